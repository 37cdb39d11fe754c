"""Merge several users' lists and bucket anime by cross-user agreement."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from .models import AnimeEntry, AnimeStatus, UserList

EntryPredicate = Callable[[AnimeEntry], bool]


@dataclass(frozen=True)
class MatchCriterion:
    """Named predicate used to count how many users agree on an anime."""

    key: str
    verb: str
    predicate: EntryPredicate

    def header(self, match_count: int) -> str:
        noun = "person" if match_count == 1 else "people"
        return f"Anime {self.verb} by {match_count} {noun}"


def _has_status(status: AnimeStatus) -> EntryPredicate:
    return lambda entry: entry.status == status


MATCH_CRITERIA: dict[str, MatchCriterion] = {
    criterion.key: criterion
    for criterion in (
        MatchCriterion("watched", "watched", _has_status(AnimeStatus.WATCHED)),
        MatchCriterion("watching", "being watched", _has_status(AnimeStatus.IN_PROGRESS)),
        MatchCriterion("planned", "planned", _has_status(AnimeStatus.PLAN_TO_WATCH)),
        MatchCriterion("on-hold", "put on hold", _has_status(AnimeStatus.ON_HOLD)),
        MatchCriterion("dropped", "dropped", _has_status(AnimeStatus.DROPPED)),
        MatchCriterion("listed", "listed", lambda entry: not entry.is_absent),
    )
}


def criterion_key(value: str) -> str:
    """Canonical criterion key: ``On_Hold`` and ``on hold`` become ``on-hold``."""

    return value.strip().lower().replace("_", "-").replace(" ", "-")


def find_criterion(value: str) -> MatchCriterion | None:
    return MATCH_CRITERIA.get(criterion_key(value))


@dataclass(slots=True)
class NormalizedLists:
    """Per-user maps that all share the same key set: the union of anime ids."""

    usernames: list[str]
    entries_by_user: list[dict[int, AnimeEntry]]
    union_ids: list[int]
    representatives: dict[int, AnimeEntry]

    @property
    def user_count(self) -> int:
        return len(self.usernames)

    def row(self, anime_id: int) -> list[AnimeEntry]:
        """Return every user's entry for ``anime_id`` in username order."""

        return [entries[anime_id] for entries in self.entries_by_user]

    def rows(self) -> Iterable[list[AnimeEntry]]:
        for anime_id in self.union_ids:
            yield self.row(anime_id)

    def representative_for(self, row: Sequence[AnimeEntry]) -> AnimeEntry:
        """Return the catalog entry for the anime ``row`` belongs to."""

        return self.representatives[row[0].anime_id]

    def to_user_lists(self) -> list[UserList]:
        return [
            UserList(username=username, entries=list(entries.values()))
            for username, entries in zip(self.usernames, self.entries_by_user)
        ]


@dataclass(slots=True)
class MatchBucket:
    """Anime that satisfy a predicate for exactly ``match_count`` users."""

    match_count: int
    rows: list[list[AnimeEntry]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def placeholder_entry(representative: AnimeEntry) -> AnimeEntry:
    """Copy catalog metadata from ``representative`` with no user progress."""

    return representative.model_copy(
        update={
            "status": AnimeStatus.ABSENT,
            "score": 0,
            "num_watched_episodes": 0,
            "is_rewatching": False,
        }
    )


def normalize(user_lists: Sequence[UserList]) -> NormalizedLists:
    """Give every user an entry for every anime that appears on any list.

    The representative entry for an anime, used only for its catalog
    metadata, is the first occurrence when walking users in order. Entries
    a user actually has are kept as-is; everything else becomes an ABSENT
    placeholder copied from the representative.
    """

    representatives: dict[int, AnimeEntry] = {}
    for user_list in user_lists:
        for entry in user_list.entries:
            representatives.setdefault(entry.anime_id, entry)
    union_ids = list(representatives)

    entries_by_user: list[dict[int, AnimeEntry]] = []
    for user_list in user_lists:
        own = {entry.anime_id: entry for entry in user_list.entries}
        complete: dict[int, AnimeEntry] = {}
        for anime_id in union_ids:
            entry = own.get(anime_id)
            if entry is None:
                entry = placeholder_entry(representatives[anime_id])
            complete[anime_id] = entry
        entries_by_user.append(complete)

    return NormalizedLists(
        usernames=[user_list.username for user_list in user_lists],
        entries_by_user=entries_by_user,
        union_ids=union_ids,
        representatives=representatives,
    )


def group_by_match_count(
    normalized: NormalizedLists, predicate: EntryPredicate
) -> list[MatchBucket]:
    """Bucket anime by how many users' entries satisfy ``predicate``.

    ``buckets[i]`` holds the anime matched by ``user_count - i`` users, so
    the result always has ``user_count + 1`` buckets, most agreement first.
    """

    user_count = normalized.user_count
    buckets = [MatchBucket(match_count=user_count - index) for index in range(user_count + 1)]
    for row in normalized.rows():
        matches = sum(1 for entry in row if predicate(entry))
        buckets[user_count - matches].rows.append(row)
    return buckets
