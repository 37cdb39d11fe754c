"""Filter tags attached to each report row.

Every anime gets its MyAnimeList genres and demographics plus a few derived
labels. The report adds them as CSS classes on the row so the filter
checkboxes can show and hide rows client-side.
"""

from __future__ import annotations

from typing import Sequence

from .grouping import NormalizedLists
from .models import AnimeEntry, AnimeStatus
from .utils import normalize_tag

MOVIE_MEDIA_TYPE = "Movie"
SHORT_MAX_EPISODES = 3


def tags_for(entry: AnimeEntry, appearances: Sequence[AnimeEntry]) -> set[str]:
    """Return the tags for ``entry`` given every user's entry for that anime."""

    tags = {normalize_tag(name) for name in entry.label_names}
    if any(item.status == AnimeStatus.IN_PROGRESS for item in appearances):
        tags.add("in-progress")
    if any(item.score == 10 for item in appearances):
        tags.add("ten-out-of-ten")
    if entry.anime_media_type_string == MOVIE_MEDIA_TYPE:
        tags.add("movie")
    # 0 episodes means unknown, which must not count as short.
    elif 0 < entry.anime_num_episodes <= SHORT_MAX_EPISODES:
        tags.add("short")
    tags.discard("")
    return tags


def row_tags(representative: AnimeEntry, row: Sequence[AnimeEntry]) -> list[str]:
    """Sorted tags for a report row; catalog metadata comes from ``representative``."""

    return sorted(tags_for(representative, row))


def unique_tags(normalized: NormalizedLists) -> list[str]:
    """Return the sorted union of tags across every anime in ``normalized``."""

    collected: set[str] = set()
    for anime_id in normalized.union_ids:
        collected.update(
            tags_for(normalized.representatives[anime_id], normalized.row(anime_id))
        )
    return sorted(collected)

