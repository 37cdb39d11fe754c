"""Cell text and CSS classes for the comparison table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .models import AnimeEntry, AnimeStatus


@dataclass(frozen=True, slots=True)
class CellDisplay:
    text: str
    css_class: str


def display_for(entry: AnimeEntry) -> CellDisplay:
    """Return how one user's entry is shown in their column.

    Statuses this module does not know about are rendered as
    ``Unrecognized status N`` instead of failing, since MyAnimeList may add
    new ones.
    """

    status = entry.status
    if status == AnimeStatus.ABSENT:
        return CellDisplay("", "absent")
    if status == AnimeStatus.WATCHED:
        return CellDisplay(str(entry.score) if entry.score > 0 else "Unscored", "watched")
    if status == AnimeStatus.IN_PROGRESS:
        return CellDisplay(
            f"{entry.num_watched_episodes} / {entry.anime_num_episodes}", "inprogress"
        )
    if status == AnimeStatus.ON_HOLD:
        return CellDisplay("On hold", "onhold")
    if status == AnimeStatus.PLAN_TO_WATCH:
        return CellDisplay("Planning to watch", "plantowatch")
    if status == AnimeStatus.DROPPED:
        return CellDisplay("Dropped", "dropped")
    return CellDisplay(f"Unrecognized status {status}", "unknown")


def group_average(row: Sequence[AnimeEntry]) -> float | None:
    """Mean of the nonzero scores among users who marked the anime watched."""

    scores = [
        entry.score
        for entry in row
        if entry.status == AnimeStatus.WATCHED and entry.score != 0
    ]
    if not scores:
        return None
    return sum(scores) / len(scores)


def community_average(entry: AnimeEntry) -> float | None:
    if entry.anime_score_val > 0:
        return entry.anime_score_val
    return None


def score_comparison_class(community: float | None, group: float | None) -> str:
    """Highlight whether MyAnimeList rates the anime above or below the group."""

    if community is None or group is None:
        return ""
    # Compare what is displayed, so equal-looking numbers count as "lower".
    if round(community, 2) > round(group, 2):
        return "mal-score-higher"
    return "mal-score-lower"
