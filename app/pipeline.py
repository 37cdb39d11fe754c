"""Wire loading, grouping and rendering into a single report run."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Sequence

import httpx

from .config import Settings
from .database import Database
from .display import community_average, group_average
from .grouping import (
    MatchBucket,
    MatchCriterion,
    NormalizedLists,
    group_by_match_count,
    normalize,
)
from .models import AnimeEntry, UserList
from .report import render_report
from .services.list_cache import DatabaseListCache, JsonFileListCache, ListCache
from .services.loader import ListLoader
from .services.myanimelist import MyAnimeListClient
from .tagging import row_tags, unique_tags
from .utils import unique_usernames

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Comparison:
    """Everything the report needs about one run."""

    criterion: MatchCriterion
    normalized: NormalizedLists
    buckets: list[MatchBucket]
    tags: list[str]

    @property
    def usernames(self) -> list[str]:
        return self.normalized.usernames

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-friendly summary of the grouped lists."""

        return {
            "criterion": self.criterion.key,
            "usernames": self.usernames,
            "tags": self.tags,
            "buckets": [
                {
                    "match_count": bucket.match_count,
                    "title": self.criterion.header(bucket.match_count),
                    "anime": [self._row_payload(row) for row in bucket.rows],
                }
                for bucket in self.buckets
            ],
        }

    def _row_payload(self, row: list[AnimeEntry]) -> dict[str, Any]:
        representative = self.normalized.representative_for(row)
        return {
            "anime_id": representative.anime_id,
            "title": representative.display_title,
            "community_average": community_average(representative),
            "group_average": group_average(row),
            "tags": row_tags(representative, row),
            "statuses": {
                username: entry.status for username, entry in zip(self.usernames, row)
            },
        }


def build_comparison(
    user_lists: Sequence[UserList], criterion: MatchCriterion
) -> Comparison:
    """Normalize the lists, then bucket them by ``criterion``."""

    normalized = normalize(user_lists)
    buckets = group_by_match_count(normalized, criterion.predicate)
    tags = unique_tags(normalized)
    logger.info(
        "Compared %s anime across %s users",
        len(normalized.union_ids),
        normalized.user_count,
    )
    return Comparison(
        criterion=criterion, normalized=normalized, buckets=buckets, tags=tags
    )


@asynccontextmanager
async def open_loader(
    settings: Settings, *, http_client: httpx.AsyncClient | None = None
) -> AsyncIterator[ListLoader]:
    """Yield a ``ListLoader`` whose HTTP client and cache live for the block."""

    async with AsyncExitStack() as exit_stack:
        if http_client is None:
            http_client = await exit_stack.enter_async_context(
                httpx.AsyncClient(
                    base_url=str(settings.mal_base_url),
                    timeout=httpx.Timeout(settings.request_timeout_seconds, connect=10.0),
                )
            )
        cache: ListCache
        if settings.cache_database_url:
            database = Database(settings.cache_database_url)
            exit_stack.push_async_callback(database.dispose)
            await database.create_all()
            cache = DatabaseListCache(database.session_factory)
        else:
            cache = JsonFileListCache(settings.cache_dir)
        yield ListLoader(MyAnimeListClient(settings, http_client), cache)


async def compare_users(
    loader: ListLoader,
    usernames: Sequence[str],
    criterion: MatchCriterion,
    *,
    refresh: bool = False,
) -> Comparison:
    """Load and compare ``usernames``, each user counted once."""

    user_lists = await loader.load_all(unique_usernames(usernames), refresh=refresh)
    return build_comparison(user_lists, criterion)


async def generate_report(
    settings: Settings,
    usernames: Sequence[str] | None = None,
    *,
    criterion: MatchCriterion | None = None,
    refresh: bool = False,
    http_client: httpx.AsyncClient | None = None,
) -> str:
    """Load, compare and render the report for ``usernames``.

    ``usernames`` and ``criterion`` default to the configured values.
    """

    resolved_usernames = list(settings.usernames if usernames is None else usernames)
    resolved_criterion = criterion or settings.criterion
    if not resolved_usernames:
        logger.warning("No usernames configured; the report will be empty")

    async with open_loader(settings, http_client=http_client) as loader:
        comparison = await compare_users(
            loader, resolved_usernames, resolved_criterion, refresh=refresh
        )
    return render_report(comparison, title=settings.report_title)
