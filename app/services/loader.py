"""Cache-aware loading of every configured user's list."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from ..models import UserList
from .list_cache import ListCache
from .myanimelist import MyAnimeListClient

logger = logging.getLogger(__name__)


class ListLoader:
    """Serve lists from the cache, falling back to MyAnimeList on a miss."""

    def __init__(self, client: MyAnimeListClient, cache: ListCache):
        self._client = client
        self._cache = cache

    async def load(self, username: str, *, refresh: bool = False) -> UserList:
        """Return ``username``'s list, fetching and caching it when needed."""

        if refresh:
            await self._cache.delete(username)
        else:
            cached = await self._cache.load(username)
            if cached is not None:
                return UserList(username=username, entries=cached)

        entries = await self._client.fetch_list(username)
        await self._cache.save(username, entries)
        return UserList(username=username, entries=entries)

    async def load_all(
        self, usernames: Sequence[str], *, refresh: bool = False
    ) -> list[UserList]:
        """Load every user concurrently, keeping the order of ``usernames``.

        A failure for any user propagates and aborts the whole load.
        """

        logger.info("Loading lists for %s users", len(usernames))
        return list(
            await asyncio.gather(
                *(self.load(username, refresh=refresh) for username in usernames)
            )
        )
