"""Tests for cache-aware list loading."""

from __future__ import annotations

from typing import Sequence

import pytest

from app.models import AnimeEntry
from app.services.loader import ListLoader
from app.services.myanimelist import ListFetchError


class MemoryCache:
    def __init__(self, initial: dict[str, list[AnimeEntry]] | None = None) -> None:
        self.entries = dict(initial or {})
        self.saved: list[str] = []

    async def load(self, username: str) -> list[AnimeEntry] | None:
        return self.entries.get(username)

    async def save(self, username: str, entries: Sequence[AnimeEntry]) -> None:
        self.saved.append(username)
        self.entries[username] = list(entries)

    async def delete(self, username: str) -> None:
        self.entries.pop(username, None)


class StubClient:
    def __init__(self, lists: dict[str, list[AnimeEntry]]) -> None:
        self.lists = lists
        self.calls: list[str] = []

    async def fetch_list(self, username: str) -> list[AnimeEntry]:
        self.calls.append(username)
        if username not in self.lists:
            raise ListFetchError(username, 0, "not found")
        return self.lists[username]


@pytest.mark.anyio("asyncio")
async def test_cached_list_skips_remote(make_entry) -> None:
    cache = MemoryCache({"alice": [make_entry(1)]})
    client = StubClient({"alice": [make_entry(2)]})
    loader = ListLoader(client, cache)  # type: ignore[arg-type]

    user_list = await loader.load("alice")

    assert [entry.anime_id for entry in user_list.entries] == [1]
    assert client.calls == []


@pytest.mark.anyio("asyncio")
async def test_cache_miss_fetches_saves_and_returns_fresh_data(make_entry) -> None:
    cache = MemoryCache()
    fresh = [make_entry(2)]
    client = StubClient({"alice": fresh})
    loader = ListLoader(client, cache)  # type: ignore[arg-type]

    user_list = await loader.load("alice")

    assert user_list.username == "alice"
    assert user_list.entries == fresh
    assert cache.saved == ["alice"]
    assert client.calls == ["alice"]


@pytest.mark.anyio("asyncio")
async def test_refresh_bypasses_cache(make_entry) -> None:
    cache = MemoryCache({"alice": [make_entry(1)]})
    client = StubClient({"alice": [make_entry(2)]})
    loader = ListLoader(client, cache)  # type: ignore[arg-type]

    user_list = await loader.load("alice", refresh=True)

    assert [entry.anime_id for entry in user_list.entries] == [2]
    assert [entry.anime_id for entry in cache.entries["alice"]] == [2]


@pytest.mark.anyio("asyncio")
async def test_load_all_keeps_username_order(make_entry) -> None:
    cache = MemoryCache({"carol": [make_entry(3)]})
    client = StubClient({"alice": [make_entry(1)], "bob": [make_entry(2)]})
    loader = ListLoader(client, cache)  # type: ignore[arg-type]

    lists = await loader.load_all(["bob", "carol", "alice"])

    assert [user_list.username for user_list in lists] == ["bob", "carol", "alice"]
    assert sorted(client.calls) == ["alice", "bob"]


@pytest.mark.anyio("asyncio")
async def test_load_all_propagates_failures(make_entry) -> None:
    loader = ListLoader(StubClient({"alice": [make_entry(1)]}), MemoryCache())  # type: ignore[arg-type]

    with pytest.raises(ListFetchError):
        await loader.load_all(["alice", "missing"])
