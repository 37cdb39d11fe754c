"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where ``app`` sits
# at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.models import AnimeEntry, UserList  # noqa: E402


def _anime_payload(anime_id: int, **overrides: Any) -> dict[str, Any]:
    """Return a ``load.json`` style entry with sensible defaults."""

    payload: dict[str, Any] = {
        "status": 2,
        "score": 0,
        "is_rewatching": 0,
        "num_watched_episodes": 12,
        "anime_id": anime_id,
        "anime_title": f"Anime {anime_id}",
        "anime_title_eng": "",
        "anime_num_episodes": 12,
        "anime_media_type_string": "TV",
        "anime_score_val": 7.5,
        "genres": [{"id": 8, "name": "Drama"}],
        "demographics": [],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    return _anime_payload


@pytest.fixture
def make_entry() -> Callable[..., AnimeEntry]:
    def _make(anime_id: int, **overrides: Any) -> AnimeEntry:
        return AnimeEntry.model_validate(_anime_payload(anime_id, **overrides))

    return _make


@pytest.fixture
def make_user() -> Callable[..., UserList]:
    def _make(username: str, *entries: AnimeEntry) -> UserList:
        return UserList(username=username, entries=list(entries))

    return _make


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"
