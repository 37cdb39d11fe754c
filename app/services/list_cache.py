"""Caches holding each user's raw list so MyAnimeList is not asked twice."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol, Sequence

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import ListSnapshot
from ..models import AnimeEntry
from ..utils import slugify

logger = logging.getLogger(__name__)


class ListCache(Protocol):
    """Per-user storage for complete anime lists."""

    async def load(self, username: str) -> list[AnimeEntry] | None: ...

    async def save(self, username: str, entries: Sequence[AnimeEntry]) -> None: ...

    async def delete(self, username: str) -> None: ...


def cache_key(username: str) -> str:
    """Storage key shared by every cache; ``Alice`` and ``alice`` are one user."""

    return slugify(username)


def _dump_entries(entries: Sequence[AnimeEntry]) -> list[dict[str, Any]]:
    return [entry.model_dump(mode="json") for entry in entries]


def _load_entries(payload: Any, *, source: str) -> list[AnimeEntry]:
    if not isinstance(payload, list):
        raise ValueError(f"Cached list in {source} is not a JSON array")
    return [AnimeEntry.model_validate(item) for item in payload]


class JsonFileListCache:
    """Stores each list as ``<username>.json`` inside ``directory``.

    The files keep every field MyAnimeList sent, including ones this program
    ignores, so they are handy for seeing what other data is available.
    Delete them to force a refetch. File access runs in a worker thread.
    """

    def __init__(self, directory: Path | str):
        self._directory = Path(directory)

    def path_for(self, username: str) -> Path:
        return self._directory / f"{cache_key(username)}.json"

    async def load(self, username: str) -> list[AnimeEntry] | None:
        path = self.path_for(username)

        def _read() -> str | None:
            if not path.is_file():
                return None
            return path.read_text(encoding="utf-8")

        text = await asyncio.to_thread(_read)
        if text is None:
            logger.debug("No cached list for %s at %s", username, path)
            return None
        entries = _load_entries(json.loads(text), source=str(path))
        logger.info("Loaded %s cached entries for %s from %s", len(entries), username, path)
        return entries

    async def save(self, username: str, entries: Sequence[AnimeEntry]) -> None:
        path = self.path_for(username)
        text = json.dumps(_dump_entries(entries))

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")

        await asyncio.to_thread(_write)
        logger.info("Cached %s entries for %s at %s", len(entries), username, path)

    async def delete(self, username: str) -> None:
        await asyncio.to_thread(self.path_for(username).unlink, missing_ok=True)


class DatabaseListCache:
    """Stores list snapshots in the ``list_snapshots`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def load(self, username: str) -> list[AnimeEntry] | None:
        async with self._session_factory() as session:
            snapshot = await session.get(ListSnapshot, cache_key(username))
            if snapshot is None:
                logger.debug("No cached snapshot for %s", username)
                return None
            entries = _load_entries(snapshot.payload, source=f"snapshot {username}")
        logger.info(
            "Loaded %s cached entries for %s (fetched %s)",
            len(entries),
            username,
            snapshot.fetched_at.isoformat(),
        )
        return entries

    async def save(self, username: str, entries: Sequence[AnimeEntry]) -> None:
        key = cache_key(username)
        values = {
            "payload": _dump_entries(entries),
            "entry_count": len(entries),
            "fetched_at": datetime.utcnow(),
        }
        async with self._session_factory() as session:
            await session.merge(ListSnapshot(username=key, **values))
            try:
                await session.commit()
            except IntegrityError:
                # A concurrent save inserted the row first; overwrite it.
                await session.rollback()
                await session.execute(
                    update(ListSnapshot)
                    .where(ListSnapshot.username == key)
                    .values(**values)
                )
                await session.commit()
        logger.info("Cached %s entries for %s", len(entries), username)

    async def delete(self, username: str) -> None:
        async with self._session_factory() as session:
            await session.execute(
                delete(ListSnapshot).where(ListSnapshot.username == cache_key(username))
            )
            await session.commit()
