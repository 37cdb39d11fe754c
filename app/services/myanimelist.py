"""Utilities for reading public MyAnimeList anime lists."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..models import AnimeEntry

logger = logging.getLogger(__name__)


class ListFetchError(RuntimeError):
    """Raised when a user's list cannot be read from MyAnimeList."""

    def __init__(self, username: str, offset: int, reason: str):
        super().__init__(
            f"Failed to fetch anime list for {username} at offset {offset}: {reason}"
        )
        self.username = username
        self.offset = offset


class MyAnimeListClient:
    """Thin wrapper around the ``animelist/<user>/load.json`` endpoint."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": f"{self._settings.app_name} (malgroup)",
        }

    async def fetch_list(self, username: str) -> list[AnimeEntry]:
        """Fetch every entry on ``username``'s anime list.

        The endpoint pages by offset but never says whether more pages exist,
        so pages are requested until one comes back empty.
        """

        url = f"/animelist/{username}/load.json"
        page_size = self._settings.mal_page_size
        collected: list[AnimeEntry] = []
        offset = 0

        while True:
            logger.info(
                "Fetching part of list for user %s - offset is %s", username, offset
            )
            params = {"status": self._settings.mal_status_filter, "offset": offset}
            try:
                response = await self._client.get(
                    url, headers=self._headers(), params=params
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise ListFetchError(username, offset, str(exc)) from exc

            page = self._parse_page(response, username=username, offset=offset)
            if not page:
                break

            collected.extend(page)
            offset += page_size

        logger.info("Fetched %s entries for user %s", len(collected), username)
        return collected

    @staticmethod
    def _parse_page(
        response: httpx.Response, *, username: str, offset: int
    ) -> list[AnimeEntry]:
        try:
            data: Any = response.json()
        except ValueError as exc:
            raise ListFetchError(username, offset, "response was not JSON") from exc
        if not isinstance(data, list):
            raise ListFetchError(username, offset, "unexpected response structure")
        try:
            return [AnimeEntry.model_validate(item) for item in data]
        except ValidationError as exc:
            raise ListFetchError(username, offset, f"invalid list entry: {exc}") from exc
