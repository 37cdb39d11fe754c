"""Pydantic models describing MyAnimeList list payloads."""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnimeStatus(IntEnum):
    """Watch statuses as encoded by MyAnimeList list endpoints."""

    # Never sent by MyAnimeList; marks an item missing from a user's list.
    ABSENT = -1
    IN_PROGRESS = 1
    WATCHED = 2
    ON_HOLD = 3
    DROPPED = 4
    PLAN_TO_WATCH = 6


class NamedTag(BaseModel):
    """Genre or demographic label attached to an anime."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int | None = None
    name: str


class AnimeEntry(BaseModel):
    """One user's relationship to one anime, as returned by ``load.json``."""

    model_config = ConfigDict(extra="allow", frozen=True)

    # Kept as a plain int so statuses MyAnimeList adds later still load.
    status: int
    score: int = 0
    is_rewatching: bool = False
    num_watched_episodes: int = 0
    anime_id: int
    anime_title: str = ""
    anime_title_eng: str = ""
    # MyAnimeList reports 0 when the episode count is unknown.
    anime_num_episodes: int = 0
    anime_media_type_string: str = ""
    anime_score_val: float = 0.0
    genres: list[NamedTag] = Field(default_factory=list)
    demographics: list[NamedTag] = Field(default_factory=list)

    @field_validator("is_rewatching", mode="before")
    @classmethod
    def _coerce_flag(cls, value: object) -> object:
        if value is None or value == "":
            return False
        return value

    @field_validator("anime_title", "anime_title_eng", "anime_media_type_string", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> object:
        if value is None:
            return ""
        return str(value)

    @field_validator(
        "score", "num_watched_episodes", "anime_num_episodes", "anime_score_val",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, value: object) -> object:
        if value is None or value == "":
            return 0
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                # e.g. "N/A" for titles that have not aired yet
                return 0
        return value

    @field_validator("genres", "demographics", mode="before")
    @classmethod
    def _coerce_tags(cls, value: object) -> object:
        if value is None:
            return []
        return value

    @property
    def display_title(self) -> str:
        """Return the English title when available, else the native one."""

        return self.anime_title_eng or self.anime_title or f"Anime {self.anime_id}"

    @property
    def is_absent(self) -> bool:
        return self.status == AnimeStatus.ABSENT

    @property
    def label_names(self) -> list[str]:
        """Demographic names followed by genre names."""

        return [tag.name for tag in self.demographics] + [tag.name for tag in self.genres]

    @property
    def url(self) -> str:
        return f"https://myanimelist.net/anime/{self.anime_id}"


class UserList(BaseModel):
    """A username paired with the raw entries on that user's list."""

    username: str
    entries: list[AnimeEntry] = Field(default_factory=list)

    @property
    def anime_ids(self) -> set[int]:
        return {entry.anime_id for entry in self.entries}
