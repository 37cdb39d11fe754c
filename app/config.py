"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Iterable, Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .grouping import MATCH_CRITERIA, MatchCriterion, criterion_key
from .utils import unique_usernames


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="malgroup", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # NoDecode keeps comma separated env values away from JSON parsing.
    usernames: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(), alias="MALGROUP_USERNAMES"
    )

    mal_base_url: HttpUrl = Field(
        default="https://myanimelist.net", alias="MAL_BASE_URL"
    )
    mal_page_size: int = Field(default=300, alias="MAL_PAGE_SIZE", ge=1, le=1_000)
    # 7 asks for every status regardless of the user's default list view.
    mal_status_filter: int = Field(default=7, alias="MAL_STATUS_FILTER")
    request_timeout_seconds: float = Field(
        default=20.0, alias="REQUEST_TIMEOUT", gt=0
    )

    cache_dir: Path = Field(default=Path("."), alias="CACHE_DIR")
    cache_database_url: str | None = Field(default=None, alias="CACHE_DATABASE_URL")

    match_criterion: str = Field(default="watched", alias="MATCH_CRITERION")
    report_title: str = Field(default="Grouped", alias="REPORT_TITLE")

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("usernames", mode="before")
    @classmethod
    def _parse_usernames(cls, value: object) -> tuple[str, ...]:
        """Normalise the configured username list from environment values."""

        if value is None:
            return ()
        if isinstance(value, str):
            raw_values = value.split(",")
        elif isinstance(value, Iterable):
            raw_values = [str(part) for part in value]
        else:
            raise TypeError("MALGROUP_USERNAMES must be a string or iterable of strings")
        return tuple(unique_usernames(raw_values))

    @field_validator("match_criterion", mode="before")
    @classmethod
    def _parse_match_criterion(cls, value: object) -> str:
        key = criterion_key(str(value or ""))
        if not key:
            return "watched"
        if key not in MATCH_CRITERIA:
            raise ValueError("Unknown match criterion configured")
        return key

    @field_validator("cache_database_url", mode="before")
    @classmethod
    def _strip_blank(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def criterion(self) -> MatchCriterion:
        """Return the match criterion used to bucket the report."""

        return MATCH_CRITERIA[self.match_criterion]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
