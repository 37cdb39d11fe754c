"""Utility helpers for the malgroup report."""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable


def normalize_tag(value: str) -> str:
    """Return a CSS-class friendly tag: lowercase with spaces as hyphens."""

    return value.strip().lower().replace(" ", "-")


def slugify(value: str) -> str:
    """Return a filesystem-friendly slug."""

    value = unicodedata.normalize("NFKD", value)
    value = value.encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9_-]+", "-", value)
    value = value.strip("-")
    value = re.sub(r"-+", "-", value)
    return value.lower() or "user"


def format_score(value: float | None) -> str:
    """Render an average with two decimals, or an empty string when undefined."""

    if value is None:
        return ""
    return f"{value:.2f}"


def unique_usernames(values: Iterable[str]) -> list[str]:
    """Strip, drop blanks and drop repeats, keeping the first spelling.

    MyAnimeList usernames are case-insensitive, so ``Alice`` repeats ``alice``.
    """

    cleaned: list[str] = []
    seen: set[str] = set()
    for value in values:
        name = str(value).strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        cleaned.append(name)
    return cleaned
