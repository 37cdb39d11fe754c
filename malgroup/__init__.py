"""Compare several MyAnimeList users' anime lists in one report."""

from __future__ import annotations

from app.pipeline import build_comparison, generate_report

__all__ = ["build_comparison", "generate_report"]
