"""SQLAlchemy ORM models backing the optional list cache."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class ListSnapshot(Base):
    """A user's full anime list as last fetched from MyAnimeList."""

    __tablename__ = "list_snapshots"

    username: Mapped[str] = mapped_column(String(64), primary_key=True)
    entry_count: Mapped[int] = mapped_column(Integer, default=0)
    payload: Mapped[list[dict[str, Any]]] = mapped_column(JSON)
    fetched_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
