from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class TorahText(Base):
    """
    One passage of source text in one language.

    The ``embedding`` vector column exists in the table but is not mapped;
    similarity search goes through the match_torah_texts() SQL function.
    """

    __tablename__ = "torah_texts"
    __table_args__ = (
        UniqueConstraint("ref", "language", name="uq_torah_texts_ref_language"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # Sefaria-style reference, e.g. "Berakhot.2a"
    ref: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    book: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    section: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    # "en" or "he"
    language: Mapped[str] = mapped_column(String(8), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)


class UserProgress(Base):
    __tablename__ = "user_progress"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    ref: Mapped[str] = mapped_column(String(255), nullable=False)
    completed_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
