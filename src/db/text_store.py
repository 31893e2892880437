"""
SQL-backed passage and progress stores over torah_texts and user_progress.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Set

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.models import TorahText, UserProgress
from src.rag.errors import ContentStoreError
from src.rag.passages import TextPassage

logger = logging.getLogger(__name__)

_SEARCH_COLUMNS = {
    "content": TorahText.content,
    "reference": TorahText.ref,
    "book": TorahText.book,
}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _to_passage(row: TorahText) -> TextPassage:
    return TextPassage(
        reference=row.ref,
        book=row.book or "",
        section=row.section or "",
        language=row.language,
        content=row.content or "",
    )


class SqlTextStore:
    """Reads passages from torah_texts; every call uses its own session."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self.sessionmaker = sessionmaker

    async def find_by_references(
        self, references: Sequence[str], language: Optional[str] = None
    ) -> List[TextPassage]:
        refs = list(dict.fromkeys(references))
        if not refs:
            return []
        stmt = select(TorahText).where(TorahText.ref.in_(refs))
        if language is not None:
            stmt = stmt.where(TorahText.language == language)
        try:
            async with self.sessionmaker() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise ContentStoreError(f"failed to fetch {len(refs)} references: {e}") from e
        return [_to_passage(r) for r in rows]

    async def search_contains(
        self,
        field: str,
        query: str,
        allowed_references: Optional[Set[str]],
        limit: int,
    ) -> List[TextPassage]:
        column = _SEARCH_COLUMNS.get(field)
        if column is None:
            raise ValueError(f"cannot search on {field!r}")
        stmt = (
            select(TorahText)
            .where(column.ilike(f"%{_escape_like(query)}%", escape="\\"))
            .limit(limit)
        )
        if allowed_references is not None:
            stmt = stmt.where(TorahText.ref.in_(sorted(allowed_references)))
        try:
            async with self.sessionmaker() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise ContentStoreError(f"substring search on {field} failed: {e}") from e
        return [_to_passage(r) for r in rows]


class SqlProgressStore:
    """Learned references: user_progress rows with is_completed = true."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self.sessionmaker = sessionmaker

    async def get_learned_references(self, user_id: str) -> Set[str]:
        stmt = select(UserProgress.ref).where(
            UserProgress.user_id == user_id,
            UserProgress.is_completed.is_(True),
        )
        try:
            async with self.sessionmaker() as session:
                result = await session.execute(stmt)
                refs = set(result.scalars().all())
        except SQLAlchemyError as e:
            raise ContentStoreError(f"failed to load progress for user: {e}") from e
        logger.info("Loaded %s learned references", len(refs))
        return refs
