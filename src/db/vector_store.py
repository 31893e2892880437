"""
pgvector similarity search through the match_torah_texts() SQL function.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Mapping, Sequence

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.rag.filters import Filter, to_payload
from src.rag.interfaces import VectorMatch

logger = logging.getLogger(__name__)

# The embedding goes over the wire as text and is cast server-side, so the
# driver needs no vector codec.
MATCH_SQL = text(
    "SELECT * FROM match_torah_texts("
    "CAST(CAST(:query_embedding AS text) AS vector), "
    ":similarity_threshold, "
    ":match_count, "
    "CAST(:filter AS jsonb))"
)


def vector_literal(embedding: Sequence[float]) -> str:
    """pgvector text form: ``[0.1,0.2,...]``."""
    return "[" + ",".join(repr(float(x)) for x in embedding) + "]"


def _row_to_match(row: Mapping[str, Any]) -> VectorMatch:
    metadata = row.get("metadata") or {}
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except ValueError:
            metadata = {}
    return VectorMatch(
        reference=row.get("ref") or metadata.get("ref"),
        book=row.get("book") or metadata.get("book") or "",
        section=row.get("section") or metadata.get("section") or "",
        language=row.get("language") or metadata.get("language") or "",
        content=row.get("content") or "",
        similarity=float(row.get("similarity") or 0.0),
        metadata=dict(metadata),
    )


class PgVectorIndex:
    """Vector index backed by Postgres + pgvector."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self.sessionmaker = sessionmaker

    async def similarity_search(
        self,
        embedding: Sequence[float],
        predicate: Filter,
        top_k: int,
        threshold: float,
    ) -> List[VectorMatch]:
        params = {
            "query_embedding": vector_literal(embedding),
            "similarity_threshold": threshold,
            "match_count": top_k,
            "filter": json.dumps(to_payload(predicate)),
        }
        async with self.sessionmaker() as session:
            result = await session.execute(MATCH_SQL, params)
            rows = result.mappings().all()
        matches = [_row_to_match(r) for r in rows]
        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:top_k]
