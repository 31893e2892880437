"""
Vector retriever: embed each expanded query and search the vector index.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import RAGConfig
from .errors import VectorSearchError
from .filters import And, Equals, Filter
from .interfaces import ContentStore, Embedder, VectorIndex, VectorMatch
from .passages import TextPassage
from .ranker import dedup_by_reference
from .tasks import gather_settled

logger = logging.getLogger(__name__)

_REF_IN_CONTENT_RE = re.compile(r"ref:\s*([^,\n]+)", re.IGNORECASE)


def match_count_per_query(requested_count: int, num_queries: int, minimum: int = 20) -> int:
    """Neighbors requested for each expanded query."""
    return max(minimum, math.ceil(requested_count * 2 / max(1, num_queries)))


def recover_reference(content: str) -> Optional[str]:
    """Pull a ``ref: <reference>`` marker out of raw passage content."""
    m = _REF_IN_CONTENT_RE.search(content or "")
    if not m:
        return None
    ref = m.group(1).strip()
    return ref or None


def _filter_language(predicate: Filter) -> Optional[str]:
    if isinstance(predicate, Equals) and predicate.field == "language":
        return predicate.value
    if isinstance(predicate, And):
        for clause in predicate.clauses:
            lang = _filter_language(clause)
            if lang is not None:
                return lang
    return None


@dataclass
class VectorRetriever:
    """Multi-query similarity search with reference-level deduplication."""

    embedder: Embedder
    index: VectorIndex
    store: Optional[ContentStore] = None
    config: RAGConfig = field(default_factory=RAGConfig)

    async def _search_one(self, query: str, predicate: Filter, top_k: int) -> List[VectorMatch]:
        embedding = await self.embedder.embed(query)
        return await self.index.similarity_search(
            embedding,
            predicate,
            top_k=top_k,
            threshold=self.config.similarity_threshold,
        )

    async def search(
        self,
        queries: Sequence[str],
        predicate: Filter,
        requested_count: int,
        request_id: Optional[str] = None,
    ) -> List[TextPassage]:
        """
        Search every query and merge the results.

        Returns at most ``requested_count`` passages sorted by similarity
        (descending). When a reference appears under several queries the first
        one seen is kept. A query whose embedding or index call fails is logged
        and skipped; VectorSearchError is raised only when every query failed.
        """
        prefix = f"[{request_id}]" if request_id else ""
        if not queries:
            return []
        top_k = match_count_per_query(requested_count, len(queries), self.config.min_match_count)

        per_query = await gather_settled([self._search_one(q, predicate, top_k) for q in queries])

        matches: List[VectorMatch] = []
        errors: List[BaseException] = []
        for query, found in zip(queries, per_query):
            if isinstance(found, BaseException):
                logger.error("%s Vector search for %r failed: %s", prefix, query, found)
                errors.append(found)
                continue
            logger.info("%s Vector search for %r found %s matches", prefix, query, len(found))
            matches.extend(found)

        if len(errors) == len(per_query):
            raise VectorSearchError(
                f"vector search failed for all {len(errors)} queries: {errors[0]}"
            ) from errors[0]

        passages = await self._ensure_references(matches, predicate, prefix)
        unique = dedup_by_reference(passages)
        unique.sort(key=lambda p: p.similarity or 0.0, reverse=True)
        result = unique[:requested_count]
        logger.info(
            "%s Combined vector search kept %s unique matches: %s",
            prefix,
            len(result),
            [(p.reference, round(p.similarity or 0.0, 4)) for p in result],
        )
        return result

    async def _ensure_references(
        self,
        matches: List[VectorMatch],
        predicate: Filter,
        prefix: str,
    ) -> List[TextPassage]:
        """
        Convert matches to passages, recovering references that came back empty.

        Order of ``matches`` is preserved; unrecoverable matches are dropped.
        """
        missing = [m for m in matches if not m.reference]
        if not missing:
            return [m.to_passage() for m in matches]

        logger.warning("%s %s vector matches carry no reference; recovering from content", prefix, len(missing))
        recovered_refs = {id(m): recover_reference(m.content) for m in missing}
        wanted = sorted({r for r in recovered_refs.values() if r})

        rows_by_ref: dict[str, TextPassage] = {}
        if wanted and self.store is not None:
            rows = await self.store.find_by_references(wanted, language=_filter_language(predicate))
            for row in rows:
                rows_by_ref.setdefault(row.reference, row)

        passages: List[TextPassage] = []
        dropped = 0
        for m in matches:
            if m.reference:
                passages.append(m.to_passage())
                continue
            row = rows_by_ref.get(recovered_refs[id(m)] or "")
            if row is None:
                dropped += 1
                continue
            passages.append(
                TextPassage(
                    reference=row.reference,
                    book=row.book,
                    section=row.section,
                    language=row.language,
                    content=row.content,
                    similarity=m.similarity,
                )
            )
        if dropped:
            logger.warning("%s Dropped %s vector matches with no recoverable reference", prefix, dropped)
        return passages
