"""
Keyword fallback retriever: substring search over content, reference and book.

Used when vector search fails or finds nothing. Every (query, field)
combination is searched independently; a failing combination is logged and
skipped so the rest still contribute.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .config import RAGConfig
from .interfaces import ContentStore
from .passages import TextPassage
from .ranker import dedup_by_reference
from .tasks import gather_settled

logger = logging.getLogger(__name__)


@dataclass
class KeywordRetriever:
    store: ContentStore
    config: RAGConfig = field(default_factory=RAGConfig)

    async def search(
        self,
        queries: Sequence[str],
        allowed_references: Optional[Iterable[str]],
        requested_count: int,
        request_id: Optional[str] = None,
    ) -> List[TextPassage]:
        """
        Union of substring matches for every query and searchable field.

        Results are unscored, ordered by (query, field) and deduplicated by
        reference with the first occurrence kept.
        """
        prefix = f"[{request_id}]" if request_id else ""
        allowed = set(allowed_references) if allowed_references is not None else None
        limit = 2 * requested_count

        combos = [(q, f) for q in queries for f in self.config.keyword_fields]
        per_combo = await gather_settled(
            [self.store.search_contains(f, q, allowed, limit) for q, f in combos]
        )

        rows: List[TextPassage] = []
        for (query, field_name), found in zip(combos, per_combo):
            if isinstance(found, BaseException):
                logger.error("%s Keyword search on %s for %r failed: %s", prefix, field_name, query, found)
                continue
            logger.info("%s Keyword search on %s for %r found %s rows", prefix, field_name, query, len(found))
            rows.extend(found)

        results = dedup_by_reference(row for row in rows if row.reference)
        logger.info("%s Keyword fallback gathered %s unique passages", prefix, len(results))
        return results
