"""
Topic search pipeline: expansion, vector search with keyword fallback,
bilingual pairing and lexical re-ranking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .bilingual import pair_bilingual
from .config import RAGConfig
from .filters import build_filter
from .interfaces import ContentStore, ProgressStore
from .keyword import KeywordRetriever
from .passages import ScoredCandidate, TextPassage
from .query_expander import QueryExpander
from .ranker import rank
from .vector import VectorRetriever

logger = logging.getLogger(__name__)

STRATEGY_VECTOR = "vector"
STRATEGY_KEYWORD = "keyword"
STRATEGY_NONE = "none"


@dataclass
class TopicSearchResult:
    """Ranked bilingual passages plus how they were found."""

    passages: List[ScoredCandidate]
    strategy: str
    queries: List[str] = field(default_factory=list)
    vector_error: Optional[str] = None

    @property
    def empty(self) -> bool:
        return not self.passages


@dataclass
class TopicSearchPipeline:
    """Retrieve passages about a topic, optionally limited to a user's learned material."""

    expander: QueryExpander
    vector_retriever: Optional[VectorRetriever]
    keyword_retriever: KeywordRetriever
    store: ContentStore
    progress: Optional[ProgressStore] = None
    config: RAGConfig = field(default_factory=RAGConfig)

    async def retrieve_by_topic(
        self,
        topic: str,
        user_id: Optional[str],
        requested_count: Optional[int] = None,
        restrict_to_learned: bool = True,
        request_id: Optional[str] = None,
    ) -> TopicSearchResult:
        """
        Run the full topic search.

        An empty ``passages`` list is the "nothing found" signal: no learned
        references when restricted, or neither strategy matched. Content store
        errors during pairing propagate.
        """
        prefix = f"[{request_id}]" if request_id else ""
        count = requested_count or self.config.default_count

        learned: Optional[set[str]] = None
        if restrict_to_learned:
            if self.progress is None or user_id is None:
                raise ValueError("restrict_to_learned requires a progress store and a user_id")
            learned = await self.progress.get_learned_references(user_id)
            if not learned:
                logger.info("%s No learned references for user; skipping search", prefix)
                return TopicSearchResult(passages=[], strategy=STRATEGY_NONE)
            logger.info("%s Restricting search to %s learned references", prefix, len(learned))

        queries = await self.expander.expand(topic, request_id=request_id)

        strategy = STRATEGY_NONE
        vector_error: Optional[str] = None
        candidates: List[TextPassage] = []

        if self.vector_retriever is not None:
            predicate = build_filter(self.config.language, learned)
            try:
                candidates = await self.vector_retriever.search(
                    queries, predicate, count, request_id=request_id
                )
            except Exception as e:
                vector_error = str(e)
                logger.error("%s Vector search failed, falling back to keyword search: %s", prefix, e)
                candidates = []
            if candidates:
                strategy = STRATEGY_VECTOR

        if not candidates:
            logger.info("%s Vector search produced no candidates; running keyword fallback", prefix)
            candidates = await self.keyword_retriever.search(
                queries, learned, count, request_id=request_id
            )
            if candidates:
                strategy = STRATEGY_KEYWORD

        if not candidates:
            logger.info("%s No passages found for topic %r", prefix, topic)
            return TopicSearchResult(
                passages=[], strategy=STRATEGY_NONE, queries=queries, vector_error=vector_error
            )

        paired = await pair_bilingual(self.store, [c.reference for c in candidates], request_id=request_id)
        ranked = rank(
            paired,
            queries,
            limit=count,
            short_content_chars=self.config.short_content_chars,
        )

        logger.info("%s Topic %r answered by %s search with %s passages", prefix, topic, strategy, len(ranked))
        for i, sc in enumerate(ranked, start=1):
            logger.info("%s %s. %s score=%s", prefix, i, sc.reference, sc.relevance_score)

        return TopicSearchResult(
            passages=ranked, strategy=strategy, queries=queries, vector_error=vector_error
        )
