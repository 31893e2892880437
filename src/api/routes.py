"""
API routes: health and topic search.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.rag import ContentStoreError, TopicSearchPipeline

from .dedup import RequestDeduplicator
from .models import HealthResponse, PassageHit, TopicSearchRequest, TopicSearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def _get_state(request: Request) -> tuple[Optional[TopicSearchPipeline], str]:
    pipeline = getattr(request.app.state, "pipeline", None)
    backend = getattr(request.app.state, "backend", "")
    return pipeline, backend


def _get_deduplicator(request: Request) -> RequestDeduplicator:
    dedup = getattr(request.app.state, "deduplicator", None)
    if dedup is None:
        request.app.state.deduplicator = RequestDeduplicator()
        dedup = request.app.state.deduplicator
    return dedup


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """Health check."""
    pipeline, backend = _get_state(request)
    return HealthResponse(
        status="ok",
        backend=backend,
        vector_search=pipeline is not None and pipeline.vector_retriever is not None,
    )


@router.post("/topic-search", response_model=TopicSearchResponse)
async def topic_search(request: Request, body: TopicSearchRequest) -> TopicSearchResponse | JSONResponse:
    """Retrieve ranked bilingual passages about a topic."""
    pipeline, _ = _get_state(request)
    if pipeline is None:
        return JSONResponse(
            status_code=503,
            content={"detail": "Service unavailable: retrieval pipeline not initialized."},
        )

    request_id = uuid.uuid4().hex[:12]
    dedup = _get_deduplicator(request)
    dedup.evict_expired()
    params: dict[str, Any] = body.model_dump()
    if not dedup.check_and_record(params):
        logger.info("[%s] Duplicate topic search within %ss, rejecting", request_id, dedup.window_s)
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many requests. Please wait before repeating the same search."},
        )

    try:
        result = await pipeline.retrieve_by_topic(
            body.topic,
            body.user_id,
            requested_count=body.count,
            restrict_to_learned=body.restrict_to_learned,
            request_id=request_id,
        )
    except ContentStoreError as e:
        logger.error("[%s] Content store error: %s", request_id, e)
        return JSONResponse(status_code=502, content={"detail": "Passage store unavailable."})

    hits = [
        PassageHit(
            reference=sc.passage.reference,
            book=sc.passage.book,
            section=sc.passage.section,
            content=sc.passage.content,
            content_en=sc.passage.content_en,
            content_he=sc.passage.content_he,
            score=sc.relevance_score,
        )
        for sc in result.passages
    ]
    return TopicSearchResponse(
        topic=body.topic,
        strategy=result.strategy,
        queries=result.queries,
        results=hits,
    )
