"""
Request and response models for the topic search API.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class TopicSearchRequest(BaseModel):
    """Request body for POST /api/topic-search."""

    user_id: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1, description="Free-text study topic")
    count: int = Field(15, ge=1, le=50)
    restrict_to_learned: bool = Field(True, description="Only search references the user has completed")


class PassageHit(BaseModel):
    """Single ranked passage."""

    reference: str
    book: str
    section: str
    content: str
    content_en: str
    content_he: Optional[str] = None
    score: int


class TopicSearchResponse(BaseModel):
    """Response for POST /api/topic-search."""

    topic: str
    strategy: str
    queries: List[str] = Field(default_factory=list)
    results: List[PassageHit] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    status: str = "ok"
    backend: str = ""
    vector_search: bool = False
