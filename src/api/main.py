"""
FastAPI application for the topic search API.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .dedup import RequestDeduplicator
from .deps import build_pipeline
from .routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and build the pipeline on startup; drop it on shutdown."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    pipeline, backend = build_pipeline()
    app.state.pipeline = pipeline
    app.state.backend = backend
    app.state.deduplicator = RequestDeduplicator(window_s=5.0, max_age_s=60.0)
    yield
    app.state.pipeline = None


app = FastAPI(
    title="Talmud Topic Search API",
    description="Topic retrieval over Talmud passages for quiz generation",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(router)
