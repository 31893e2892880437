"""
Build the topic search pipeline for the API (used in lifespan) and the CLI.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Set, Tuple

from src.llm import LLMClient, create_client
from src.rag import (
    KeywordRetriever,
    LocalTextStore,
    QueryExpander,
    RAGConfig,
    TopicSearchPipeline,
    VectorRetriever,
    load_passages,
)
from src.rag.embeddings import create_embedder

logger = logging.getLogger(__name__)

TEXT_BACKEND = os.getenv("TEXT_BACKEND", "postgres")
LEARNED_PATH = os.getenv("LEARNED_PATH")


def _load_learned(path: Optional[str]) -> Dict[str, Set[str]]:
    """Local progress file: ``{"<user_id>": ["Berakhot.2a", ...]}``."""
    if not path:
        return {}
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    return {str(user): set(refs) for user, refs in data.items()}


def _try_client() -> Optional[LLMClient]:
    try:
        return create_client()
    except ValueError as e:
        logger.warning("LLM client unavailable, query expansion disabled: %s", e)
        return None


def build_pipeline(
    backend: Optional[str] = None,
    texts_path: Optional[Path] = None,
    config: Optional[RAGConfig] = None,
) -> Tuple[TopicSearchPipeline, str]:
    """
    Wire stores, retrievers and the expander.

    ``backend`` is "postgres" (torah_texts via DATABASE_URL) or "local"
    (JSONL export at TEXTS_PATH). Returns (pipeline, backend).
    """
    backend = (backend or TEXT_BACKEND).lower()
    config = config or RAGConfig()
    client = _try_client()

    if backend == "local":
        store = LocalTextStore(load_passages(texts_path), learned=_load_learned(LEARNED_PATH))
        index = store
        progress = store
    elif backend == "postgres":
        from src.db.session import AsyncSessionLocal
        from src.db.text_store import SqlProgressStore, SqlTextStore
        from src.db.vector_store import PgVectorIndex

        store = SqlTextStore(AsyncSessionLocal)
        index = PgVectorIndex(AsyncSessionLocal)
        progress = SqlProgressStore(AsyncSessionLocal)
    else:
        raise ValueError(f"unknown text backend: {backend!r}")

    vector_retriever: Optional[VectorRetriever] = None
    try:
        embedder = create_embedder(client=client)
        vector_retriever = VectorRetriever(embedder=embedder, index=index, store=store, config=config)
    except ValueError as e:
        logger.warning("Vector search disabled (embedder unavailable): %s", e)

    pipeline = TopicSearchPipeline(
        expander=QueryExpander(generator=client, config=config),
        vector_retriever=vector_retriever,
        keyword_retriever=KeywordRetriever(store=store, config=config),
        store=store,
        progress=progress,
        config=config,
    )
    return pipeline, backend
