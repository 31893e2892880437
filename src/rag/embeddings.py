"""
Query embedders: OpenAI embeddings API or a local sentence-transformers model.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
from sentence_transformers import SentenceTransformer

from src.llm.client import DEFAULT_EMBEDDING_MODEL, LLMClient, create_client

EMBEDDING_PROVIDER = os.getenv("EMBEDDING_PROVIDER", "openai")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")


@dataclass
class OpenAIEmbedder:
    """Embeds through the OpenAI embeddings endpoint (matches the stored 1536-d vectors)."""

    client: LLMClient
    model: str = DEFAULT_EMBEDDING_MODEL

    async def embed(self, text: str) -> List[float]:
        vectors = await asyncio.to_thread(self.client.embed, [text], self.model)
        return vectors[0]


@dataclass
class SentenceTransformerEmbedder:
    """Local sentence-transformers embedder producing normalized vectors."""

    model_name: str = EMBEDDING_MODEL
    _model: Optional[SentenceTransformer] = field(default=None, init=False, repr=False)

    def _encode(self, text: str) -> np.ndarray:
        if self._model is None:
            self._model = SentenceTransformer(self.model_name)
        return self._model.encode(
            [text],
            convert_to_numpy=True,
            normalize_embeddings=True,
        )[0]

    async def embed(self, text: str) -> List[float]:
        vec = await asyncio.to_thread(self._encode, text)
        return vec.astype(float).tolist()


def create_embedder(provider: Optional[str] = None, client: Optional[LLMClient] = None):
    """Build the embedder selected by EMBEDDING_PROVIDER ("openai" or "sentence-transformers")."""
    provider = (provider or EMBEDDING_PROVIDER).lower()
    if provider in ("sentence-transformers", "local"):
        return SentenceTransformerEmbedder()
    if provider != "openai":
        raise ValueError(f"unknown embedding provider: {provider!r}")
    if client is None:
        client = create_client()
    return OpenAIEmbedder(client=client)
