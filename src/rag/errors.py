"""Exceptions raised by the topic retrieval pipeline."""

from __future__ import annotations


class RetrievalError(Exception):
    """Base class for retrieval failures."""


class VectorSearchError(RetrievalError):
    """Embedding or similarity search failed; callers fall back to keyword search."""


class ContentStoreError(RetrievalError):
    """The passage store could not be read."""
