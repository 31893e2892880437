"""
Collaborator protocols for the topic retrieval pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Set

from .filters import Filter
from .passages import TextPassage


@dataclass
class VectorMatch:
    """One row returned by a similarity search; ``reference`` may be missing."""

    content: str
    similarity: float
    reference: Optional[str] = None
    book: str = ""
    section: str = ""
    language: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_passage(self) -> TextPassage:
        return TextPassage(
            reference=self.reference or "",
            book=self.book,
            section=self.section,
            language=self.language,
            content=self.content,
            similarity=self.similarity,
        )


class TextGenerator(Protocol):
    """Single-shot text completion (blocking)."""

    def generate_single(self, prompt: str, max_tokens: int = ..., temperature: float = ...) -> str:
        ...


class Embedder(Protocol):
    async def embed(self, text: str) -> List[float]:
        ...


class VectorIndex(Protocol):
    async def similarity_search(
        self,
        embedding: Sequence[float],
        predicate: Filter,
        top_k: int,
        threshold: float,
    ) -> List[VectorMatch]:
        """
        Return up to top_k matches above threshold, most similar first.

        Args:
            embedding: Query vector
            predicate: Metadata filter every match must satisfy
            top_k: Maximum number of matches
            threshold: Minimum cosine similarity
        """
        ...


class ContentStore(Protocol):
    async def find_by_references(
        self, references: Sequence[str], language: Optional[str] = None
    ) -> List[TextPassage]:
        """Batched lookup of passages by reference, optionally for one language."""
        ...

    async def search_contains(
        self,
        field: str,
        query: str,
        allowed_references: Optional[Set[str]],
        limit: int,
    ) -> List[TextPassage]:
        """Case-insensitive substring search on one field."""
        ...


class ProgressStore(Protocol):
    async def get_learned_references(self, user_id: str) -> Set[str]:
        ...
