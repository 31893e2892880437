"""
In-process passage store over a loaded corpus export.

Implements the content store, vector index and progress store protocols
without a database, using numpy cosine similarity for vector search.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

import numpy as np

from .filters import Filter, matches
from .interfaces import VectorMatch
from .passages import TextPassage

_SEARCHABLE_FIELDS = ("content", "reference", "book")


@dataclass
class LocalTextStore:
    """Passages held in memory; embeddings are used when present."""

    passages: List[TextPassage]
    learned: Dict[str, Set[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._embedded = [p for p in self.passages if p.embedding]
        if self._embedded:
            emb = np.asarray([p.embedding for p in self._embedded], dtype=np.float32)
            norms = np.linalg.norm(emb, axis=1, keepdims=True)
            norms[norms == 0] = 1.0
            self._embeddings = emb / norms
        else:
            self._embeddings = np.zeros((0, 0), dtype=np.float32)

    async def find_by_references(
        self, references: Sequence[str], language: Optional[str] = None
    ) -> List[TextPassage]:
        wanted = set(references)
        return [
            p
            for p in self.passages
            if p.reference in wanted and (language is None or p.language == language)
        ]

    async def search_contains(
        self,
        field: str,
        query: str,
        allowed_references: Optional[Set[str]],
        limit: int,
    ) -> List[TextPassage]:
        if field not in _SEARCHABLE_FIELDS:
            raise ValueError(f"cannot search on {field!r}")
        needle = query.lower()
        found: List[TextPassage] = []
        for p in self.passages:
            if allowed_references is not None and p.reference not in allowed_references:
                continue
            if needle in (getattr(p, field) or "").lower():
                found.append(p)
                if len(found) >= limit:
                    break
        return found

    async def similarity_search(
        self,
        embedding: Sequence[float],
        predicate: Filter,
        top_k: int,
        threshold: float,
    ) -> List[VectorMatch]:
        if not self._embedded:
            return []
        q = np.asarray(embedding, dtype=np.float32)
        if q.shape[0] != self._embeddings.shape[1]:
            raise ValueError(
                f"query embedding has {q.shape[0]} dims, index has {self._embeddings.shape[1]}"
            )
        norm = np.linalg.norm(q)
        if norm:
            q = q / norm
        sims = self._embeddings @ q
        results: List[VectorMatch] = []
        for idx in np.argsort(-sims, kind="stable"):
            passage = self._embedded[int(idx)]
            score = float(sims[idx])
            if score <= threshold:
                break
            if not matches(predicate, passage):
                continue
            results.append(
                VectorMatch(
                    reference=passage.reference,
                    book=passage.book,
                    section=passage.section,
                    language=passage.language,
                    content=passage.content,
                    similarity=score,
                )
            )
            if len(results) >= top_k:
                break
        return results

    async def get_learned_references(self, user_id: str) -> Set[str]:
        return set(self.learned.get(user_id, set()))
