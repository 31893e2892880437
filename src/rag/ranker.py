"""
Lexical relevance ranking for retrieved passages.

Scores are additive integers computed against the expanded query set:

- +5 for each query term found verbatim (case-insensitive) in the content
- +1 for each word longer than 3 characters, from any term, found in the content
  (a word that is itself a fully matched term is counted by both rules)
- +1 if the content is shorter than ``short_content_chars``
- +3 if any such word appears in the passage reference

Ties keep the input order (the sort is stable); there is no secondary key.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, TypeVar

from .passages import Passage, ScoredCandidate

SHORT_CONTENT_CHARS = 1000
MIN_WORD_LEN = 4

T = TypeVar("T")


def _query_words(query_terms: Sequence[str]) -> List[str]:
    words: List[str] = []
    for term in query_terms:
        words.extend(w for w in term.lower().split() if len(w) >= MIN_WORD_LEN)
    return words


def score(
    candidate: Passage,
    query_terms: Sequence[str],
    *,
    short_content_chars: int = SHORT_CONTENT_CHARS,
) -> int:
    """Relevance of one passage to the query terms (non-negative)."""
    content = (candidate.content or "").lower()
    total = 0

    for term in query_terms:
        if term.lower() in content:
            total += 5

    words = _query_words(query_terms)
    for word in words:
        if word in content:
            total += 1

    if len(content) < short_content_chars:
        total += 1

    reference = (candidate.reference or "").lower()
    if reference and any(word in reference for word in words):
        total += 3

    return total


def dedup_by_reference(items: Iterable[T]) -> List[T]:
    """Drop items whose reference was already seen; first occurrence wins."""
    seen: set[str] = set()
    unique: List[T] = []
    for item in items:
        ref = getattr(item, "reference")
        if ref in seen:
            continue
        seen.add(ref)
        unique.append(item)
    return unique


def rank(
    candidates: Iterable[Passage],
    query_terms: Sequence[str],
    limit: Optional[int] = None,
    *,
    short_content_chars: int = SHORT_CONTENT_CHARS,
) -> List[ScoredCandidate]:
    """Deduplicate, score and sort candidates by descending relevance."""
    scored = [
        ScoredCandidate(
            passage=c,
            relevance_score=score(c, query_terms, short_content_chars=short_content_chars),
        )
        for c in dedup_by_reference(candidates)
    ]
    scored.sort(key=lambda s: s.relevance_score, reverse=True)
    if limit is not None:
        scored = scored[:limit]
    return scored
