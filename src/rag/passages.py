"""
Core data records for topic retrieval over Talmud passages.
"""

from __future__ import annotations

import dataclasses
import json
import os
from pathlib import Path
from typing import List, Optional, Union


ROOT = Path(__file__).resolve().parents[2]
TEXTS_PATH = Path(os.getenv("TEXTS_PATH", str(ROOT / "data" / "torah_texts.jsonl")))

LANGUAGES = ("en", "he")


@dataclasses.dataclass
class TextPassage:
    """A single-language unit of source text (one row of torah_texts)."""

    reference: str
    book: str
    section: str
    language: str
    content: str
    embedding: Optional[List[float]] = None
    # Only set when the passage came back from a similarity search.
    similarity: Optional[float] = None


@dataclasses.dataclass
class BilingualPassage:
    """English passage paired with its Hebrew counterpart, if one exists."""

    reference: str
    book: str
    section: str
    content_en: str
    content_he: Optional[str] = None

    @property
    def content(self) -> str:
        if self.content_he is None:
            return f"English: {self.content_en}"
        return f"English: {self.content_en}\n\nHebrew: {self.content_he}"


Passage = Union[TextPassage, BilingualPassage]


@dataclasses.dataclass
class ScoredCandidate:
    """A passage with its lexical relevance score for one request."""

    passage: Passage
    relevance_score: int

    @property
    def reference(self) -> str:
        return self.passage.reference


def passage_from_row(obj: dict) -> TextPassage:
    """Build a TextPassage from a torah_texts-shaped dict (``ref`` or ``reference``)."""
    embedding = obj.get("embedding")
    return TextPassage(
        reference=obj.get("reference") or obj["ref"],
        book=obj.get("book") or "",
        section=obj.get("section") or "",
        language=obj["language"],
        content=obj.get("content") or "",
        embedding=[float(x) for x in embedding] if embedding else None,
    )


def load_passages(
    path: Path | None = None,
    language: Optional[str] = None,
) -> List[TextPassage]:
    """Load passages from a JSONL export. If language is set, only that language is loaded."""
    if path is None:
        path = TEXTS_PATH
    if not path.exists():
        raise FileNotFoundError(f"passage export not found at {path}")

    passages: List[TextPassage] = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            obj = json.loads(line)
            if language and obj.get("language") != language:
                continue
            passages.append(passage_from_row(obj))
    return passages

