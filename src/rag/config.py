"""
Configuration for the topic retrieval pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass
class RAGConfig:
    """Configuration for topic retrieval."""

    language: str = "en"
    similarity_threshold: float = 0.01
    min_match_count: int = 20
    keyword_fields: Tuple[str, ...] = ("content", "reference", "book")
    short_content_chars: int = 1000
    expansion_timeout_s: float = 30.0
    expansion_temperature: float = 0.3
    expansion_max_tokens: int = 256
    default_count: int = 5
