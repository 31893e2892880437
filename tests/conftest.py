"""
Shared fixtures: a tiny bilingual corpus and a keyword-driven embedder.
"""

from __future__ import annotations

from typing import List

import pytest

from src.rag import LocalTextStore, TextPassage


class KeywordEmbedder:
    """Deterministic 3-d embeddings: prayer / damages / shabbat axes."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        t = text.lower()
        if "prayer" in t or "shema" in t:
            return [1.0, 0.0, 0.0]
        if "damage" in t:
            return [0.0, 1.0, 0.0]
        if "shabbat" in t or "candle" in t:
            return [0.0, 0.0, 1.0]
        return [0.3, 0.3, 0.3]


@pytest.fixture
def sample_passages() -> list[TextPassage]:
    return [
        TextPassage(
            reference="Berakhot.2a",
            book="Berakhot",
            section="2a",
            language="en",
            content="From when may one recite Shema in the evening? The Mishnah discusses the times of prayer.",
            embedding=[1.0, 0.0, 0.0],
        ),
        TextPassage(
            reference="Berakhot.2a",
            book="Berakhot",
            section="2a",
            language="he",
            content="מאימתי קורין את שמע בערבין",
        ),
        TextPassage(
            reference="Berakhot.2b",
            book="Berakhot",
            section="2b",
            language="en",
            content="The priests enter to eat their teruma when the stars emerge.",
            embedding=[0.9, 0.1, 0.0],
        ),
        TextPassage(
            reference="Berakhot.2b",
            book="Berakhot",
            section="2b",
            language="he",
            content="משעה שהכהנים נכנסים לאכול בתרומתן",
        ),
        TextPassage(
            reference="Bava Kamma.2a",
            book="Bava Kamma",
            section="2a",
            language="en",
            content="There are four primary categories of damage; the laws of damages are discussed here.",
            embedding=[0.0, 1.0, 0.0],
        ),
        TextPassage(
            reference="Bava Kamma.2a",
            book="Bava Kamma",
            section="2a",
            language="he",
            content="ארבעה אבות נזיקין",
        ),
        TextPassage(
            reference="Bava Kamma.3a",
            book="Bava Kamma",
            section="3a",
            language="he",
            content="תנא שור לרגלו",
        ),
        TextPassage(
            reference="Shabbat.21b",
            book="Shabbat",
            section="21b",
            language="en",
            content="The mitzva of Hanukkah lights and the oils used for Shabbat candles.",
            embedding=[0.0, 0.1, 1.0],
        ),
    ]


@pytest.fixture
def store(sample_passages: list[TextPassage]) -> LocalTextStore:
    return LocalTextStore(
        sample_passages,
        learned={"u1": {"Berakhot.2b"}, "u2": {"Berakhot.2a", "Bava Kamma.2a"}},
    )


@pytest.fixture
def embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
