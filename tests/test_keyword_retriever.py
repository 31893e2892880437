"""
Tests for the keyword fallback retriever.
"""

from __future__ import annotations

import asyncio

import pytest

from src.rag import ContentStoreError, KeywordRetriever, LocalTextStore


class _RecordingStore:
    """Delegates to a real store; can fail on selected fields."""

    def __init__(self, inner: LocalTextStore, failing_fields: tuple[str, ...] = ()):
        self.inner = inner
        self.failing_fields = failing_fields
        self.calls: list[tuple[str, str, int]] = []

    async def search_contains(self, field, query, allowed_references, limit):
        self.calls.append((field, query, limit))
        if field in self.failing_fields:
            raise ContentStoreError(f"column {field} unavailable")
        return await self.inner.search_contains(field, query, allowed_references, limit)


@pytest.mark.anyio
async def test_finds_content_matches(store: LocalTextStore):
    results = await KeywordRetriever(store=store).search(["damages"], None, 5)
    assert [p.reference for p in results] == ["Bava Kamma.2a"]


@pytest.mark.anyio
async def test_one_failing_field_does_not_sink_the_rest(store: LocalTextStore):
    recording = _RecordingStore(store, failing_fields=("book",))
    results = await KeywordRetriever(store=recording).search(["damages", "Shabbat"], None, 5)
    refs = [p.reference for p in results]
    assert "Bava Kamma.2a" in refs
    assert "Shabbat.21b" in refs
    assert len(recording.calls) == 6


@pytest.mark.anyio
async def test_all_fields_failing_returns_empty(store: LocalTextStore):
    recording = _RecordingStore(store, failing_fields=("content", "reference", "book"))
    assert await KeywordRetriever(store=recording).search(["damages"], None, 5) == []


@pytest.mark.anyio
async def test_respects_allowed_references(store: LocalTextStore):
    results = await KeywordRetriever(store=store).search(["Berakhot"], {"Berakhot.2b"}, 5)
    assert [p.reference for p in results] == ["Berakhot.2b"]


@pytest.mark.anyio
async def test_each_combination_limited_to_twice_the_count(store: LocalTextStore):
    recording = _RecordingStore(store)
    await KeywordRetriever(store=recording).search(["prayer", "damages"], None, 4)
    assert len(recording.calls) == 6
    assert {limit for _, _, limit in recording.calls} == {8}
    assert [(f, q) for f, q, _ in recording.calls] == [
        ("content", "prayer"),
        ("reference", "prayer"),
        ("book", "prayer"),
        ("content", "damages"),
        ("reference", "damages"),
        ("book", "damages"),
    ]


@pytest.mark.anyio
async def test_results_deduplicated_by_reference(store: LocalTextStore):
    # "Bava Kamma" hits both the reference and book fields, in both languages
    results = await KeywordRetriever(store=store).search(["Bava Kamma", "kamma"], None, 10)
    refs = [p.reference for p in results]
    assert refs == ["Bava Kamma.2a", "Bava Kamma.3a"]
    assert len(refs) == len(set(refs))


class _SlowStore:
    def __init__(self):
        self.started = 0
        self.cancelled = 0

    async def search_contains(self, field, query, allowed_references, limit):
        self.started += 1
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        return []


@pytest.mark.anyio
async def test_cancelling_search_stops_pending_combinations():
    slow = _SlowStore()
    task = asyncio.ensure_future(KeywordRetriever(store=slow).search(["prayer", "damages"], None, 5))
    while slow.started < 6:
        await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert slow.cancelled == 6
