"""
Tests for duplicate-request suppression.
"""

from __future__ import annotations

import pytest

from src.api.dedup import RequestDeduplicator, request_key


class _Clock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_request_key_ignores_key_and_list_order():
    a = {"topic": "prayer", "user_id": "u1", "books": ["Berakhot", "Shabbat"]}
    b = {"books": ["Shabbat", "Berakhot"], "user_id": "u1", "topic": "prayer"}
    assert request_key(a) == request_key(b)
    assert request_key(a) != request_key({**a, "topic": "damages"})


def test_duplicate_within_window_is_rejected():
    clock = _Clock()
    dedup = RequestDeduplicator(window_s=5.0, max_age_s=60.0, clock=clock)
    params = {"topic": "prayer", "user_id": "u1"}
    assert dedup.check_and_record(params)
    clock.now += 4.9
    assert not dedup.check_and_record(params)
    assert dedup.check_and_record({"topic": "prayer", "user_id": "u2"})


def test_request_allowed_after_window():
    clock = _Clock()
    dedup = RequestDeduplicator(window_s=5.0, max_age_s=60.0, clock=clock)
    params = {"topic": "prayer", "user_id": "u1"}
    assert dedup.check_and_record(params)
    clock.now += 5.0
    assert dedup.check_and_record(params)


def test_evict_expired_drops_old_entries():
    clock = _Clock()
    dedup = RequestDeduplicator(window_s=5.0, max_age_s=60.0, clock=clock)
    dedup.check_and_record({"topic": "a"})
    clock.now += 30.0
    dedup.check_and_record({"topic": "b"})
    clock.now += 31.0
    assert dedup.evict_expired() == 1
    assert len(dedup) == 1
    clock.now += 30.0
    assert dedup.evict_expired() == 1
    assert len(dedup) == 0


def test_max_age_must_cover_window():
    with pytest.raises(ValueError):
        RequestDeduplicator(window_s=10.0, max_age_s=5.0)
