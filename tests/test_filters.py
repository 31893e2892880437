"""
Tests for the similarity-search filter predicates.
"""

from __future__ import annotations

import pytest

from src.rag import And, Equals, InSet, TextPassage, build_filter, matches, to_payload


def _passage(ref: str, language: str = "en") -> TextPassage:
    return TextPassage(reference=ref, book="Berakhot", section="2a", language=language, content="")


def test_build_filter_language_only():
    predicate = build_filter("en")
    assert predicate == Equals("language", "en")
    assert to_payload(predicate) == {"language": "en"}


def test_build_filter_with_learned_references():
    predicate = build_filter("en", ["Berakhot.2b", "Berakhot.2a"])
    assert isinstance(predicate, And)
    assert to_payload(predicate) == {
        "language": "en",
        "ref": {"in": ["Berakhot.2a", "Berakhot.2b"]},
    }


def test_matches_evaluates_all_clauses():
    predicate = build_filter("en", {"Berakhot.2a"})
    assert matches(predicate, _passage("Berakhot.2a"))
    assert not matches(predicate, _passage("Berakhot.2b"))
    assert not matches(predicate, _passage("Berakhot.2a", language="he"))


def test_inset_normalizes_values_to_frozenset():
    predicate = InSet("reference", ["a", "b", "a"])  # type: ignore[arg-type]
    assert predicate.values == frozenset({"a", "b"})


def test_unknown_field_rejected():
    with pytest.raises(ValueError):
        Equals("content", "x")
    with pytest.raises(ValueError):
        InSet("embedding", frozenset())


def test_conflicting_clauses_rejected_in_payload():
    predicate = And((Equals("language", "en"), Equals("language", "he")))
    with pytest.raises(ValueError):
        to_payload(predicate)
