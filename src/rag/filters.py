"""
Metadata filter predicates for similarity search.

The predicate language is closed: equality on one field, membership of one
field in a fixed set of values, and a conjunction of the two.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple, Union

from .passages import TextPassage

FILTERABLE_FIELDS = ("reference", "book", "section", "language")

# Column names used by the torah_texts table and match_torah_texts().
_COLUMN_NAMES = {"reference": "ref"}


def _check_field(field: str) -> None:
    if field not in FILTERABLE_FIELDS:
        raise ValueError(f"cannot filter on {field!r}; expected one of {FILTERABLE_FIELDS}")


@dataclass(frozen=True)
class Equals:
    field: str
    value: str

    def __post_init__(self) -> None:
        _check_field(self.field)


@dataclass(frozen=True)
class InSet:
    field: str
    values: FrozenSet[str]

    def __post_init__(self) -> None:
        _check_field(self.field)
        if not isinstance(self.values, frozenset):
            object.__setattr__(self, "values", frozenset(self.values))


@dataclass(frozen=True)
class And:
    clauses: Tuple["Filter", ...]

    def __post_init__(self) -> None:
        if not isinstance(self.clauses, tuple):
            object.__setattr__(self, "clauses", tuple(self.clauses))


Filter = Union[Equals, InSet, And]


def build_filter(language: str, allowed_references: Optional[Iterable[str]] = None) -> Filter:
    """Filter used by topic search: one language, optionally restricted to a set of references."""
    lang = Equals("language", language)
    if allowed_references is None:
        return lang
    return And((lang, InSet("reference", frozenset(allowed_references))))


def matches(predicate: Filter, passage: TextPassage) -> bool:
    """Evaluate the predicate against a passage in memory."""
    if isinstance(predicate, Equals):
        return getattr(passage, predicate.field) == predicate.value
    if isinstance(predicate, InSet):
        return getattr(passage, predicate.field) in predicate.values
    if isinstance(predicate, And):
        return all(matches(clause, passage) for clause in predicate.clauses)
    raise TypeError(f"unsupported filter: {predicate!r}")


def to_payload(predicate: Filter) -> Dict[str, Any]:
    """
    Render the predicate as the JSON filter accepted by match_torah_texts().

    Equality becomes ``{"language": "en"}``; membership becomes
    ``{"ref": {"in": [...]}}`` with values sorted so the payload is stable.
    """
    if isinstance(predicate, Equals):
        return {_COLUMN_NAMES.get(predicate.field, predicate.field): predicate.value}
    if isinstance(predicate, InSet):
        column = _COLUMN_NAMES.get(predicate.field, predicate.field)
        return {column: {"in": sorted(predicate.values)}}
    if isinstance(predicate, And):
        payload: Dict[str, Any] = {}
        for clause in predicate.clauses:
            part = to_payload(clause)
            overlap = payload.keys() & part.keys()
            if overlap:
                raise ValueError(f"conflicting clauses for {sorted(overlap)}")
            payload.update(part)
        return payload
    raise TypeError(f"unsupported filter: {predicate!r}")
