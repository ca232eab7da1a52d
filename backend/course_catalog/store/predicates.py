"""Backend-neutral query predicates for the course record store.

Stores receive a small predicate tree instead of raw SQL so the catalog
core can run unchanged against PostgreSQL or the in-memory store. Field
names are the public record field names (``title``, ``tags``,
``creatorName`` ...).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class MatchAll:
    pass


@dataclass(frozen=True)
class FieldEquals:
    field: str
    value: Any


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring test on a text field. An empty ``text`` matches everything."""

    field: str
    text: str


@dataclass(frozen=True)
class AnyIn:
    """The sequence field shares at least one element with ``values``."""

    field: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class AnyOf:
    predicates: tuple["Predicate", ...]


Predicate = Union[MatchAll, FieldEquals, Contains, AnyIn, AnyOf]


@dataclass(frozen=True)
class Sort:
    field: str = "id"
    descending: bool = True


ID_DESCENDING = Sort("id", descending=True)


def any_of(*predicates: Predicate) -> Predicate:
    if len(predicates) == 1:
        return predicates[0]
    return AnyOf(tuple(predicates))


def evaluate(predicate: Predicate, record: dict[str, Any]) -> bool:
    """Evaluate a predicate against a record dict keyed by public field names."""
    if isinstance(predicate, MatchAll):
        return True
    if isinstance(predicate, FieldEquals):
        return record.get(predicate.field) == predicate.value
    if isinstance(predicate, Contains):
        value = record.get(predicate.field) or ""
        return predicate.text.lower() in str(value).lower()
    if isinstance(predicate, AnyIn):
        present = record.get(predicate.field) or []
        return any(v in present for v in predicate.values)
    if isinstance(predicate, AnyOf):
        return any(evaluate(p, record) for p in predicate.predicates)
    raise TypeError(f"Unsupported predicate: {predicate!r}")
