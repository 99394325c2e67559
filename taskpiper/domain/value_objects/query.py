"""Query expression value objects for list endpoints.

A parsed ``where`` filter is a small tree of tagged, immutable nodes
(FieldCondition, AllOf, AnyOf). Sorting and projection are value objects
as well. Every node can be evaluated against a plain document dict, so
storage backends without a native query engine (and tests) share the same
semantics as the Firestore compiler.

Matching follows document-store conventions: a missing field compares
equal to None, equality against an array field means "array contains",
and range operators only compare values of the same type family.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

ID_FIELD = "_id"


class FilterOp(str, Enum):
    """Field comparison operators supported in ``where``."""

    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"


def get_path(doc: dict[str, Any], path: str) -> Any:
    """Return the value at a dotted path, or None when any segment is missing."""
    current: Any = doc
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _family(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, datetime):
        return "date"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _equals(actual: Any, expected: Any) -> bool:
    if isinstance(actual, list) and not isinstance(expected, list):
        return any(_equals(item, expected) for item in actual)
    if _family(actual) != _family(expected):
        return False
    return actual == expected


def _compare(actual: Any, op: FilterOp, expected: Any) -> bool:
    if isinstance(actual, list):
        return any(_compare(item, op, expected) for item in actual)
    if _family(actual) != _family(expected) or _family(actual) in ("null", "array", "object"):
        return False
    if op is FilterOp.GT:
        return actual > expected
    if op is FilterOp.GTE:
        return actual >= expected
    if op is FilterOp.LT:
        return actual < expected
    return actual <= expected


@dataclass(frozen=True)
class FieldCondition:
    """Leaf node: ``field <op> value``."""

    field: str
    op: FilterOp
    value: Any

    def __post_init__(self) -> None:
        if self.op in (FilterOp.IN, FilterOp.NIN) and not isinstance(self.value, tuple):
            raise ValueError(f"{self.op.value} requires a list of values")

    def matches(self, doc: dict[str, Any]) -> bool:
        actual = get_path(doc, self.field)
        if self.op is FilterOp.EQ:
            return _equals(actual, self.value)
        if self.op is FilterOp.NE:
            return not _equals(actual, self.value)
        if self.op is FilterOp.IN:
            return any(_equals(actual, v) for v in self.value)
        if self.op is FilterOp.NIN:
            return not any(_equals(actual, v) for v in self.value)
        return _compare(actual, self.op, self.value)


@dataclass(frozen=True)
class AllOf:
    """Conjunction node (``$and``, or several keys in one filter document)."""

    clauses: tuple["Filter", ...]

    def matches(self, doc: dict[str, Any]) -> bool:
        return all(clause.matches(doc) for clause in self.clauses)


@dataclass(frozen=True)
class AnyOf:
    """Disjunction node (``$or``)."""

    clauses: tuple["Filter", ...]

    def matches(self, doc: dict[str, Any]) -> bool:
        return any(clause.matches(doc) for clause in self.clauses)


Filter = Union[FieldCondition, AllOf, AnyOf]


# Type order used when sorting mixed values: null, numbers, strings,
# objects, arrays, booleans, dates.
_SORT_RANK = {
    "null": 0,
    "number": 1,
    "string": 2,
    "object": 3,
    "array": 4,
    "bool": 5,
    "date": 6,
}


def _sortable(value: Any) -> tuple[int, Any]:
    family = _family(value)
    rank = _SORT_RANK.get(family, 7)
    if family in ("null",):
        return (rank, 0)
    if family in ("object", "array") or rank == 7:
        return (rank, repr(value))
    return (rank, value)


@dataclass(frozen=True)
class SortKey:
    """One ``sort`` entry: field name and direction."""

    field: str
    descending: bool = False


def sort_documents(
    docs: list[dict[str, Any]], keys: tuple[SortKey, ...]
) -> list[dict[str, Any]]:
    """Return docs ordered by keys (first key most significant, stable)."""
    ordered = list(docs)
    for key in reversed(keys):
        ordered.sort(
            key=lambda d, f=key.field: _sortable(get_path(d, f)),
            reverse=key.descending,
        )
    return ordered


@dataclass(frozen=True)
class Projection:
    """Field selection: inclusion (only ``fields``) or exclusion (all but ``fields``).

    ``include_id`` controls ``_id`` independently, as in inclusion
    projections like ``{"name": 1, "_id": 0}``.
    """

    fields: tuple[str, ...]
    include: bool = True
    include_id: bool = True

    def apply(self, doc: dict[str, Any]) -> dict[str, Any]:
        if self.include:
            out: dict[str, Any] = {}
            if self.include_id and ID_FIELD in doc:
                out[ID_FIELD] = doc[ID_FIELD]
            for name in self.fields:
                if name in doc:
                    out[name] = doc[name]
            return out
        out = {k: v for k, v in doc.items() if k not in self.fields}
        if not self.include_id:
            out.pop(ID_FIELD, None)
        return out


@dataclass(frozen=True)
class QuerySpec:
    """Validated list query: filter, sort, projection, pagination, count flag."""

    filter: Filter | None = None
    sort: tuple[SortKey, ...] = field(default_factory=tuple)
    projection: Projection | None = None
    skip: int | None = None
    limit: int | None = None
    want_count: bool = False

    def matches(self, doc: dict[str, Any]) -> bool:
        return self.filter is None or self.filter.matches(doc)

    def project(self, doc: dict[str, Any]) -> dict[str, Any]:
        return self.projection.apply(doc) if self.projection else doc
