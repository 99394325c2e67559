"""Domain value objects (immutable, no identity)."""

from taskpiper.domain.value_objects.query import (
    ID_FIELD,
    AllOf,
    AnyOf,
    FieldCondition,
    Filter,
    FilterOp,
    Projection,
    QuerySpec,
    SortKey,
    sort_documents,
)

__all__ = [
    "ID_FIELD",
    "AllOf",
    "AnyOf",
    "FieldCondition",
    "Filter",
    "FilterOp",
    "Projection",
    "QuerySpec",
    "SortKey",
    "sort_documents",
]
