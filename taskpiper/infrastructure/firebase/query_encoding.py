"""Compile query value objects into Firestore structuredQuery fragments.

``_id`` maps to the ``__name__`` pseudo-field (compared as document
references). Equality on array fields maps to ARRAY_CONTAINS and ``$in``
to ARRAY_CONTAINS_ANY; negative operators on arrays have no Firestore
equivalent and are rejected.
"""

from __future__ import annotations

from typing import Any

from taskpiper.domain.exceptions import ValidationException
from taskpiper.domain.value_objects.query import (
    ID_FIELD,
    AnyOf,
    FieldCondition,
    Filter,
    FilterOp,
    SortKey,
)
from taskpiper.infrastructure.collections import ARRAY_FIELDS
from taskpiper.infrastructure.firebase._rest_encoding import DocumentRef, encode_value

NAME_FIELD = "__name__"

_OPS: dict[FilterOp, str] = {
    FilterOp.EQ: "EQUAL",
    FilterOp.NE: "NOT_EQUAL",
    FilterOp.GT: "GREATER_THAN",
    FilterOp.GTE: "GREATER_THAN_OR_EQUAL",
    FilterOp.LT: "LESS_THAN",
    FilterOp.LTE: "LESS_THAN_OR_EQUAL",
    FilterOp.IN: "IN",
    FilterOp.NIN: "NOT_IN",
}

_ARRAY_OPS: dict[FilterOp, str] = {
    FilterOp.EQ: "ARRAY_CONTAINS",
    FilterOp.IN: "ARRAY_CONTAINS_ANY",
}


def _field_path(name: str) -> str:
    return NAME_FIELD if name == ID_FIELD else name


def _operand(node: FieldCondition, collection_path: str) -> Any:
    if node.field != ID_FIELD:
        return node.value
    if isinstance(node.value, tuple):
        return tuple(DocumentRef(f"{collection_path}/{v}") for v in node.value)
    return DocumentRef(f"{collection_path}/{node.value}")


def _compile_condition(node: FieldCondition, collection_path: str) -> dict[str, Any]:
    path = {"fieldPath": _field_path(node.field)}
    if node.value is None and node.op in (FilterOp.EQ, FilterOp.NE):
        op = "IS_NULL" if node.op is FilterOp.EQ else "IS_NOT_NULL"
        return {"unaryFilter": {"field": path, "op": op}}

    if node.field in ARRAY_FIELDS and not isinstance(node.value, list):
        op = _ARRAY_OPS.get(node.op)
        if op is None:
            raise ValidationException(
                f"operator {node.op.value} is not supported on array field {node.field!r}",
                field=node.field,
            )
    else:
        op = _OPS[node.op]
    return {
        "fieldFilter": {
            "field": path,
            "op": op,
            "value": encode_value(_operand(node, collection_path)),
        }
    }


def compile_filter(node: Filter, collection_path: str) -> dict[str, Any]:
    """Return a Firestore ``Filter`` message for node.

    Args:
        node: Parsed filter tree.
        collection_path: Full resource path of the collection (for __name__ references).
    """
    if isinstance(node, FieldCondition):
        return _compile_condition(node, collection_path)
    op = "OR" if isinstance(node, AnyOf) else "AND"
    return {
        "compositeFilter": {
            "op": op,
            "filters": [compile_filter(c, collection_path) for c in node.clauses],
        }
    }


def compile_order(keys: tuple[SortKey, ...]) -> list[dict[str, Any]]:
    """Return Firestore ``orderBy`` entries for sort keys."""
    return [
        {
            "field": {"fieldPath": _field_path(k.field)},
            "direction": "DESCENDING" if k.descending else "ASCENDING",
        }
        for k in keys
    ]
