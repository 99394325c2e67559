"""Compilation of query value objects to Firestore structuredQuery fragments."""

from datetime import UTC, datetime

import pytest

from taskpiper.domain.exceptions import ValidationException
from taskpiper.domain.value_objects.query import AllOf, AnyOf, FieldCondition, FilterOp, SortKey
from taskpiper.infrastructure.firebase._rest_encoding import (
    DocumentRef,
    decode_document,
    encode_document,
    encode_value,
)
from taskpiper.infrastructure.firebase.query_encoding import compile_filter, compile_order

USERS = "projects/p/databases/(default)/documents/users"


def test_equality_filter() -> None:
    out = compile_filter(FieldCondition("name", FilterOp.EQ, "Al"), USERS)
    assert out == {
        "fieldFilter": {
            "field": {"fieldPath": "name"},
            "op": "EQUAL",
            "value": {"stringValue": "Al"},
        }
    }


def test_null_comparisons_use_unary_filters() -> None:
    eq = compile_filter(FieldCondition("email", FilterOp.EQ, None), USERS)
    ne = compile_filter(FieldCondition("email", FilterOp.NE, None), USERS)
    assert eq == {"unaryFilter": {"field": {"fieldPath": "email"}, "op": "IS_NULL"}}
    assert ne["unaryFilter"]["op"] == "IS_NOT_NULL"


def test_id_maps_to_document_name_reference() -> None:
    out = compile_filter(FieldCondition("_id", FilterOp.IN, ("abc", "def")), USERS)
    assert out["fieldFilter"]["field"] == {"fieldPath": "__name__"}
    assert out["fieldFilter"]["op"] == "IN"
    assert out["fieldFilter"]["value"] == {
        "arrayValue": {
            "values": [
                {"referenceValue": f"{USERS}/abc"},
                {"referenceValue": f"{USERS}/def"},
            ]
        }
    }


def test_array_field_operators() -> None:
    contains = compile_filter(FieldCondition("pendingTasks", FilterOp.EQ, "t1"), USERS)
    any_of = compile_filter(FieldCondition("pendingTasks", FilterOp.IN, ("t1", "t2")), USERS)
    assert contains["fieldFilter"]["op"] == "ARRAY_CONTAINS"
    assert any_of["fieldFilter"]["op"] == "ARRAY_CONTAINS_ANY"


def test_negative_operator_on_array_field_is_rejected() -> None:
    with pytest.raises(ValidationException):
        compile_filter(FieldCondition("pendingTasks", FilterOp.NIN, ("t1",)), USERS)


def test_composite_filters() -> None:
    node = AnyOf(
        (
            FieldCondition("completed", FilterOp.EQ, True),
            AllOf(
                (
                    FieldCondition("deadline", FilterOp.GTE, datetime(2024, 1, 1, tzinfo=UTC)),
                    FieldCondition("name", FilterOp.NE, "x"),
                )
            ),
        )
    )
    out = compile_filter(node, USERS)
    assert out["compositeFilter"]["op"] == "OR"
    inner = out["compositeFilter"]["filters"][1]
    assert inner["compositeFilter"]["op"] == "AND"
    assert inner["compositeFilter"]["filters"][0]["fieldFilter"]["value"] == {
        "timestampValue": "2024-01-01T00:00:00.000000Z"
    }


def test_compile_order() -> None:
    assert compile_order((SortKey("_id"), SortKey("name", descending=True))) == [
        {"field": {"fieldPath": "__name__"}, "direction": "ASCENDING"},
        {"field": {"fieldPath": "name"}, "direction": "DESCENDING"},
    ]


def test_document_round_trip_keeps_types() -> None:
    data = {
        "name": "T",
        "completed": False,
        "count": 3,
        "deadline": datetime(2024, 1, 1, 12, tzinfo=UTC),
        "pendingTasks": ["a", "b"],
        "missing": None,
    }
    assert decode_document(encode_document(data)["fields"]) == data


def test_reference_values_decode_to_ids() -> None:
    encoded = encode_value(DocumentRef(f"{USERS}/abc"))
    assert decode_document({"ref": encoded}) == {"ref": "abc"}
