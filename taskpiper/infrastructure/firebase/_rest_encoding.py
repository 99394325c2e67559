"""Firestore REST ``Value`` codec for task and user documents.

Only the value kinds these documents use are supported: null, booleans,
numbers, strings, UTC timestamps, document references (``_id`` filters),
arrays (``pendingTasks``) and maps.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any


class DocumentRef(str):
    """A full document name that must be sent as a ``referenceValue``."""


def _timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def encode_value(value: Any) -> dict[str, Any]:
    """Return the Firestore ``Value`` message for a Python value."""
    if value is None:
        return {"nullValue": None}
    # bool before int: True is an int.
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": _timestamp(value)}
    if isinstance(value, DocumentRef):
        return {"referenceValue": str(value)}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    raise TypeError(f"Unsupported Firestore value type: {type(value).__name__}")


def encode_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {name: encode_value(v) for name, v in data.items()}


def encode_document(data: dict[str, Any]) -> dict[str, Any]:
    """Return a Document body (``{"fields": ...}``) for create/patch requests."""
    return {"fields": encode_fields(data)}


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "nullValue": lambda _: None,
    "booleanValue": bool,
    "integerValue": int,
    "doubleValue": float,
    "stringValue": str,
    # Firestore sends up to nanoseconds; fromisoformat keeps microseconds.
    "timestampValue": lambda raw: datetime.fromisoformat(raw.replace("Z", "+00:00")),
    # Only the trailing document id is exposed to the application.
    "referenceValue": lambda raw: raw.rsplit("/", 1)[-1],
    "arrayValue": lambda raw: [decode_value(v) for v in raw.get("values") or []],
    "mapValue": lambda raw: decode_document(raw.get("fields")),
}


def decode_value(message: dict[str, Any]) -> Any:
    """Return the Python value of a Firestore ``Value`` message (None if unknown)."""
    for kind, raw in message.items():
        decoder = _DECODERS.get(kind)
        if decoder is not None:
            return decoder(raw)
    return None


def decode_document(fields: dict[str, Any] | None) -> dict[str, Any]:
    """Return a plain dict from a Document's ``fields`` map."""
    return {name: decode_value(v) for name, v in (fields or {}).items()}
