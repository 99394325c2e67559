"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system are timezone-aware UTC. Deadlines arrive
from clients as epoch milliseconds; use these helpers at the boundaries.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of datetime.now() (naive, local timezone) or
    datetime.utcnow() (naive, deprecated in Python 3.12).
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def from_timestamp_ms_utc(timestamp_ms: int | float) -> datetime:
    """
    Create a UTC-aware datetime from a millisecond Unix timestamp.
    Common in JavaScript clients, which send Date.getTime() values.

    Args:
        timestamp_ms: Unix timestamp in milliseconds

    Returns:
        UTC-aware datetime
    """
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)


def parse_client_timestamp(value: object) -> datetime | None:
    """
    Parse a client-supplied timestamp; None when it cannot be read.

    Accepts epoch milliseconds (int, float or a string of digits) and
    ISO-8601 strings, so documents read from the API can be sent back as-is.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    try:
        if isinstance(value, (int, float)):
            return from_timestamp_ms_utc(value)
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return None
            if raw.lstrip("-").isdigit():
                return from_timestamp_ms_utc(int(raw))
            return ensure_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except (ValueError, OverflowError, OSError):
        return None
    return None
