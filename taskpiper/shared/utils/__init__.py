"""Shared helpers: UTC datetimes and id generation."""

from taskpiper.shared.utils.datetime import (
    ensure_utc,
    from_timestamp_ms_utc,
    parse_client_timestamp,
    utc_now,
)
from taskpiper.shared.utils.generators import generate_cuid, is_valid_id

__all__ = [
    "ensure_utc",
    "from_timestamp_ms_utc",
    "generate_cuid",
    "is_valid_id",
    "parse_client_timestamp",
    "utc_now",
]
