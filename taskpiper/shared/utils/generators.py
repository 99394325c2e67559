"""ID generation and id-format checks (CUID2)."""

import re

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

# CUID2: a lowercase letter followed by lowercase base36 characters.
_CUID_RE = re.compile(r"^[a-z][0-9a-z]{1,31}$")


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def is_valid_id(value: object) -> bool:
    """Return True if value is a well-formed document id."""
    return isinstance(value, str) and bool(_CUID_RE.fullmatch(value))
