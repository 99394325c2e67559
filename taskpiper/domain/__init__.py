"""Domain layer: value objects, enums, and exceptions."""

from taskpiper.domain.exceptions import (
    ConflictException,
    MalformedQueryException,
    ResourceNotFoundException,
    TaskPiperException,
    ValidationException,
)

__all__ = [
    "ConflictException",
    "MalformedQueryException",
    "ResourceNotFoundException",
    "TaskPiperException",
    "ValidationException",
]
