"""Domain exceptions for the taskpiper service.

Business rule violations raised by the entity services. Independent of
HTTP; the presentation layer maps them to status codes and the
``{message, data}`` envelope in exception handlers.
"""

from typing import Any


class TaskPiperException(Exception):
    """Base exception for all taskpiper errors.

    Attributes:
        message: Human-readable error description (sent as ``message``).
        error_code: Machine-readable error code.
        details: Additional error context for logs.
        data: Payload sent to the client as ``data`` (defaults to ``{}``).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        data: Any = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.data = data if data is not None else {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the response envelope for this error."""
        return {"message": self.message, "data": self.data}


class ValidationException(TaskPiperException):
    """Raised when input validation fails (missing field, malformed id or query)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        data: Any = None,
    ) -> None:
        details = {"field": field} if field else {}
        super().__init__(f"Bad Request: {message}", "VALIDATION_ERROR", details, data)


class ResourceNotFoundException(TaskPiperException):
    """Raised when a requested or referenced resource does not exist."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str | None = None,
        message: str | None = None,
        data: Any = None,
    ) -> None:
        super().__init__(
            message or "Not Found",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
            data,
        )


class ConflictException(TaskPiperException):
    """Raised when a write would break a uniqueness rule (e.g. duplicate email)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(f"Bad Request: {message}", "CONFLICT", details)


class MalformedQueryException(ValidationException):
    """Raised when a JSON query parameter (where/sort/select) cannot be parsed."""

    def __init__(self, parameter: str, reason: str) -> None:
        super().__init__(
            "malformed JSON in query parameters",
            field=parameter,
            data={"parameter": parameter, "reason": reason},
        )
