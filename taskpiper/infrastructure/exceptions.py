"""Infrastructure exceptions for storage operations.

Storage errors extend TaskPiperException so presentation can map them
to HTTP 500 consistently, with the underlying error passed through in data.
"""

from typing import Any

from taskpiper.domain.exceptions import TaskPiperException


class StorageException(TaskPiperException):
    """Unexpected failure from the persistence layer."""

    def __init__(
        self,
        operation: str,
        reason: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        error: dict[str, Any] = {"operation": operation, "reason": reason}
        if status_code is not None:
            error["status_code"] = status_code
        if body is not None:
            error["body"] = body
        super().__init__("Server error", "STORAGE_ERROR", error, error)


class StorageNotConfiguredError(StorageException):
    """The selected backend has no usable connection."""

    def __init__(self, backend: str) -> None:
        super().__init__(
            "connect",
            f"{backend} is not configured; set FIREBASE_SERVICE_ACCOUNT_KEY, "
            "FIREBASE_SERVICE_ACCOUNT_PATH or FIRESTORE_EMULATOR_HOST",
        )
