"""DTOs for the user use cases (no dependency on storage)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from taskpiper.domain.enums import FieldKind
from taskpiper.shared.utils.datetime import ensure_utc

USER_FIELDS: dict[str, FieldKind] = {
    "_id": FieldKind.ID,
    "name": FieldKind.STRING,
    "email": FieldKind.STRING,
    "pendingTasks": FieldKind.ID_LIST,
    "dateCreated": FieldKind.TIMESTAMP,
}


@dataclass(frozen=True)
class UserWrite:
    """Validated user fields for create and full replace (dateCreated is server-owned)."""

    name: str
    email: str
    pending_tasks: tuple[str, ...]


@dataclass(frozen=True)
class UserResult:
    """User read-model returned by repositories."""

    id: str
    name: str
    email: str
    pending_tasks: tuple[str, ...]
    date_created: datetime | None

    @classmethod
    def from_fields(cls, user_id: str, data: dict[str, Any]) -> "UserResult":
        return cls(
            id=user_id,
            name=data.get("name", ""),
            email=data.get("email", ""),
            pending_tasks=tuple(data.get("pendingTasks") or ()),
            date_created=ensure_utc(data.get("dateCreated")),
        )

    def to_document(self) -> dict[str, Any]:
        """API representation (id under ``_id``)."""
        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "pendingTasks": list(self.pending_tasks),
            "dateCreated": self.date_created,
        }
