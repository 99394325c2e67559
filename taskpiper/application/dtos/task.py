"""DTOs for the task use cases (no dependency on storage)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from taskpiper.domain.enums import FieldKind
from taskpiper.shared.utils.datetime import ensure_utc

UNASSIGNED_USER_NAME = "unassigned"

# Stored document fields (camelCase, as exposed by the API) and their kinds.
TASK_FIELDS: dict[str, FieldKind] = {
    "_id": FieldKind.ID,
    "name": FieldKind.STRING,
    "description": FieldKind.STRING,
    "deadline": FieldKind.TIMESTAMP,
    "completed": FieldKind.BOOLEAN,
    "assignedUser": FieldKind.STRING,
    "assignedUserName": FieldKind.STRING,
    "dateCreated": FieldKind.TIMESTAMP,
}


@dataclass(frozen=True)
class TaskWrite:
    """Validated task fields for create and full replace."""

    name: str
    description: str
    deadline: datetime
    completed: bool
    assigned_user: str
    assigned_user_name: str

    def to_fields(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "deadline": self.deadline,
            "completed": self.completed,
            "assignedUser": self.assigned_user,
            "assignedUserName": self.assigned_user_name,
        }


@dataclass(frozen=True)
class TaskResult:
    """Task read-model returned by repositories."""

    id: str
    name: str
    description: str
    deadline: datetime | None
    completed: bool
    assigned_user: str
    assigned_user_name: str
    date_created: datetime | None

    @property
    def is_pending(self) -> bool:
        """Assigned to a user and not completed."""
        return bool(self.assigned_user) and not self.completed

    @classmethod
    def from_fields(cls, task_id: str, data: dict[str, Any]) -> "TaskResult":
        return cls(
            id=task_id,
            name=data.get("name", ""),
            description=data.get("description", "") or "",
            deadline=ensure_utc(data.get("deadline")),
            completed=bool(data.get("completed", False)),
            assigned_user=data.get("assignedUser", "") or "",
            assigned_user_name=data.get("assignedUserName") or UNASSIGNED_USER_NAME,
            date_created=ensure_utc(data.get("dateCreated")),
        )

    def to_document(self) -> dict[str, Any]:
        """API representation (id under ``_id``)."""
        return {
            "_id": self.id,
            "name": self.name,
            "description": self.description,
            "deadline": self.deadline,
            "completed": self.completed,
            "assignedUser": self.assigned_user,
            "assignedUserName": self.assigned_user_name,
            "dateCreated": self.date_created,
        }
