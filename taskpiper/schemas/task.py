"""Task API schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class TaskBody(BaseModel):
    """Request body for creating or replacing a task.

    Types follow the wire format: deadline may be epoch
    milliseconds or an ISO string and completed may be the string "true".
    Required fields are enforced by TaskService so that they answer 400.
    """

    model_config = ConfigDict(extra="allow")

    name: Any = None
    description: Any = None
    deadline: Any = None
    completed: Any = None
    assignedUser: Any = None
    assignedUserName: Any = None

    def to_payload(self) -> dict[str, Any]:
        """Fields the client actually sent."""
        return self.model_dump(exclude_unset=True)
