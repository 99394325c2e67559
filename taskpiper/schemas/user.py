"""User API schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class UserBody(BaseModel):
    """Request body for creating or replacing a user.

    dateCreated is server-owned; if sent it is ignored.
    """

    model_config = ConfigDict(extra="allow")

    name: Any = None
    email: Any = None
    pendingTasks: Any = None

    def to_payload(self) -> dict[str, Any]:
        """Fields the client actually sent, minus server-owned ones."""
        payload = self.model_dump(exclude_unset=True)
        payload.pop("dateCreated", None)
        payload.pop("_id", None)
        return payload
