"""Repository interfaces (ports) for the application layer.

Protocols define contracts that storage backends must fulfil (DIP).
Every method is a single-document operation or a read; multi-document
consistency is the assignment coordinator's job, not the repository's.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from taskpiper.application.dtos.task import TaskResult, TaskWrite
    from taskpiper.application.dtos.user import UserResult, UserWrite
    from taskpiper.domain.value_objects.query import Filter, QuerySpec


class ITaskRepository(Protocol):
    """Protocol for task storage."""

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        """Return task by ID."""

    async def get_many(self, task_ids: Sequence[str]) -> list[TaskResult]:
        """Return the tasks that exist among task_ids (missing ids are skipped)."""

    async def find(self, query: QuerySpec) -> list[dict[str, Any]]:
        """Return API documents matching query (filtered, sorted, paged, projected)."""

    async def count(self, filter_: Filter | None) -> int:
        """Return the number of tasks matching filter_."""

    async def create(self, data: TaskWrite) -> TaskResult:
        """Insert a new task with a generated id and dateCreated."""

    async def replace(self, task_id: str, data: TaskWrite) -> TaskResult | None:
        """Overwrite task fields (dateCreated kept); None if the task does not exist."""

    async def set_assignee(self, task_id: str, user_id: str, user_name: str) -> bool:
        """Set assignedUser/assignedUserName on one task; False if it does not exist."""

    async def delete(self, task_id: str) -> bool:
        """Delete task; False if it did not exist."""


class IUserRepository(Protocol):
    """Protocol for user storage."""

    async def get_by_id(self, user_id: str) -> UserResult | None:
        """Return user by ID."""

    async def get_by_email(self, email: str) -> UserResult | None:
        """Return the user with this email, if any."""

    async def find(self, query: QuerySpec) -> list[dict[str, Any]]:
        """Return API documents matching query (filtered, sorted, paged, projected)."""

    async def count(self, filter_: Filter | None) -> int:
        """Return the number of users matching filter_."""

    async def create(self, data: UserWrite) -> UserResult:
        """Insert a new user with a generated id and dateCreated."""

    async def replace(self, user_id: str, data: UserWrite) -> UserResult | None:
        """Overwrite name, email and pendingTasks (dateCreated kept); None if missing."""

    async def add_pending_task(self, user_id: str, task_id: str) -> bool:
        """Atomically append task_id to pendingTasks unless present; False if user missing."""

    async def remove_pending_tasks(self, user_id: str, task_ids: Sequence[str]) -> bool:
        """Atomically remove task_ids from pendingTasks; False if user missing."""

    async def find_ids_with_pending(self, task_ids: Sequence[str]) -> list[str]:
        """Return ids of users whose pendingTasks contains any of task_ids."""

    async def delete(self, user_id: str) -> bool:
        """Delete user; False if it did not exist."""
