"""Task operations: list, get, create, replace, delete.

Validation happens before any write. Once the task document is persisted,
back-references on users are reconciled by the AssignmentCoordinator.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from taskpiper.application.dtos.task import UNASSIGNED_USER_NAME, TaskResult, TaskWrite
from taskpiper.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)
from taskpiper.application.services.assignment_coordinator import AssignmentCoordinator
from taskpiper.application.services.query_translator import QueryTranslator
from taskpiper.domain.exceptions import ResourceNotFoundException, ValidationException
from taskpiper.shared.utils.datetime import parse_client_timestamp
from taskpiper.shared.utils.generators import is_valid_id

logger = logging.getLogger(__name__)


def coerce_completed(value: Any) -> bool:
    """True only for boolean true or the string "true"."""
    return value is True or value == "true"


def _require(body: Mapping[str, Any], name: str) -> Any:
    value = body.get(name)
    if value is None or value == "" or value is False:
        raise ValidationException("name and deadline are required", field=name)
    return value


def _require_text(body: Mapping[str, Any], name: str) -> str:
    value = _require(body, name)
    if not isinstance(value, str):
        raise ValidationException(f"{name} must be a string", field=name)
    return value


class TaskService:
    """CRUD on tasks with assignment validation and pending-list upkeep."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        user_repo: IUserRepository,
        translator: QueryTranslator,
        coordinator: AssignmentCoordinator,
    ) -> None:
        self.task_repo = task_repo
        self.user_repo = user_repo
        self.translator = translator
        self.coordinator = coordinator

    async def list_tasks(self, params: Mapping[str, str | None]) -> list[dict[str, Any]] | int:
        """Return matching task documents, or their count when ``count=true``."""
        query = self.translator.translate(params)
        if query.want_count:
            return await self.task_repo.count(query.filter)
        return await self.task_repo.find(query)

    async def get_task(self, task_id: str, params: Mapping[str, str | None]) -> dict[str, Any]:
        """Return one task document with optional ``select`` projection."""
        projection = self.translator.translate_projection(params)
        self._check_id(task_id)
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        doc = task.to_document()
        return projection.apply(doc) if projection else doc

    async def create_task(self, body: Mapping[str, Any]) -> TaskResult:
        data = await self._build_write(body)
        created = await self.task_repo.create(data)
        logger.info("Created task %s", created.id)
        if created.is_pending:
            await self.coordinator.after_task_saved(None, created)
        return created

    async def replace_task(self, task_id: str, body: Mapping[str, Any]) -> TaskResult:
        """Full replace. A completed task can no longer be modified."""
        self._check_id(task_id, "invalid task id format")
        _require_text(body, "name")
        _require(body, "deadline")
        before = await self.task_repo.get_by_id(task_id)
        if before is None:
            raise ResourceNotFoundException("task", task_id)
        if before.completed:
            raise ValidationException("cannot modify a completed task", field="completed")

        data = await self._build_write(body)
        after = await self.task_repo.replace(task_id, data)
        if after is None:
            raise ResourceNotFoundException("task", task_id)
        logger.info("Replaced task %s", task_id)
        await self.coordinator.after_task_saved(before, after)
        return after

    async def delete_task(self, task_id: str) -> None:
        self._check_id(task_id, "invalid task id format")
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        await self.coordinator.after_task_deleted(task)
        await self.task_repo.delete(task_id)
        logger.info("Deleted task %s", task_id)

    @staticmethod
    def _check_id(task_id: str, message: str = "invalid id format") -> None:
        if not is_valid_id(task_id):
            raise ValidationException(message, field="id")

    async def _build_write(self, body: Mapping[str, Any]) -> TaskWrite:
        name = _require_text(body, "name")
        raw_deadline = _require(body, "deadline")
        deadline = parse_client_timestamp(raw_deadline)
        if deadline is None:
            raise ValidationException(
                "deadline must be epoch milliseconds or an ISO-8601 date", field="deadline"
            )

        assigned_user = body.get("assignedUser") or ""
        if not isinstance(assigned_user, str):
            raise ValidationException("invalid assignedUser id format", field="assignedUser")
        assigned_user_name = await self._resolve_assignee_name(
            assigned_user, body.get("assignedUserName")
        )

        description = body.get("description") or ""
        return TaskWrite(
            name=name,
            description=description if isinstance(description, str) else str(description),
            deadline=deadline,
            completed=coerce_completed(body.get("completed")),
            assigned_user=assigned_user,
            assigned_user_name=assigned_user_name,
        )

    async def _resolve_assignee_name(self, assigned_user: str, provided: Any) -> str:
        """Return the name to store; a supplied name must match the user's current name."""
        if not assigned_user:
            return UNASSIGNED_USER_NAME
        if not is_valid_id(assigned_user):
            raise ValidationException("invalid assignedUser id format", field="assignedUser")
        user = await self.user_repo.get_by_id(assigned_user)
        if user is None:
            raise ResourceNotFoundException(
                "user", assigned_user, message="Not Found: assigned user does not exist"
            )
        if provided:
            if provided != user.name:
                raise ValidationException(
                    "assignedUserName does not match user name",
                    field="assignedUserName",
                    data={"provided": provided, "actual": user.name},
                )
            return provided
        return user.name
