"""User operations: list, get, create, replace, delete.

Email uniqueness and the pendingTasks list are validated before anything
is written; tasks named in pendingTasks must exist and be incomplete.
Task back-references are reconciled by the AssignmentCoordinator.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from taskpiper.application.dtos.user import UserResult, UserWrite
from taskpiper.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)
from taskpiper.application.services.assignment_coordinator import AssignmentCoordinator
from taskpiper.application.services.query_translator import QueryTranslator
from taskpiper.domain.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from taskpiper.shared.utils.generators import is_valid_id

logger = logging.getLogger(__name__)


def _require_text(body: Mapping[str, Any], name: str) -> str:
    value = body.get(name)
    if not value or not isinstance(value, str):
        raise ValidationException("name and email are required", field=name)
    return value


def _pending_list(body: Mapping[str, Any]) -> tuple[str, ...]:
    """Return pendingTasks without duplicates (first occurrence wins).

    Every element must be a well-formed task id.
    """
    raw = body.get("pendingTasks")
    if raw is None or raw == "":
        return ()
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise ValidationException("pendingTasks must be an array of task ids", field="pendingTasks")
    malformed = [t for t in raw if not is_valid_id(t)]
    if malformed:
        raise ValidationException(
            "invalid task id format in pendingTasks",
            field="pendingTasks",
            data=malformed,
        )
    return tuple(dict.fromkeys(raw))


class UserService:
    """CRUD on users with email uniqueness and task reassignment."""

    def __init__(
        self,
        user_repo: IUserRepository,
        task_repo: ITaskRepository,
        translator: QueryTranslator,
        coordinator: AssignmentCoordinator,
    ) -> None:
        self.user_repo = user_repo
        self.task_repo = task_repo
        self.translator = translator
        self.coordinator = coordinator

    async def list_users(self, params: Mapping[str, str | None]) -> list[dict[str, Any]] | int:
        """Return matching user documents, or their count when ``count=true``."""
        query = self.translator.translate(params)
        if query.want_count:
            return await self.user_repo.count(query.filter)
        return await self.user_repo.find(query)

    async def get_user(self, user_id: str, params: Mapping[str, str | None]) -> dict[str, Any]:
        """Return one user document; projection from ``select`` or legacy ``filter``."""
        projection = self.translator.translate_projection(params)
        self._check_id(user_id)
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        doc = user.to_document()
        return projection.apply(doc) if projection else doc

    async def create_user(self, body: Mapping[str, Any]) -> UserResult:
        name = _require_text(body, "name")
        email = _require_text(body, "email")
        pending = _pending_list(body)

        if await self.user_repo.get_by_email(email) is not None:
            raise ConflictException("email already exists", field="email")
        await self._validate_assignable(pending)

        created = await self.user_repo.create(UserWrite(name, email, pending))
        logger.info("Created user %s", created.id)
        if created.pending_tasks:
            await self.coordinator.after_user_saved(None, created)
        return created

    async def replace_user(self, user_id: str, body: Mapping[str, Any]) -> UserResult:
        """Full replace of name, email and pendingTasks; dateCreated is preserved."""
        name = _require_text(body, "name")
        email = _require_text(body, "email")
        self._check_id(user_id, "invalid user id format")
        pending = _pending_list(body)

        other = await self.user_repo.get_by_email(email)
        if other is not None and other.id != user_id:
            raise ConflictException("email already exists", field="email")

        before = await self.user_repo.get_by_id(user_id)
        if before is None:
            raise ResourceNotFoundException("user", user_id)

        added = [t for t in pending if t not in before.pending_tasks]
        await self._validate_assignable(added)

        after = await self.user_repo.replace(user_id, UserWrite(name, email, pending))
        if after is None:
            raise ResourceNotFoundException("user", user_id)
        logger.info("Replaced user %s", user_id)
        await self.coordinator.after_user_saved(before, after)
        return after

    async def delete_user(self, user_id: str) -> None:
        self._check_id(user_id, "invalid user id format")
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        await self.coordinator.after_user_deleted(user)
        await self.user_repo.delete(user_id)
        logger.info("Deleted user %s", user_id)

    @staticmethod
    def _check_id(user_id: str, message: str = "invalid id format") -> None:
        if not is_valid_id(user_id):
            raise ValidationException(message, field="id")

    async def _validate_assignable(self, task_ids: Sequence[str]) -> None:
        """Every id must exist and name an incomplete task."""
        if not task_ids:
            return
        found = await self.task_repo.get_many(task_ids)
        found_ids = {t.id for t in found}
        missing = [t for t in task_ids if t not in found_ids]
        if missing:
            raise ResourceNotFoundException(
                "task",
                message="Not Found: some task ids do not exist",
                data=missing,
            )
        completed = [t.id for t in found if t.completed]
        if completed:
            raise ValidationException(
                "cannot add completed tasks to pendingTasks",
                field="pendingTasks",
                data=completed,
            )
