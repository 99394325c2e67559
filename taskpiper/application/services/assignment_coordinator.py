"""Keeps Task.assignedUser and User.pendingTasks consistent.

This is the only code that writes back-references between the two
collections. The entity services call one ``after_*`` entry point once
their primary write has been persisted, passing the state before and after.

Each back-reference write is a separate single-document operation; there
is no multi-document transaction and nothing is rolled back. A failed
write is logged and recorded in the returned SideEffectReport instead of
being raised; the primary write it follows stays in place.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from taskpiper.application.dtos.side_effects import SideEffectReport
from taskpiper.application.dtos.task import UNASSIGNED_USER_NAME, TaskResult
from taskpiper.application.dtos.user import UserResult
from taskpiper.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)
from taskpiper.domain.exceptions import TaskPiperException

logger = logging.getLogger(__name__)


class AssignmentCoordinator:
    """Applies the pending-task rules after task and user writes."""

    def __init__(self, task_repo: ITaskRepository, user_repo: IUserRepository) -> None:
        self.task_repo = task_repo
        self.user_repo = user_repo

    async def link_task(self, user_id: str, task_id: str) -> SideEffectReport:
        """Add task_id to the user's pendingTasks (no duplicate)."""
        report = SideEffectReport()
        await self._attempt(
            report, "link_task", user_id, self.user_repo.add_pending_task(user_id, task_id)
        )
        return report

    async def unlink_task(self, user_id: str, task_ids: Sequence[str]) -> SideEffectReport:
        """Remove task_ids from the user's pendingTasks."""
        report = SideEffectReport()
        if task_ids:
            await self._attempt(
                report,
                "unlink_task",
                user_id,
                self.user_repo.remove_pending_tasks(user_id, task_ids),
            )
        return report

    async def assign_tasks(
        self, task_ids: Iterable[str], user_id: str, user_name: str
    ) -> SideEffectReport:
        """Point each task at the user (assignedUser/assignedUserName)."""
        report = SideEffectReport()
        for task_id in task_ids:
            await self._attempt(
                report,
                "assign_task",
                task_id,
                self.task_repo.set_assignee(task_id, user_id, user_name),
            )
        return report

    async def unassign_tasks(self, task_ids: Iterable[str]) -> SideEffectReport:
        """Clear assignedUser and reset assignedUserName on each task."""
        report = SideEffectReport()
        for task_id in task_ids:
            await self._attempt(
                report,
                "unassign_task",
                task_id,
                self.task_repo.set_assignee(task_id, "", UNASSIGNED_USER_NAME),
            )
        return report

    async def rename_assignee(
        self, task_ids: Iterable[str], user_id: str, user_name: str
    ) -> SideEffectReport:
        """Refresh assignedUserName on tasks that stay assigned to a renamed user."""
        report = SideEffectReport()
        for task_id in task_ids:
            await self._attempt(
                report,
                "rename_assignee",
                task_id,
                self.task_repo.set_assignee(task_id, user_id, user_name),
            )
        return report

    async def detach_from_other_users(
        self, task_ids: Sequence[str], keep_user_id: str | None
    ) -> SideEffectReport:
        """Strip task_ids from every other user's pendingTasks (one pending owner per task)."""
        report = SideEffectReport()
        if not task_ids:
            return report
        try:
            holders = await self.user_repo.find_ids_with_pending(task_ids)
        except TaskPiperException as e:
            logger.warning("Could not look up other holders of %s: %s", list(task_ids), e.message)
            report.fail("detach_lookup", ",".join(task_ids), e.message)
            return report
        for user_id in holders:
            if user_id != keep_user_id:
                report.merge(await self.unlink_task(user_id, task_ids))
        return report

    async def after_task_saved(
        self, before: TaskResult | None, after: TaskResult
    ) -> SideEffectReport:
        """Reconcile user pendingTasks after a task create (before=None) or replace.

        Three independent rules, all judged on the before/after states:
        the previous assignee loses the task when the assignee changed; the
        current assignee gains it while it is pending; and it leaves the
        assignee's list when it moves from incomplete to completed.
        """
        report = SideEffectReport()
        if before is not None and before.assigned_user and before.assigned_user != after.assigned_user:
            report.merge(await self.unlink_task(before.assigned_user, [after.id]))
        if after.is_pending:
            report.merge(await self.link_task(after.assigned_user, after.id))
        if (
            before is not None
            and not before.completed
            and after.completed
            and after.assigned_user
        ):
            report.merge(await self.unlink_task(after.assigned_user, [after.id]))
        return self._log(report, "task", after.id)

    async def after_task_deleted(self, task: TaskResult) -> SideEffectReport:
        report = SideEffectReport()
        if task.assigned_user:
            report.merge(await self.unlink_task(task.assigned_user, [task.id]))
        return self._log(report, "task", task.id)

    async def after_user_saved(
        self, before: UserResult | None, after: UserResult
    ) -> SideEffectReport:
        """Reconcile tasks after a user create (before=None) or replace.

        Tasks dropped from pendingTasks are unassigned. Tasks added are taken
        away from any other user and assigned here. When the name changed,
        tasks that stay pending get the new assignedUserName.
        """
        old = before.pending_tasks if before is not None else ()
        removed = [t for t in old if t not in after.pending_tasks]
        added = [t for t in after.pending_tasks if t not in old]
        kept = [t for t in after.pending_tasks if t in old]

        report = SideEffectReport()
        report.merge(await self.unassign_tasks(removed))
        report.merge(await self.detach_from_other_users(added, after.id))
        report.merge(await self.assign_tasks(added, after.id, after.name))
        if before is not None and before.name != after.name:
            report.merge(await self.rename_assignee(kept, after.id, after.name))
        return self._log(report, "user", after.id)

    async def after_user_deleted(self, user: UserResult) -> SideEffectReport:
        report = await self.unassign_tasks(user.pending_tasks)
        return self._log(report, "user", user.id)

    async def _attempt(self, report: SideEffectReport, action: str, target_id: str, op) -> None:
        report.record(action, target_id)
        try:
            found = await op
        except TaskPiperException as e:
            report.fail(action, target_id, e.message)
            return
        if not found:
            report.fail(action, target_id, "document not found")

    @staticmethod
    def _log(report: SideEffectReport, entity: str, entity_id: str) -> SideEffectReport:
        for failure in report.failures:
            logger.warning(
                "Back-reference write %s on %s failed after %s %s changed: %s",
                failure.action,
                failure.target_id,
                entity,
                entity_id,
                failure.reason,
            )
        return report
