"""AssignmentCoordinator: pending-task rules against the memory backend."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

from taskpiper.application.dtos.task import TaskWrite
from taskpiper.application.dtos.user import UserWrite
from taskpiper.application.services.assignment_coordinator import AssignmentCoordinator
from taskpiper.infrastructure.exceptions import StorageException

DEADLINE = datetime(2024, 6, 1, tzinfo=UTC)


def _task(
    assigned_user: str = "",
    name: str = "T",
    completed: bool = False,
    user_name: str = "unassigned",
) -> TaskWrite:
    return TaskWrite(
        name=name,
        description="",
        deadline=DEADLINE,
        completed=completed,
        assigned_user=assigned_user,
        assigned_user_name=user_name,
    )


async def test_task_create_links_pending_task(coordinator, task_repo, user_repo) -> None:
    user = await user_repo.create(UserWrite("Al", "a@x.com", ()))
    task = await task_repo.create(_task(user.id, user_name="Al"))

    report = await coordinator.after_task_saved(None, task)

    assert report.ok
    assert (await user_repo.get_by_id(user.id)).pending_tasks == (task.id,)


async def test_link_is_idempotent(coordinator, task_repo, user_repo) -> None:
    user = await user_repo.create(UserWrite("Al", "a@x.com", ()))
    task = await task_repo.create(_task(user.id, user_name="Al"))

    await coordinator.link_task(user.id, task.id)
    await coordinator.link_task(user.id, task.id)

    assert (await user_repo.get_by_id(user.id)).pending_tasks == (task.id,)


async def test_reassignment_moves_task_between_users(coordinator, task_repo, user_repo) -> None:
    al = await user_repo.create(UserWrite("Al", "a@x.com", ()))
    bo = await user_repo.create(UserWrite("Bo", "b@x.com", ()))
    before = await task_repo.create(_task(al.id, user_name="Al"))
    await coordinator.after_task_saved(None, before)

    after = await task_repo.replace(before.id, _task(bo.id, user_name="Bo"))
    report = await coordinator.after_task_saved(before, after)

    assert report.ok
    assert (await user_repo.get_by_id(al.id)).pending_tasks == ()
    assert (await user_repo.get_by_id(bo.id)).pending_tasks == (before.id,)


async def test_completion_removes_task_from_pending(coordinator, task_repo, user_repo) -> None:
    al = await user_repo.create(UserWrite("Al", "a@x.com", ()))
    before = await task_repo.create(_task(al.id, user_name="Al"))
    await coordinator.after_task_saved(None, before)

    after = await task_repo.replace(before.id, _task(al.id, user_name="Al", completed=True))
    await coordinator.after_task_saved(before, after)

    assert (await user_repo.get_by_id(al.id)).pending_tasks == ()


async def test_task_delete_unlinks(coordinator, task_repo, user_repo) -> None:
    al = await user_repo.create(UserWrite("Al", "a@x.com", ()))
    task = await task_repo.create(_task(al.id, user_name="Al"))
    await coordinator.after_task_saved(None, task)

    await coordinator.after_task_deleted(task)

    assert (await user_repo.get_by_id(al.id)).pending_tasks == ()


async def test_user_saved_assigns_added_and_unassigns_removed(coordinator, task_repo, user_repo) -> None:
    t1 = await task_repo.create(_task())
    t2 = await task_repo.create(_task())
    before = await user_repo.create(UserWrite("Al", "a@x.com", (t1.id,)))
    await coordinator.after_user_saved(None, before)

    after = await user_repo.replace(before.id, UserWrite("Al", "a@x.com", (t2.id,)))
    report = await coordinator.after_user_saved(before, after)

    assert report.ok
    first = await task_repo.get_by_id(t1.id)
    second = await task_repo.get_by_id(t2.id)
    assert (first.assigned_user, first.assigned_user_name) == ("", "unassigned")
    assert (second.assigned_user, second.assigned_user_name) == (before.id, "Al")


async def test_user_saved_detaches_task_from_other_user(coordinator, task_repo, user_repo) -> None:
    task = await task_repo.create(_task())
    al = await user_repo.create(UserWrite("Al", "a@x.com", (task.id,)))
    await coordinator.after_user_saved(None, al)
    bo = await user_repo.create(UserWrite("Bo", "b@x.com", (task.id,)))

    await coordinator.after_user_saved(None, bo)

    assert (await user_repo.get_by_id(al.id)).pending_tasks == ()
    assert (await user_repo.get_by_id(bo.id)).pending_tasks == (task.id,)
    assert (await task_repo.get_by_id(task.id)).assigned_user == bo.id


async def test_rename_updates_denormalized_name(coordinator, task_repo, user_repo) -> None:
    task = await task_repo.create(_task())
    before = await user_repo.create(UserWrite("Al", "a@x.com", (task.id,)))
    await coordinator.after_user_saved(None, before)

    after = await user_repo.replace(before.id, UserWrite("Alan", "a@x.com", (task.id,)))
    report = await coordinator.after_user_saved(before, after)

    assert report.attempted == [f"rename_assignee:{task.id}"]
    assert (await task_repo.get_by_id(task.id)).assigned_user_name == "Alan"


async def test_same_list_twice_changes_nothing(coordinator, task_repo, user_repo) -> None:
    task = await task_repo.create(_task())
    user = await user_repo.create(UserWrite("Al", "a@x.com", (task.id,)))
    await coordinator.after_user_saved(None, user)

    report = await coordinator.after_user_saved(user, user)

    assert report.attempted == []


async def test_user_deleted_unassigns_pending_tasks(coordinator, task_repo, user_repo) -> None:
    task = await task_repo.create(_task())
    user = await user_repo.create(UserWrite("Al", "a@x.com", (task.id,)))
    await coordinator.after_user_saved(None, user)

    await coordinator.after_user_deleted(user)

    stored = await task_repo.get_by_id(task.id)
    assert (stored.assigned_user, stored.assigned_user_name) == ("", "unassigned")


async def test_missing_documents_are_reported_not_raised(coordinator, task_repo) -> None:
    task = await task_repo.create(_task("ghostuser1", user_name="Ghost"))

    report = await coordinator.after_task_saved(None, task)

    assert not report.ok
    assert report.failures[0].target_id == "ghostuser1"
    assert report.failures[0].reason == "document not found"


async def test_storage_errors_are_reported_not_raised(task_repo) -> None:
    user_repo = AsyncMock()
    user_repo.add_pending_task = AsyncMock(side_effect=StorageException("commit", "unavailable"))
    coordinator = AssignmentCoordinator(task_repo, user_repo)
    task = await task_repo.create(_task("someuser1", user_name="Someone"))

    report = await coordinator.after_task_saved(None, task)

    assert len(report.failures) == 1
    assert report.failures[0].action == "link_task"
    assert report.failures[0].reason == "Server error"
