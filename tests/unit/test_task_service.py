"""TaskService against the memory backend."""

from datetime import UTC, datetime

import pytest

from taskpiper.application.dtos.user import UserWrite
from taskpiper.application.use_cases.tasks import coerce_completed
from taskpiper.domain.exceptions import ResourceNotFoundException, ValidationException

DEADLINE_MS = 1700000000000


@pytest.fixture
async def al(user_repo):
    return await user_repo.create(UserWrite("Al", "a@x.com", ()))


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, True), ("true", True), ("True", False), (1, False), (None, False), (False, False)],
)
def test_coerce_completed(value, expected) -> None:
    assert coerce_completed(value) is expected


async def test_create_requires_name_and_deadline(task_service) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await task_service.create_task({"name": "T1"})
    assert exc_info.value.message == "Bad Request: name and deadline are required"


async def test_create_rejects_non_string_name(task_service, task_repo) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await task_service.create_task({"name": [1], "deadline": DEADLINE_MS})
    assert exc_info.value.message == "Bad Request: name must be a string"
    assert await task_repo.count(None) == 0


async def test_create_converts_deadline_and_defaults(task_service) -> None:
    task = await task_service.create_task({"name": "T1", "deadline": DEADLINE_MS})
    assert task.deadline == datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)
    assert task.description == ""
    assert task.completed is False
    assert task.assigned_user == ""
    assert task.assigned_user_name == "unassigned"
    assert task.date_created is not None


async def test_create_rejects_unreadable_deadline(task_service) -> None:
    with pytest.raises(ValidationException):
        await task_service.create_task({"name": "T1", "deadline": "soon"})


async def test_create_derives_assignee_name_and_links(task_service, user_repo, al) -> None:
    task = await task_service.create_task(
        {"name": "T1", "deadline": DEADLINE_MS, "assignedUser": al.id}
    )
    assert task.assigned_user_name == "Al"
    assert (await user_repo.get_by_id(al.id)).pending_tasks == (task.id,)


async def test_create_completed_task_is_not_linked(task_service, user_repo, al) -> None:
    await task_service.create_task(
        {"name": "T1", "deadline": DEADLINE_MS, "assignedUser": al.id, "completed": "true"}
    )
    assert (await user_repo.get_by_id(al.id)).pending_tasks == ()


async def test_create_with_malformed_assignee_is_bad_request(task_service) -> None:
    with pytest.raises(ValidationException):
        await task_service.create_task(
            {"name": "T1", "deadline": DEADLINE_MS, "assignedUser": "NOT-AN-ID"}
        )


async def test_create_with_unknown_assignee_is_not_found(task_service) -> None:
    with pytest.raises(ResourceNotFoundException) as exc_info:
        await task_service.create_task(
            {"name": "T1", "deadline": DEADLINE_MS, "assignedUser": "nosuchuser1"}
        )
    assert exc_info.value.message == "Not Found: assigned user does not exist"


async def test_create_with_mismatched_name_reports_both(task_service, al) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await task_service.create_task(
            {
                "name": "T1",
                "deadline": DEADLINE_MS,
                "assignedUser": al.id,
                "assignedUserName": "Bob",
            }
        )
    assert exc_info.value.data == {"provided": "Bob", "actual": "Al"}


async def test_get_task_with_projection(task_service) -> None:
    task = await task_service.create_task({"name": "T1", "deadline": DEADLINE_MS})
    doc = await task_service.get_task(task.id, {"select": '{"name": 1}'})
    assert doc == {"_id": task.id, "name": "T1"}


async def test_get_task_errors(task_service) -> None:
    with pytest.raises(ValidationException):
        await task_service.get_task("BAD ID", {})
    with pytest.raises(ResourceNotFoundException):
        await task_service.get_task("missingtask1", {})


async def test_list_and_count(task_service) -> None:
    for i in range(3):
        await task_service.create_task(
            {"name": f"T{i}", "deadline": DEADLINE_MS, "completed": i == 0}
        )
    pending = await task_service.list_tasks({"where": '{"completed": false}', "sort": '{"name": -1}'})
    assert [d["name"] for d in pending] == ["T2", "T1"]
    assert await task_service.list_tasks({"count": "true"}) == 3
    assert await task_service.list_tasks({"count": "true", "limit": "1"}) == 3
    assert len(await task_service.list_tasks({"skip": "1", "limit": "1"})) == 1


async def test_replace_completed_task_is_rejected(task_service) -> None:
    task = await task_service.create_task(
        {"name": "T1", "deadline": DEADLINE_MS, "completed": True}
    )
    with pytest.raises(ValidationException) as exc_info:
        await task_service.replace_task(task.id, {"name": "T1", "deadline": DEADLINE_MS})
    assert exc_info.value.message == "Bad Request: cannot modify a completed task"


async def test_replace_checks_id_before_lookup(task_service) -> None:
    with pytest.raises(ValidationException):
        await task_service.replace_task("BAD ID", {"name": "T1", "deadline": DEADLINE_MS})
    with pytest.raises(ResourceNotFoundException):
        await task_service.replace_task("missingtask1", {"name": "T1", "deadline": DEADLINE_MS})


async def test_replace_completion_leaves_pending_list(task_service, user_repo, al) -> None:
    task = await task_service.create_task(
        {"name": "T1", "deadline": DEADLINE_MS, "assignedUser": al.id}
    )
    updated = await task_service.replace_task(
        task.id,
        {"name": "T1", "deadline": DEADLINE_MS, "assignedUser": al.id, "completed": True},
    )
    assert updated.completed is True
    assert updated.date_created == task.date_created
    assert (await user_repo.get_by_id(al.id)).pending_tasks == ()


async def test_replace_unassigning_clears_name(task_service, user_repo, al) -> None:
    task = await task_service.create_task(
        {"name": "T1", "deadline": DEADLINE_MS, "assignedUser": al.id}
    )
    updated = await task_service.replace_task(task.id, {"name": "T1", "deadline": DEADLINE_MS})
    assert (updated.assigned_user, updated.assigned_user_name) == ("", "unassigned")
    assert (await user_repo.get_by_id(al.id)).pending_tasks == ()


async def test_delete_unlinks_then_deletes(task_service, task_repo, user_repo, al) -> None:
    task = await task_service.create_task(
        {"name": "T1", "deadline": DEADLINE_MS, "assignedUser": al.id}
    )
    await task_service.delete_task(task.id)
    assert await task_repo.get_by_id(task.id) is None
    assert (await user_repo.get_by_id(al.id)).pending_tasks == ()
    with pytest.raises(ResourceNotFoundException):
        await task_service.delete_task(task.id)
