"""Task endpoints: envelope, status codes and assignment side effects."""

import json

from httpx import AsyncClient

DEADLINE_MS = 1700000000000


async def _create_user(client: AsyncClient, name: str = "Al", email: str = "a@x.com") -> dict:
    response = await client.post("/api/users", json={"name": name, "email": email})
    assert response.status_code == 201
    return response.json()["data"]


async def _create_task(client: AsyncClient, **fields) -> dict:
    body = {"name": "T1", "deadline": DEADLINE_MS, **fields}
    response = await client.post("/api/tasks", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_create_task_returns_envelope(client: AsyncClient) -> None:
    response = await client.post("/api/tasks", json={"name": "T1", "deadline": DEADLINE_MS})
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Task created"
    task = body["data"]
    assert task["_id"]
    assert task["deadline"].startswith("2023-11-14T22:13:20")
    assert task["assignedUser"] == ""
    assert task["assignedUserName"] == "unassigned"
    assert task["completed"] is False


async def test_create_without_required_fields(client: AsyncClient) -> None:
    response = await client.post("/api/tasks", json={"description": "no name"})
    assert response.status_code == 400
    assert response.json()["message"] == "Bad Request: name and deadline are required"
    empty = await client.post("/api/tasks")
    assert empty.status_code == 400


async def test_non_object_body_is_bad_request(client: AsyncClient) -> None:
    response = await client.post("/api/tasks", json=["name"])
    assert response.status_code == 400
    assert set(response.json()) == {"message", "data"}


async def test_assigned_user_checks(client: AsyncClient) -> None:
    missing = await client.post(
        "/api/tasks", json={"name": "T", "deadline": DEADLINE_MS, "assignedUser": "nosuchuser1"}
    )
    assert missing.status_code == 404
    malformed = await client.post(
        "/api/tasks", json={"name": "T", "deadline": DEADLINE_MS, "assignedUser": "NOT-AN-ID"}
    )
    assert malformed.status_code == 400


async def test_mismatched_user_name(client: AsyncClient) -> None:
    al = await _create_user(client)
    response = await client.post(
        "/api/tasks",
        json={
            "name": "T",
            "deadline": DEADLINE_MS,
            "assignedUser": al["_id"],
            "assignedUserName": "Bob",
        },
    )
    assert response.status_code == 400
    assert response.json()["data"] == {"provided": "Bob", "actual": "Al"}


async def test_get_task_and_select(client: AsyncClient) -> None:
    task = await _create_task(client, description="d")
    response = await client.get(
        f"/api/tasks/{task['_id']}", params={"select": json.dumps({"description": 0})}
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert "description" not in data
    assert data["_id"] == task["_id"]


async def test_get_task_errors(client: AsyncClient) -> None:
    assert (await client.get("/api/tasks/NOT-AN-ID")).status_code == 400
    response = await client.get("/api/tasks/missingtask1")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found", "data": {}}


async def test_list_query_language(client: AsyncClient) -> None:
    for i in range(5):
        await _create_task(client, name=f"T{i}", completed=i % 2 == 0)

    response = await client.get(
        "/api/tasks",
        params={
            "where": json.dumps({"completed": True}),
            "sort": json.dumps({"name": -1}),
            "select": json.dumps({"name": 1, "_id": 0}),
            "skip": "1",
            "limit": "1",
        },
    )
    assert response.status_code == 200
    assert response.json() == {"message": "OK", "data": [{"name": "T2"}]}

    count = await client.get("/api/tasks", params={"count": "true"})
    assert count.json()["data"] == 5


async def test_list_limit_defaults_to_100(client: AsyncClient) -> None:
    for i in range(101):
        await _create_task(client, name=f"T{i}")
    response = await client.get("/api/tasks")
    assert len(response.json()["data"]) == 100


async def test_malformed_where_is_400(client: AsyncClient) -> None:
    response = await client.get("/api/tasks", params={"where": "{completed: true"})
    assert response.status_code == 400
    assert response.json()["message"] == "Bad Request: malformed JSON in query parameters"


async def test_put_completed_task_always_400(client: AsyncClient) -> None:
    task = await _create_task(client, completed=True)
    for body in (
        {"name": "T1", "deadline": DEADLINE_MS, "completed": True},
        {"name": "Other", "deadline": DEADLINE_MS, "completed": False},
    ):
        response = await client.put(f"/api/tasks/{task['_id']}", json=body)
        assert response.status_code == 400


async def test_put_updates_task(client: AsyncClient) -> None:
    task = await _create_task(client)
    response = await client.put(
        f"/api/tasks/{task['_id']}",
        json={"name": "Renamed", "deadline": task["deadline"], "description": "x"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Task updated"
    assert body["data"]["name"] == "Renamed"
    assert body["data"]["deadline"] == task["deadline"]
    assert body["data"]["dateCreated"] == task["dateCreated"]


async def test_delete_task(client: AsyncClient) -> None:
    al = await _create_user(client)
    task = await _create_task(client, assignedUser=al["_id"])

    response = await client.delete(f"/api/tasks/{task['_id']}")
    assert response.status_code == 204
    assert response.content == b""

    user = (await client.get(f"/api/users/{al['_id']}")).json()["data"]
    assert user["pendingTasks"] == []
    assert (await client.delete(f"/api/tasks/{task['_id']}")).status_code == 404


async def test_non_scalar_sort_direction_is_400(client: AsyncClient) -> None:
    for sort in ({"name": [1]}, {"name": {"$meta": "x"}}):
        response = await client.get("/api/tasks", params={"sort": json.dumps(sort)})
        assert response.status_code == 400
        assert response.json()["message"] == "Bad Request: malformed JSON in query parameters"


async def test_non_string_name_is_400(client: AsyncClient) -> None:
    for name in ([1], {}, 5):
        response = await client.post("/api/tasks", json={"name": name, "deadline": DEADLINE_MS})
        assert response.status_code == 400
    count = await client.get("/api/tasks", params={"count": "true"})
    assert count.json()["data"] == 0

    task = await _create_task(client)
    response = await client.put(
        f"/api/tasks/{task['_id']}", json={"name": [1], "deadline": DEADLINE_MS}
    )
    assert response.status_code == 400
    stored = await client.get(f"/api/tasks/{task['_id']}")
    assert stored.json()["data"]["name"] == "T1"
