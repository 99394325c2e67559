"""Memory-backed task and user repositories (implement the repository ports)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from taskpiper.application.dtos.task import TaskResult, TaskWrite
from taskpiper.application.dtos.user import UserResult, UserWrite
from taskpiper.domain.value_objects.query import Filter, QuerySpec, sort_documents
from taskpiper.infrastructure.collections import COLLECTION_TASKS, COLLECTION_USERS
from taskpiper.infrastructure.memory.store import MemoryCollection, MemoryStore
from taskpiper.shared.utils.datetime import utc_now
from taskpiper.shared.utils.generators import generate_cuid


async def _run_query(
    coll: MemoryCollection, to_document, query: QuerySpec
) -> list[dict[str, Any]]:
    docs = [to_document(doc_id, data) for doc_id, data in await coll.get_all()]
    docs = [d for d in docs if query.matches(d)]
    if query.sort:
        docs = sort_documents(docs, query.sort)
    if query.skip:
        docs = docs[query.skip:]
    if query.limit is not None:
        docs = docs[: query.limit]
    return [query.project(d) for d in docs]


async def _count(coll: MemoryCollection, to_document, filter_: Filter | None) -> int:
    docs = [to_document(doc_id, data) for doc_id, data in await coll.get_all()]
    if filter_ is None:
        return len(docs)
    return sum(1 for d in docs if filter_.matches(d))


def _task_document(doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
    return TaskResult.from_fields(doc_id, data).to_document()


def _user_document(doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
    return UserResult.from_fields(doc_id, data).to_document()


class MemoryTaskRepository:
    """Task repository over a MemoryStore. Same contract as FirestoreTaskRepository."""

    def __init__(self, store: MemoryStore) -> None:
        self._coll = store.collection(COLLECTION_TASKS)

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        data = await self._coll.get(task_id)
        return TaskResult.from_fields(task_id, data) if data is not None else None

    async def get_many(self, task_ids: Sequence[str]) -> list[TaskResult]:
        results = []
        for task_id in dict.fromkeys(task_ids):
            task = await self.get_by_id(task_id)
            if task is not None:
                results.append(task)
        return results

    async def find(self, query: QuerySpec) -> list[dict[str, Any]]:
        return await _run_query(self._coll, _task_document, query)

    async def count(self, filter_: Filter | None) -> int:
        return await _count(self._coll, _task_document, filter_)

    async def create(self, data: TaskWrite) -> TaskResult:
        task_id = generate_cuid()
        fields = {**data.to_fields(), "dateCreated": utc_now()}
        await self._coll.set(task_id, fields)
        return TaskResult.from_fields(task_id, fields)

    async def replace(self, task_id: str, data: TaskWrite) -> TaskResult | None:
        if not await self._coll.update(task_id, data.to_fields()):
            return None
        return await self.get_by_id(task_id)

    async def set_assignee(self, task_id: str, user_id: str, user_name: str) -> bool:
        return await self._coll.update(
            task_id, {"assignedUser": user_id, "assignedUserName": user_name}
        )

    async def delete(self, task_id: str) -> bool:
        return await self._coll.delete(task_id)


class MemoryUserRepository:
    """User repository over a MemoryStore. Same contract as FirestoreUserRepository."""

    def __init__(self, store: MemoryStore) -> None:
        self._coll = store.collection(COLLECTION_USERS)

    async def get_by_id(self, user_id: str) -> UserResult | None:
        data = await self._coll.get(user_id)
        return UserResult.from_fields(user_id, data) if data is not None else None

    async def get_by_email(self, email: str) -> UserResult | None:
        for doc_id, data in await self._coll.get_all():
            if data.get("email") == email:
                return UserResult.from_fields(doc_id, data)
        return None

    async def find(self, query: QuerySpec) -> list[dict[str, Any]]:
        return await _run_query(self._coll, _user_document, query)

    async def count(self, filter_: Filter | None) -> int:
        return await _count(self._coll, _user_document, filter_)

    async def create(self, data: UserWrite) -> UserResult:
        user_id = generate_cuid()
        fields = {
            "name": data.name,
            "email": data.email,
            "pendingTasks": list(data.pending_tasks),
            "dateCreated": utc_now(),
        }
        await self._coll.set(user_id, fields)
        return UserResult.from_fields(user_id, fields)

    async def replace(self, user_id: str, data: UserWrite) -> UserResult | None:
        updated = await self._coll.update(
            user_id,
            {"name": data.name, "email": data.email, "pendingTasks": list(data.pending_tasks)},
        )
        if not updated:
            return None
        return await self.get_by_id(user_id)

    async def add_pending_task(self, user_id: str, task_id: str) -> bool:
        return await self._coll.transform(
            user_id, "pendingTasks", lambda ids: ids if task_id in ids else ids + [task_id]
        )

    async def remove_pending_tasks(self, user_id: str, task_ids: Sequence[str]) -> bool:
        drop = set(task_ids)
        return await self._coll.transform(
            user_id, "pendingTasks", lambda ids: [i for i in ids if i not in drop]
        )

    async def find_ids_with_pending(self, task_ids: Sequence[str]) -> list[str]:
        wanted = set(task_ids)
        return [
            doc_id
            for doc_id, data in await self._coll.get_all()
            if wanted.intersection(data.get("pendingTasks") or ())
        ]

    async def delete(self, user_id: str) -> bool:
        return await self._coll.delete(user_id)
