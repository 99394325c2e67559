"""Firestore-backed task repository (implements ITaskRepository)."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from taskpiper.application.dtos.task import TaskResult, TaskWrite
from taskpiper.domain.value_objects.query import Filter, QuerySpec
from taskpiper.infrastructure.collections import COLLECTION_TASKS
from taskpiper.infrastructure.firebase._rest_client import FirestoreRESTClient
from taskpiper.infrastructure.firebase.repositories._query import run_count, run_query
from taskpiper.shared.utils.datetime import utc_now
from taskpiper.shared.utils.generators import generate_cuid


def _to_document(doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
    return TaskResult.from_fields(doc_id, data).to_document()


class FirestoreTaskRepository:
    """Task repository using Firestore. Same contract as MemoryTaskRepository."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_TASKS)

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        """Return task by ID."""
        doc = await self._coll.document(task_id).get()
        if not doc:
            return None
        return TaskResult.from_fields(doc.id, doc.to_dict())

    async def get_many(self, task_ids: Sequence[str]) -> list[TaskResult]:
        """Fetch tasks concurrently; ids that do not exist are skipped."""
        found = await asyncio.gather(
            *(self.get_by_id(task_id) for task_id in dict.fromkeys(task_ids))
        )
        return [task for task in found if task is not None]

    async def find(self, query: QuerySpec) -> list[dict[str, Any]]:
        return await run_query(self._coll, _to_document, query)

    async def count(self, filter_: Filter | None) -> int:
        return await run_count(self._coll, filter_)

    async def create(self, data: TaskWrite) -> TaskResult:
        """Create task under a new CUID; dateCreated is set here."""
        task_id = generate_cuid()
        fields = {**data.to_fields(), "dateCreated": utc_now()}
        await self._coll.create(task_id, fields)
        return TaskResult.from_fields(task_id, fields)

    async def replace(self, task_id: str, data: TaskWrite) -> TaskResult | None:
        """Overwrite every writable field; dateCreated is left untouched."""
        doc_ref = self._coll.document(task_id)
        if not await doc_ref.update(data.to_fields()):
            return None
        return await self.get_by_id(task_id)

    async def set_assignee(self, task_id: str, user_id: str, user_name: str) -> bool:
        return await self._coll.document(task_id).update(
            {"assignedUser": user_id, "assignedUserName": user_name}
        )

    async def delete(self, task_id: str) -> bool:
        doc_ref = self._coll.document(task_id)
        if not await doc_ref.get():
            return False
        await doc_ref.delete()
        return True
