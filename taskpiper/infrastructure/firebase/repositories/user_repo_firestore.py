"""Firestore-backed user repository (implements IUserRepository)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from taskpiper.application.dtos.user import UserResult, UserWrite
from taskpiper.domain.value_objects.query import Filter, QuerySpec
from taskpiper.infrastructure.collections import COLLECTION_USERS
from taskpiper.infrastructure.firebase._rest_client import FirestoreRESTClient
from taskpiper.infrastructure.firebase.repositories._query import run_count, run_query
from taskpiper.shared.utils.datetime import utc_now
from taskpiper.shared.utils.generators import generate_cuid

# Firestore caps array-contains-any at 30 values per query.
_ARRAY_CONTAINS_ANY_MAX = 30


def _to_document(doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
    return UserResult.from_fields(doc_id, data).to_document()


class FirestoreUserRepository:
    """User repository using Firestore. Same contract as MemoryUserRepository."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_USERS)

    async def get_by_id(self, user_id: str) -> UserResult | None:
        """Return user by ID."""
        doc = await self._coll.document(user_id).get()
        if not doc:
            return None
        return UserResult.from_fields(doc.id, doc.to_dict())

    async def get_by_email(self, email: str) -> UserResult | None:
        """Return user by email (server-side where query, at most one doc)."""
        q = self._coll.where("email", "==", email).limit(1)
        async for snapshot in q.stream():
            return UserResult.from_fields(snapshot.id, snapshot.to_dict())
        return None

    async def find(self, query: QuerySpec) -> list[dict[str, Any]]:
        return await run_query(self._coll, _to_document, query)

    async def count(self, filter_: Filter | None) -> int:
        return await run_count(self._coll, filter_)

    async def create(self, data: UserWrite) -> UserResult:
        """Create user under a new CUID; dateCreated is set here."""
        user_id = generate_cuid()
        fields = {
            "name": data.name,
            "email": data.email,
            "pendingTasks": list(data.pending_tasks),
            "dateCreated": utc_now(),
        }
        await self._coll.create(user_id, fields)
        return UserResult.from_fields(user_id, fields)

    async def replace(self, user_id: str, data: UserWrite) -> UserResult | None:
        """Overwrite name, email and pendingTasks; dateCreated is left untouched."""
        updated = await self._coll.document(user_id).update(
            {
                "name": data.name,
                "email": data.email,
                "pendingTasks": list(data.pending_tasks),
            }
        )
        if not updated:
            return None
        return await self.get_by_id(user_id)

    async def add_pending_task(self, user_id: str, task_id: str) -> bool:
        return await self._coll.document(user_id).array_union("pendingTasks", [task_id])

    async def remove_pending_tasks(self, user_id: str, task_ids: Sequence[str]) -> bool:
        return await self._coll.document(user_id).array_remove("pendingTasks", list(task_ids))

    async def find_ids_with_pending(self, task_ids: Sequence[str]) -> list[str]:
        ids = list(dict.fromkeys(task_ids))
        found: dict[str, None] = {}
        for start in range(0, len(ids), _ARRAY_CONTAINS_ANY_MAX):
            chunk = ids[start:start + _ARRAY_CONTAINS_ANY_MAX]
            q = self._coll.where("pendingTasks", "array-contains-any", chunk)
            async for snapshot in q.stream():
                found[snapshot.id] = None
        return list(found)

    async def delete(self, user_id: str) -> bool:
        doc_ref = self._coll.document(user_id)
        if not await doc_ref.get():
            return False
        await doc_ref.delete()
        return True
