"""In-process document store (dev and tests).

Collections are dicts of document id -> field dict. Every public method
takes the store lock, so each call is atomic per document just like a
single Firestore write; nothing spans documents.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Callable
from typing import Any


class MemoryCollection:
    """One named collection inside a MemoryStore."""

    def __init__(self, store: "MemoryStore", name: str) -> None:
        self._store = store
        self._docs: dict[str, dict[str, Any]] = store._data.setdefault(name, {})

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        async with self._store.lock:
            data = self._docs.get(doc_id)
            return copy.deepcopy(data) if data is not None else None

    async def get_all(self) -> list[tuple[str, dict[str, Any]]]:
        async with self._store.lock:
            return [(k, copy.deepcopy(v)) for k, v in self._docs.items()]

    async def set(self, doc_id: str, data: dict[str, Any]) -> None:
        async with self._store.lock:
            self._docs[doc_id] = copy.deepcopy(data)

    async def update(self, doc_id: str, data: dict[str, Any]) -> bool:
        """Merge fields into an existing document; False if it does not exist."""
        async with self._store.lock:
            if doc_id not in self._docs:
                return False
            self._docs[doc_id].update(copy.deepcopy(data))
            return True

    async def transform(
        self, doc_id: str, field: str, fn: Callable[[list[Any]], list[Any]]
    ) -> bool:
        """Apply fn to an array field in place; False if the document does not exist."""
        async with self._store.lock:
            doc = self._docs.get(doc_id)
            if doc is None:
                return False
            doc[field] = fn(list(doc.get(field) or []))
            return True

    async def delete(self, doc_id: str) -> bool:
        async with self._store.lock:
            return self._docs.pop(doc_id, None) is not None


class MemoryStore:
    """Dict-backed stand-in for the Firestore database."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self.lock = asyncio.Lock()

    def collection(self, name: str) -> MemoryCollection:
        return MemoryCollection(self, name)

    def clear(self) -> None:
        """Drop every document (collections already handed out stay bound)."""
        for docs in self._data.values():
            docs.clear()
        self.lock = asyncio.Lock()


_default_store: MemoryStore | None = None


def get_memory_store() -> MemoryStore:
    """Return the process-wide store used when DATABASE_BACKEND=memory."""
    global _default_store
    if _default_store is None:
        _default_store = MemoryStore()
    return _default_store
