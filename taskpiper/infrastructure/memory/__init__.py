"""In-process storage backend (DATABASE_BACKEND=memory)."""

from taskpiper.infrastructure.memory.repositories import (
    MemoryTaskRepository,
    MemoryUserRepository,
)
from taskpiper.infrastructure.memory.store import MemoryStore, get_memory_store

__all__ = [
    "MemoryStore",
    "MemoryTaskRepository",
    "MemoryUserRepository",
    "get_memory_store",
]
