"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for repositories and entity services. All
services are built from infrastructure implementations here; routes
depend only on these dependencies, not on infra directly.

When database_backend is 'firestore', repositories use the Firestore REST
client created at startup. When it is 'memory', they share the in-process
store. Switch backends via DATABASE_BACKEND in config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends

from taskpiper.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)
from taskpiper.application.services.assignment_coordinator import AssignmentCoordinator
from taskpiper.application.services.query_translator import (
    QueryTranslator,
    task_query_rules,
    user_query_rules,
)
from taskpiper.application.use_cases.tasks import TaskService
from taskpiper.application.use_cases.users import UserService
from taskpiper.core.config import get_settings
from taskpiper.infrastructure.exceptions import StorageNotConfiguredError
from taskpiper.infrastructure.firebase.client import get_firestore_client
from taskpiper.infrastructure.firebase.repositories import (
    FirestoreTaskRepository,
    FirestoreUserRepository,
)
from taskpiper.infrastructure.memory import (
    MemoryTaskRepository,
    MemoryUserRepository,
    get_memory_store,
)


@dataclass
class Repositories:
    """Task and user repositories bound to the same backend."""

    tasks: ITaskRepository
    users: IUserRepository


def get_repositories() -> Repositories:
    """Build repositories for the configured backend.

    Raises:
        StorageNotConfiguredError: Firestore selected but no client was initialized (500).
    """
    settings = get_settings()
    if settings.database_backend == "memory":
        store = get_memory_store()
        return Repositories(MemoryTaskRepository(store), MemoryUserRepository(store))
    client = get_firestore_client()
    if client is None:
        raise StorageNotConfiguredError("Firestore")
    return Repositories(FirestoreTaskRepository(client), FirestoreUserRepository(client))


def get_coordinator(
    repos: Annotated[Repositories, Depends(get_repositories)],
) -> AssignmentCoordinator:
    return AssignmentCoordinator(repos.tasks, repos.users)


def get_task_service(
    repos: Annotated[Repositories, Depends(get_repositories)],
    coordinator: Annotated[AssignmentCoordinator, Depends(get_coordinator)],
) -> TaskService:
    """Build TaskService (limit default from TASK_DEFAULT_LIMIT)."""
    settings = get_settings()
    translator = QueryTranslator(task_query_rules(settings.task_default_limit))
    return TaskService(repos.tasks, repos.users, translator, coordinator)


def get_user_service(
    repos: Annotated[Repositories, Depends(get_repositories)],
    coordinator: Annotated[AssignmentCoordinator, Depends(get_coordinator)],
) -> UserService:
    """Build UserService (unbounded default limit, select/filter alias)."""
    translator = QueryTranslator(user_query_rules())
    return UserService(repos.users, repos.tasks, translator, coordinator)
