"""Pytest configuration and fixtures for taskpiper.

Tests run against the in-memory storage backend: DATABASE_BACKEND is set
before taskpiper.main is imported so the app and every service share the
process-wide MemoryStore, which is emptied before each test.
"""

import os

os.environ["DATABASE_BACKEND"] = "memory"

import pytest
from httpx import ASGITransport, AsyncClient

from taskpiper.application.services.assignment_coordinator import AssignmentCoordinator
from taskpiper.application.services.query_translator import (
    QueryTranslator,
    task_query_rules,
    user_query_rules,
)
from taskpiper.application.use_cases.tasks import TaskService
from taskpiper.application.use_cases.users import UserService
from taskpiper.core.config import get_settings
from taskpiper.infrastructure.memory import (
    MemoryStore,
    MemoryTaskRepository,
    MemoryUserRepository,
    get_memory_store,
)

get_settings.cache_clear()

from taskpiper.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_memory_store() -> None:
    """Start every test with empty collections."""
    get_memory_store().clear()


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def store() -> MemoryStore:
    """A private store for service-level tests."""
    return MemoryStore()


@pytest.fixture
def task_repo(store: MemoryStore) -> MemoryTaskRepository:
    return MemoryTaskRepository(store)


@pytest.fixture
def user_repo(store: MemoryStore) -> MemoryUserRepository:
    return MemoryUserRepository(store)


@pytest.fixture
def coordinator(task_repo, user_repo) -> AssignmentCoordinator:
    return AssignmentCoordinator(task_repo, user_repo)


@pytest.fixture
def task_service(task_repo, user_repo, coordinator) -> TaskService:
    return TaskService(task_repo, user_repo, QueryTranslator(task_query_rules()), coordinator)


@pytest.fixture
def user_service(task_repo, user_repo, coordinator) -> UserService:
    return UserService(user_repo, task_repo, QueryTranslator(user_query_rules()), coordinator)
