"""API router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from taskpiper.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from taskpiper.api.v1.endpoints import health, tasks, users

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
