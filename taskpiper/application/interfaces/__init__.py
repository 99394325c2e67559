"""Application ports (Protocols implemented by infrastructure)."""

from taskpiper.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)

__all__ = ["ITaskRepository", "IUserRepository"]
