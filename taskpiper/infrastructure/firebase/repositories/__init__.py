"""Firestore-backed repository implementations (swappable with the memory backend)."""

from taskpiper.infrastructure.firebase.repositories.task_repo_firestore import (
    FirestoreTaskRepository,
)
from taskpiper.infrastructure.firebase.repositories.user_repo_firestore import (
    FirestoreUserRepository,
)

__all__ = [
    "FirestoreTaskRepository",
    "FirestoreUserRepository",
]
