"""Application DTOs (no storage dependency)."""

from taskpiper.application.dtos.side_effects import SideEffectReport
from taskpiper.application.dtos.task import (
    TASK_FIELDS,
    UNASSIGNED_USER_NAME,
    TaskResult,
    TaskWrite,
)
from taskpiper.application.dtos.user import USER_FIELDS, UserResult, UserWrite

__all__ = [
    "SideEffectReport",
    "TASK_FIELDS",
    "TaskResult",
    "TaskWrite",
    "UNASSIGNED_USER_NAME",
    "USER_FIELDS",
    "UserResult",
    "UserWrite",
]
