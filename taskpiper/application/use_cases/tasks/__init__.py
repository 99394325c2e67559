"""Task use cases."""

from taskpiper.application.use_cases.tasks.task_operations import TaskService, coerce_completed

__all__ = ["TaskService", "coerce_completed"]
