"""Application services shared by the entity use cases."""

from taskpiper.application.services.assignment_coordinator import AssignmentCoordinator
from taskpiper.application.services.query_translator import (
    CollectionQueryRules,
    QueryTranslator,
    task_query_rules,
    user_query_rules,
)

__all__ = [
    "AssignmentCoordinator",
    "CollectionQueryRules",
    "QueryTranslator",
    "task_query_rules",
    "user_query_rules",
]
