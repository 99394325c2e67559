"""User use cases."""

from taskpiper.application.use_cases.users.user_operations import UserService

__all__ = ["UserService"]
