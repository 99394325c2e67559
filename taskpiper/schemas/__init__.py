"""API request/response schemas."""

from taskpiper.schemas.common import ApiResponse
from taskpiper.schemas.health import HealthResponse
from taskpiper.schemas.task import TaskBody
from taskpiper.schemas.user import UserBody

__all__ = ["ApiResponse", "HealthResponse", "TaskBody", "UserBody"]
