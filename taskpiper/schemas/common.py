"""Response envelope shared by every endpoint."""

from typing import Any

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """``{message, data}`` envelope for all non-204 responses."""

    message: str = Field(default="OK", description="Short status text")
    data: Any = Field(default=None, description="Payload: document, list, count or error detail")
