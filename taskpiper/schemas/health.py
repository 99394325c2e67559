"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /api/health (liveness)."""

    status: str = Field(default="ok", description="Service status")
    backend: str = Field(..., description="Configured storage backend")
    storage_connected: bool = Field(..., description="False when Firestore is not configured")
