"""Health check endpoint. No dependencies; used for liveness probes."""

from fastapi import APIRouter

from taskpiper.core.config import get_settings
from taskpiper.infrastructure.firebase.client import get_firestore_client
from taskpiper.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok status for liveness, plus whether storage is reachable in principle."""
    settings = get_settings()
    if settings.database_backend == "memory":
        connected = True
    else:
        connected = get_firestore_client() is not None
    return HealthResponse(backend=settings.database_backend, storage_connected=connected)
