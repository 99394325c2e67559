"""Application lifespan: startup and shutdown.

Single place for startup/shutdown logic. Used by main.py; no business
logic here, only wiring of the storage backend.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from taskpiper.core.config import get_settings
from taskpiper.infrastructure.firebase.client import close_firebase, init_firebase
from taskpiper.infrastructure.memory import get_memory_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: open the Firestore client (or the in-memory store). A missing
    connection is logged as a warning; the app still starts. Shutdown:
    close the Firestore HTTP client.
    """
    settings = get_settings()

    # ---- Startup ----
    if settings.database_backend == "memory":
        get_memory_store()
        logger.info("Using in-memory storage backend (data is lost on restart)")
    elif not init_firebase():
        logger.warning("Storage not available; task and user requests will fail with 500")

    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    await close_firebase()
    logger.info("%s stopped", settings.app_name)
