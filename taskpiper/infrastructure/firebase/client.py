"""Firestore client (REST-based, no firebase-admin).

Initialized at app startup from FIREBASE_SERVICE_ACCOUNT_KEY (JSON string),
FIREBASE_SERVICE_ACCOUNT_PATH (file path) or FIRESTORE_EMULATOR_HOST. When
none is set the service still starts; a warning is logged and requests
that need storage fail with a 500 until the connection is configured.
"""

import json
import logging
from pathlib import Path

from taskpiper.core.config import get_settings
from taskpiper.infrastructure.firebase._rest_client import (
    EMULATOR_TOKEN,
    FirestoreRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def _load_key_dict():
    """Return service account dict from env key or file path."""
    settings = get_settings()
    key_json = settings.firebase_service_account_key.get_secret_value() if settings.firebase_service_account_key else None
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def init_firebase() -> bool:
    """Initialize the Firestore client.

    Idempotent if already initialized. On missing or malformed credentials
    logs and returns False so the app can start without a database.

    Returns:
        True if Firestore was initialized, False if not configured or on error.
    """
    global _firestore_client
    if _firestore_client is not None:
        return True
    settings = get_settings()
    try:
        if settings.firestore_emulator_host:
            project_id = settings.firestore_project_id or "demo-taskpiper"
            _firestore_client = FirestoreRESTClient(
                project_id,
                base_url=f"http://{settings.firestore_emulator_host}/v1",
                static_token=EMULATOR_TOKEN,
                timeout=settings.firestore_timeout_seconds,
            )
            logger.info(
                "Using Firestore emulator at %s (project %s)",
                settings.firestore_emulator_host,
                project_id,
            )
            return True

        key_dict = _load_key_dict()
        if not key_dict:
            logger.warning(
                "Warning: no Firestore connection configured (FIREBASE_SERVICE_ACCOUNT_KEY, "
                "FIREBASE_SERVICE_ACCOUNT_PATH or FIRESTORE_EMULATOR_HOST). "
                "The application may not be able to reach the database."
            )
            return False

        project_id = settings.firestore_project_id or key_dict.get("project_id")
        if not project_id:
            logger.error("Firebase service account JSON missing 'project_id'")
            return False

        cred = _get_credentials(key_dict)
        _firestore_client = FirestoreRESTClient(
            project_id, cred, timeout=settings.firestore_timeout_seconds
        )
        logger.info("Connected to Firestore project %s", project_id)
        return True
    except (ValueError, OSError):
        logger.exception("Firebase initialization failed")
        return False


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not configured."""
    return _firestore_client


async def close_firebase() -> None:
    """Close the Firestore client's HTTP connection pool. Call from app shutdown."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore HTTP client closed")
