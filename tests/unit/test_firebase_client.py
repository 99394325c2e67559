"""Firestore client initialization from settings."""

import logging

import pytest

from taskpiper.core.config import get_settings
from taskpiper.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
)

_FIREBASE_ENV = (
    "FIREBASE_SERVICE_ACCOUNT_KEY",
    "FIREBASE_SERVICE_ACCOUNT_PATH",
    "FIRESTORE_EMULATOR_HOST",
    "FIRESTORE_PROJECT_ID",
)


@pytest.fixture
async def firestore_env(monkeypatch):
    """Clean Firestore settings; restores the cached settings afterwards."""
    for name in _FIREBASE_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATABASE_BACKEND", "firestore")
    get_settings.cache_clear()
    yield monkeypatch
    await close_firebase()
    monkeypatch.undo()
    get_settings.cache_clear()


async def test_missing_credentials_is_a_warning(firestore_env, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        assert init_firebase() is False
    assert get_firestore_client() is None
    assert "no Firestore connection configured" in caplog.text


async def test_malformed_key_is_logged_not_raised(firestore_env) -> None:
    firestore_env.setenv("FIREBASE_SERVICE_ACCOUNT_KEY", "{not json")
    get_settings.cache_clear()
    assert init_firebase() is False


async def test_emulator_host_needs_no_credentials(firestore_env) -> None:
    firestore_env.setenv("FIRESTORE_EMULATOR_HOST", "localhost:8080")
    firestore_env.setenv("FIRESTORE_PROJECT_ID", "demo-test")
    get_settings.cache_clear()

    assert init_firebase() is True
    client = get_firestore_client()
    assert client is not None
    assert client.base_url == "http://localhost:8080/v1"
    assert client.prefix == "projects/demo-test/databases/(default)/documents"
    assert await client.get_token() == "owner"

    await close_firebase()
    assert get_firestore_client() is None


def test_unknown_backend_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_BACKEND", "postgres")
    get_settings.cache_clear()
    try:
        with pytest.raises(ValueError):
            get_settings()
    finally:
        monkeypatch.undo()
        get_settings.cache_clear()
