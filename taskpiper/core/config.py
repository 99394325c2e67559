"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. A missing storage credential is not a load-time error:
the lifespan logs a warning and the service starts without a database.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "taskpiper"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server (python -m taskpiper)
    host: str = "0.0.0.0"
    port: int = 3000

    # Database: "firestore" (REST API) or "memory" (in-process, dev/tests)
    database_backend: str = "firestore"

    # Firestore connection: service account key (env) or path (file).
    # FIRESTORE_EMULATOR_HOST (e.g. localhost:8080) skips credentials entirely.
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    firestore_project_id: str | None = None
    firestore_emulator_host: str | None = None
    firestore_timeout_seconds: float = 30.0

    # Listing defaults
    task_default_limit: int = 100

    # CORS
    allowed_origins: str = "*"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        """Reject unknown database backends; credentials are checked at startup."""
        if self.database_backend not in ("firestore", "memory"):
            raise ValueError(
                f"database_backend must be 'firestore' or 'memory', got: {self.database_backend!r}"
            )
        if self.task_default_limit < 0:
            raise ValueError("TASK_DEFAULT_LIMIT must be zero or positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    In tests, call get_settings.cache_clear() before overriding env vars so
    the next get_settings() uses the new values.
    """
    return Settings()
