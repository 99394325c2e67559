"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, CORS, routers. No
business logic here. See taskpiper.core.lifespan and
taskpiper.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before importing or calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskpiper.api.v1 import api_router
from taskpiper.core.config import get_settings
from taskpiper.core.exception_handlers import register_exception_handlers
from taskpiper.core.lifespan import create_lifespan
from taskpiper.shared.telemetry.logging import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_methods=["POST", "GET", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["X-Requested-With", "X-HTTP-Method-Override", "Content-Type", "Accept"],
    )

    app.include_router(api_router, prefix="/api")

    @app.get("/")
    def root() -> dict:
        """JSON index of the API."""
        return {
            "message": "OK",
            "data": {
                "name": settings.app_name,
                "version": settings.app_version,
                "endpoints": ["/api/health", "/api/tasks", "/api/users"],
                "docs": "/docs",
            },
        }

    return app


app = create_app()
