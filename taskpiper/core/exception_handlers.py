"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses, always in the ``{message, data}`` envelope.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskpiper.core.config import get_settings
from taskpiper.domain.exceptions import TaskPiperException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "CONFLICT": 400,
    "RESOURCE_NOT_FOUND": 404,
    "STORAGE_ERROR": 500,
}


def _taskpiper_exception_handler(
    request: Request, exc: TaskPiperException
) -> JSONResponse:
    """Return the exception's envelope with the status for its error_code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.error(
            "%s %s failed: %s %s", request.method, request.url.path, exc.message, exc.details
        )
    return JSONResponse(
        status_code=status,
        content=jsonable_encoder(exc.to_dict()),
    )


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 400 with validation error details (e.g. body is not a JSON object)."""
    return JSONResponse(
        status_code=400,
        content={
            "message": "Bad Request: request validation failed",
            "data": jsonable_encoder(exc.errors()),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return the envelope for Starlette HTTP exceptions (unknown route, bad method)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail), "data": {}},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include the error text only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    data: Any = {"error": str(exc)} if settings.debug else {}
    return JSONResponse(
        status_code=500,
        content={"message": "Server error", "data": data},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: TaskPiperException (and
    subclasses), RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(TaskPiperException, _taskpiper_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
