"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain, upstream and
framework exceptions to JSON error responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wastesearch.core.config import get_settings
from wastesearch.domain.exceptions import WasteSearchException
from wastesearch.infrastructure.exceptions import UpstreamRateLimitedException

logger = logging.getLogger(__name__)

# Map error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "INVALID_SORT_FIELD": 400,
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "FORBIDDEN": 403,
    "RESOURCE_NOT_FOUND": 404,
    "SEARCH_UNAVAILABLE": 503,
    "SEARCH_TIMEOUT": 504,
    "UPSTREAM_NOT_FOUND": 404,
    "UPSTREAM_RATE_LIMITED": 429,
    "UPSTREAM_UNAVAILABLE": 503,
    "UPSTREAM_REQUEST_ERROR": 502,
}


def _wastesearch_exception_handler(
    request: Request, exc: WasteSearchException
) -> JSONResponse:
    """Return JSON from WasteSearchException.to_dict() with the mapped status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.error("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    headers: dict[str, str] | None = None
    if isinstance(exc, UpstreamRateLimitedException) and exc.retry_after is not None:
        headers = {"Retry-After": str(int(exc.retry_after.total_seconds()))}
    return JSONResponse(status_code=status, content=exc.to_dict(), headers=headers)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: WasteSearchException (and subclasses, upstream errors
    included), RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(WasteSearchException, _wastesearch_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
