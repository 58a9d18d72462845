"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
No business logic here. See wastesearch.core.lifespan and
wastesearch.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and optionally
clear get_settings cache) before importing or calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from wastesearch.api.v1 import api_router
from wastesearch.core.config import get_settings
from wastesearch.core.exception_handlers import register_exception_handlers
from wastesearch.core.lifespan import create_lifespan
from wastesearch.core.limiter import limiter
from wastesearch.middleware import (
    CallerContextMiddleware,
    RequestContextMiddleware,
    TimeoutMiddleware,
)
from wastesearch.shared.telemetry import setup_logging


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

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Middleware: last added = outermost. Order: timeout -> request/correlation IDs -> caller -> CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(CallerContextMiddleware, settings=settings)
    app.add_middleware(
        RequestContextMiddleware,
        request_id_header=settings.request_id_header,
        correlation_id_header=settings.correlation_id_header,
    )
    app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
