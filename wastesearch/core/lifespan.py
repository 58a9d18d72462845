"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (Forest Client HTTP client,
circuit breakers, cache, telemetry, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from wastesearch.core.config import get_settings
from wastesearch.infrastructure.external.forest_client.api import build_http_client
from wastesearch.infrastructure.external.forest_client.resilience import BreakerRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: telemetry (if enabled), Forest Client HTTP client and
    breaker registry, Redis cache (if enabled). Shutdown order: HTTP client
    close, cache disconnect, telemetry shutdown, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    if settings.telemetry_enabled:
        from wastesearch.infrastructure.persistence import database
        from wastesearch.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument(
            app,
            engine=database._ensure_engine(),
            redis=settings.redis_enabled,
        )

    # Shared HTTP client for the Forest Client API (connection reuse).
    app.state.forest_client_http = build_http_client(settings)
    # One breaker per upstream dependency, shared by all in-flight searches.
    app.state.breakers = BreakerRegistry.from_settings(settings)

    if settings.redis_enabled:
        from wastesearch.infrastructure.cache.redis_cache import CacheService

        cache = CacheService(settings=settings)
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None

    yield

    # ---- Shutdown ----
    if getattr(app.state, "forest_client_http", None) is not None:
        await app.state.forest_client_http.aclose()
        app.state.forest_client_http = None
        logger.info("Forest Client HTTP client closed")

    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        logger.info("Cache disconnected")

    from wastesearch.shared.telemetry.telemetry import get_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        logger.info("Telemetry shutdown complete")

    from wastesearch.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
