"""OpenTelemetry tracing setup for the search service.

One TelemetryConfig is built at startup when telemetry is enabled. It owns
the tracer provider, picks the span exporter, and instruments the inbound
FastAPI app plus the three outbound dependencies a search touches: the
reporting-unit database, the Forest Client API (httpx) and Redis.
"""

import logging
import threading
from collections.abc import Callable

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# Health probes would drown the search spans.
EXCLUDED_URLS = "/api/v1/health"


def _build_exporter(exporter_type: str, otlp_endpoint: str | None) -> SpanExporter | None:
    """Exporter for the configured type; None means spans are not exported."""
    if exporter_type == "none":
        return None
    if exporter_type == "otlp":
        if otlp_endpoint:
            logger.info("Exporting spans over OTLP to %s", otlp_endpoint)
            return OTLPSpanExporter(
                endpoint=otlp_endpoint,
                insecure=otlp_endpoint.startswith("http://"),
            )
        logger.warning("OTLP exporter selected without an endpoint, using console")
    elif exporter_type != "console":
        logger.warning("Unknown span exporter '%s', using console", exporter_type)
    return ConsoleSpanExporter()


class TelemetryConfig:
    """Tracer provider plus the instrumentation of the search dependencies."""

    def __init__(
        self,
        service_name: str,
        service_version: str,
        enabled: bool = True,
        environment: str = "development",
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.enabled = enabled
        self.environment = environment
        self.tracer_provider: TracerProvider | None = None

    @property
    def active(self) -> bool:
        return self.enabled and self.tracer_provider is not None

    def setup_telemetry(
        self,
        exporter_type: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> TracerProvider | None:
        """Create the tracer provider and register it globally.

        Args:
            exporter_type: "console", "otlp" or "none".
            otlp_endpoint: OTLP gRPC endpoint, required for "otlp".
            sample_rate: Fraction of traces kept, 0.0 to 1.0.

        Returns:
            The provider, or None when disabled or setup failed.
        """
        if not self.enabled:
            logger.info("Telemetry disabled")
            return None
        try:
            provider = TracerProvider(
                resource=Resource(
                    attributes={
                        SERVICE_NAME: self.service_name,
                        SERVICE_VERSION: self.service_version,
                        "deployment.environment": self.environment,
                    }
                ),
                sampler=TraceIdRatioBased(sample_rate),
            )
            exporter = _build_exporter(exporter_type, otlp_endpoint)
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(provider)
        except Exception as e:
            logger.exception("Failed to initialize telemetry: %s", e)
            self.tracer_provider = None
            return None

        self.tracer_provider = provider
        logger.info(
            "Tracing %s %s (%s, exporter=%s, sample_rate=%s)",
            self.service_name,
            self.service_version,
            self.environment,
            exporter_type,
            sample_rate,
        )
        return provider

    def instrument(
        self,
        app: FastAPI,
        engine: AsyncEngine | None = None,
        redis: bool = False,
    ) -> list[str]:
        """Instrument the app and its dependencies; return what got instrumented.

        A failing instrumentor is logged and skipped, the others still run.
        """
        if not self.active:
            return []
        provider = self.tracer_provider
        steps: list[tuple[str, Callable[[], None]]] = [
            (
                "fastapi",
                lambda: FastAPIInstrumentor.instrument_app(
                    app, tracer_provider=provider, excluded_urls=EXCLUDED_URLS
                ),
            ),
            ("httpx", lambda: HTTPXClientInstrumentor().instrument(tracer_provider=provider)),
            (
                "logging",
                lambda: LoggingInstrumentor().instrument(
                    tracer_provider=provider, set_logging_format=True
                ),
            ),
        ]
        if engine is not None:
            steps.append(
                (
                    "sqlalchemy",
                    lambda: SQLAlchemyInstrumentor().instrument(
                        engine=engine.sync_engine, tracer_provider=provider
                    ),
                )
            )
        if redis:
            steps.append(
                ("redis", lambda: RedisInstrumentor().instrument(tracer_provider=provider))
            )

        done: list[str] = []
        for name, step in steps:
            try:
                step()
            except Exception as e:
                logger.exception("Failed to instrument %s: %s", name, e)
                continue
            done.append(name)
        logger.info("Instrumented: %s", ", ".join(done) or "nothing")
        return done

    def shutdown(self) -> None:
        """Flush pending spans and shut the provider down."""
        if self.tracer_provider is None:
            return
        try:
            self.tracer_provider.shutdown()
        except Exception as e:
            logger.exception("Error during telemetry shutdown: %s", e)


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> TelemetryConfig | None:
    """Return the telemetry set at startup, if any."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
