"""OpenTelemetry setup for the automation service.

configure_tracing() builds the tracer provider from settings and installs it
globally; instrument_app() and instrument_engine() attach the FastAPI,
logging and SQLAlchemy instrumentors to it. shutdown_tracing() flushes
pending spans. Exporters: "console", "otlp" (gRPC) or "none".
"""

import logging
import threading

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
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

from automation.core.config import Settings

logger = logging.getLogger(__name__)

# Health checks are polled; their spans are noise.
_UNTRACED_URLS = "/api/v1/health"

_provider: TracerProvider | None = None
_provider_lock = threading.RLock()


def _build_exporter(settings: Settings) -> SpanExporter | None:
    kind = settings.telemetry_exporter
    if kind == "none":
        return None
    if kind == "otlp":
        if not settings.telemetry_otlp_endpoint:
            logger.warning("TELEMETRY_EXPORTER=otlp without an endpoint; spans not exported")
            return None
        endpoint = settings.telemetry_otlp_endpoint
        return OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))
    return ConsoleSpanExporter()


def configure_tracing(settings: Settings) -> TracerProvider | None:
    """Create and register the global tracer provider.

    Returns None when telemetry is disabled. A failure here is logged and
    leaves tracing off; it never stops the service from starting.
    """
    global _provider
    if not settings.telemetry_enabled:
        return None
    try:
        provider = TracerProvider(
            resource=Resource(
                attributes={
                    SERVICE_NAME: settings.app_name,
                    SERVICE_VERSION: settings.app_version,
                    "deployment.environment": settings.telemetry_environment,
                }
            ),
            sampler=TraceIdRatioBased(settings.telemetry_sample_rate),
        )
        exporter = _build_exporter(settings)
        if exporter is not None:
            provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
    except Exception:
        logger.exception("Failed to initialize tracing")
        return None

    with _provider_lock:
        _provider = provider
    logger.info(
        "Tracing enabled: exporter=%s sample_rate=%s",
        settings.telemetry_exporter,
        settings.telemetry_sample_rate,
    )
    return provider


def get_tracer_provider() -> TracerProvider | None:
    with _provider_lock:
        return _provider


def instrument_app(app: FastAPI, provider: TracerProvider) -> None:
    """Trace HTTP requests and add trace/span ids to log records."""
    FastAPIInstrumentor.instrument_app(
        app, tracer_provider=provider, excluded_urls=_UNTRACED_URLS
    )
    LoggingInstrumentor().instrument(tracer_provider=provider, set_logging_format=True)


def instrument_engine(engine: AsyncEngine, provider: TracerProvider) -> None:
    """Trace SQL statements issued through the async engine."""
    SQLAlchemyInstrumentor().instrument(
        engine=engine.sync_engine,
        tracer_provider=provider,
        enable_commenter=True,
    )


def shutdown_tracing() -> None:
    """Flush pending spans and forget the provider. Safe to call when tracing is off."""
    global _provider
    with _provider_lock:
        provider, _provider = _provider, None
    if provider is None:
        return
    try:
        provider.shutdown()
    except Exception:
        logger.exception("Error flushing spans on shutdown")
