"""Application lifespan: startup and shutdown.

Wiring of infrastructure only (logging, tracing, DB engine dispose); no
business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from automation.core.config import get_settings
from automation.infrastructure.persistence import database
from automation.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: logging, then tracing when TELEMETRY_ENABLED. Shutdown: flush
    spans, dispose the SQL engine."""
    settings = get_settings()
    setup_logging()

    if settings.telemetry_enabled:
        from automation.shared.telemetry.telemetry import (
            configure_tracing,
            instrument_app,
            instrument_engine,
        )

        provider = configure_tracing(settings)
        if provider is not None:
            instrument_app(app, provider)
            engine = database.get_engine()
            if engine is not None:
                instrument_engine(engine, provider)

    logger.info(
        "%s %s started (database_backend=%s)",
        settings.app_name,
        settings.app_version,
        settings.database_backend,
    )

    yield

    if settings.telemetry_enabled:
        from automation.shared.telemetry.telemetry import shutdown_tracing

        shutdown_tracing()

    # Only dispose an engine that was actually created.
    if database.engine is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
