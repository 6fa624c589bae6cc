"""Logging setup: one stdout handler, level from settings."""

import logging
import sys

from automation.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Library loggers that are chatty at INFO.
_QUIET_LOGGERS = ("uvicorn.access", "opentelemetry")


def setup_logging() -> None:
    """Configure root logging once per process.

    DEBUG when settings.debug is set, otherwise INFO. Safe to call again;
    basicConfig leaves existing handlers alone.
    """
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; pass __name__."""
    return logging.getLogger(name)
