"""Shared telemetry: logging setup and tracing helpers.

configure_tracing and the instrumentors are imported from
automation.shared.telemetry.telemetry at startup only.
"""

from automation.shared.telemetry.logging import get_logger, setup_logging
from automation.shared.telemetry.tracing import (
    add_span_attributes,
    set_span_error,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "traced",
    "add_span_attributes",
    "set_span_error",
]
