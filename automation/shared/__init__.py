"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from automation.shared.enums import ValuesMixin, WorkflowExecutionStatus
from automation.shared.utils import (
    ensure_utc,
    generate_cuid,
    parse_iso_datetime,
    utc_now,
)

__all__ = [
    "ValuesMixin",
    "WorkflowExecutionStatus",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
]
