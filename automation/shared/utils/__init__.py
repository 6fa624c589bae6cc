"""Shared utilities: datetime, generators."""

from automation.shared.utils.datetime import ensure_utc, parse_iso_datetime, utc_now
from automation.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
]
