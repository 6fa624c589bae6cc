"""UTC helpers. Timestamps stored or compared by the service are timezone-aware UTC."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Naive values are taken to be UTC; aware values are converted to it."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string as sent by record payloads ('Z' suffix allowed).

    Raises:
        ValueError: When the string is not ISO-8601.
    """
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
