"""Errors raised by rule management and the record store.

Each carries a machine-readable ``error_code``; the HTTP layer picks the
status from it (see automation.core.exception_handlers). The workflow engine
never lets these escape a dispatch.
"""

from typing import Any


class AutomationException(Exception):
    """Root of the service's errors.

    ``error_code`` falls back to the class name; ``details`` is extra context
    safe to return to API clients (a field path, a resource id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or type(self).__name__
        self.details = dict(details) if details else {}

    def to_dict(self) -> dict[str, Any]:
        """Error response body."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AutomationException):
    """A rule or record payload was rejected (unknown operator, unknown column, ...).

    ``field`` is the offending path, e.g. ``conditions[0].operator``.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            message, "VALIDATION_ERROR", {"field": field} if field else None
        )


class ResourceNotFoundException(AutomationException):
    """No rule or record with that id in the caller's organization."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SqlNotConfiguredException(AutomationException):
    """A SQL session was requested while DATABASE_BACKEND is not 'postgres'."""

    def __init__(self) -> None:
        super().__init__(
            "SQL persistence is not configured (DATABASE_BACKEND=postgres and DATABASE_URL)",
            "SERVICE_UNAVAILABLE",
        )
