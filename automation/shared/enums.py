"""Shared enumerations for the automation service.

Cross-cutting enums used by application and infrastructure (e.g. execution
status). Rule-definition enums (trigger, operator, action kind) live in
automation.domain.enums.
"""

from enum import Enum


class ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class WorkflowExecutionStatus(ValuesMixin, str, Enum):
    """Outcome of one rule firing."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
