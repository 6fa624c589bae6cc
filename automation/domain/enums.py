"""Domain enumerations for workflow rules.

Closed sets of values a rule definition is built from: what triggers it,
which record kinds exist, and how conditions compare and combine.
"""

from enum import Enum

from automation.shared.enums import ValuesMixin


class TriggerType(ValuesMixin, str, Enum):
    """Record lifecycle event that makes a rule eligible to fire."""

    RECORD_CREATED = "RECORD_CREATED"
    RECORD_UPDATED = "RECORD_UPDATED"
    FIELD_CHANGED = "FIELD_CHANGED"
    TIME_BASED = "TIME_BASED"


class EntityKind(ValuesMixin, str, Enum):
    """Record kinds the record store exposes to the engine.

    The value is the tag callers pass as object_type (and the engine stores
    on the record as ``__type``).
    """

    ACCOUNT = "Account"
    CONTACT = "Contact"
    OPPORTUNITY = "Opportunity"
    TASK = "Task"
    NOTIFICATION = "Notification"
    ACTIVITY = "Activity"
    AIRCRAFT = "Aircraft"
    WORK_ORDER = "WorkOrder"

    @classmethod
    def parse(cls, value: object) -> "EntityKind | None":
        """Return the kind for a tag, or None when the tag is not a known kind."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class ConditionOperator(ValuesMixin, str, Enum):
    """Comparison applied between a record field and a condition value."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS_OR_EQUAL = "less_or_equal"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"
    IN = "in"
    NOT_IN = "not_in"


class LogicOperator(ValuesMixin, str, Enum):
    """How the next condition is folded into the chain result."""

    AND = "AND"
    OR = "OR"
