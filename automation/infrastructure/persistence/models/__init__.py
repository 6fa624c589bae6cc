"""Persistence models: ORM entities and mixins."""

from automation.infrastructure.persistence.models.mixins import (
    CuidMixin,
    OrganizationMixin,
    OrganizationScopedModel,
    TimestampMixin,
)
from automation.infrastructure.persistence.models.records import (
    Account,
    Activity,
    Aircraft,
    Contact,
    Notification,
    Opportunity,
    Task,
    WorkOrder,
)
from automation.infrastructure.persistence.models.workflow import (
    WorkflowExecution,
    WorkflowRule,
)

__all__ = [
    "Account",
    "Activity",
    "Aircraft",
    "Contact",
    "CuidMixin",
    "Notification",
    "Opportunity",
    "OrganizationMixin",
    "OrganizationScopedModel",
    "Task",
    "TimestampMixin",
    "WorkOrder",
    "WorkflowExecution",
    "WorkflowRule",
]
