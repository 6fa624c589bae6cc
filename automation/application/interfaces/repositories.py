"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill
(SQLAlchemy in automation.infrastructure.persistence, in-process in
automation.infrastructure.memory). All types reference application DTOs only.

Domain records (accounts, tasks, ...) cross this boundary as plain dicts keyed
by the record store's field names (``id``, ``ownerId``, ``accountId``, ...).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from automation.domain.enums import EntityKind, TriggerType
from automation.shared.enums import WorkflowExecutionStatus

if TYPE_CHECKING:
    from automation.application.dtos.workflow import (
        WorkflowExecutionResult,
        WorkflowRuleCreate,
        WorkflowRuleResult,
        WorkflowRuleUpdate,
    )


class IWorkflowRuleRepository(Protocol):
    """Protocol for workflow rule storage."""

    async def get_by_id(
        self, rule_id: str, organization_id: str
    ) -> WorkflowRuleResult | None:
        """Return rule by id within the organization."""

    async def get_matching_rules(
        self, organization_id: str, object_type: str, trigger_type: TriggerType
    ) -> list[WorkflowRuleResult]:
        """Return active rules for the object type and trigger type."""

    async def list_by_organization(
        self, organization_id: str, object_type: str | None = None
    ) -> list[WorkflowRuleResult]:
        """Return all rules (active or not), newest first, optionally by object type."""

    async def create_rule(
        self, organization_id: str, data: WorkflowRuleCreate
    ) -> WorkflowRuleResult:
        """Persist a new rule."""

    async def update_rule(
        self, rule_id: str, organization_id: str, data: WorkflowRuleUpdate
    ) -> WorkflowRuleResult | None:
        """Apply a partial update; None when the rule does not exist."""

    async def delete_rule(self, rule_id: str, organization_id: str) -> bool:
        """Delete a rule; False when it does not exist."""

    async def record_trigger(self, rule_id: str, triggered_at: datetime) -> None:
        """Set last_triggered and increment times_triggered by one, atomically."""


class IWorkflowExecutionRepository(Protocol):
    """Protocol for the execution audit trail (append-only)."""

    async def create_execution(
        self,
        organization_id: str,
        workflow_rule_id: str,
        entity_type: str,
        entity_id: str | None,
        status: WorkflowExecutionStatus,
        result: list[dict[str, Any]],
    ) -> WorkflowExecutionResult:
        """Persist one execution record."""

    async def list_by_rule(
        self, workflow_rule_id: str, organization_id: str, limit: int = 50
    ) -> list[WorkflowExecutionResult]:
        """Return executions for a rule, most recent first."""

    async def delete_by_rule(self, workflow_rule_id: str, organization_id: str) -> int:
        """Delete the executions of a rule; return how many were removed."""


class IRecordRepository(Protocol):
    """Protocol for one kind of domain record in the record store."""

    async def get_by_id(
        self, record_id: str, organization_id: str
    ) -> dict[str, Any] | None:
        """Return record fields, or None."""

    async def create(
        self, organization_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        """Create a record and return its fields (including generated id)."""

    async def update(
        self, record_id: str, organization_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        """Update fields of an existing record; raise ResourceNotFoundException if absent."""

    async def list_by_organization(
        self, organization_id: str, skip: int = 0, limit: int = 500
    ) -> list[dict[str, Any]]:
        """Return records of this kind for the organization."""


class IRecordStore(Protocol):
    """Closed registry from entity kind to record repository."""

    def get_repository(self, kind: EntityKind | str) -> IRecordRepository | None:
        """Return the repository for a kind; None for kinds not registered."""
