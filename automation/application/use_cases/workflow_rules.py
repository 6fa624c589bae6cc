"""Workflow rule management: create, update, delete, list rules and their executions."""

from __future__ import annotations

from automation.application.dtos.workflow import (
    WorkflowCondition,
    WorkflowExecutionResult,
    WorkflowRuleCreate,
    WorkflowRuleResult,
    WorkflowRuleUpdate,
)
from automation.application.interfaces.repositories import (
    IWorkflowExecutionRepository,
    IWorkflowRuleRepository,
)
from automation.domain.enums import ConditionOperator, LogicOperator
from automation.domain.exceptions import ResourceNotFoundException, ValidationException
from automation.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

DEFAULT_EXECUTION_LIMIT = 50


def _validate_conditions(conditions: list[WorkflowCondition]) -> None:
    """Reject operators the evaluator does not know (they would always be False)."""
    for index, condition in enumerate(conditions):
        if condition.operator not in ConditionOperator.values():
            raise ValidationException(
                f"Unknown condition operator: {condition.operator!r}",
                field=f"conditions[{index}].operator",
            )
        if (
            condition.logic_operator is not None
            and condition.logic_operator not in LogicOperator.values()
        ):
            raise ValidationException(
                f"Unknown logic operator: {condition.logic_operator!r}",
                field=f"conditions[{index}].logic_operator",
            )


class WorkflowRuleService:
    """Rule management, scoped to an organization."""

    def __init__(
        self,
        rule_repo: IWorkflowRuleRepository,
        execution_repo: IWorkflowExecutionRepository,
    ) -> None:
        self.rule_repo = rule_repo
        self.execution_repo = execution_repo

    async def create_rule(
        self, organization_id: str, data: WorkflowRuleCreate
    ) -> WorkflowRuleResult:
        """Validate and persist a new rule."""
        if not data.name.strip():
            raise ValidationException("Rule name must not be blank", field="name")
        if not data.object_type.strip():
            raise ValidationException("object_type must not be blank", field="object_type")
        _validate_conditions(data.conditions)
        rule = await self.rule_repo.create_rule(organization_id, data)
        logger.info(
            "Created workflow rule %s (%s on %s, organization_id=%s)",
            rule.id,
            rule.trigger_type.value,
            rule.object_type,
            organization_id,
        )
        return rule

    async def update_rule(
        self, rule_id: str, organization_id: str, data: WorkflowRuleUpdate
    ) -> WorkflowRuleResult:
        """Apply a partial update. Raises ResourceNotFoundException if absent."""
        if data.name is not None and not data.name.strip():
            raise ValidationException("Rule name must not be blank", field="name")
        if data.conditions is not None:
            _validate_conditions(data.conditions)
        rule = await self.rule_repo.update_rule(rule_id, organization_id, data)
        if rule is None:
            raise ResourceNotFoundException("workflow_rule", rule_id)
        return rule

    async def delete_rule(self, rule_id: str, organization_id: str) -> None:
        """Delete a rule and its execution history."""
        rule = await self.rule_repo.get_by_id(rule_id, organization_id)
        if rule is None:
            raise ResourceNotFoundException("workflow_rule", rule_id)
        removed = await self.execution_repo.delete_by_rule(rule_id, organization_id)
        await self.rule_repo.delete_rule(rule_id, organization_id)
        logger.info(
            "Deleted workflow rule %s and %d execution(s) (organization_id=%s)",
            rule_id,
            removed,
            organization_id,
        )

    async def get_rule(self, rule_id: str, organization_id: str) -> WorkflowRuleResult:
        rule = await self.rule_repo.get_by_id(rule_id, organization_id)
        if rule is None:
            raise ResourceNotFoundException("workflow_rule", rule_id)
        return rule

    async def list_rules(
        self, organization_id: str, object_type: str | None = None
    ) -> list[WorkflowRuleResult]:
        """Return rules newest first, optionally only those for one object type."""
        return await self.rule_repo.list_by_organization(organization_id, object_type)

    async def list_executions(
        self,
        rule_id: str,
        organization_id: str,
        limit: int = DEFAULT_EXECUTION_LIMIT,
    ) -> list[WorkflowExecutionResult]:
        """Return a rule's executions, most recent first, at most ``limit``."""
        if limit < 1:
            raise ValidationException("limit must be >= 1", field="limit")
        await self.get_rule(rule_id, organization_id)
        return await self.execution_repo.list_by_rule(rule_id, organization_id, limit)
