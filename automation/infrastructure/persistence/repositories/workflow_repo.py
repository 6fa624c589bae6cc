"""WorkflowRule and WorkflowExecution repositories."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ValidationError
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from automation.application.dtos.workflow import (
    WorkflowExecutionResult,
    WorkflowRuleCreate,
    WorkflowRuleResult,
    WorkflowRuleUpdate,
    dump_actions,
    dump_conditions,
    parse_actions,
    parse_conditions,
)
from automation.domain.enums import TriggerType
from automation.infrastructure.persistence.models.workflow import (
    WorkflowExecution,
    WorkflowRule,
)
from automation.infrastructure.persistence.repositories.base import BaseRepository
from automation.shared.enums import WorkflowExecutionStatus
from automation.shared.telemetry.logging import get_logger
from automation.shared.utils.datetime import utc_now

logger = get_logger(__name__)


def _rule_to_result(rule: WorkflowRule) -> WorkflowRuleResult:
    return WorkflowRuleResult(
        id=rule.id,
        organization_id=rule.organization_id,
        name=rule.name,
        description=rule.description,
        is_active=rule.is_active,
        trigger_type=TriggerType(rule.trigger_type),
        object_type=rule.object_type,
        conditions=parse_conditions(rule.conditions),
        actions=parse_actions(rule.actions),
        last_triggered=rule.last_triggered,
        times_triggered=rule.times_triggered,
        created_at=rule.created_at,
        updated_at=rule.updated_at,
    )


def _execution_to_result(execution: WorkflowExecution) -> WorkflowExecutionResult:
    return WorkflowExecutionResult(
        id=execution.id,
        organization_id=execution.organization_id,
        workflow_rule_id=execution.workflow_rule_id,
        entity_type=execution.entity_type,
        entity_id=execution.entity_id,
        status=WorkflowExecutionStatus(execution.status),
        result=list(execution.result or []),
        executed_at=execution.executed_at,
    )


class WorkflowRuleRepository(BaseRepository[WorkflowRule]):
    """Workflow rule repository. Returns DTOs; ORM rows stay inside."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowRule)

    async def get_by_id(  # type: ignore[override]
        self, rule_id: str, organization_id: str
    ) -> WorkflowRuleResult | None:
        rule = await super().get_by_id(rule_id, organization_id)
        return _rule_to_result(rule) if rule is not None else None

    async def get_matching_rules(
        self, organization_id: str, object_type: str, trigger_type: TriggerType
    ) -> list[WorkflowRuleResult]:
        """Active rules for the record kind and trigger, oldest first.

        A stored rule whose definition no longer validates is logged and left
        out rather than failing the whole dispatch.
        """
        result = await self.db.execute(
            select(WorkflowRule)
            .where(
                WorkflowRule.organization_id == organization_id,
                WorkflowRule.object_type == object_type,
                WorkflowRule.trigger_type == trigger_type.value,
                WorkflowRule.is_active.is_(True),
            )
            .order_by(WorkflowRule.created_at.asc(), WorkflowRule.id.asc())
        )
        rules: list[WorkflowRuleResult] = []
        for row in result.scalars().all():
            try:
                rules.append(_rule_to_result(row))
            except ValidationError as e:
                logger.error("Stored workflow rule %s is invalid: %s", row.id, e)
        return rules

    async def list_by_organization(
        self, organization_id: str, object_type: str | None = None
    ) -> list[WorkflowRuleResult]:
        q = select(WorkflowRule).where(WorkflowRule.organization_id == organization_id)
        if object_type is not None:
            q = q.where(WorkflowRule.object_type == object_type)
        q = q.order_by(WorkflowRule.created_at.desc(), WorkflowRule.id.desc())
        result = await self.db.execute(q)
        return [_rule_to_result(r) for r in result.scalars().all()]

    async def create_rule(
        self, organization_id: str, data: WorkflowRuleCreate
    ) -> WorkflowRuleResult:
        """Create rule; return created rule."""
        rule = WorkflowRule(
            organization_id=organization_id,
            name=data.name,
            description=data.description,
            is_active=data.is_active,
            trigger_type=data.trigger_type.value,
            object_type=data.object_type,
            conditions=dump_conditions(data.conditions),
            actions=dump_actions(data.actions),
            times_triggered=0,
        )
        created = await self.create(rule)
        return _rule_to_result(created)

    async def update_rule(
        self, rule_id: str, organization_id: str, data: WorkflowRuleUpdate
    ) -> WorkflowRuleResult | None:
        rule = await super().get_by_id(rule_id, organization_id)
        if rule is None:
            return None
        if data.name is not None:
            rule.name = data.name
        if data.description is not None:
            rule.description = data.description
        if data.is_active is not None:
            rule.is_active = data.is_active
        if data.trigger_type is not None:
            rule.trigger_type = data.trigger_type.value
        if data.object_type is not None:
            rule.object_type = data.object_type
        if data.conditions is not None:
            rule.conditions = dump_conditions(data.conditions)
        if data.actions is not None:
            rule.actions = dump_actions(data.actions)
        saved = await self.save(rule)
        return _rule_to_result(saved)

    async def delete_rule(self, rule_id: str, organization_id: str) -> bool:
        rule = await super().get_by_id(rule_id, organization_id)
        if rule is None:
            return False
        await self.delete(rule)
        return True

    async def record_trigger(self, rule_id: str, triggered_at: datetime) -> None:
        """Bump statistics in one UPDATE so concurrent firings are not lost."""
        await self.db.execute(
            update(WorkflowRule)
            .where(WorkflowRule.id == rule_id)
            .values(
                times_triggered=WorkflowRule.times_triggered + 1,
                last_triggered=triggered_at,
            )
        )


class WorkflowExecutionRepository(BaseRepository[WorkflowExecution]):
    """Execution audit trail: append and list, never mutated."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowExecution)

    async def create_execution(
        self,
        organization_id: str,
        workflow_rule_id: str,
        entity_type: str,
        entity_id: str | None,
        status: WorkflowExecutionStatus,
        result: list[dict[str, Any]],
    ) -> WorkflowExecutionResult:
        execution = WorkflowExecution(
            organization_id=organization_id,
            workflow_rule_id=workflow_rule_id,
            entity_type=entity_type,
            entity_id=entity_id,
            status=status.value,
            result=result,
            executed_at=utc_now(),
        )
        self.db.add(execution)
        await self.db.flush()
        return _execution_to_result(execution)

    async def list_by_rule(
        self, workflow_rule_id: str, organization_id: str, limit: int = 50
    ) -> list[WorkflowExecutionResult]:
        result = await self.db.execute(
            select(WorkflowExecution)
            .where(
                WorkflowExecution.workflow_rule_id == workflow_rule_id,
                WorkflowExecution.organization_id == organization_id,
            )
            .order_by(WorkflowExecution.executed_at.desc(), WorkflowExecution.id.desc())
            .limit(limit)
        )
        return [_execution_to_result(e) for e in result.scalars().all()]

    async def delete_by_rule(self, workflow_rule_id: str, organization_id: str) -> int:
        result = await self.db.execute(
            delete(WorkflowExecution).where(
                WorkflowExecution.workflow_rule_id == workflow_rule_id,
                WorkflowExecution.organization_id == organization_id,
            )
        )
        return result.rowcount or 0
