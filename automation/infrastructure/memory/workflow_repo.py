"""In-process workflow rule and execution repositories."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime
from typing import Any

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
from automation.shared.enums import WorkflowExecutionStatus
from automation.shared.utils.datetime import utc_now
from automation.shared.utils.generators import generate_cuid


class InMemoryWorkflowRuleRepository:
    """Rules kept in insertion order in a dict; statistics updated under a lock."""

    def __init__(self) -> None:
        self._rules: dict[str, WorkflowRuleResult] = {}
        self._stats_lock = asyncio.Lock()

    async def get_by_id(
        self, rule_id: str, organization_id: str
    ) -> WorkflowRuleResult | None:
        rule = self._rules.get(rule_id)
        if rule is None or rule.organization_id != organization_id:
            return None
        return rule

    async def get_matching_rules(
        self, organization_id: str, object_type: str, trigger_type: TriggerType
    ) -> list[WorkflowRuleResult]:
        return [
            r
            for r in self._rules.values()
            if r.organization_id == organization_id
            and r.object_type == object_type
            and r.trigger_type == trigger_type
            and r.is_active
        ]

    async def list_by_organization(
        self, organization_id: str, object_type: str | None = None
    ) -> list[WorkflowRuleResult]:
        rules = [
            r
            for r in reversed(self._rules.values())
            if r.organization_id == organization_id
            and (object_type is None or r.object_type == object_type)
        ]
        return sorted(rules, key=lambda r: r.created_at, reverse=True)

    async def create_rule(
        self, organization_id: str, data: WorkflowRuleCreate
    ) -> WorkflowRuleResult:
        now = utc_now()
        rule = WorkflowRuleResult(
            id=generate_cuid(),
            organization_id=organization_id,
            name=data.name,
            description=data.description,
            is_active=data.is_active,
            trigger_type=data.trigger_type,
            object_type=data.object_type,
            # Stored in serialized form, as the SQL backend does.
            conditions=parse_conditions(dump_conditions(data.conditions)),
            actions=parse_actions(dump_actions(data.actions)),
            last_triggered=None,
            times_triggered=0,
            created_at=now,
            updated_at=now,
        )
        self._rules[rule.id] = rule
        return rule

    async def update_rule(
        self, rule_id: str, organization_id: str, data: WorkflowRuleUpdate
    ) -> WorkflowRuleResult | None:
        rule = await self.get_by_id(rule_id, organization_id)
        if rule is None:
            return None
        changes: dict[str, Any] = {
            name: getattr(data, name)
            for name in ("name", "description", "is_active", "trigger_type", "object_type")
            if getattr(data, name) is not None
        }
        if data.conditions is not None:
            changes["conditions"] = parse_conditions(dump_conditions(data.conditions))
        if data.actions is not None:
            changes["actions"] = parse_actions(dump_actions(data.actions))
        updated = replace(rule, **changes, updated_at=utc_now())
        self._rules[rule_id] = updated
        return updated

    async def delete_rule(self, rule_id: str, organization_id: str) -> bool:
        if await self.get_by_id(rule_id, organization_id) is None:
            return False
        del self._rules[rule_id]
        return True

    async def record_trigger(self, rule_id: str, triggered_at: datetime) -> None:
        async with self._stats_lock:
            rule = self._rules.get(rule_id)
            if rule is None:
                return
            self._rules[rule_id] = replace(
                rule,
                last_triggered=triggered_at,
                times_triggered=rule.times_triggered + 1,
            )


class InMemoryWorkflowExecutionRepository:
    """Append-only execution log."""

    def __init__(self) -> None:
        self._executions: list[WorkflowExecutionResult] = []

    async def create_execution(
        self,
        organization_id: str,
        workflow_rule_id: str,
        entity_type: str,
        entity_id: str | None,
        status: WorkflowExecutionStatus,
        result: list[dict[str, Any]],
    ) -> WorkflowExecutionResult:
        execution = WorkflowExecutionResult(
            id=generate_cuid(),
            organization_id=organization_id,
            workflow_rule_id=workflow_rule_id,
            entity_type=entity_type,
            entity_id=entity_id,
            status=status,
            result=list(result),
            executed_at=utc_now(),
        )
        self._executions.append(execution)
        return execution

    async def list_by_rule(
        self, workflow_rule_id: str, organization_id: str, limit: int = 50
    ) -> list[WorkflowExecutionResult]:
        matching = [
            e
            for e in reversed(self._executions)
            if e.workflow_rule_id == workflow_rule_id
            and e.organization_id == organization_id
        ]
        return matching[:limit]

    async def delete_by_rule(self, workflow_rule_id: str, organization_id: str) -> int:
        kept = [
            e
            for e in self._executions
            if not (
                e.workflow_rule_id == workflow_rule_id
                and e.organization_id == organization_id
            )
        ]
        removed = len(self._executions) - len(kept)
        self._executions = kept
        return removed
