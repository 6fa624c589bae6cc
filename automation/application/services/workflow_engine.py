"""Workflow engine: run automation rules triggered by record changes.

Entry points:

- trigger_workflows: called by the record store's write path after a create
  or update. Finds active rules for the record kind and trigger, then runs
  each one. Failures are logged and reported on the returned DispatchResult;
  they are never raised to the caller.
- execute_workflow: run one rule directly (manual re-run, tests).
- schedule_trigger: start trigger_workflows as a background asyncio task.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from automation.application.dtos.workflow import (
    ActionResult,
    DispatchResult,
    WorkflowExecutionResult,
    WorkflowRuleResult,
)
from automation.application.interfaces.repositories import (
    IWorkflowExecutionRepository,
    IWorkflowRuleRepository,
)
from automation.application.services.action_executor import TYPE_TAG, ActionExecutor
from automation.application.services.condition_evaluator import evaluate_all
from automation.domain.enums import TriggerType
from automation.shared.enums import WorkflowExecutionStatus
from automation.shared.telemetry.logging import get_logger
from automation.shared.telemetry.tracing import (
    add_span_attributes,
    set_span_error,
    traced,
)
from automation.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class WorkflowEngine:
    """Finds and runs workflow rules for a record event."""

    def __init__(
        self,
        rule_repo: IWorkflowRuleRepository,
        execution_repo: IWorkflowExecutionRepository,
        action_executor: ActionExecutor,
    ) -> None:
        self.rule_repo = rule_repo
        self.execution_repo = execution_repo
        self.action_executor = action_executor
        self._background: set[asyncio.Task[DispatchResult]] = set()

    @traced("workflow.trigger")
    async def trigger_workflows(
        self,
        object_type: str,
        trigger_type: TriggerType | str,
        record: Mapping[str, Any],
        organization_id: str,
        changed_fields: list[str] | None = None,
    ) -> DispatchResult:
        """Run every active rule matching the record kind and trigger.

        For FIELD_CHANGED with changed_fields given, a rule runs only if at
        least one of its conditions reads a changed field; other rules are
        skipped without evaluating conditions.
        """
        outcome = DispatchResult(
            object_type=object_type,
            trigger_type=str(getattr(trigger_type, "value", trigger_type)),
            organization_id=organization_id,
        )
        try:
            trigger = TriggerType(trigger_type)
            enriched = {**record, TYPE_TAG: object_type}
            rules = await self.rule_repo.get_matching_rules(
                organization_id, object_type, trigger
            )
            outcome.rules_matched = len(rules)
            add_span_attributes(rules_matched=len(rules))

            for rule in rules:
                if (
                    trigger is TriggerType.FIELD_CHANGED
                    and changed_fields is not None
                    and not rule.watches_any(changed_fields)
                ):
                    logger.debug(
                        "Skipping rule %s: no condition on changed fields %s",
                        rule.id,
                        changed_fields,
                    )
                    outcome.skipped_rule_ids.append(rule.id)
                    continue
                execution = await self._run_rule(rule, enriched, organization_id)
                if execution is not None:
                    outcome.executions.append(execution)
        except Exception as e:
            logger.exception(
                "Error triggering workflows (organization_id=%s, object_type=%s, trigger_type=%s)",
                organization_id,
                object_type,
                outcome.trigger_type,
            )
            set_span_error(e)
            outcome.error = str(e)
        return outcome

    @traced("workflow.execute")
    async def execute_workflow(
        self,
        rule_id: str,
        record: Mapping[str, Any],
        organization_id: str,
    ) -> WorkflowExecutionResult | None:
        """Run one rule against a record.

        Returns None (with no side effects) when the rule is missing, inactive,
        or its conditions do not hold. Store errors propagate to the caller.
        """
        rule = await self.rule_repo.get_by_id(rule_id, organization_id)
        if rule is None or not rule.is_active:
            logger.debug("Rule %s missing or inactive; nothing to execute", rule_id)
            return None
        enriched = dict(record)
        enriched.setdefault(TYPE_TAG, rule.object_type)
        return await self._run_rule(rule, enriched, organization_id)

    def schedule_trigger(
        self,
        object_type: str,
        trigger_type: TriggerType | str,
        record: Mapping[str, Any],
        organization_id: str,
        changed_fields: list[str] | None = None,
    ) -> asyncio.Task[DispatchResult]:
        """Start trigger_workflows without waiting for it.

        Must be called from a running event loop. The returned task resolves
        to the DispatchResult; it does not raise.
        """
        task = asyncio.create_task(
            self.trigger_workflows(
                object_type,
                trigger_type,
                record,
                organization_id,
                changed_fields,
            )
        )
        # The event loop holds tasks weakly; hold one until it finishes.
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _run_rule(
        self,
        rule: WorkflowRuleResult,
        record: Mapping[str, Any],
        organization_id: str,
    ) -> WorkflowExecutionResult | None:
        if not evaluate_all(record, rule.conditions):
            logger.debug("Rule %s conditions not met for entity %s", rule.id, record.get("id"))
            return None

        results: list[ActionResult] = []
        for action in rule.actions:
            results.append(
                await self.action_executor.execute(action, record, organization_id)
            )

        status = (
            WorkflowExecutionStatus.SUCCESS
            if all(r.success for r in results)
            else WorkflowExecutionStatus.FAILED
        )
        execution = await self.execution_repo.create_execution(
            organization_id=organization_id,
            workflow_rule_id=rule.id,
            entity_type=rule.object_type,
            entity_id=record.get("id"),
            status=status,
            result=[r.to_dict() for r in results],
        )
        await self.rule_repo.record_trigger(rule.id, utc_now())

        log = logger.info if status is WorkflowExecutionStatus.SUCCESS else logger.warning
        log(
            "Workflow rule %s executed: status=%s actions=%d failed=%d (organization_id=%s, entity_id=%s)",
            rule.id,
            status.value,
            len(results),
            sum(1 for r in results if not r.success),
            organization_id,
            record.get("id"),
        )
        return execution
