"""WorkflowEngine: dispatch, single-rule execution, bookkeeping, and error capture."""

import asyncio
from unittest.mock import AsyncMock

from automation.application.dtos.workflow import (
    WorkflowRuleCreate,
    WorkflowRuleUpdate,
    parse_actions,
    parse_conditions,
)
from automation.application.services import ActionExecutor, WorkflowEngine
from automation.domain.enums import EntityKind, TriggerType
from automation.infrastructure.memory import InMemoryBackend
from automation.shared.enums import WorkflowExecutionStatus

ORG_ID = "org-test"


def _rule(
    conditions: list[dict] | None = None,
    actions: list[dict] | None = None,
    trigger_type: TriggerType = TriggerType.RECORD_UPDATED,
    object_type: str = "Opportunity",
    is_active: bool = True,
    name: str = "Rule",
) -> WorkflowRuleCreate:
    return WorkflowRuleCreate(
        name=name,
        trigger_type=trigger_type,
        object_type=object_type,
        conditions=parse_conditions(conditions or []),
        actions=parse_actions(actions or []),
        is_active=is_active,
    )


WON_FOLLOW_UP = _rule(
    conditions=[{"field": "stage", "operator": "equals", "value": "WON"}],
    actions=[{"type": "create_task", "parameters": {"title": "Follow up on {{name}}"}}],
)


async def test_won_deal_creates_follow_up_task(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    """One task titled from the record, one SUCCESS execution, counter bumped once."""
    rule = await memory_backend.rules.create_rule(ORG_ID, WON_FOLLOW_UP)

    result = await workflow_engine.trigger_workflows(
        "Opportunity",
        TriggerType.RECORD_UPDATED,
        {"id": "opp1", "name": "Acme Deal", "stage": "WON"},
        ORG_ID,
    )

    assert result.ok
    assert result.rules_matched == 1
    assert len(result.executions) == 1
    execution = result.executions[0]
    assert execution.status is WorkflowExecutionStatus.SUCCESS
    assert execution.workflow_rule_id == rule.id
    assert execution.entity_type == "Opportunity"
    assert execution.entity_id == "opp1"

    tasks = await memory_backend.records.get_repository(EntityKind.TASK).list_by_organization(ORG_ID)
    assert [t["title"] for t in tasks] == ["Follow up on Acme Deal"]

    stored = await memory_backend.rules.get_by_id(rule.id, ORG_ID)
    assert stored.times_triggered == 1
    assert stored.last_triggered is not None


async def test_conditions_not_met_writes_nothing(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    rule = await memory_backend.rules.create_rule(ORG_ID, WON_FOLLOW_UP)

    result = await workflow_engine.trigger_workflows(
        "Opportunity", "RECORD_UPDATED", {"id": "opp1", "stage": "OPEN"}, ORG_ID
    )

    assert result.rules_matched == 1
    assert result.executions == []
    assert await memory_backend.executions.list_by_rule(rule.id, ORG_ID) == []
    assert (await memory_backend.rules.get_by_id(rule.id, ORG_ID)).times_triggered == 0


async def test_only_matching_trigger_and_object_type_run(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    await memory_backend.rules.create_rule(
        ORG_ID, _rule(trigger_type=TriggerType.RECORD_CREATED, object_type="Opportunity")
    )
    await memory_backend.rules.create_rule(
        ORG_ID, _rule(trigger_type=TriggerType.RECORD_UPDATED, object_type="Account")
    )
    await memory_backend.rules.create_rule(
        "org-other", _rule(trigger_type=TriggerType.RECORD_UPDATED, object_type="Opportunity")
    )

    result = await workflow_engine.trigger_workflows(
        "Opportunity", TriggerType.RECORD_UPDATED, {"id": "opp1"}, ORG_ID
    )

    assert result.rules_matched == 0
    assert result.executions == []


async def test_inactive_rule_never_executes(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    rule = await memory_backend.rules.create_rule(
        ORG_ID, _rule(actions=[{"type": "send_email"}], is_active=False)
    )
    record = {"id": "opp1"}

    dispatched = await workflow_engine.trigger_workflows(
        "Opportunity", TriggerType.RECORD_UPDATED, record, ORG_ID
    )
    direct = await workflow_engine.execute_workflow(rule.id, record, ORG_ID)

    assert dispatched.rules_matched == 0
    assert direct is None
    assert await memory_backend.executions.list_by_rule(rule.id, ORG_ID) == []


async def test_field_changed_skips_rules_not_watching_changed_fields(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    rule = await memory_backend.rules.create_rule(
        ORG_ID,
        _rule(
            trigger_type=TriggerType.FIELD_CHANGED,
            conditions=[{"field": "stage", "operator": "is_not_empty"}],
            actions=[{"type": "send_email"}],
        ),
    )

    skipped = await workflow_engine.trigger_workflows(
        "Opportunity",
        TriggerType.FIELD_CHANGED,
        {"id": "opp1", "stage": "WON", "amount": 5},
        ORG_ID,
        changed_fields=["amount"],
    )
    ran = await workflow_engine.trigger_workflows(
        "Opportunity",
        TriggerType.FIELD_CHANGED,
        {"id": "opp1", "stage": "WON", "amount": 5},
        ORG_ID,
        changed_fields=["amount", "stage"],
    )

    assert skipped.skipped_rule_ids == [rule.id]
    assert skipped.executions == []
    assert ran.skipped_rule_ids == []
    assert len(ran.executions) == 1
    assert (await memory_backend.rules.get_by_id(rule.id, ORG_ID)).times_triggered == 1


async def test_field_changed_without_changed_fields_applies_no_filter(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    await memory_backend.rules.create_rule(
        ORG_ID,
        _rule(trigger_type=TriggerType.FIELD_CHANGED, actions=[{"type": "send_email"}]),
    )
    result = await workflow_engine.trigger_workflows(
        "Opportunity", TriggerType.FIELD_CHANGED, {"id": "opp1"}, ORG_ID
    )
    assert len(result.executions) == 1


async def test_failed_action_does_not_stop_later_actions(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    """Results keep action order; one failure marks the execution FAILED."""
    rule = await memory_backend.rules.create_rule(
        ORG_ID,
        _rule(
            object_type="Spaceship",
            actions=[
                {"type": "create_task", "parameters": {"title": "Check {{name}}"}},
                {"type": "update_field", "parameters": {"field": "stage", "value": "X"}},
                {"type": "send_email", "parameters": {"to": "ops@example.com"}},
            ],
        ),
    )

    result = await workflow_engine.trigger_workflows(
        "Spaceship", TriggerType.RECORD_UPDATED, {"id": "s1", "name": "Falcon"}, ORG_ID
    )

    execution = result.executions[0]
    assert execution.status is WorkflowExecutionStatus.FAILED
    assert [r["action"] for r in execution.result] == [
        "create_task",
        "update_field",
        "send_email",
    ]
    assert [r["success"] for r in execution.result] == [True, False, True]
    assert execution.result[1]["error"] == "Model not found"
    tasks = await memory_backend.records.get_repository(EntityKind.TASK).list_by_organization(ORG_ID)
    assert tasks[0]["title"] == "Check Falcon"
    # A FAILED execution still counts as a firing.
    assert (await memory_backend.rules.get_by_id(rule.id, ORG_ID)).times_triggered == 1


async def test_rule_without_actions_records_success(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    rule = await memory_backend.rules.create_rule(ORG_ID, _rule())
    execution = await workflow_engine.execute_workflow(rule.id, {"id": "opp1"}, ORG_ID)
    assert execution is not None
    assert execution.status is WorkflowExecutionStatus.SUCCESS
    assert execution.result == []


async def test_update_field_mutates_triggering_record(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    opportunities = memory_backend.records.get_repository(EntityKind.OPPORTUNITY)
    opp = await opportunities.create(ORG_ID, {"name": "Acme", "stage": "WON"})
    await memory_backend.rules.create_rule(
        ORG_ID,
        _rule(
            conditions=[{"field": "stage", "operator": "equals", "value": "WON"}],
            actions=[{"type": "update_field", "parameters": {"field": "probability", "value": 100}}],
        ),
    )

    result = await workflow_engine.trigger_workflows(
        "Opportunity", TriggerType.RECORD_UPDATED, opp, ORG_ID
    )

    assert result.executions[0].status is WorkflowExecutionStatus.SUCCESS
    assert (await opportunities.get_by_id(opp["id"], ORG_ID))["probability"] == 100


async def test_execute_workflow_tags_record_with_rule_object_type(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    accounts = memory_backend.records.get_repository(EntityKind.ACCOUNT)
    account = await accounts.create(ORG_ID, {"name": "Acme", "ownerId": "u1"})
    rule = await memory_backend.rules.create_rule(
        ORG_ID,
        _rule(
            object_type="Account",
            actions=[{"type": "assign_owner", "parameters": {"user_id": "u2"}}],
        ),
    )

    execution = await workflow_engine.execute_workflow(rule.id, account, ORG_ID)

    assert execution.status is WorkflowExecutionStatus.SUCCESS
    assert (await accounts.get_by_id(account["id"], ORG_ID))["ownerId"] == "u2"


async def test_execute_workflow_unknown_rule_returns_none(
    workflow_engine: WorkflowEngine,
) -> None:
    assert await workflow_engine.execute_workflow("missing", {"id": "x"}, ORG_ID) is None


async def test_execute_workflow_is_organization_scoped(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    rule = await memory_backend.rules.create_rule(ORG_ID, _rule())
    assert await workflow_engine.execute_workflow(rule.id, {"id": "x"}, "org-other") is None


async def test_rules_run_in_order_and_each_gets_an_execution(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    first = await memory_backend.rules.create_rule(ORG_ID, _rule(name="first"))
    second = await memory_backend.rules.create_rule(ORG_ID, _rule(name="second"))

    result = await workflow_engine.trigger_workflows(
        "Opportunity", TriggerType.RECORD_UPDATED, {"id": "opp1"}, ORG_ID
    )

    assert [e.workflow_rule_id for e in result.executions] == [first.id, second.id]


async def test_dispatch_error_is_returned_not_raised(memory_backend: InMemoryBackend) -> None:
    """A store failure while loading rules is logged and reported on the result."""
    rule_repo = AsyncMock()
    rule_repo.get_matching_rules = AsyncMock(side_effect=RuntimeError("db down"))
    engine = WorkflowEngine(
        rule_repo, memory_backend.executions, ActionExecutor(memory_backend.records)
    )

    result = await engine.trigger_workflows(
        "Opportunity", TriggerType.RECORD_UPDATED, {"id": "opp1"}, ORG_ID
    )

    assert result.ok is False
    assert result.error == "db down"
    assert result.executions == []


async def test_invalid_trigger_type_is_returned_not_raised(
    workflow_engine: WorkflowEngine,
) -> None:
    result = await workflow_engine.trigger_workflows(
        "Opportunity", "RECORD_DELETED", {"id": "opp1"}, ORG_ID
    )
    assert result.ok is False
    assert result.trigger_type == "RECORD_DELETED"


async def test_execution_write_failure_stops_dispatch_without_raising(
    memory_backend: InMemoryBackend,
) -> None:
    await memory_backend.rules.create_rule(ORG_ID, _rule())
    execution_repo = AsyncMock()
    execution_repo.create_execution = AsyncMock(side_effect=RuntimeError("disk full"))
    engine = WorkflowEngine(
        memory_backend.rules, execution_repo, ActionExecutor(memory_backend.records)
    )

    result = await engine.trigger_workflows(
        "Opportunity", TriggerType.RECORD_UPDATED, {"id": "opp1"}, ORG_ID
    )

    assert result.error == "disk full"


async def test_trigger_does_not_mutate_caller_record(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    await memory_backend.rules.create_rule(ORG_ID, _rule())
    record = {"id": "opp1"}
    await workflow_engine.trigger_workflows(
        "Opportunity", TriggerType.RECORD_UPDATED, record, ORG_ID
    )
    assert record == {"id": "opp1"}


async def test_schedule_trigger_runs_in_background(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    rule = await memory_backend.rules.create_rule(ORG_ID, WON_FOLLOW_UP)

    task = workflow_engine.schedule_trigger(
        "Opportunity",
        TriggerType.RECORD_UPDATED,
        {"id": "opp1", "name": "Acme", "stage": "WON"},
        ORG_ID,
    )
    assert isinstance(task, asyncio.Task)
    result = await task

    assert len(result.executions) == 1
    assert (await memory_backend.rules.get_by_id(rule.id, ORG_ID)).times_triggered == 1


async def test_concurrent_firings_count_every_trigger(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    rule = await memory_backend.rules.create_rule(ORG_ID, _rule())

    await asyncio.gather(
        *(
            workflow_engine.trigger_workflows(
                "Opportunity", TriggerType.RECORD_UPDATED, {"id": f"opp{i}"}, ORG_ID
            )
            for i in range(10)
        )
    )

    stored = await memory_backend.rules.get_by_id(rule.id, ORG_ID)
    assert stored.times_triggered == 10
    assert len(await memory_backend.executions.list_by_rule(rule.id, ORG_ID)) == 10


async def test_deactivated_rule_stops_matching(
    workflow_engine: WorkflowEngine, memory_backend: InMemoryBackend
) -> None:
    rule = await memory_backend.rules.create_rule(ORG_ID, _rule())
    await memory_backend.rules.update_rule(rule.id, ORG_ID, WorkflowRuleUpdate(is_active=False))

    result = await workflow_engine.trigger_workflows(
        "Opportunity", TriggerType.RECORD_UPDATED, {"id": "opp1"}, ORG_ID
    )

    assert result.rules_matched == 0
