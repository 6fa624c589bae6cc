"""Workflow and record repository integration tests. Require Postgres; session is rolled back after each test."""

import pytest

from automation.application.dtos.workflow import (
    WorkflowRuleCreate,
    WorkflowRuleUpdate,
    parse_actions,
    parse_conditions,
)
from automation.application.services import ActionExecutor, WorkflowEngine
from automation.domain.enums import EntityKind, TriggerType
from automation.domain.exceptions import ResourceNotFoundException, ValidationException
from automation.infrastructure.backends import sql_repositories
from automation.infrastructure.persistence.repositories import (
    SqlRecordStore,
    WorkflowExecutionRepository,
    WorkflowRuleRepository,
)
from automation.shared.enums import WorkflowExecutionStatus
from automation.shared.utils.datetime import utc_now

ORG_ID = "org-integration"


def _rule(object_type: str = "Opportunity") -> WorkflowRuleCreate:
    return WorkflowRuleCreate(
        name="Won deals",
        trigger_type=TriggerType.RECORD_UPDATED,
        object_type=object_type,
        conditions=parse_conditions([{"field": "stage", "operator": "equals", "value": "WON"}]),
        actions=parse_actions(
            [{"type": "create_task", "parameters": {"title": "Follow up on {{name}}"}}]
        ),
    )


@pytest.mark.requires_db
async def test_create_rule_and_get_by_id(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    created = await repo.create_rule(ORG_ID, _rule())

    found = await repo.get_by_id(created.id, ORG_ID)

    assert found is not None
    assert found.name == "Won deals"
    assert found.times_triggered == 0
    assert found.conditions[0].field == "stage"
    assert found.actions[0].type == "create_task"
    assert await repo.get_by_id(created.id, "org-other") is None


@pytest.mark.requires_db
async def test_get_matching_rules_filters_active_and_trigger(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    active = await repo.create_rule(ORG_ID, _rule())
    inactive = await repo.create_rule(ORG_ID, _rule())
    await repo.update_rule(inactive.id, ORG_ID, WorkflowRuleUpdate(is_active=False))
    await repo.create_rule(ORG_ID, _rule(object_type="Account"))

    rules = await repo.get_matching_rules(ORG_ID, "Opportunity", TriggerType.RECORD_UPDATED)

    assert [r.id for r in rules] == [active.id]


@pytest.mark.requires_db
async def test_record_trigger_increments_in_database(db_session) -> None:
    repo = WorkflowRuleRepository(db_session)
    rule = await repo.create_rule(ORG_ID, _rule())

    await repo.record_trigger(rule.id, utc_now())
    await repo.record_trigger(rule.id, utc_now())

    found = await repo.get_by_id(rule.id, ORG_ID)
    assert found.times_triggered == 2
    assert found.last_triggered is not None


@pytest.mark.requires_db
async def test_executions_most_recent_first_and_deleted_with_rule(db_session) -> None:
    rules = WorkflowRuleRepository(db_session)
    executions = WorkflowExecutionRepository(db_session)
    rule = await rules.create_rule(ORG_ID, _rule())
    for entity_id in ("a", "b", "c"):
        await executions.create_execution(
            ORG_ID, rule.id, "Opportunity", entity_id, WorkflowExecutionStatus.SUCCESS, []
        )

    latest = await executions.list_by_rule(rule.id, ORG_ID, limit=2)
    assert [e.entity_id for e in latest] == ["c", "b"]

    assert await executions.delete_by_rule(rule.id, ORG_ID) == 3
    assert await rules.delete_rule(rule.id, ORG_ID) is True
    assert await rules.get_by_id(rule.id, ORG_ID) is None


@pytest.mark.requires_db
async def test_sql_record_repository_maps_field_names(db_session) -> None:
    repo = SqlRecordStore(db_session).get_repository(EntityKind.TASK)

    task = await repo.create(
        ORG_ID, {"title": "Call", "ownerId": "u1", "dueDate": "2026-11-01T09:00:00Z"}
    )
    updated = await repo.update(task["id"], ORG_ID, {"priority": "HIGH"})

    assert task["ownerId"] == "u1"
    assert task["status"] == "TODO"
    assert task["dueDate"].year == 2026
    assert updated["priority"] == "HIGH"
    with pytest.raises(ValidationException):
        await repo.update(task["id"], ORG_ID, {"noSuchField": 1})
    with pytest.raises(ResourceNotFoundException):
        await repo.update("missing", ORG_ID, {"priority": "LOW"})


@pytest.mark.requires_db
async def test_engine_end_to_end_on_sql(db_session) -> None:
    repos = sql_repositories(db_session)
    engine = WorkflowEngine(repos.rules, repos.executions, ActionExecutor(repos.records))
    rule = await repos.rules.create_rule(ORG_ID, _rule())

    result = await engine.trigger_workflows(
        "Opportunity",
        TriggerType.RECORD_UPDATED,
        {"id": "opp1", "name": "Acme Deal", "stage": "WON"},
        ORG_ID,
    )

    assert result.ok, result.error
    assert result.executions[0].status is WorkflowExecutionStatus.SUCCESS
    tasks = await repos.records.get_repository(EntityKind.TASK).list_by_organization(ORG_ID)
    assert "Follow up on Acme Deal" in [t["title"] for t in tasks]
    assert (await repos.rules.get_by_id(rule.id, ORG_ID)).times_triggered == 1
