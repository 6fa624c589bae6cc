"""ActionExecutor: per-action dispatch against the record store; never raises."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from automation.application.dtos.workflow import parse_actions
from automation.application.services.action_executor import ActionExecutor
from automation.domain.enums import EntityKind
from automation.infrastructure.memory import InMemoryRecordStore

ORG_ID = "org-test"


def _action(raw: dict):
    return parse_actions([raw])[0]


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def executor(store: InMemoryRecordStore) -> ActionExecutor:
    return ActionExecutor(store)


async def test_create_task_substitutes_title_and_links_record(
    executor: ActionExecutor, store: InMemoryRecordStore
) -> None:
    record = {
        "id": "opp1",
        "name": "Acme Deal",
        "ownerId": "u1",
        "accountId": "acc1",
        "__type": "Opportunity",
    }
    action = _action(
        {"type": "create_task", "parameters": {"title": "Follow up on {{name}}"}}
    )

    result = await executor.execute(action, record, ORG_ID)

    assert result.success is True
    task_id = result.data["task_id"]
    task = await store.get_repository(EntityKind.TASK).get_by_id(task_id, ORG_ID)
    assert task["title"] == "Follow up on Acme Deal"
    assert task["ownerId"] == "u1"
    assert task["accountId"] == "acc1"
    assert task["contactId"] is None
    assert task["opportunityId"] is None


async def test_create_task_explicit_owner_wins(
    executor: ActionExecutor, store: InMemoryRecordStore
) -> None:
    action = _action(
        {
            "type": "create_task",
            "parameters": {"title": "Call", "owner_id": "u2", "due_date": "2026-11-01T09:00:00Z"},
        }
    )
    result = await executor.execute(action, {"ownerId": "u1"}, ORG_ID)
    task = await store.get_repository("Task").get_by_id(result.data["task_id"], ORG_ID)
    assert task["ownerId"] == "u2"
    assert task["dueDate"].isoformat() == "2026-11-01T09:00:00+00:00"


async def test_send_notification_defaults_to_record_owner(
    executor: ActionExecutor, store: InMemoryRecordStore
) -> None:
    action = _action(
        {
            "type": "send_notification",
            "parameters": {"title": "{{name}} closed", "message": "Stage is {{stage}}"},
        }
    )
    result = await executor.execute(
        action, {"name": "Acme", "stage": "WON", "ownerId": "u1"}, ORG_ID
    )
    assert result.success is True
    assert result.data["user_id"] == "u1"
    notification = await store.get_repository(EntityKind.NOTIFICATION).get_by_id(
        result.data["notification_id"], ORG_ID
    )
    assert notification["title"] == "Acme closed"
    assert notification["message"] == "Stage is WON"
    assert notification["type"] == "info"


async def test_update_field_updates_tagged_record(
    executor: ActionExecutor, store: InMemoryRecordStore
) -> None:
    repo = store.get_repository(EntityKind.OPPORTUNITY)
    created = await repo.create(ORG_ID, {"name": "Acme", "stage": "WON"})
    record = {**created, "__type": "Opportunity"}
    action = _action(
        {"type": "update_field", "parameters": {"field": "description", "value": "Won by {{ownerId}}"}}
    )
    record["ownerId"] = "u9"

    result = await executor.execute(action, record, ORG_ID)

    assert result.success is True
    assert result.data == {
        "entity_id": created["id"],
        "field": "description",
        "value": "Won by u9",
    }
    stored = await repo.get_by_id(created["id"], ORG_ID)
    assert stored["description"] == "Won by u9"


async def test_update_field_unknown_kind_is_model_not_found(executor: ActionExecutor) -> None:
    action = _action({"type": "update_field", "parameters": {"field": "x", "value": 1}})
    result = await executor.execute(action, {"id": "r1", "__type": "Spaceship"}, ORG_ID)
    assert result.success is False
    assert result.error == "Model not found"


async def test_update_field_without_type_tag_is_model_not_found(
    executor: ActionExecutor,
) -> None:
    action = _action({"type": "update_field", "parameters": {"field": "x", "value": 1}})
    result = await executor.execute(action, {"id": "r1"}, ORG_ID)
    assert result.error == "Model not found"


async def test_update_field_missing_record_is_failure(executor: ActionExecutor) -> None:
    action = _action({"type": "update_field", "parameters": {"field": "stage", "value": "WON"}})
    result = await executor.execute(action, {"id": "nope", "__type": "Account"}, ORG_ID)
    assert result.success is False
    assert "not found" in result.error


async def test_assign_owner(executor: ActionExecutor, store: InMemoryRecordStore) -> None:
    repo = store.get_repository(EntityKind.ACCOUNT)
    created = await repo.create(ORG_ID, {"name": "Acme", "ownerId": "u1"})
    action = _action({"type": "assign_owner", "parameters": {"user_id": "u2"}})

    result = await executor.execute(action, {**created, "__type": "Account"}, ORG_ID)

    assert result.success is True
    assert result.data == {"entity_id": created["id"], "owner_id": "u2"}
    assert (await repo.get_by_id(created["id"], ORG_ID))["ownerId"] == "u2"


async def test_create_activity_defaults_to_note(
    executor: ActionExecutor, store: InMemoryRecordStore
) -> None:
    action = _action(
        {"type": "create_activity", "parameters": {"subject": "Stage changed to {{stage}}"}}
    )
    record = {"stage": "WON", "aircraftId": "ac1", "accountId": "acc1", "ownerId": "u1"}

    result = await executor.execute(action, record, ORG_ID)

    activity = await store.get_repository(EntityKind.ACTIVITY).get_by_id(
        result.data["activity_id"], ORG_ID
    )
    assert activity["type"] == "NOTE"
    assert activity["subject"] == "Stage changed to WON"
    assert activity["aircraftId"] == "ac1"
    assert activity["accountId"] == "acc1"
    assert activity["userId"] == "u1"


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ({"type": "send_email", "parameters": {"to": "a@example.com"}}, "Email queued"),
        ({"type": "webhook", "parameters": {"url": "https://example.com/hook"}}, "Webhook triggered"),
        ({"type": "webhook"}, "Webhook triggered"),
    ],
)
async def test_stub_actions_acknowledge(executor: ActionExecutor, raw: dict, message: str) -> None:
    result = await executor.execute(_action(raw), {}, ORG_ID)
    assert result.success is True
    assert result.data == {"message": message}


async def test_store_failure_is_captured() -> None:
    """A raising repository becomes a failed ActionResult, not an exception."""
    failing_repo = MagicMock()
    failing_repo.create = AsyncMock(side_effect=RuntimeError("connection reset"))
    store = MagicMock()
    store.get_repository = MagicMock(return_value=failing_repo)
    executor = ActionExecutor(store)

    result = await executor.execute(
        _action({"type": "create_task", "parameters": {"title": "x"}}), {}, ORG_ID
    )

    assert result.success is False
    assert result.error == "connection reset"
    assert result.to_dict() == {
        "action": "create_task",
        "success": False,
        "error": "connection reset",
    }


async def test_missing_task_repository_is_captured() -> None:
    store = MagicMock()
    store.get_repository = MagicMock(return_value=None)
    result = await ActionExecutor(store).execute(
        _action({"type": "create_task", "parameters": {"title": "x"}}), {}, ORG_ID
    )
    assert result.success is False
    assert "No record repository" in result.error


async def test_camel_case_parameters_are_read(
    executor: ActionExecutor, store: InMemoryRecordStore
) -> None:
    record = {"id": "opp1", "ownerId": "u-record", "__type": "Opportunity"}
    task_action = _action(
        {
            "type": "create_task",
            "parameters": {"title": "t", "ownerId": "u-explicit", "dueDate": "2026-11-01T09:00:00Z"},
        }
    )
    notify_action = _action(
        {
            "type": "send_notification",
            "parameters": {"title": "t", "userId": "u7", "notificationType": "warning"},
        }
    )
    activity_action = _action(
        {
            "type": "create_activity",
            "parameters": {"subject": "s", "activityType": "CALL", "userId": "u8"},
        }
    )

    task_result = await executor.execute(task_action, record, ORG_ID)
    notify_result = await executor.execute(notify_action, record, ORG_ID)
    activity_result = await executor.execute(activity_action, record, ORG_ID)

    task = await store.get_repository(EntityKind.TASK).get_by_id(
        task_result.data["task_id"], ORG_ID
    )
    notification = await store.get_repository(EntityKind.NOTIFICATION).get_by_id(
        notify_result.data["notification_id"], ORG_ID
    )
    activity = await store.get_repository(EntityKind.ACTIVITY).get_by_id(
        activity_result.data["activity_id"], ORG_ID
    )
    assert task["ownerId"] == "u-explicit"
    assert task["dueDate"].year == 2026
    assert notification["userId"] == "u7"
    assert notification["type"] == "warning"
    assert activity["type"] == "CALL"
    assert activity["userId"] == "u8"


async def test_assign_owner_accepts_user_id_camel_case(
    executor: ActionExecutor, store: InMemoryRecordStore
) -> None:
    repo = store.get_repository(EntityKind.ACCOUNT)
    created = await repo.create(ORG_ID, {"name": "Acme", "ownerId": "u1"})
    action = _action({"type": "assign_owner", "parameters": {"userId": "u2"}})

    result = await executor.execute(action, {**created, "__type": "Account"}, ORG_ID)

    assert result.success is True
    assert (await repo.get_by_id(created["id"], ORG_ID))["ownerId"] == "u2"


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "update_field", "parameters": {"field": "stage", "value": "WON"}},
        {"type": "assign_owner", "parameters": {"user_id": "u2"}},
    ],
)
async def test_record_without_id_is_named_failure(executor: ActionExecutor, raw: dict) -> None:
    result = await executor.execute(_action(raw), {"__type": "Opportunity"}, ORG_ID)
    assert result.success is False
    assert result.error == "Record has no id"
