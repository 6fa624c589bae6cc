"""DTOs for workflow rules, actions, and executions (no dependency on ORM).

Conditions and actions are pydantic models so a rule's shape is validated
when it is authored and again when it is loaded from storage. Actions are a
discriminated union on ``type``: one model per action kind, each with its own
parameter model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter

from automation.domain.enums import ConditionOperator, LogicOperator, TriggerType
from automation.shared.enums import WorkflowExecutionStatus


class _Missing:
    """Sentinel for an absent record field or an absent condition value."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class WorkflowCondition(BaseModel):
    """One field/operator/value test against the triggering record.

    ``operator`` and ``logic_operator`` accept any string when loaded so that
    stored rules never fail to parse; unknown operators evaluate to False.
    Authoring paths reject unknown operators (see WorkflowRuleService).
    Keys are read in snake_case or in the camelCase the rule editor sends
    (``logicOperator``); they are stored in snake_case.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field: str = Field(..., min_length=1, max_length=255)
    operator: ConditionOperator | str
    value: Any = None
    logic_operator: LogicOperator | str | None = Field(
        default=None, validation_alias=AliasChoices("logic_operator", "logicOperator")
    )

    @property
    def compare_value(self) -> Any:
        """Condition value, or MISSING when the rule did not set one."""
        if "value" not in self.model_fields_set:
            return MISSING
        return self.value


# ---- Action parameters ----
#
# Multi-word parameters also accept their camelCase key (ownerId, dueDate, ...).


class _Params(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateTaskParams(_Params):
    title: str = Field(..., min_length=1)
    owner_id: str | None = Field(default=None, validation_alias=AliasChoices("owner_id", "ownerId"))
    due_date: datetime | None = Field(
        default=None, validation_alias=AliasChoices("due_date", "dueDate")
    )
    description: str | None = None
    priority: str | None = None


class SendNotificationParams(_Params):
    title: str = Field(..., min_length=1)
    message: str = ""
    user_id: str | None = Field(default=None, validation_alias=AliasChoices("user_id", "userId"))
    notification_type: str = Field(
        default="info", validation_alias=AliasChoices("notification_type", "notificationType")
    )
    link: str | None = None


class UpdateFieldParams(_Params):
    field: str = Field(..., min_length=1)
    value: Any = None


class AssignOwnerParams(_Params):
    user_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("user_id", "userId")
    )


class CreateActivityParams(_Params):
    subject: str = Field(..., min_length=1)
    content: str = ""
    activity_type: str = Field(
        default="NOTE", validation_alias=AliasChoices("activity_type", "activityType")
    )
    user_id: str | None = Field(default=None, validation_alias=AliasChoices("user_id", "userId"))


class SendEmailParams(_Params):
    to: str | None = None
    subject: str | None = None
    body: str | None = None
    template_id: str | None = Field(
        default=None, validation_alias=AliasChoices("template_id", "templateId")
    )


class WebhookParams(_Params):
    url: str | None = None
    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE"] = "POST"
    headers: dict[str, str] = Field(default_factory=dict)


# ---- Actions (one variant per type) ----


class CreateTaskAction(BaseModel):
    type: Literal["create_task"] = "create_task"
    parameters: CreateTaskParams


class SendNotificationAction(BaseModel):
    type: Literal["send_notification"] = "send_notification"
    parameters: SendNotificationParams


class UpdateFieldAction(BaseModel):
    type: Literal["update_field"] = "update_field"
    parameters: UpdateFieldParams


class AssignOwnerAction(BaseModel):
    type: Literal["assign_owner"] = "assign_owner"
    parameters: AssignOwnerParams


class CreateActivityAction(BaseModel):
    type: Literal["create_activity"] = "create_activity"
    parameters: CreateActivityParams


class SendEmailAction(BaseModel):
    type: Literal["send_email"] = "send_email"
    parameters: SendEmailParams = Field(default_factory=SendEmailParams)


class WebhookAction(BaseModel):
    type: Literal["webhook"] = "webhook"
    parameters: WebhookParams = Field(default_factory=WebhookParams)


WorkflowAction = Annotated[
    CreateTaskAction
    | SendNotificationAction
    | UpdateFieldAction
    | AssignOwnerAction
    | CreateActivityAction
    | SendEmailAction
    | WebhookAction,
    Field(discriminator="type"),
]

_conditions_adapter: TypeAdapter[list[WorkflowCondition]] = TypeAdapter(
    list[WorkflowCondition]
)
_actions_adapter: TypeAdapter[list[WorkflowAction]] = TypeAdapter(list[WorkflowAction])


def parse_conditions(raw: list[Any] | None) -> list[WorkflowCondition]:
    """Validate stored or submitted conditions (dicts or models)."""
    return _conditions_adapter.validate_python(raw or [])


def parse_actions(raw: list[Any] | None) -> list[WorkflowAction]:
    """Validate stored or submitted actions (dicts or models).

    Raises:
        pydantic.ValidationError: On an unknown type or a bad parameter shape.
    """
    return _actions_adapter.validate_python(raw or [])


def dump_conditions(conditions: list[WorkflowCondition]) -> list[dict[str, Any]]:
    """Serialize conditions for JSON storage; unset values stay absent."""
    return [c.model_dump(mode="json", exclude_unset=True) for c in conditions]


def dump_actions(actions: list[WorkflowAction]) -> list[dict[str, Any]]:
    """Serialize actions for JSON storage."""
    return [a.model_dump(mode="json") for a in actions]


# ---- Rules and executions ----


@dataclass(frozen=True)
class WorkflowRuleResult:
    """Workflow rule read from storage."""

    id: str
    organization_id: str
    name: str
    description: str | None
    is_active: bool
    trigger_type: TriggerType
    object_type: str
    conditions: list[WorkflowCondition]
    actions: list[WorkflowAction]
    last_triggered: datetime | None
    times_triggered: int
    created_at: datetime
    updated_at: datetime

    def watches_any(self, changed_fields: list[str]) -> bool:
        """Return whether any condition reads one of the changed fields."""
        changed = set(changed_fields)
        return any(c.field in changed for c in self.conditions)


@dataclass(frozen=True)
class WorkflowRuleCreate:
    """Data needed to create a workflow rule."""

    name: str
    trigger_type: TriggerType
    object_type: str
    conditions: list[WorkflowCondition] = field(default_factory=list)
    actions: list[WorkflowAction] = field(default_factory=list)
    description: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class WorkflowRuleUpdate:
    """Partial update for a workflow rule; None means 'leave unchanged'."""

    name: str | None = None
    description: str | None = None
    is_active: bool | None = None
    trigger_type: TriggerType | None = None
    object_type: str | None = None
    conditions: list[WorkflowCondition] | None = None
    actions: list[WorkflowAction] | None = None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one action. Exactly one of data / error is meaningful."""

    action: str
    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def ok(cls, action: str, **data: Any) -> ActionResult:
        return cls(action=action, success=True, data=data)

    @classmethod
    def failed(cls, action: str, error: str) -> ActionResult:
        return cls(action=action, success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the execution audit trail."""
        out: dict[str, Any] = {"action": self.action, "success": self.success}
        if self.success:
            out["data"] = self.data or {}
        else:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class WorkflowExecutionResult:
    """One rule firing, as persisted."""

    id: str
    organization_id: str
    workflow_rule_id: str
    entity_type: str
    entity_id: str | None
    status: WorkflowExecutionStatus
    result: list[dict[str, Any]]
    executed_at: datetime


@dataclass
class DispatchResult:
    """Summary of one trigger_workflows call.

    ``error`` is set when the dispatch itself failed (e.g. rules could not be
    loaded); the exception is logged and never raised to the caller.
    """

    object_type: str
    trigger_type: str
    organization_id: str
    rules_matched: int = 0
    executions: list[WorkflowExecutionResult] = field(default_factory=list)
    skipped_rule_ids: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
