"""Workflow rule API schemas.

Conditions and actions reuse the application models, so a rule with an
unknown action type or a malformed parameter block is rejected with 422
before it reaches the service.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from automation.application.dtos.workflow import (
    DispatchResult,
    WorkflowAction,
    WorkflowCondition,
    WorkflowRuleCreate,
    WorkflowRuleUpdate,
)
from automation.domain.enums import TriggerType
from automation.shared.enums import WorkflowExecutionStatus


class WorkflowRuleCreateRequest(BaseModel):
    """Request body for creating a workflow rule."""

    name: str = Field(..., min_length=1, max_length=255)
    trigger_type: TriggerType
    object_type: str = Field(..., min_length=1, max_length=64)
    conditions: list[WorkflowCondition] = Field(default_factory=list)
    actions: list[WorkflowAction] = Field(default_factory=list)
    description: str | None = None
    is_active: bool = True

    def to_dto(self) -> WorkflowRuleCreate:
        return WorkflowRuleCreate(
            name=self.name,
            trigger_type=self.trigger_type,
            object_type=self.object_type,
            conditions=self.conditions,
            actions=self.actions,
            description=self.description,
            is_active=self.is_active,
        )


class WorkflowRuleUpdateRequest(BaseModel):
    """Request body for updating a workflow rule (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_active: bool | None = None
    trigger_type: TriggerType | None = None
    object_type: str | None = Field(default=None, min_length=1, max_length=64)
    conditions: list[WorkflowCondition] | None = None
    actions: list[WorkflowAction] | None = None

    def to_dto(self) -> WorkflowRuleUpdate:
        return WorkflowRuleUpdate(
            name=self.name,
            description=self.description,
            is_active=self.is_active,
            trigger_type=self.trigger_type,
            object_type=self.object_type,
            conditions=self.conditions,
            actions=self.actions,
        )


class WorkflowRuleResponse(BaseModel):
    """Workflow rule response."""

    model_config = ConfigDict(from_attributes=True)

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


class WorkflowExecutionResponse(BaseModel):
    """Workflow execution response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    workflow_rule_id: str
    entity_type: str
    entity_id: str | None
    status: WorkflowExecutionStatus
    result: list[dict[str, Any]]
    executed_at: datetime


class ExecuteRequest(BaseModel):
    """Request body for running one rule against a supplied record."""

    record: dict[str, Any]


class ExecuteResponse(BaseModel):
    """executed is False when the rule is inactive or its conditions do not hold."""

    executed: bool
    execution: WorkflowExecutionResponse | None = None


class TriggerRequest(BaseModel):
    """Record event from the record store's write path."""

    object_type: str = Field(..., min_length=1, max_length=64)
    trigger_type: TriggerType
    record: dict[str, Any]
    changed_fields: list[str] | None = None


class DispatchResponse(BaseModel):
    """Summary of one dispatch. error is set when the dispatch itself failed."""

    model_config = ConfigDict(from_attributes=True)

    object_type: str
    trigger_type: str
    organization_id: str
    rules_matched: int
    executions: list[WorkflowExecutionResponse]
    skipped_rule_ids: list[str]
    error: str | None = None

    @classmethod
    def from_result(cls, result: DispatchResult) -> "DispatchResponse":
        return cls.model_validate(result)
