"""Application DTOs: data passed between layers, independent of the ORM."""

from automation.application.dtos.workflow import (
    MISSING,
    ActionResult,
    AssignOwnerAction,
    CreateActivityAction,
    CreateTaskAction,
    DispatchResult,
    SendEmailAction,
    SendNotificationAction,
    UpdateFieldAction,
    WebhookAction,
    WorkflowAction,
    WorkflowCondition,
    WorkflowExecutionResult,
    WorkflowRuleCreate,
    WorkflowRuleResult,
    WorkflowRuleUpdate,
    parse_actions,
    parse_conditions,
)

__all__ = [
    "MISSING",
    "ActionResult",
    "AssignOwnerAction",
    "CreateActivityAction",
    "CreateTaskAction",
    "DispatchResult",
    "SendEmailAction",
    "SendNotificationAction",
    "UpdateFieldAction",
    "WebhookAction",
    "WorkflowAction",
    "WorkflowCondition",
    "WorkflowExecutionResult",
    "WorkflowRuleCreate",
    "WorkflowRuleResult",
    "WorkflowRuleUpdate",
    "parse_actions",
    "parse_conditions",
]
