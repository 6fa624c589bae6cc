"""Workflow API: rule management, execution history, and record-event dispatch."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from automation.api.v1.dependencies import (
    get_organization_id,
    get_rule_service,
    get_rule_service_read,
    get_workflow_engine,
)
from automation.application.services import WorkflowEngine
from automation.application.use_cases import WorkflowRuleService
from automation.core.config import get_settings
from automation.core.limiter import limit_writes
from automation.schemas.workflow import (
    DispatchResponse,
    ExecuteRequest,
    ExecuteResponse,
    TriggerRequest,
    WorkflowExecutionResponse,
    WorkflowRuleCreateRequest,
    WorkflowRuleResponse,
    WorkflowRuleUpdateRequest,
)
from automation.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/trigger", response_model=DispatchResponse, status_code=202)
async def trigger_workflows(
    body: TriggerRequest,
    organization_id: Annotated[str, Depends(get_organization_id)],
    engine: Annotated[WorkflowEngine, Depends(get_workflow_engine)],
):
    """Dispatch a record event to matching rules.

    Always 202: a failed dispatch is reported in the body's ``error``.
    """
    result = await engine.trigger_workflows(
        body.object_type,
        body.trigger_type,
        body.record,
        organization_id,
        body.changed_fields,
    )
    return DispatchResponse.from_result(result)


@router.post("", response_model=WorkflowRuleResponse, status_code=201)
@limit_writes
async def create_rule(
    request: Request,
    body: WorkflowRuleCreateRequest,
    organization_id: Annotated[str, Depends(get_organization_id)],
    service: Annotated[WorkflowRuleService, Depends(get_rule_service)],
):
    """Create a workflow rule (organization-scoped)."""
    rule = await service.create_rule(organization_id, body.to_dto())
    return WorkflowRuleResponse.model_validate(rule)


@router.get("", response_model=list[WorkflowRuleResponse])
async def list_rules(
    organization_id: Annotated[str, Depends(get_organization_id)],
    service: Annotated[WorkflowRuleService, Depends(get_rule_service_read)],
    object_type: str | None = Query(None, min_length=1, max_length=64),
):
    """List rules for the organization, newest first."""
    rules = await service.list_rules(organization_id, object_type)
    return [WorkflowRuleResponse.model_validate(r) for r in rules]


@router.get("/{rule_id}", response_model=WorkflowRuleResponse)
async def get_rule(
    rule_id: str,
    organization_id: Annotated[str, Depends(get_organization_id)],
    service: Annotated[WorkflowRuleService, Depends(get_rule_service_read)],
):
    """Get rule by id (organization-scoped)."""
    rule = await service.get_rule(rule_id, organization_id)
    return WorkflowRuleResponse.model_validate(rule)


@router.patch("/{rule_id}", response_model=WorkflowRuleResponse)
@limit_writes
async def update_rule(
    request: Request,
    rule_id: str,
    body: WorkflowRuleUpdateRequest,
    organization_id: Annotated[str, Depends(get_organization_id)],
    service: Annotated[WorkflowRuleService, Depends(get_rule_service)],
):
    """Partially update a rule; omitted fields are left unchanged."""
    rule = await service.update_rule(rule_id, organization_id, body.to_dto())
    return WorkflowRuleResponse.model_validate(rule)


@router.delete("/{rule_id}", status_code=204)
@limit_writes
async def delete_rule(
    request: Request,
    rule_id: str,
    organization_id: Annotated[str, Depends(get_organization_id)],
    service: Annotated[WorkflowRuleService, Depends(get_rule_service)],
):
    """Delete a rule and its execution history."""
    await service.delete_rule(rule_id, organization_id)


@router.get(
    "/{rule_id}/executions",
    response_model=list[WorkflowExecutionResponse],
)
async def list_executions(
    rule_id: str,
    organization_id: Annotated[str, Depends(get_organization_id)],
    service: Annotated[WorkflowRuleService, Depends(get_rule_service_read)],
    limit: int | None = Query(None, ge=1),
):
    """Execution history for a rule, most recent first.

    limit defaults to WORKFLOW_EXECUTION_LIST_DEFAULT_LIMIT and is capped at
    WORKFLOW_EXECUTION_LIST_MAX_LIMIT.
    """
    settings = get_settings()
    effective = min(
        limit or settings.workflow_execution_list_default_limit,
        settings.workflow_execution_list_max_limit,
    )
    executions = await service.list_executions(rule_id, organization_id, effective)
    return [WorkflowExecutionResponse.model_validate(e) for e in executions]


@router.post("/{rule_id}/execute", response_model=ExecuteResponse)
@limit_writes
async def execute_rule(
    request: Request,
    rule_id: str,
    body: ExecuteRequest,
    organization_id: Annotated[str, Depends(get_organization_id)],
    service: Annotated[WorkflowRuleService, Depends(get_rule_service)],
    engine: Annotated[WorkflowEngine, Depends(get_workflow_engine)],
):
    """Run one rule against a supplied record (manual re-run).

    404 when the rule does not exist; executed=false when it is inactive or
    its conditions do not hold.
    """
    await service.get_rule(rule_id, organization_id)
    execution = await engine.execute_workflow(rule_id, body.record, organization_id)
    if execution is None:
        logger.debug("Manual run of rule %s produced no execution", rule_id)
        return ExecuteResponse(executed=False)
    return ExecuteResponse(
        executed=True,
        execution=WorkflowExecutionResponse.model_validate(execution),
    )
