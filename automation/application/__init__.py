"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions. Infrastructure implements
the interfaces (SQLAlchemy and in-memory repositories).
"""

from automation.application.interfaces import (
    IRecordRepository,
    IRecordStore,
    IWorkflowExecutionRepository,
    IWorkflowRuleRepository,
)
from automation.application.services import ActionExecutor, WorkflowEngine
from automation.application.use_cases import WorkflowRuleService

__all__ = [
    "ActionExecutor",
    "IRecordRepository",
    "IRecordStore",
    "IWorkflowExecutionRepository",
    "IWorkflowRuleRepository",
    "WorkflowEngine",
    "WorkflowRuleService",
]
