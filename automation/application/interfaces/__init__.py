"""Application interfaces (ports): repository protocols implemented by infrastructure."""

from automation.application.interfaces.repositories import (
    IRecordRepository,
    IRecordStore,
    IWorkflowExecutionRepository,
    IWorkflowRuleRepository,
)

__all__ = [
    "IRecordRepository",
    "IRecordStore",
    "IWorkflowExecutionRepository",
    "IWorkflowRuleRepository",
]
