"""In-memory implementations of the repository ports."""

from automation.infrastructure.memory.backend import InMemoryBackend
from automation.infrastructure.memory.record_repo import (
    InMemoryRecordRepository,
    InMemoryRecordStore,
)
from automation.infrastructure.memory.workflow_repo import (
    InMemoryWorkflowExecutionRepository,
    InMemoryWorkflowRuleRepository,
)

__all__ = [
    "InMemoryBackend",
    "InMemoryRecordRepository",
    "InMemoryRecordStore",
    "InMemoryWorkflowExecutionRepository",
    "InMemoryWorkflowRuleRepository",
]
