"""SQLAlchemy repository implementations of the application ports."""

from automation.infrastructure.persistence.repositories.base import BaseRepository
from automation.infrastructure.persistence.repositories.record_repo import (
    SqlRecordRepository,
    SqlRecordStore,
)
from automation.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowExecutionRepository,
    WorkflowRuleRepository,
)

__all__ = [
    "BaseRepository",
    "SqlRecordRepository",
    "SqlRecordStore",
    "WorkflowExecutionRepository",
    "WorkflowRuleRepository",
]
