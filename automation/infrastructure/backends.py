"""Repository sets: the three ports the engine and rule service need, per backend."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from automation.application.interfaces.repositories import (
    IRecordStore,
    IWorkflowExecutionRepository,
    IWorkflowRuleRepository,
)
from automation.infrastructure.persistence.repositories import (
    SqlRecordStore,
    WorkflowExecutionRepository,
    WorkflowRuleRepository,
)


@dataclass(frozen=True)
class RepositorySet:
    """Rules, executions, and record store bound to one backend (and session)."""

    rules: IWorkflowRuleRepository
    executions: IWorkflowExecutionRepository
    records: IRecordStore


def sql_repositories(db: AsyncSession) -> RepositorySet:
    """Repositories sharing one SQLAlchemy session (one transaction)."""
    return RepositorySet(
        rules=WorkflowRuleRepository(db),
        executions=WorkflowExecutionRepository(db),
        records=SqlRecordStore(db),
    )
