"""In-process backend: one set of repositories shared for the process lifetime."""

from automation.infrastructure.backends import RepositorySet
from automation.infrastructure.memory.record_repo import InMemoryRecordStore
from automation.infrastructure.memory.workflow_repo import (
    InMemoryWorkflowExecutionRepository,
    InMemoryWorkflowRuleRepository,
)


class InMemoryBackend:
    """Holds the in-memory repositories (database_backend=memory and tests)."""

    def __init__(self) -> None:
        self.rules = InMemoryWorkflowRuleRepository()
        self.executions = InMemoryWorkflowExecutionRepository()
        self.records = InMemoryRecordStore()

    def repositories(self) -> RepositorySet:
        return RepositorySet(
            rules=self.rules, executions=self.executions, records=self.records
        )
