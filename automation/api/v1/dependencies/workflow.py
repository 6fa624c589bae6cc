"""Workflow engine and rule service dependencies (composition root).

When database_backend is 'memory', repositories come from the process-wide
InMemoryBackend on app.state. When 'postgres', they share one SQLAlchemy
session per request.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request

from automation.application.services import ActionExecutor, WorkflowEngine
from automation.application.use_cases import WorkflowRuleService
from automation.infrastructure.backends import RepositorySet, sql_repositories
from automation.infrastructure.persistence.database import (
    read_session,
    transactional_session,
)


async def get_repositories(request: Request) -> AsyncIterator[RepositorySet]:
    """Repositories for write operations (commit on success, roll back on error)."""
    backend = getattr(request.app.state, "memory_backend", None)
    if backend is not None:
        yield backend.repositories()
        return
    async with transactional_session() as db:
        yield sql_repositories(db)


async def get_read_repositories(request: Request) -> AsyncIterator[RepositorySet]:
    """Repositories for read operations (no commit)."""
    backend = getattr(request.app.state, "memory_backend", None)
    if backend is not None:
        yield backend.repositories()
        return
    async with read_session() as db:
        yield sql_repositories(db)


async def get_workflow_engine(
    repos: Annotated[RepositorySet, Depends(get_repositories)],
) -> WorkflowEngine:
    """Engine wired to the request's repositories and record store."""
    return WorkflowEngine(repos.rules, repos.executions, ActionExecutor(repos.records))


async def get_rule_service(
    repos: Annotated[RepositorySet, Depends(get_repositories)],
) -> WorkflowRuleService:
    """Rule service for create/update/delete (transactional)."""
    return WorkflowRuleService(repos.rules, repos.executions)


async def get_rule_service_read(
    repos: Annotated[RepositorySet, Depends(get_read_repositories)],
) -> WorkflowRuleService:
    """Rule service for list and get."""
    return WorkflowRuleService(repos.rules, repos.executions)
