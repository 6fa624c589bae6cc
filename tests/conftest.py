"""Pytest configuration and fixtures for crm-automation.

HTTP tests build the app with create_app() and an InMemoryBackend on
app.state, so they never need a database. Repository integration tests use
db_session and are skipped unless Postgres is configured.
"""

import os

# Before any automation import reads settings.
os.environ.setdefault("DATABASE_BACKEND", "memory")
os.environ.setdefault("TELEMETRY_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_WRITES", "1000/minute")

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from automation.application.services import ActionExecutor, WorkflowEngine
from automation.application.use_cases import WorkflowRuleService
from automation.infrastructure.memory import InMemoryBackend
from automation.infrastructure.persistence import database
from automation.main import create_app

ORG_ID = "org-test"
OTHER_ORG_ID = "org-other"


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    """Fresh in-memory repositories for each test."""
    return InMemoryBackend()


@pytest.fixture
def workflow_engine(memory_backend: InMemoryBackend) -> WorkflowEngine:
    return WorkflowEngine(
        memory_backend.rules,
        memory_backend.executions,
        ActionExecutor(memory_backend.records),
    )


@pytest.fixture
def rule_service(memory_backend: InMemoryBackend) -> WorkflowRuleService:
    return WorkflowRuleService(memory_backend.rules, memory_backend.executions)


@pytest.fixture
def app(memory_backend: InMemoryBackend) -> FastAPI:
    """FastAPI app whose routes use the test's memory backend."""
    application = create_app()
    application.state.memory_backend = memory_backend
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def org_headers() -> dict[str, str]:
    return {"X-Organization-ID": ORG_ID}


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_BACKEND=postgres and DATABASE_URL with migrations
    applied. Skips when Postgres is not configured; run without DB via:
    pytest -m 'not requires_db'.
    """
    if database.get_engine() is None or database.AsyncSessionLocal is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_BACKEND=postgres and DATABASE_URL, "
            "then run: alembic upgrade head"
        )
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
