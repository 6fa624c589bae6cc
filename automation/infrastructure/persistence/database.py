"""SQLAlchemy engine, sessions and declarative Base (postgres backend only).

The engine is built the first time a session is asked for, so importing
models or repositories never reads settings. With DATABASE_BACKEND=memory no
engine exists and asking for a session raises SqlNotConfiguredException.
Schema changes go through Alembic (see migrations/).
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from automation.core.config import get_settings
from automation.domain.exceptions import SqlNotConfiguredException

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 10
DEFAULT_MAX_OVERFLOW = 20

engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Declarative base for rule, execution and record tables."""


def _ensure_engine() -> None:
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    if settings.database_backend != "postgres":
        return
    pool_size = settings.db_pool_size or DEFAULT_POOL_SIZE
    engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=(
            settings.db_max_overflow
            if settings.db_max_overflow is not None
            else DEFAULT_MAX_OVERFLOW
        ),
        pool_recycle=3600,
    )
    # Rows are converted to DTOs before commit; keep them readable after it.
    AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    logger.info("SQL engine created (pool_size=%s)", pool_size)


def get_engine() -> AsyncEngine | None:
    """The SQL engine, built on first call; None unless the backend is postgres."""
    _ensure_engine()
    return engine


def _session_factory() -> async_sessionmaker[AsyncSession]:
    _ensure_engine()
    if AsyncSessionLocal is None:
        raise SqlNotConfiguredException()
    return AsyncSessionLocal


@asynccontextmanager
async def read_session() -> AsyncIterator[AsyncSession]:
    """Session for queries; nothing is committed."""
    async with _session_factory()() as session:
        yield session


@asynccontextmanager
async def transactional_session() -> AsyncIterator[AsyncSession]:
    """Session inside one transaction: committed on normal exit, rolled back
    if the block raises."""
    async with _session_factory()() as session, session.begin():
        yield session
