"""Base repository: organization-scoped get, create, and delete."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from automation.infrastructure.persistence.database import Base


class BaseRepository[ModelType: Base]:
    """Base repository over one organization-scoped model.

    Every lookup is filtered by organization_id; a row belonging to another
    organization is reported as absent.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str, organization_id: str) -> ModelType | None:
        """Return a single row by primary key within the organization, or None."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model).where(
                model.id == entity_id, model.organization_id == organization_id
            )
        )
        return result.scalar_one_or_none()

    async def get_all(
        self, organization_id: str, skip: int = 0, limit: int = 100
    ) -> list[ModelType]:
        """Return rows of the organization with pagination, oldest first."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model)
            .where(model.organization_id == organization_id)
            .order_by(model.created_at.asc(), model.id.asc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new row and reload server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def save(self, obj: ModelType) -> ModelType:
        """Flush pending changes on an attached row and reload it."""
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()
