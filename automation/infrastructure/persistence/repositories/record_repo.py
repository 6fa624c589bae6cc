"""Record store over SQL: one repository per entity kind, fields as dicts.

The engine addresses record fields by the record store's camelCase names
(``ownerId``, ``dueDate``); columns are snake_case. Conversion happens here
and nowhere else. Writes run in a SAVEPOINT so a failed action leaves the
surrounding transaction usable.
"""

from __future__ import annotations

import re
from typing import Any

from sqlalchemy import DateTime, inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession

from automation.domain.enums import EntityKind
from automation.domain.exceptions import ResourceNotFoundException, ValidationException
from automation.infrastructure.persistence.database import Base
from automation.infrastructure.persistence.models.records import (
    Account,
    Activity,
    Aircraft,
    Contact,
    Notification,
    Opportunity,
    Task,
    WorkOrder,
)
from automation.infrastructure.persistence.repositories.base import BaseRepository
from automation.shared.utils.datetime import parse_iso_datetime

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Managed by the store; never written from record fields.
_PROTECTED_COLUMNS = frozenset({"id", "organization_id", "created_at", "updated_at"})

MODELS_BY_KIND: dict[EntityKind, type[Base]] = {
    EntityKind.ACCOUNT: Account,
    EntityKind.CONTACT: Contact,
    EntityKind.OPPORTUNITY: Opportunity,
    EntityKind.TASK: Task,
    EntityKind.NOTIFICATION: Notification,
    EntityKind.ACTIVITY: Activity,
    EntityKind.AIRCRAFT: Aircraft,
    EntityKind.WORK_ORDER: WorkOrder,
}


def to_column_name(field: str) -> str:
    """ownerId -> owner_id; snake_case names pass through."""
    return _CAMEL_BOUNDARY.sub("_", field).lower()


def to_field_name(column: str) -> str:
    """owner_id -> ownerId."""
    head, *rest = column.split("_")
    return head + "".join(part.capitalize() for part in rest)


class SqlRecordRepository(BaseRepository[Any]):
    """Record repository for one entity kind."""

    def __init__(self, db: AsyncSession, kind: EntityKind) -> None:
        super().__init__(db, MODELS_BY_KIND[kind])
        self.kind = kind
        self._columns = {c.key: c for c in sa_inspect(self.model).columns}

    def _to_record(self, obj: Any) -> dict[str, Any]:
        return {to_field_name(key): getattr(obj, key) for key in self._columns}

    def _to_values(self, fields: dict[str, Any]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for name, value in fields.items():
            key = to_column_name(name)
            if key not in self._columns or key in _PROTECTED_COLUMNS:
                raise ValidationException(
                    f"{self.kind.value} has no writable field {name!r}", field=name
                )
            if isinstance(self._columns[key].type, DateTime) and isinstance(value, str):
                value = parse_iso_datetime(value)
            values[key] = value
        return values

    async def get_by_id(  # type: ignore[override]
        self, record_id: str, organization_id: str
    ) -> dict[str, Any] | None:
        obj = await super().get_by_id(record_id, organization_id)
        return self._to_record(obj) if obj is not None else None

    async def create(  # type: ignore[override]
        self, organization_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        """Insert a row; None-valued fields are left to column defaults."""
        values = self._to_values({k: v for k, v in fields.items() if v is not None})
        async with self.db.begin_nested():
            obj = await super().create(
                self.model(organization_id=organization_id, **values)
            )
        return self._to_record(obj)

    async def update(
        self, record_id: str, organization_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        values = self._to_values(fields)
        obj = await super().get_by_id(record_id, organization_id)
        if obj is None:
            raise ResourceNotFoundException(self.kind.value, record_id)
        async with self.db.begin_nested():
            for key, value in values.items():
                setattr(obj, key, value)
            saved = await self.save(obj)
        return self._to_record(saved)

    async def list_by_organization(
        self, organization_id: str, skip: int = 0, limit: int = 500
    ) -> list[dict[str, Any]]:
        rows = await self.get_all(organization_id, skip=skip, limit=limit)
        return [self._to_record(r) for r in rows]


class SqlRecordStore:
    """Closed registry from EntityKind to SQL record repositories."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def get_repository(self, kind: EntityKind | str) -> SqlRecordRepository | None:
        entity_kind = EntityKind.parse(kind)
        if entity_kind is None:
            return None
        return SqlRecordRepository(self.db, entity_kind)
