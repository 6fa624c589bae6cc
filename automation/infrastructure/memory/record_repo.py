"""In-process record store: schemaless dicts per entity kind."""

from __future__ import annotations

from typing import Any

from automation.domain.enums import EntityKind
from automation.domain.exceptions import ResourceNotFoundException
from automation.shared.utils.datetime import utc_now
from automation.shared.utils.generators import generate_cuid

# Managed by the store; ignored in update payloads.
_PROTECTED_FIELDS = frozenset({"id", "organizationId", "createdAt"})


class InMemoryRecordRepository:
    """Records of one kind, keyed by id. Returns copies, never live dicts."""

    def __init__(self, kind: EntityKind) -> None:
        self.kind = kind
        self._records: dict[str, dict[str, Any]] = {}

    async def get_by_id(
        self, record_id: str, organization_id: str
    ) -> dict[str, Any] | None:
        record = self._records.get(record_id)
        if record is None or record["organizationId"] != organization_id:
            return None
        return dict(record)

    async def create(
        self, organization_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        now = utc_now()
        record = {
            **{k: v for k, v in fields.items() if k not in _PROTECTED_FIELDS},
            "id": fields.get("id") or generate_cuid(),
            "organizationId": organization_id,
            "createdAt": now,
            "updatedAt": now,
        }
        self._records[record["id"]] = record
        return dict(record)

    async def update(
        self, record_id: str, organization_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        record = self._records.get(record_id)
        if record is None or record["organizationId"] != organization_id:
            raise ResourceNotFoundException(self.kind.value, str(record_id))
        record.update({k: v for k, v in fields.items() if k not in _PROTECTED_FIELDS})
        record["updatedAt"] = utc_now()
        return dict(record)

    async def list_by_organization(
        self, organization_id: str, skip: int = 0, limit: int = 500
    ) -> list[dict[str, Any]]:
        records = [
            dict(r)
            for r in self._records.values()
            if r["organizationId"] == organization_id
        ]
        return records[skip : skip + limit]


class InMemoryRecordStore:
    """Closed registry: one InMemoryRecordRepository per EntityKind."""

    def __init__(self) -> None:
        self._repositories = {kind: InMemoryRecordRepository(kind) for kind in EntityKind}

    def get_repository(self, kind: EntityKind | str) -> InMemoryRecordRepository | None:
        entity_kind = EntityKind.parse(kind)
        if entity_kind is None:
            return None
        return self._repositories[entity_kind]
