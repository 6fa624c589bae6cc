"""Run TIME_BASED workflow rules for every record of one kind in an organization.

Usage:
    python -m scripts.run_time_based_workflows <organization_id> <object_type>
Meant to be called by cron. Requires Postgres (DATABASE_BACKEND=postgres).
Each record is dispatched in its own transaction.
"""

import asyncio
import sys

from automation.application.services import ActionExecutor, WorkflowEngine
from automation.core.config import get_settings
from automation.domain.enums import EntityKind, TriggerType
from automation.infrastructure.backends import sql_repositories
from automation.infrastructure.persistence import database
from automation.shared.telemetry.logging import setup_logging

BATCH_SIZE = 500


async def main() -> None:
    """Page through the records and dispatch TIME_BASED for each one."""
    if len(sys.argv) < 3:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    organization_id, object_type = sys.argv[1], sys.argv[2]
    kind = EntityKind.parse(object_type)
    if kind is None:
        print(
            f"Unknown object type: {object_type} (one of {', '.join(EntityKind.values())})",
            file=sys.stderr,
        )
        sys.exit(1)
    if get_settings().database_backend != "postgres":
        print("Set DATABASE_BACKEND=postgres and DATABASE_URL", file=sys.stderr)
        sys.exit(1)
    setup_logging()

    dispatched = executed = failed = 0
    skip = 0
    try:
        while True:
            async with database.read_session() as session:
                repo = sql_repositories(session).records.get_repository(kind)
                assert repo is not None
                records = await repo.list_by_organization(
                    organization_id, skip=skip, limit=BATCH_SIZE
                )
            if not records:
                break
            for record in records:
                async with database.transactional_session() as session:
                    repos = sql_repositories(session)
                    engine = WorkflowEngine(
                        repos.rules, repos.executions, ActionExecutor(repos.records)
                    )
                    result = await engine.trigger_workflows(
                        kind.value, TriggerType.TIME_BASED, record, organization_id
                    )
                dispatched += 1
                executed += len(result.executions)
                if not result.ok:
                    failed += 1
            skip += len(records)
    finally:
        sql_engine = database.engine
        if sql_engine is not None:
            await sql_engine.dispose()

    print(
        f"Done. Records: {dispatched}, executions written: {executed}, "
        f"failed dispatches: {failed}"
    )


if __name__ == "__main__":
    asyncio.run(main())
