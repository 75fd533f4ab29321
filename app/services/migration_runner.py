# app/services/migration_runner.py
"""
Background execution of persisted migrations.

Routes create a pending Migration and hand it to launch_migration, which
schedules the batch on the running event loop and returns immediately. The
batch owns its own database session; callers poll the Migration record for
progress. On startup, recover_stuck_migrations relaunches migrations left in
in_progress by a previous process (items already finished are not redone).
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from app.core.enums import MigrationDirection, MigrationStatus
from app.database import async_session
from app.services.migration_service import create_migration_service
from app.services.storage import MappingStorage

logger = logging.getLogger(__name__)

_active_migration_tasks: Dict[int, asyncio.Task] = {}


def is_migration_running(migration_id: int) -> bool:
    task = _active_migration_tasks.get(migration_id)
    return task is not None and not task.done()


async def run_migration_job(
    migration_id: int,
    product_ids: List[int],
    direction: Optional[MigrationDirection] = None,
    *,
    session_factory: Optional[Callable] = None,
    service_factory: Optional[Callable] = None,
):
    """Run one migration to completion inside a dedicated session"""
    session_factory = session_factory or async_session
    service_factory = service_factory or create_migration_service

    async with session_factory() as db:
        service = service_factory(MappingStorage(db))
        return await service.start_migration(migration_id, product_ids, direction)


def launch_migration(
    migration_id: int,
    product_ids: List[int],
    direction: Optional[MigrationDirection] = None,
    *,
    session_factory: Optional[Callable] = None,
    service_factory: Optional[Callable] = None,
) -> asyncio.Task:
    """Schedule a migration on the running loop without waiting for it."""
    logger.info(f"Queueing migration {migration_id} ({len(product_ids)} products)")

    loop = asyncio.get_running_loop()
    task = loop.create_task(
        run_migration_job(
            migration_id,
            product_ids,
            direction,
            session_factory=session_factory,
            service_factory=service_factory,
        )
    )
    _active_migration_tasks[migration_id] = task

    def _finalize(t: asyncio.Task, mig_id: int) -> None:
        if _active_migration_tasks.get(mig_id) is t:
            _active_migration_tasks.pop(mig_id, None)
        if t.cancelled():
            logger.warning(f"Migration {mig_id} task was cancelled")
            return
        exc = t.exception()
        if exc is not None:
            logger.error(f"Migration {mig_id} failed", exc_info=exc)
        else:
            report = t.result()
            logger.info(
                f"Migration {mig_id} task finished: "
                f"{report.successful} successful, {report.failed} failed"
            )

    task.add_done_callback(lambda t, mig_id=migration_id: _finalize(t, mig_id))
    return task


async def recover_stuck_migrations(
    *,
    session_factory: Optional[Callable] = None,
    service_factory: Optional[Callable] = None,
) -> List[int]:
    """Relaunch migrations a previous process left in_progress; returns their ids"""
    session_factory = session_factory or async_session

    async with session_factory() as db:
        stuck = await MappingStorage(db).get_migrations_by_status([MigrationStatus.IN_PROGRESS])
        pending = [
            (m.id, list(m.product_ids or []), MigrationDirection(m.direction))
            for m in stuck
            if not is_migration_running(m.id)
        ]

    recovered = []
    for migration_id, product_ids, direction in pending:
        logger.warning(f"Recovering interrupted migration {migration_id}")
        launch_migration(
            migration_id,
            product_ids,
            direction,
            session_factory=session_factory,
            service_factory=service_factory,
        )
        recovered.append(migration_id)

    if recovered:
        logger.info(f"Relaunched {len(recovered)} interrupted migrations: {recovered}")
    return recovered
