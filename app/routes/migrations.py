# app/routes/migrations.py
"""
Migration endpoints.

POST /api/migrations only records a pending Migration and queues it with the
background runner; clients poll GET /api/migrations/{id} for progress. The
/api/migrate/* endpoints run a batch inline and answer with the full report.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.config import get_settings
from app.core.enums import MigrationDirection, MigrationStatus
from app.core.exceptions import MigrationNotFoundError
from app.dependencies import get_migration_service, get_storage
from app.schemas.migration import (
    BatchMigrateRequest,
    BatchMigrateResponse,
    MigrationCreate,
    MigrationDetail,
    MigrationProductRead,
    MigrationRead,
)
from app.schemas.product import ProductRead
from app.services.migration_runner import launch_migration
from app.services.migration_service import MigrationService
from app.services.storage import MappingStorage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["migrations"])


async def _create_pending(storage: MappingStorage, product_ids: List[int], options, direction: MigrationDirection):
    return await storage.create_migration({
        "status": MigrationStatus.PENDING.value,
        "direction": direction.value,
        "total_products": len(product_ids),
        "successful_products": 0,
        "failed_products": 0,
        "options": options.model_dump(),
        "product_ids": product_ids,
    })


@router.get("/migrations", response_model=List[MigrationRead])
async def list_migrations(storage: MappingStorage = Depends(get_storage)):
    return await storage.get_all_migrations()


@router.get("/migrations/recent", response_model=List[MigrationRead])
async def recent_migrations(
    limit: Optional[int] = Query(None, ge=1, le=100),
    storage: MappingStorage = Depends(get_storage),
):
    return await storage.get_recent_migrations(limit or get_settings().RECENT_MIGRATIONS_LIMIT)


@router.get("/migrations/{migration_id}", response_model=MigrationDetail)
async def migration_detail(migration_id: int, storage: MappingStorage = Depends(get_storage)):
    """Migration with its per-product rows and the products they refer to"""
    migration = await storage.get_migration(migration_id)
    if migration is None:
        raise HTTPException(status_code=404, detail="Migration not found")

    products = []
    for row in await storage.get_migration_products(migration_id):
        product = await storage.get_product(row.product_id)
        products.append(MigrationProductRead(
            id=row.id,
            migration_id=row.migration_id,
            product_id=row.product_id,
            status=row.status,
            error_message=row.error_message,
            target_product_id=row.target_product_id,
            product=ProductRead.from_orm_model(product) if product else None,
        ))

    return MigrationDetail(**MigrationRead.from_orm_model(migration).model_dump(), products=products)


@router.post("/migrations", response_model=MigrationRead, status_code=201)
async def create_migration(payload: MigrationCreate, storage: MappingStorage = Depends(get_storage)):
    """Record a pending migration and run it in the background."""
    if not payload.product_ids:
        raise HTTPException(status_code=400, detail="Product IDs are required")

    migration = await _create_pending(storage, payload.product_ids, payload.options, payload.direction)
    launch_migration(migration.id, payload.product_ids, payload.direction)
    return migration


async def _run_batch(
    payload: BatchMigrateRequest,
    direction: MigrationDirection,
    storage: MappingStorage,
    service: MigrationService,
) -> BatchMigrateResponse:
    if not payload.product_ids:
        raise HTTPException(status_code=400, detail="Product IDs are required")

    migration = await _create_pending(storage, payload.product_ids, payload.options, direction)
    logger.info(f"Migrating {len(payload.product_ids)} products inline ({direction.value}), migration {migration.id}")
    try:
        report = await service.start_migration(migration.id, payload.product_ids, direction)
    except MigrationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Batch migration {migration.id} failed: {e}")
        raise HTTPException(status_code=500, detail=f"Migration failed: {e}")

    return BatchMigrateResponse(
        migration_id=migration.id,
        total=report.total,
        successful=report.successful,
        failed=report.failed,
        details=report.results,
    )


@router.post("/migrate/to-target", response_model=BatchMigrateResponse)
async def migrate_to_target(
    payload: BatchMigrateRequest,
    storage: MappingStorage = Depends(get_storage),
    service: MigrationService = Depends(get_migration_service),
):
    """Ozon -> Wildberries, synchronously"""
    return await _run_batch(payload, MigrationDirection.TO_TARGET, storage, service)


@router.post("/migrate/to-source", response_model=BatchMigrateResponse)
async def migrate_to_source(
    payload: BatchMigrateRequest,
    storage: MappingStorage = Depends(get_storage),
    service: MigrationService = Depends(get_migration_service),
):
    """Wildberries -> Ozon, synchronously"""
    return await _run_batch(payload, MigrationDirection.TO_SOURCE, storage, service)
