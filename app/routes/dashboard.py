import logging

from fastapi import APIRouter, Depends

from app.core.enums import MarketplaceName, MigrationStatus
from app.dependencies import get_storage
from app.services.storage import MappingStorage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(storage: MappingStorage = Depends(get_storage)):
    """Product counts per marketplace and migration outcomes"""
    ozon_products = await storage.count_products(MarketplaceName.OZON)
    wildberries_products = await storage.count_products(MarketplaceName.WILDBERRIES)
    completed = await storage.get_migrations_by_status([MigrationStatus.COMPLETED])
    unsuccessful = await storage.get_migrations_by_status([MigrationStatus.FAILED, MigrationStatus.PARTIAL])
    running = await storage.get_migrations_by_status([MigrationStatus.PENDING, MigrationStatus.IN_PROGRESS])

    return {
        "ozon_products": ozon_products,
        "wildberries_products": wildberries_products,
        "successful_migrations": len(completed),
        "failed_migrations": len(unsuccessful),
        "active_migrations": len(running),
    }
