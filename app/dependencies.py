from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import MarketplaceName
from app.database import async_session
from app.services.marketplace import MarketplaceClient
from app.services.migration_service import MigrationService, create_migration_service
from app.services.ozon.client import OzonClient
from app.services.storage import MappingStorage
from app.services.wildberries.client import WildberriesClient


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


def get_storage(db: AsyncSession = Depends(get_db)) -> MappingStorage:
    """Dependency wrapping the request session in the persistence facade."""
    return MappingStorage(db)


def get_migration_service(storage: MappingStorage = Depends(get_storage)) -> MigrationService:
    return create_migration_service(storage)


def get_marketplace_client(marketplace: MarketplaceName) -> MarketplaceClient:
    """Client for the marketplace named in the request path."""
    if marketplace == MarketplaceName.OZON:
        return OzonClient()
    return WildberriesClient()
