"""
Purpose: Pulls a marketplace's catalogue into the local products table.

Functionality: Fetches normalized products from a MarketplaceClient and upserts
each one by (external_id, marketplace_id). Existing rows keep their analog flag.
A product that fails to save is logged and counted; the sync carries on.
"""
import logging
from typing import Dict

from app.services.marketplace import MarketplaceClient

logger = logging.getLogger(__name__)


class ProductSyncService:
    def __init__(self, storage, client: MarketplaceClient):
        self.storage = storage
        self.client = client

    async def sync_products(self) -> Dict[str, int]:
        marketplace = self.client.marketplace.value
        products = await self.client.fetch_products()
        logger.info(f"Fetched {len(products)} products from {marketplace}")

        stats = {"total": len(products), "synced": 0, "failed": 0}
        for item in products:
            data = item.model_dump(mode="json")
            try:
                existing = await self.storage.get_product_by_external_id(item.external_id, marketplace)
                if existing:
                    data.pop("has_analog_on_other", None)
                    data.pop("external_id", None)
                    data.pop("marketplace_id", None)
                    await self.storage.update_product(existing.id, data)
                else:
                    await self.storage.create_product(data)
                stats["synced"] += 1
            except Exception as e:
                logger.error(f"Failed to save {marketplace} product {item.external_id}: {e}")
                stats["failed"] += 1

        logger.info(f"{marketplace} sync finished: {stats}")
        return stats
