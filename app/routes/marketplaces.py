# app/routes/marketplaces.py
"""
Per-marketplace catalogue endpoints: the locally synced products, a sync
trigger, and pass-through reads of the marketplace's categories.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from app.core.enums import MarketplaceName
from app.core.exceptions import MarketplaceAPIError
from app.dependencies import get_marketplace_client, get_storage
from app.schemas.product import ProductRead
from app.services.marketplace import MarketplaceClient
from app.services.product_sync_service import ProductSyncService
from app.services.storage import MappingStorage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/{marketplace}", tags=["marketplaces"])


@router.get("/products", response_model=List[ProductRead])
async def list_products(
    marketplace: MarketplaceName,
    query: Optional[str] = None,
    storage: MappingStorage = Depends(get_storage),
):
    if query:
        return await storage.search_products(query, marketplace)
    return await storage.get_products_by_marketplace(marketplace)


@router.get("/products/{product_id}", response_model=ProductRead)
async def get_product(marketplace: MarketplaceName, product_id: int, storage: MappingStorage = Depends(get_storage)):
    product = await storage.get_product(product_id)
    if product is None or product.marketplace_id != marketplace.value:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/sync")
async def sync_products(
    marketplace: MarketplaceName,
    storage: MappingStorage = Depends(get_storage),
    client: MarketplaceClient = Depends(get_marketplace_client),
):
    """Pull the marketplace catalogue into the local products table"""
    try:
        return await ProductSyncService(storage, client).sync_products()
    except MarketplaceAPIError as e:
        logger.error(f"Error syncing {marketplace.value} products: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to sync {marketplace.value} products: {e}")


@router.get("/connection")
async def connection_status(
    marketplace: MarketplaceName,
    client: MarketplaceClient = Depends(get_marketplace_client),
):
    return {"marketplace": marketplace.value, "connected": await client.test_connection()}


@router.get("/categories")
async def list_categories(
    marketplace: MarketplaceName,
    client: MarketplaceClient = Depends(get_marketplace_client),
):
    try:
        return await client.get_categories()
    except MarketplaceAPIError as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch {marketplace.value} categories: {e}")


@router.get("/categories/{category_id}/attributes")
async def list_category_attributes(
    marketplace: MarketplaceName,
    category_id: int,
    client: MarketplaceClient = Depends(get_marketplace_client),
):
    try:
        return await client.get_category_attributes(category_id)
    except MarketplaceAPIError as e:
        raise HTTPException(
            status_code=502,
            detail=f"Failed to fetch attributes of {marketplace.value} category {category_id}: {e}",
        )
