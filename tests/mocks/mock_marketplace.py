from typing import Any, Dict, List, Optional

from app.core.enums import MarketplaceName
from app.schemas.platform.common import ListingResult
from app.schemas.product import ProductCreate
from app.services.marketplace import MarketplaceClient


class MockMarketplaceClient(MarketplaceClient):
    """Records calls; `should_fail` or a listed name in `fail_names` makes create_listing fail."""

    def __init__(self, marketplace: MarketplaceName = MarketplaceName.WILDBERRIES):
        self.marketplace = marketplace
        self.created: List[Any] = []
        self.price_updates: List[Dict[str, Any]] = []
        self.products: List[ProductCreate] = []
        self.categories: List[Dict[str, Any]] = []
        self.should_fail = False
        self.fail_names = set()
        self.price_update_result = True
        self.connected = True

    async def fetch_products(self) -> List[ProductCreate]:
        return list(self.products)

    async def get_categories(self) -> List[Dict[str, Any]]:
        return list(self.categories)

    async def get_category_attributes(self, category_id: int) -> List[Dict[str, Any]]:
        return [{"id": 1, "name": "Color", "category_id": category_id}]

    async def create_listing(self, payload: Any) -> ListingResult:
        if self.should_fail or payload.name in self.fail_names:
            return ListingResult(success=False, error="API unavailable")
        self.created.append(payload)
        return ListingResult(success=True, external_id=f"{self.marketplace.vendor_prefix}-{len(self.created)}")

    async def update_price(self, external_id: str, price: int) -> bool:
        self.price_updates.append({"external_id": external_id, "price": price})
        return self.price_update_result

    async def test_connection(self) -> bool:
        return self.connected

    def clear_history(self):
        self.created = []
        self.price_updates = []
