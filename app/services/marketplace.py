from abc import ABC, abstractmethod
from typing import Any, Dict, List

from app.core.enums import MarketplaceName
from app.schemas.platform.common import ListingResult
from app.schemas.product import ProductCreate


class MarketplaceClient(ABC):
    """
    Black-box contract the mapping and migration services rely on.

    create_listing and update_price report failure through their return value;
    the read operations raise the marketplace-specific API error.
    """

    marketplace: MarketplaceName

    @abstractmethod
    async def fetch_products(self) -> List[ProductCreate]:
        """Fetch the seller's catalogue, normalized to our product shape"""
        pass

    @abstractmethod
    async def get_categories(self) -> List[Dict[str, Any]]:
        """Category tree / subject list"""
        pass

    @abstractmethod
    async def get_category_attributes(self, category_id: int) -> List[Dict[str, Any]]:
        """Attribute schema of one category"""
        pass

    @abstractmethod
    async def create_listing(self, payload: Any) -> ListingResult:
        """Create a listing from a transformed payload"""
        pass

    @abstractmethod
    async def update_price(self, external_id: str, price: int) -> bool:
        """Set the price of an existing listing"""
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        pass
