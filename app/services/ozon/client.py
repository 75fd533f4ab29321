import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import get_settings
from app.core.enums import MarketplaceName
from app.core.exceptions import OzonAPIError
from app.schemas.platform.common import ListingResult
from app.schemas.platform.ozon import OzonProductPayload
from app.schemas.product import ProductCreate
from app.services.marketplace import MarketplaceClient

logger = logging.getLogger(__name__)


class OzonClient(MarketplaceClient):
    """
    Asynchronous client for the Ozon Seller API (source marketplace).

    Authenticates with the Client-Id / Api-Key header pair and wraps the product
    list/info, category tree, category attribute, product import and price
    endpoints. All requests go through _make_request, which raises OzonAPIError
    on non-2xx responses and network failures.

    Documentation: https://docs.ozon.ru/api/seller
    """

    marketplace = MarketplaceName.OZON

    def __init__(
        self,
        client_id: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.client_id = (client_id if client_id is not None else settings.OZON_CLIENT_ID).strip()
        self.api_key = (api_key if api_key is not None else settings.OZON_API_KEY).strip()
        self.base_url = (base_url or settings.OZON_API_URL).rstrip("/")
        self.timeout = timeout or settings.MARKETPLACE_HTTP_TIMEOUT

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Client-Id": self.client_id,
            "Api-Key": self.api_key,
            "Content-Type": "application/json",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Any] = None,
        params: Optional[Dict] = None,
    ) -> Dict:
        """
        Make a request to the Ozon Seller API

        Raises:
            OzonAPIError: If the API request fails
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        logger.debug(f"Making {method} request to {url}")
        if data:
            logger.debug(f"Data: {json.dumps(data, default=str)[:500]}...")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    json=data,
                    params=params,
                )
        except httpx.TimeoutException as e:
            logger.error(f"Ozon timeout: {str(e)}")
            raise OzonAPIError(f"Request timed out: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"Ozon network error: {str(e)}")
            raise OzonAPIError(f"Network error: {str(e)}")

        if response.status_code not in (200, 201, 202, 204):
            logger.error(f"Ozon API error {response.status_code}: {response.text}")
            raise OzonAPIError(f"Request failed ({response.status_code}): {response.text}")

        if response.status_code == 204:
            return {}
        return response.json()

    async def test_connection(self) -> bool:
        try:
            await self._make_request("POST", "/v3/product/list", {"filter": {"visibility": "ALL"}, "last_id": "", "limit": 1})
            return True
        except OzonAPIError as e:
            logger.warning(f"Ozon connection test failed: {e}")
            return False

    async def fetch_products(self) -> List[ProductCreate]:
        """List the seller's products and merge in their info and attributes."""
        listing = await self._make_request(
            "POST", "/v3/product/list", {"filter": {"visibility": "ALL"}, "last_id": "", "limit": 100}
        )
        items = (listing.get("result") or {}).get("items") or []
        if not items:
            return []

        product_ids = [item["product_id"] for item in items]
        info = await self._make_request("POST", "/v3/product/info/list", {"product_id": product_ids})
        info_by_id = {p.get("id"): p for p in info.get("items") or (info.get("result") or {}).get("items") or []}

        attrs = await self._make_request(
            "POST", "/v4/product/info/attributes", {"filter": {"product_id": product_ids}, "limit": 100}
        )
        attrs_by_id = {a.get("id"): a.get("attributes") or [] for a in attrs.get("result") or []}

        products = []
        for item in items:
            pid = item["product_id"]
            details = info_by_id.get(pid, {})
            products.append(
                ProductCreate(
                    external_id=str(pid),
                    marketplace_id=MarketplaceName.OZON,
                    name=details.get("name") or item.get("name") or f"Ozon product {pid}",
                    sku=details.get("offer_id") or item.get("offer_id"),
                    category_path=details.get("category_name") or details.get("category_title"),
                    price=_to_int(details.get("price")),
                    image_urls=details.get("images") or [],
                    attributes=self.process_attributes(attrs_by_id.get(pid, [])),
                )
            )
        return products

    @staticmethod
    def process_attributes(raw_attributes: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Ozon attribute list -> {attribute_id: {name, value, value_id}}"""
        processed: Dict[str, Dict[str, Any]] = {}
        for attr in raw_attributes:
            attr_id = attr.get("attribute_id", attr.get("id"))
            if attr_id is None:
                continue
            values = attr.get("values") or []
            processed[str(attr_id)] = {
                "name": attr.get("attribute_name") or attr.get("name") or str(attr_id),
                "value": ", ".join(str(v.get("value")) for v in values if v.get("value") is not None),
                "value_id": next((v.get("dictionary_value_id") for v in values if v.get("dictionary_value_id")), None),
            }
        return processed

    async def get_categories(self) -> List[Dict[str, Any]]:
        response = await self._make_request("POST", "/v2/category/tree", {})
        return response.get("result") or []

    async def get_category_attributes(self, category_id: int) -> List[Dict[str, Any]]:
        response = await self._make_request("POST", "/v3/category/attribute", {"category_id": [category_id]})
        return response.get("result") or []

    async def create_listing(self, payload: OzonProductPayload) -> ListingResult:
        """
        Submit a product import. Ozon imports asynchronously, so the returned
        task id stands in for the product id until the import is processed.
        """
        try:
            response = await self._make_request("POST", "/v3/product/import", {"items": [payload.to_api_body()]})
        except OzonAPIError as e:
            return ListingResult(success=False, error=str(e))

        task_id = (response.get("result") or {}).get("task_id")
        if not task_id:
            return ListingResult(success=False, error="Ozon did not return an import task id")
        return ListingResult(success=True, external_id=str(task_id))

    async def update_price(self, external_id: str, price: int) -> bool:
        try:
            response = await self._make_request(
                "POST",
                "/v1/product/import/prices",
                {"prices": [{"product_id": _to_int(external_id), "price": str(price)}]},
            )
        except OzonAPIError as e:
            logger.error(f"Failed to update Ozon price for {external_id}: {e}")
            return False
        results = response.get("result") or []
        return all(r.get("updated", True) for r in results)


def _to_int(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None
