import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import get_settings
from app.core.enums import MarketplaceName
from app.core.exceptions import WildberriesAPIError
from app.schemas.platform.common import ListingResult
from app.schemas.platform.wildberries import WildberriesCardPayload
from app.schemas.product import ProductCreate
from app.services.marketplace import MarketplaceClient

logger = logging.getLogger(__name__)


class WildberriesClient(MarketplaceClient):
    """
    Asynchronous client for the Wildberries supplier APIs (target marketplace).

    Two hosts are involved: the content API (cards, subjects, characteristics)
    and the supplier API (stocks, prices). Authentication is the raw API key in
    the Authorization header.

    Documentation: https://dev.wildberries.ru/openapi/api-information
    """

    marketplace = MarketplaceName.WILDBERRIES

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        content_api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.api_key = (api_key if api_key is not None else settings.WILDBERRIES_API_KEY).strip()
        self.base_url = (base_url or settings.WILDBERRIES_API_URL).rstrip("/")
        self.content_api_url = (content_api_url or settings.WILDBERRIES_CONTENT_API_URL).rstrip("/")
        self.timeout = timeout or settings.MARKETPLACE_HTTP_TIMEOUT

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _make_request(
        self,
        method: str,
        url: str,
        data: Optional[Any] = None,
        params: Optional[Dict] = None,
    ) -> Any:
        """
        Make a request to a Wildberries API host (url is absolute)

        Raises:
            WildberriesAPIError: If the API request fails
        """
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
            logger.error(f"Wildberries timeout: {str(e)}")
            raise WildberriesAPIError(f"Request timed out: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"Wildberries network error: {str(e)}")
            raise WildberriesAPIError(f"Network error: {str(e)}")

        if response.status_code not in (200, 201, 202, 204):
            logger.error(f"Wildberries API error {response.status_code}: {response.text}")
            raise WildberriesAPIError(f"Request failed ({response.status_code}): {response.text}")

        if response.status_code == 204:
            return {}
        return response.json()

    async def test_connection(self) -> bool:
        try:
            await self._make_request("GET", f"{self.content_api_url}/ping")
            return True
        except WildberriesAPIError as e:
            logger.warning(f"Wildberries connection test failed: {e}")
            return False

    async def fetch_products(self) -> List[ProductCreate]:
        """Walk the stock list and pull each card with its price."""
        stocks = await self._make_request("GET", f"{self.base_url}/api/v3/stocks/goods")
        products = []
        for stock in stocks.get("stocks") or []:
            nm_id = stock.get("nmId")
            if nm_id is None:
                continue
            cards = await self._make_request(
                "POST", f"{self.content_api_url}/content/v2/get/cards/detail", {"nm": nm_id}
            )
            card_list = cards.get("cards") or []
            if not card_list:
                logger.info(f"No card data found for Wildberries nmId {nm_id}")
                continue
            card = card_list[0]

            prices = await self._make_request("GET", f"{self.base_url}/api/v2/prices", params={"nmId": nm_id})
            price = prices[0].get("price") if isinstance(prices, list) and prices else None

            products.append(
                ProductCreate(
                    external_id=str(nm_id),
                    marketplace_id=MarketplaceName.WILDBERRIES,
                    name=card.get("title") or card.get("subjectName") or f"Wildberries product {nm_id}",
                    sku=card.get("vendorCode"),
                    category_path=card.get("subjectName"),
                    price=price,
                    image_urls=card.get("mediaFiles") or [],
                    attributes=self.process_characteristics(card.get("characteristics")),
                )
            )
        return products

    @staticmethod
    def process_characteristics(characteristics: Any) -> Dict[str, Dict[str, Any]]:
        """
        Cards carry characteristics either as {name: value} or as a list of
        {"id", "name", "value"}; both become {key: {name, value}}.
        """
        processed: Dict[str, Dict[str, Any]] = {}
        if isinstance(characteristics, dict):
            for key, value in characteristics.items():
                processed[str(key)] = {"name": str(key), "value": value}
        elif isinstance(characteristics, list):
            for item in characteristics:
                key = item.get("id", item.get("name"))
                if key is None:
                    continue
                processed[str(key)] = {"name": item.get("name") or str(key), "value": item.get("value")}
        return processed

    async def get_categories(self) -> List[Dict[str, Any]]:
        response = await self._make_request("GET", f"{self.content_api_url}/api/v1/directory/get/categories")
        return response.get("data") or []

    async def get_category_attributes(self, category_id: int) -> List[Dict[str, Any]]:
        response = await self._make_request(
            "GET", f"{self.content_api_url}/api/v1/directory/get/object/characteristics/{category_id}"
        )
        return response.get("data") or []

    async def create_listing(self, payload: WildberriesCardPayload) -> ListingResult:
        try:
            response = await self._make_request(
                "POST", f"{self.content_api_url}/api/v1/card/upload", payload.to_api_body()
            )
        except WildberriesAPIError as e:
            return ListingResult(success=False, error=str(e))

        if response.get("error"):
            return ListingResult(
                success=False,
                error=response.get("errorText") or "Wildberries rejected the card",
            )

        nm_id = (response.get("data") or {}).get("nmID")
        if not nm_id:
            return ListingResult(success=False, error="Wildberries did not return the created card id")
        return ListingResult(success=True, external_id=str(nm_id))

    async def update_price(self, external_id: str, price: int) -> bool:
        try:
            await self._make_request(
                "POST", f"{self.base_url}/api/v2/prices", [{"nmId": int(external_id), "price": price}]
            )
        except (WildberriesAPIError, ValueError) as e:
            logger.error(f"Failed to update Wildberries price for {external_id}: {e}")
            return False
        return True
