from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class OzonAttributePayload(BaseModel):
    name: str
    value: Any = None


class OzonProductPayload(BaseModel):
    """Creation payload for an Ozon product (source marketplace)"""
    name: str
    offer_id: str
    category: str
    category_id: Optional[int] = None
    price: Optional[int] = None
    description: str = ""
    images: List[str] = []
    attributes: Dict[str, OzonAttributePayload] = {}
    original_external_id: Optional[str] = None
    original_marketplace_id: Optional[str] = None

    def to_api_body(self) -> Dict[str, Any]:
        """Shape expected by Ozon's /v3/product/import item"""
        return {
            "name": self.name,
            "offer_id": self.offer_id,
            "category_id": self.category_id or 0,
            "price": str(self.price or 0),
            "description": self.description,
            "images": self.images,
            "attributes": [
                {"id": attr_id, "name": attr.name, "values": [{"value": attr.value}]}
                for attr_id, attr in self.attributes.items()
            ],
        }
