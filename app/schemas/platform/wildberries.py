from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class WildberriesCardPayload(BaseModel):
    """Creation payload for a Wildberries product card (target marketplace)"""
    name: str
    vendor_code: str
    category_path: str
    subject_id: int = 0
    price: Optional[int] = None
    description: str = ""
    image_urls: List[str] = []
    attributes: Dict[str, Any] = {}
    original_external_id: Optional[str] = None
    original_marketplace_id: Optional[str] = None

    def to_api_body(self) -> Dict[str, Any]:
        """Shape expected by the Wildberries card upload endpoint"""
        return {
            "subjectID": self.subject_id,
            "vendorCode": self.vendor_code,
            "title": self.name,
            "description": self.description,
            "characteristics": self.attributes,
            "images": self.image_urls,
            "price": {"priceRrc": self.price or 0},
        }
