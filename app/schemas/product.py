"""
Schemas for marketplace products.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from app.core.enums import MarketplaceName
from app.schemas.base import BaseSchema

Scalar = Union[str, int, float, bool]


class AttributeValue(BaseModel):
    """One entry of Product.attributes; value is a scalar or a list of scalars."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    value: Optional[Union[Scalar, List[Scalar]]] = None
    value_id: Optional[Union[int, str]] = None

    @property
    def display_value(self) -> str:
        if isinstance(self.value, list):
            return ", ".join(str(v) for v in self.value if v not in (None, ""))
        return "" if self.value is None else str(self.value)


def parse_attribute(attr_id: str, entry: Any) -> AttributeValue:
    """
    Normalize one stored attribute entry.

    Bare values (as some marketplaces send characteristics) become
    {"name": attr_id, "value": entry}. Raises ValidationError for values that
    are neither scalars nor lists of scalars.
    """
    if isinstance(entry, AttributeValue):
        return entry
    if isinstance(entry, dict):
        value = entry.get("value")
        if isinstance(value, dict) and "value" in value:
            value = value["value"]
        return AttributeValue(
            name=str(entry.get("name") or ""),
            value=value,
            value_id=entry.get("value_id", entry.get("valueId")),
        )
    return AttributeValue(name=str(attr_id), value=entry)


def parse_attributes(raw: Optional[Dict[str, Any]]) -> Dict[str, AttributeValue]:
    """Normalize a whole attribute bag, keeping order; any bad entry raises."""
    return {str(attr_id): parse_attribute(str(attr_id), entry) for attr_id, entry in (raw or {}).items()}


class ProductBase(BaseSchema):
    external_id: str
    marketplace_id: MarketplaceName
    name: str
    sku: Optional[str] = None
    category_path: Optional[str] = None
    price: Optional[int] = None
    image_urls: List[str] = []
    attributes: Dict[str, AttributeValue] = {}
    has_analog_on_other: bool = False

    @field_validator('attributes', mode='before')
    @classmethod
    def validate_attributes(cls, v):
        return parse_attributes(v)

    @field_validator('image_urls', mode='before')
    @classmethod
    def validate_image_urls(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


class ProductCreate(ProductBase):
    pass


class ProductRead(ProductBase):
    id: int
    created_at: Optional[datetime] = None
