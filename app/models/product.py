# app/models/product.py
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String, UniqueConstraint

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """
    A listing as it exists on one marketplace (Ozon or Wildberries).

    `attributes` is an ordered mapping of attribute id -> {"name", "value", "value_id"}.
    `has_analog_on_other` records whether an equivalent listing already exists
    on the other marketplace.
    """
    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("external_id", "marketplace_id", name="uq_products_external_marketplace"),
    )

    id = Column(Integer, primary_key=True)
    external_id = Column(String, nullable=False)
    marketplace_id = Column(String(32), nullable=False, index=True)
    name = Column(String, nullable=False)
    sku = Column(String)
    category_path = Column(String)
    price = Column(Integer)
    image_urls = Column(JSON, nullable=False, default=list)
    attributes = Column(JSON, nullable=False, default=dict)
    has_analog_on_other = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, marketplace={self.marketplace_id}, external_id={self.external_id})>"
