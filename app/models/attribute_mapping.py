# app/models/attribute_mapping.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint

from app.database import Base


class AttributeMapping(Base):
    """
    Maps a source attribute id onto a target attribute id.

    A NULL category_id is the global scope; otherwise the mapping only applies
    to products of that CategoryMapping. One row per (source_attribute_id, scope):
    the composite constraint covers scoped rows and the partial index covers the
    global scope, where NULLs would otherwise compare distinct.
    """
    __tablename__ = "attribute_mappings"

    id = Column(Integer, primary_key=True)
    source_attribute_id = Column(String, nullable=False, index=True)
    source_attribute_name = Column(String, nullable=False, default="")
    target_attribute_id = Column(String, nullable=False, index=True)
    target_attribute_name = Column(String, nullable=False, default="")
    category_id = Column(Integer, ForeignKey("category_mappings.id", ondelete="CASCADE"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("source_attribute_id", "category_id", name="uq_attribute_mapping_scope"),
        Index(
            "uq_attribute_mapping_global",
            "source_attribute_id",
            unique=True,
            postgresql_where=category_id.is_(None),
            sqlite_where=category_id.is_(None),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<AttributeMapping(id={self.id}, {self.source_attribute_id!r} -> "
            f"{self.target_attribute_id!r}, category_id={self.category_id})>"
        )
