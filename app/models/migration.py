# app/models/migration.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.enums import MigrationDirection, MigrationStatus, MigrationProductStatus
from app.database import Base


class Migration(Base):
    """
    One batch moving a set of products between marketplaces.

    Lifecycle: pending -> in_progress -> completed | failed | partial.
    `product_ids` keeps the requested batch so an interrupted run can be relaunched.
    """
    __tablename__ = "migrations"

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(32), nullable=False, default=MigrationStatus.PENDING.value, index=True)
    direction = Column(String(16), nullable=False, default=MigrationDirection.TO_TARGET.value)
    total_products = Column(Integer, nullable=False)
    successful_products = Column(Integer, nullable=False, default=0)
    failed_products = Column(Integer, nullable=False, default=0)
    options = Column(JSON, nullable=False, default=dict)  # {"update_prices", "update_stocks", "skip_existing"}
    product_ids = Column(JSON, nullable=False, default=list)
    duration = Column(Integer, nullable=True)  # seconds

    products = relationship(
        "MigrationProduct",
        back_populates="migration",
        cascade="all, delete-orphan",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Migration(id={self.id}, status={self.status}, total={self.total_products})>"


class MigrationProduct(Base):
    """Per-product outcome within a migration; pending -> success | failed."""
    __tablename__ = "migration_products"
    __table_args__ = (
        UniqueConstraint("migration_id", "product_id", name="uq_migration_product"),
    )

    id = Column(Integer, primary_key=True)
    migration_id = Column(Integer, ForeignKey("migrations.id", ondelete="CASCADE"), nullable=False, index=True)
    # No FK: a requested id may not exist, and the failure row must still be recorded
    product_id = Column(Integer, nullable=False)
    status = Column(String(32), nullable=False, default=MigrationProductStatus.PENDING.value)
    error_message = Column(Text, nullable=True)
    target_product_id = Column(String, nullable=True)

    migration = relationship("Migration", back_populates="products", lazy="raise")

    def __repr__(self) -> str:
        return f"<MigrationProduct(migration_id={self.migration_id}, product_id={self.product_id}, status={self.status})>"
