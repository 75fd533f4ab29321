"""
Schemas for migrations, their per-product rows and batch reports.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.core.enums import MigrationDirection, MigrationProductStatus, MigrationStatus
from app.schemas.base import BaseSchema
from app.schemas.product import ProductRead


class MigrationOptions(BaseSchema):
    update_prices: bool = False
    update_stocks: bool = False
    skip_existing: bool = False


class MigrationCreate(BaseSchema):
    product_ids: List[int] = []
    options: MigrationOptions = Field(default_factory=MigrationOptions)
    direction: MigrationDirection = MigrationDirection.TO_TARGET

    @field_validator('product_ids')
    @classmethod
    def validate_product_ids(cls, v: List[int]) -> List[int]:
        # Preserve request order, drop repeats
        return list(dict.fromkeys(v))


class BatchMigrateRequest(BaseSchema):
    product_ids: List[int] = []
    options: MigrationOptions = Field(default_factory=MigrationOptions)

    @field_validator('product_ids')
    @classmethod
    def validate_product_ids(cls, v: List[int]) -> List[int]:
        return list(dict.fromkeys(v))


class MigrationRead(BaseSchema):
    id: int
    created_at: datetime
    completed_at: Optional[datetime] = None
    status: MigrationStatus
    direction: MigrationDirection
    total_products: int
    successful_products: int = 0
    failed_products: int = 0
    options: MigrationOptions = Field(default_factory=MigrationOptions)
    duration: Optional[int] = None

    @field_validator('options', mode='before')
    @classmethod
    def validate_options(cls, v):
        return v or {}


class MigrationProductRead(BaseSchema):
    id: int
    migration_id: int
    product_id: int
    status: MigrationProductStatus
    error_message: Optional[str] = None
    target_product_id: Optional[str] = None
    product: Optional[ProductRead] = None


class MigrationDetail(MigrationRead):
    products: List[MigrationProductRead] = []


class ItemResult(BaseModel):
    """
    Outcome of migrating one product.

    `retryable` separates transient marketplace/API failures from terminal ones
    (missing product, untransformable record).
    """
    product_id: int
    status: MigrationProductStatus
    target_product_id: Optional[str] = None
    error_message: Optional[str] = None
    retryable: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status == MigrationProductStatus.SUCCESS


class MigrationReport(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    results: List[ItemResult] = []

    def record(self, result: ItemResult) -> None:
        self.results.append(result)
        if result.succeeded:
            self.successful += 1
        else:
            self.failed += 1


class BatchMigrateResponse(BaseModel):
    migration_id: int
    total: int
    successful: int
    failed: int
    details: List[ItemResult]
