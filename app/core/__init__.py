"""
Core module exports.
"""
from .enums import (
    MarketplaceName,
    MigrationDirection,
    MigrationStatus,
    MigrationProductStatus,
)

from .exceptions import (
    BaseServiceError,
    MappingError,
    ProductNotFoundError,
    MigrationNotFoundError,
    TransformationError,
    MarketplaceAPIError,
    OzonAPIError,
    WildberriesAPIError,
    DatabaseError,
)
