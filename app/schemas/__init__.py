"""
Schema exports for the application.
"""

# Base schemas
from .base import BaseSchema

# Product schemas
from .product import AttributeValue, ProductBase, ProductCreate, ProductRead, parse_attribute, parse_attributes

# Mapping schemas
from .mapping import (
    CategoryMappingCreate,
    CategoryMappingRead,
    AttributeMappingCreate,
    AttributeMappingUpdate,
    AttributeMappingRead,
)

# Migration schemas
from .migration import (
    MigrationOptions,
    MigrationCreate,
    MigrationRead,
    MigrationDetail,
    MigrationProductRead,
    ItemResult,
    MigrationReport,
    BatchMigrateRequest,
    BatchMigrateResponse,
)

# Platform-Specific Schemas
from .platform.common import ListingResult
from .platform.ozon import OzonProductPayload, OzonAttributePayload
from .platform.wildberries import WildberriesCardPayload
