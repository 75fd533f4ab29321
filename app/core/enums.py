"""
Shared enums and constants used across the application.
"""

from enum import Enum


class MarketplaceName(str, Enum):
    OZON = "ozon"
    WILDBERRIES = "wildberries"

    @property
    def vendor_prefix(self) -> str:
        # Used for generated vendor codes / offer ids, e.g. "OZ-12345"
        return "OZ" if self is MarketplaceName.OZON else "WB"

    @property
    def other(self) -> "MarketplaceName":
        return MarketplaceName.WILDBERRIES if self is MarketplaceName.OZON else MarketplaceName.OZON


# Ozon is the source catalog, Wildberries the target one.
SOURCE_MARKETPLACE = MarketplaceName.OZON
TARGET_MARKETPLACE = MarketplaceName.WILDBERRIES


class MigrationDirection(str, Enum):
    """Which way a batch moves products"""
    TO_TARGET = "to_target"  # Ozon -> Wildberries
    TO_SOURCE = "to_source"  # Wildberries -> Ozon

    @property
    def origin(self) -> MarketplaceName:
        return SOURCE_MARKETPLACE if self is MigrationDirection.TO_TARGET else TARGET_MARKETPLACE

    @property
    def destination(self) -> MarketplaceName:
        return self.origin.other


class MigrationStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL = "partial"

    @property
    def is_terminal(self) -> bool:
        return self in (MigrationStatus.COMPLETED, MigrationStatus.FAILED, MigrationStatus.PARTIAL)


class MigrationProductStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
