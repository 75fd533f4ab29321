class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class MappingError(BaseServiceError):
    """Raised when category/attribute mappings cannot be read or written."""
    pass

class ProductNotFoundError(BaseServiceError):
    """Raised when product is not found."""
    pass

class MigrationNotFoundError(BaseServiceError):
    """Raised when a migration record is not found."""
    pass

class TransformationError(BaseServiceError):
    """Raised when a product cannot be converted to the other marketplace's format."""
    pass

class MarketplaceAPIError(BaseServiceError):
    """Base exception for marketplace API errors."""
    pass

class OzonAPIError(MarketplaceAPIError):
    """Raised when Ozon API calls fail."""
    pass

class WildberriesAPIError(MarketplaceAPIError):
    """Raised when Wildberries API calls fail."""
    pass

class DatabaseError(Exception):
    """Exception raised for database-related errors."""
    pass
