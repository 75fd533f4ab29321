from .product import Product
from .category_mapping import CategoryMapping
from .attribute_mapping import AttributeMapping
from .migration import Migration, MigrationProduct

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'Product',
    'CategoryMapping',
    'AttributeMapping',
    'Migration',
    'MigrationProduct',
]
