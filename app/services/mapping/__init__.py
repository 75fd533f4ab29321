from .category_resolver import CategoryResolver
from .attribute_resolver import AttributeResolver, derive_attribute_id
from .product_transformer import ProductTransformer

__all__ = [
    'CategoryResolver',
    'AttributeResolver',
    'ProductTransformer',
    'derive_attribute_id',
]
