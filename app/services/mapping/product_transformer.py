"""
Purpose: Builds creation payloads for one marketplace out of a product stored
for the other.

Functionality: to_target turns an Ozon product into a Wildberries card
(category via CategoryResolver, attributes via AttributeResolver, subject id
from the matched category mapping). to_source does the reverse with the
mapping tables read backwards. Both generate a plain-text description from the
product name and its characteristics.

Any failure is raised as TransformationError; the caller treats it as fatal for
that one product only.
"""
import logging

from pydantic import ValidationError

from app.core.enums import MarketplaceName
from app.core.exceptions import TransformationError
from app.schemas.platform.ozon import OzonAttributePayload, OzonProductPayload
from app.schemas.platform.wildberries import WildberriesCardPayload
from app.schemas.product import parse_attribute
from app.services.mapping.attribute_resolver import AttributeResolver
from app.services.mapping.category_resolver import CategoryResolver

logger = logging.getLogger(__name__)


def _marketplace_str(value) -> str:
    return value.value if isinstance(value, MarketplaceName) else str(value)


class ProductTransformer:
    def __init__(self, category_resolver: CategoryResolver, attribute_resolver: AttributeResolver):
        self.category_resolver = category_resolver
        self.attribute_resolver = attribute_resolver

    async def to_target(self, product) -> WildberriesCardPayload:
        """Ozon product -> Wildberries card payload"""
        try:
            if not product.name:
                raise ValueError("product has no name")

            source_category = product.category_path or ""
            target_category = await self.category_resolver.resolve(source_category)
            attributes = await self.attribute_resolver.resolve(product.attributes, product.category_path)

            subject_id = 0
            mapping = await self.category_resolver.find_by_target(target_category)
            if mapping and mapping.target_subject_id:
                subject_id = mapping.target_subject_id

            return WildberriesCardPayload(
                name=product.name,
                vendor_code=product.sku or f"{MarketplaceName.OZON.vendor_prefix}-{product.external_id}",
                category_path=target_category,
                subject_id=subject_id,
                price=product.price,
                description=self.generate_description(product),
                image_urls=list(product.image_urls or []),
                attributes=attributes,
                original_external_id=product.external_id,
                original_marketplace_id=_marketplace_str(product.marketplace_id),
            )
        except TransformationError:
            raise
        except Exception as e:
            logger.error(f"Failed to transform product {product.id} for Wildberries: {e}")
            raise TransformationError(f"Failed to transform product {product.id}: {e}") from e

    async def to_source(self, product) -> OzonProductPayload:
        """Wildberries product -> Ozon product payload"""
        try:
            if not product.name:
                raise ValueError("product has no name")

            mapping = None
            if product.category_path:
                mapping = await self.category_resolver.find_by_target(product.category_path)
            category = mapping.source_category if mapping else (product.category_path or "")

            attributes = await self.attribute_resolver.resolve_reverse(product.attributes, product.category_path)

            return OzonProductPayload(
                name=product.name,
                offer_id=product.sku or f"{MarketplaceName.WILDBERRIES.vendor_prefix}-{product.external_id}",
                category=category,
                category_id=mapping.source_category_id if mapping else None,
                price=product.price,
                description=self.generate_description(product),
                images=list(product.image_urls or []),
                attributes={
                    attr_id: OzonAttributePayload(name=entry["name"], value=entry["value"])
                    for attr_id, entry in attributes.items()
                },
                original_external_id=product.external_id,
                original_marketplace_id=_marketplace_str(product.marketplace_id),
            )
        except TransformationError:
            raise
        except Exception as e:
            logger.error(f"Failed to transform product {product.id} for Ozon: {e}")
            raise TransformationError(f"Failed to transform product {product.id}: {e}") from e

    @staticmethod
    def generate_description(product) -> str:
        """
        Name, a blank line, then one "- name: value" line per characteristic
        that has both a name and a value.
        """
        description = f"{product.name}\n\n"
        lines = []
        for attr_id, entry in (product.attributes or {}).items():
            try:
                attribute = parse_attribute(str(attr_id), entry)
            except ValidationError:
                continue
            value = attribute.display_value
            if attribute.name and value:
                lines.append(f"- {attribute.name}: {value}\n")
        if product.attributes:
            description += "Characteristics:\n" + "".join(lines)
        return description
