"""
Purpose: Converts a product's attribute bag between the Ozon and Wildberries
attribute schemas.

Functionality: Each attribute is looked up in the mapping store, category-scoped
mapping first and global mapping second. Unmapped attributes get a mapping
created on the spot (target id derived from the attribute name), so the store
grows with every new attribute it sees. Mappings with an empty name on either
side are backfilled as they are used.

Failures are isolated per attribute: a store error or an unusable value on one
attribute is logged and that attribute is left out of the result; the rest
still resolve.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from app.schemas.product import parse_attribute

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[\W_]+")


def derive_attribute_id(name: str) -> str:
    """'Screen Size (in)' -> 'screen_size_in'"""
    return _NON_ALNUM.sub("_", (name or "").lower()).strip("_")


def humanize_attribute_id(attribute_id: str) -> str:
    """'screen_size' -> 'Screen Size'"""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), attribute_id.replace("_", " "))


class AttributeResolver:
    def __init__(self, storage):
        self.storage = storage

    async def _category_scope(self, category_path: Optional[str], *, by_target: bool = False) -> Optional[int]:
        """Id of the CategoryMapping for category_path, None for the global scope"""
        if not category_path:
            return None
        try:
            if by_target:
                for mapping in await self.storage.get_all_category_mappings():
                    if mapping.target_category == category_path:
                        return mapping.id
                return None
            mapping = await self.storage.get_category_mapping(category_path)
            return mapping.id if mapping else None
        except Exception as e:
            logger.error(f"Error looking up category scope for '{category_path}': {e}")
            return None

    async def resolve(self, source_attributes: Dict[str, Any], source_category_path: Optional[str]) -> Dict[str, Any]:
        """
        Map source (Ozon) attributes onto target (Wildberries) attribute ids.

        Returns {target_attribute_id: value}, in the order of the input.
        """
        if not source_attributes:
            return {}

        category_id = await self._category_scope(source_category_path)
        resolved: Dict[str, Any] = {}

        for attr_id, entry in source_attributes.items():
            attr_id = str(attr_id)
            try:
                attribute = parse_attribute(attr_id, entry)
                mapping = None
                if category_id is not None:
                    mapping = await self.storage.get_attribute_mapping(attr_id, category_id)
                if mapping is None:
                    mapping = await self.storage.get_attribute_mapping(attr_id, None)

                if mapping is not None:
                    if not mapping.source_attribute_name or not mapping.target_attribute_name:
                        await self.storage.update_attribute_mapping(mapping.id, {
                            "source_attribute_name": mapping.source_attribute_name or attribute.name or attr_id,
                            "target_attribute_name": mapping.target_attribute_name or mapping.target_attribute_id,
                        })
                    resolved[mapping.target_attribute_id] = attribute.value
                    continue

                name = attribute.name or attr_id
                target_id = derive_attribute_id(name) or attr_id
                mapping = await self.storage.create_attribute_mapping({
                    "source_attribute_id": attr_id,
                    "source_attribute_name": name,
                    "target_attribute_id": target_id,
                    "target_attribute_name": name,
                    "category_id": category_id,
                })
                logger.info(
                    f"Created attribute mapping '{attr_id}' -> '{mapping.target_attribute_id}' "
                    f"(category_id={category_id})"
                )
                resolved[mapping.target_attribute_id] = attribute.value
            except Exception as e:
                logger.error(f"Error mapping attribute '{attr_id}': {e}")

        return resolved

    async def resolve_reverse(
        self, target_attributes: Dict[str, Any], target_category_path: Optional[str]
    ) -> Dict[str, Dict[str, Any]]:
        """
        Map target (Wildberries) attributes back onto source (Ozon) attribute ids.

        Returns {source_attribute_id: {"name": ..., "value": ...}}.
        """
        if not target_attributes:
            return {}

        category_id = await self._category_scope(target_category_path, by_target=True)
        try:
            mappings: List[Any] = []
            if category_id is not None:
                mappings = list(await self.storage.get_attribute_mappings_by_category(category_id))
            if not mappings:
                mappings = list(await self.storage.get_all_attribute_mappings())
        except Exception as e:
            logger.error(f"Error loading attribute mappings for '{target_category_path}': {e}")
            mappings = []

        resolved: Dict[str, Dict[str, Any]] = {}
        for key, entry in target_attributes.items():
            key = str(key)
            try:
                attribute = parse_attribute(key, entry)
                mapping = next((m for m in mappings if m.target_attribute_id == key), None)

                if mapping is not None:
                    if not mapping.target_attribute_name:
                        await self.storage.update_attribute_mapping(mapping.id, {"target_attribute_name": key})
                    resolved[mapping.source_attribute_id] = {
                        "name": mapping.source_attribute_name or mapping.source_attribute_id,
                        "value": attribute.value,
                    }
                    continue

                name = humanize_attribute_id(key)
                mapping = await self.storage.create_attribute_mapping({
                    "source_attribute_id": key,
                    "source_attribute_name": name,
                    "target_attribute_id": key,
                    "target_attribute_name": name,
                    "category_id": category_id,
                })
                mappings.append(mapping)
                logger.info(f"Created reverse attribute mapping for '{key}' (category_id={category_id})")
                resolved[mapping.source_attribute_id] = {
                    "name": mapping.source_attribute_name or name,
                    "value": attribute.value,
                }
            except Exception as e:
                logger.error(f"Error mapping attribute '{key}' back to source: {e}")

        return resolved
