"""
Purpose: Translates an Ozon category label into the Wildberries category label
used when building a card.

Functionality: Exact lookup in the mapping store first. Failing that, a keyword
heuristic scans the existing mappings' target labels; a hit is cached as a new
exact mapping so the next call for the same label skips the scan. With no hit
the source label is returned as-is and nothing is stored.

Role: First step of ProductTransformer.to_target; also provides the reverse
lookup (target label -> mapping) used by to_source and the upsert behind the
category mapping API.
"""
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class CategoryResolver:
    """Resolves category labels across marketplaces through the mapping store"""

    def __init__(self, storage):
        self.storage = storage

    async def resolve(self, source_category: str) -> str:
        """
        Return the target category for source_category.

        Never raises: a failing store is logged and the input is returned unchanged.
        """
        try:
            mapping = await self.storage.get_category_mapping(source_category)
            if mapping:
                return mapping.target_category

            keywords = self.extract_keywords(source_category)
            if not keywords:
                return source_category

            for candidate in await self.storage.get_all_category_mappings():
                target = (candidate.target_category or "").lower()
                if any(keyword in target for keyword in keywords):
                    logger.info(
                        f"Category '{source_category}' matched '{candidate.target_category}' "
                        f"via mapping id={candidate.id}, caching it"
                    )
                    await self.storage.create_category_mapping({
                        "source_category": source_category,
                        "target_category": candidate.target_category,
                        "target_subject_id": candidate.target_subject_id,
                    })
                    return candidate.target_category

            logger.warning(f"No category mapping found for '{source_category}', using it unchanged")
            return source_category
        except Exception as e:
            logger.error(f"Error resolving category '{source_category}': {e}")
            return source_category

    @staticmethod
    def extract_keywords(category: str) -> List[str]:
        """'Electronics/Mobile Phones' -> ['electronics', 'mobile', 'phones']"""
        keywords = []
        for part in (category or "").split("/"):
            for word in part.split():
                word = word.strip().lower()
                if word and word not in keywords:
                    keywords.append(word)
        return keywords

    async def find_mapping(self, source_category: str):
        return await self.storage.get_category_mapping(source_category)

    async def find_by_target(self, target_category: str):
        """First (lowest id) mapping whose target label equals target_category"""
        for mapping in await self.storage.get_all_category_mappings():
            if mapping.target_category == target_category:
                return mapping
        return None

    async def upsert(
        self,
        source_category: str,
        target_category: str,
        target_subject_id: Optional[int] = None,
        source_category_id: Optional[int] = None,
    ):
        """Explicit mapping: update the row for source_category, or create it."""
        data: Dict[str, Any] = {
            "target_category": target_category,
            "target_subject_id": target_subject_id,
            "source_category_id": source_category_id,
        }
        existing = await self.storage.get_category_mapping(source_category)
        if existing:
            logger.info(f"Updating category mapping '{source_category}' -> '{target_category}'")
            return await self.storage.update_category_mapping(existing.id, data)

        logger.info(f"Creating category mapping '{source_category}' -> '{target_category}'")
        return await self.storage.create_category_mapping({"source_category": source_category, **data})
