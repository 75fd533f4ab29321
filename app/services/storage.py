"""
Purpose: Persistence facade used by the mapping and migration services.

Functionality: Wraps an AsyncSession and exposes record-level CRUD for products,
category mappings, attribute mappings, migrations and migration products. Every
write commits immediately; there is no transaction spanning a whole batch.

Mapping creation is insert-or-ignore: the schema carries unique constraints on
category_mappings.source_category and on attribute_mappings
(source_attribute_id, category scope), so two resolvers racing to create the same
mapping end up sharing one row instead of inserting duplicates. The insert uses
ON CONFLICT DO NOTHING followed by a re-select, so losing the race never rolls
back the session a running batch is holding.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import MarketplaceName, MigrationStatus
from app.core.exceptions import MappingError
from app.models.attribute_mapping import AttributeMapping
from app.models.category_mapping import CategoryMapping
from app.models.migration import Migration, MigrationProduct
from app.models.product import Product

logger = logging.getLogger(__name__)


class MappingStorage:
    """Record-level persistence operations over one AsyncSession"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _save(self, instance):
        self.db.add(instance)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return instance

    async def _apply(self, instance, data: Dict[str, Any]):
        for key, value in data.items():
            if not hasattr(instance, key):
                raise AttributeError(f"{type(instance).__name__} has no field '{key}'")
            setattr(instance, key, value)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return instance

    async def _insert_or_ignore(self, model, data: Dict[str, Any]) -> bool:
        """
        INSERT ... ON CONFLICT DO NOTHING. Returns False when a unique
        constraint swallowed the row; the session is not rolled back.
        """
        insert = pg_insert if self.db.get_bind().dialect.name == "postgresql" else sqlite_insert
        try:
            result = await self.db.execute(insert(model).values(**data).on_conflict_do_nothing())
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return result.rowcount > 0

    # Products

    async def get_product(self, product_id: int) -> Optional[Product]:
        return await self.db.get(Product, product_id)

    async def get_product_by_external_id(self, external_id: str, marketplace_id: str) -> Optional[Product]:
        result = await self.db.execute(
            select(Product).where(
                Product.external_id == external_id,
                Product.marketplace_id == _marketplace_value(marketplace_id),
            )
        )
        return result.scalars().first()

    async def get_products_by_marketplace(self, marketplace_id: str) -> List[Product]:
        result = await self.db.execute(
            select(Product)
            .where(Product.marketplace_id == _marketplace_value(marketplace_id))
            .order_by(Product.id)
        )
        return list(result.scalars().all())

    async def search_products(self, query: str, marketplace_id: str) -> List[Product]:
        pattern = f"%{query.lower()}%"
        result = await self.db.execute(
            select(Product)
            .where(
                Product.marketplace_id == _marketplace_value(marketplace_id),
                or_(func.lower(Product.name).like(pattern), func.lower(Product.sku).like(pattern)),
            )
            .order_by(Product.id)
        )
        return list(result.scalars().all())

    async def count_products(self, marketplace_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Product.id)).where(Product.marketplace_id == _marketplace_value(marketplace_id))
        )
        return result.scalar() or 0

    async def create_product(self, data: Dict[str, Any]) -> Product:
        data = dict(data)
        data["marketplace_id"] = _marketplace_value(data["marketplace_id"])
        return await self._save(Product(**data))

    async def update_product(self, product_id: int, data: Dict[str, Any]) -> Optional[Product]:
        product = await self.get_product(product_id)
        if product is None:
            return None
        return await self._apply(product, data)

    # Category mappings

    async def get_category_mapping(self, source_category: str) -> Optional[CategoryMapping]:
        result = await self.db.execute(
            select(CategoryMapping).where(CategoryMapping.source_category == source_category)
        )
        return result.scalars().first()

    async def get_category_mapping_by_id(self, mapping_id: int) -> Optional[CategoryMapping]:
        return await self.db.get(CategoryMapping, mapping_id)

    async def get_all_category_mappings(self) -> List[CategoryMapping]:
        result = await self.db.execute(select(CategoryMapping).order_by(CategoryMapping.id))
        return list(result.scalars().all())

    async def create_category_mapping(self, data: Dict[str, Any]) -> CategoryMapping:
        """Insert a mapping, or return the existing one for the same source_category."""
        source_category = data["source_category"]
        existing = await self.get_category_mapping(source_category)
        if existing:
            return existing

        if not await self._insert_or_ignore(CategoryMapping, data):
            logger.info(f"Category mapping for '{source_category}' was created concurrently, reusing it")
        mapping = await self.get_category_mapping(source_category)
        if mapping is None:
            raise MappingError(f"Category mapping for '{source_category}' could not be stored")
        return mapping

    async def update_category_mapping(self, mapping_id: int, data: Dict[str, Any]) -> Optional[CategoryMapping]:
        mapping = await self.get_category_mapping_by_id(mapping_id)
        if mapping is None:
            return None
        return await self._apply(mapping, data)

    async def delete_category_mapping(self, mapping_id: int) -> bool:
        # Scoped attribute mappings go with their category
        await self.db.execute(delete(AttributeMapping).where(AttributeMapping.category_id == mapping_id))
        result = await self.db.execute(delete(CategoryMapping).where(CategoryMapping.id == mapping_id))
        await self.db.commit()
        return result.rowcount > 0

    # Attribute mappings

    async def get_attribute_mapping(
        self, source_attribute_id: str, category_id: Optional[int] = None
    ) -> Optional[AttributeMapping]:
        """
        Mapping for one source attribute in exactly one scope: the given category,
        or the global scope when category_id is None. Lowest id wins if legacy
        duplicates exist.
        """
        scope = (
            AttributeMapping.category_id.is_(None)
            if category_id is None
            else AttributeMapping.category_id == category_id
        )
        result = await self.db.execute(
            select(AttributeMapping)
            .where(AttributeMapping.source_attribute_id == source_attribute_id, scope)
            .order_by(AttributeMapping.id)
            .limit(1)
        )
        return result.scalars().first()

    async def get_attribute_mapping_by_id(self, mapping_id: int) -> Optional[AttributeMapping]:
        return await self.db.get(AttributeMapping, mapping_id)

    async def get_attribute_mappings_by_category(self, category_id: int) -> List[AttributeMapping]:
        result = await self.db.execute(
            select(AttributeMapping)
            .where(AttributeMapping.category_id == category_id)
            .order_by(AttributeMapping.id)
        )
        return list(result.scalars().all())

    async def get_all_attribute_mappings(self) -> List[AttributeMapping]:
        result = await self.db.execute(select(AttributeMapping).order_by(AttributeMapping.id))
        return list(result.scalars().all())

    async def create_attribute_mapping(self, data: Dict[str, Any]) -> AttributeMapping:
        """Insert a mapping, or return the existing one for the same attribute and scope."""
        source_attribute_id = data["source_attribute_id"]
        category_id = data.get("category_id")
        existing = await self.get_attribute_mapping(source_attribute_id, category_id)
        if existing:
            return existing

        if not await self._insert_or_ignore(AttributeMapping, data):
            logger.info(
                f"Attribute mapping for '{source_attribute_id}' (category={category_id}) "
                f"was created concurrently, reusing it"
            )
        mapping = await self.get_attribute_mapping(source_attribute_id, category_id)
        if mapping is None:
            raise MappingError(f"Attribute mapping for '{source_attribute_id}' could not be stored")
        return mapping

    async def update_attribute_mapping(self, mapping_id: int, data: Dict[str, Any]) -> Optional[AttributeMapping]:
        mapping = await self.get_attribute_mapping_by_id(mapping_id)
        if mapping is None:
            return None
        return await self._apply(mapping, data)

    async def delete_attribute_mapping(self, mapping_id: int) -> bool:
        result = await self.db.execute(delete(AttributeMapping).where(AttributeMapping.id == mapping_id))
        await self.db.commit()
        return result.rowcount > 0

    # Migrations

    async def get_migration(self, migration_id: int) -> Optional[Migration]:
        return await self.db.get(Migration, migration_id)

    async def get_all_migrations(self) -> List[Migration]:
        result = await self.db.execute(select(Migration).order_by(Migration.created_at.desc(), Migration.id.desc()))
        return list(result.scalars().all())

    async def get_recent_migrations(self, limit: int) -> List[Migration]:
        result = await self.db.execute(
            select(Migration).order_by(Migration.created_at.desc(), Migration.id.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def get_migrations_by_status(self, statuses: Sequence[MigrationStatus]) -> List[Migration]:
        values = [s.value for s in statuses]
        result = await self.db.execute(
            select(Migration).where(Migration.status.in_(values)).order_by(Migration.id)
        )
        return list(result.scalars().all())

    async def create_migration(self, data: Dict[str, Any]) -> Migration:
        return await self._save(Migration(**data))

    async def update_migration(self, migration_id: int, data: Dict[str, Any]) -> Optional[Migration]:
        migration = await self.get_migration(migration_id)
        if migration is None:
            return None
        return await self._apply(migration, data)

    # Migration products

    async def get_migration_products(self, migration_id: int) -> List[MigrationProduct]:
        result = await self.db.execute(
            select(MigrationProduct)
            .where(MigrationProduct.migration_id == migration_id)
            .order_by(MigrationProduct.id)
        )
        return list(result.scalars().all())

    async def get_migration_product(self, migration_id: int, product_id: int) -> Optional[MigrationProduct]:
        result = await self.db.execute(
            select(MigrationProduct).where(
                MigrationProduct.migration_id == migration_id,
                MigrationProduct.product_id == product_id,
            )
        )
        return result.scalars().first()

    async def create_migration_product(self, data: Dict[str, Any]) -> MigrationProduct:
        return await self._save(MigrationProduct(**data))

    async def update_migration_product(self, migration_product_id: int, data: Dict[str, Any]) -> Optional[MigrationProduct]:
        migration_product = await self.db.get(MigrationProduct, migration_product_id)
        if migration_product is None:
            return None
        return await self._apply(migration_product, data)


def _marketplace_value(marketplace_id) -> str:
    return marketplace_id.value if isinstance(marketplace_id, MarketplaceName) else str(marketplace_id)
