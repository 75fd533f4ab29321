"""
Purpose: Drives product migrations between Ozon and Wildberries.

Functionality: Products are processed one at a time, in request order. Each
product is loaded, transformed for the destination marketplace and submitted
through that marketplace's client. The outcome becomes an ItemResult; nothing
about a single product aborts the batch. start_migration additionally tracks
progress on a persisted Migration record (per-product MigrationProduct rows,
running success/failure counters, final status and duration) so it can run
detached from the request that queued it. migrate_batch runs the same per-item
logic without a Migration record and returns an in-memory report.

Role: Called by the migration routes and by the background runner.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Union

from app.core.enums import MarketplaceName, MigrationDirection, MigrationProductStatus, MigrationStatus
from app.core.exceptions import MarketplaceAPIError, MigrationNotFoundError, TransformationError
from app.schemas.migration import ItemResult, MigrationOptions, MigrationReport
from app.schemas.platform.ozon import OzonProductPayload
from app.schemas.platform.wildberries import WildberriesCardPayload
from app.services.mapping import AttributeResolver, CategoryResolver, ProductTransformer
from app.services.marketplace import MarketplaceClient
from app.services.ozon.client import OzonClient
from app.services.wildberries.client import WildberriesClient

logger = logging.getLogger(__name__)

ALREADY_EXISTS = "already_exists"


class _RowState(NamedTuple):
    id: int
    status: str
    target_product_id: Optional[str]
    error_message: Optional[str]


def final_status(successful: int, failed: int) -> MigrationStatus:
    if failed > 0 and successful == 0:
        return MigrationStatus.FAILED
    if failed > 0:
        return MigrationStatus.PARTIAL
    return MigrationStatus.COMPLETED


def _marketplace_str(value) -> str:
    return value.value if isinstance(value, MarketplaceName) else str(value)


class MigrationService:
    """
    Migrates products from the source marketplace (Ozon) to the target
    marketplace (Wildberries) or back, depending on MigrationDirection.
    """

    def __init__(
        self,
        storage,
        transformer: ProductTransformer,
        source_client: MarketplaceClient,
        target_client: MarketplaceClient,
    ):
        self.storage = storage
        self.transformer = transformer
        self.source_client = source_client
        self.target_client = target_client

    def _destination_client(self, direction: MigrationDirection) -> MarketplaceClient:
        return self.target_client if direction == MigrationDirection.TO_TARGET else self.source_client

    async def _transform(self, product, direction: MigrationDirection):
        if direction == MigrationDirection.TO_TARGET:
            return await self.transformer.to_target(product)
        return await self.transformer.to_source(product)

    async def migrate_product(
        self,
        product_id: int,
        options: MigrationOptions,
        direction: MigrationDirection = MigrationDirection.TO_TARGET,
    ) -> ItemResult:
        """
        Migrate one product and report the outcome. Never raises.

        Marketplace failures are retryable; a missing, misplaced or
        untransformable product is not.
        """
        try:
            product = await self.storage.get_product(product_id)
            if product is None:
                return self._failed(product_id, f"Product {product_id} not found")

            origin = direction.origin
            if _marketplace_str(product.marketplace_id) != origin.value:
                return self._failed(
                    product_id,
                    f"Product {product_id} belongs to {product.marketplace_id}, expected {origin.value}",
                )

            if options.skip_existing and product.has_analog_on_other:
                logger.info(
                    f"Product {product.name} (id={product_id}) already has an analog on "
                    f"{direction.destination.value}, skipping"
                )
                return ItemResult(
                    product_id=product_id,
                    status=MigrationProductStatus.SUCCESS,
                    target_product_id=ALREADY_EXISTS,
                )

            price = product.price
            payload = await self._transform(product, direction)

            client = self._destination_client(direction)
            logger.info(f"Creating product on {direction.destination.value}: {payload.name}")
            listing = await client.create_listing(payload)
            if not listing.success or not listing.external_id:
                error = listing.error or "Unknown error"
                logger.error(f"Marketplace rejected product {product_id}: {error}")
                return self._failed(product_id, error, retryable=True)

            try:
                await self.storage.update_product(product_id, {"has_analog_on_other": True})
                await self._materialize(payload, listing.external_id, direction)
            except Exception as e:
                # Listing already exists remotely, the item stays successful
                logger.error(f"Product {product_id} migrated but local records were not updated: {e}")

            if options.update_prices and price is not None:
                await self._update_price(client, listing.external_id, price)

            logger.info(f"Product {payload.name} migrated, {direction.destination.value} id: {listing.external_id}")
            return ItemResult(
                product_id=product_id,
                status=MigrationProductStatus.SUCCESS,
                target_product_id=listing.external_id,
            )
        except TransformationError as e:
            return self._failed(product_id, str(e))
        except MarketplaceAPIError as e:
            return self._failed(product_id, str(e), retryable=True)
        except Exception as e:
            logger.exception(f"Error processing product {product_id}")
            return self._failed(product_id, str(e) or type(e).__name__)

    @staticmethod
    def _failed(product_id: int, message: str, retryable: bool = False) -> ItemResult:
        logger.error(f"Migration of product {product_id} failed: {message}")
        return ItemResult(
            product_id=product_id,
            status=MigrationProductStatus.FAILED,
            error_message=message,
            retryable=retryable,
        )

    async def _update_price(self, client: MarketplaceClient, external_id: str, price: int) -> None:
        try:
            if not await client.update_price(external_id, price):
                logger.warning(f"Price update for {external_id} was not accepted")
        except Exception as e:
            logger.warning(f"Price update for {external_id} failed: {e}")

    async def _materialize(
        self,
        payload: Union[WildberriesCardPayload, OzonProductPayload],
        external_id: str,
        direction: MigrationDirection,
    ):
        """Record the newly created listing as a Product of the destination marketplace"""
        destination = direction.destination
        if isinstance(payload, WildberriesCardPayload):
            data: Dict[str, Any] = {
                "sku": payload.vendor_code,
                "category_path": payload.category_path,
                "image_urls": payload.image_urls,
                "attributes": {key: {"name": key, "value": value} for key, value in payload.attributes.items()},
            }
        else:
            data = {
                "sku": payload.offer_id,
                "category_path": payload.category,
                "image_urls": payload.images,
                "attributes": {key: attr.model_dump() for key, attr in payload.attributes.items()},
            }
        data.update(name=payload.name, price=payload.price, has_analog_on_other=True)

        existing = await self.storage.get_product_by_external_id(external_id, destination.value)
        if existing:
            return await self.storage.update_product(existing.id, data)
        return await self.storage.create_product(
            {"external_id": external_id, "marketplace_id": destination.value, **data}
        )

    async def migrate_batch(
        self,
        product_ids: Iterable[int],
        options: Optional[MigrationOptions] = None,
        direction: MigrationDirection = MigrationDirection.TO_TARGET,
    ) -> MigrationReport:
        """Migrate products sequentially without a persisted Migration record"""
        options = options or MigrationOptions()
        product_ids = list(product_ids)
        logger.info(f"Migrating {len(product_ids)} products ({direction.value})")

        report = MigrationReport(total=len(product_ids))
        for product_id in product_ids:
            report.record(await self.migrate_product(product_id, options, direction))

        logger.info(
            f"Batch {direction.value} finished: {report.successful} successful, {report.failed} failed"
        )
        return report

    async def migrate_all_to_target(
        self, product_ids: Iterable[int], options: Optional[MigrationOptions] = None
    ) -> MigrationReport:
        return await self.migrate_batch(product_ids, options, MigrationDirection.TO_TARGET)

    async def migrate_all_to_source(
        self, product_ids: Iterable[int], options: Optional[MigrationOptions] = None
    ) -> MigrationReport:
        return await self.migrate_batch(product_ids, options, MigrationDirection.TO_SOURCE)

    async def start_migration(
        self,
        migration_id: int,
        product_ids: List[int],
        direction: Optional[MigrationDirection] = None,
    ) -> MigrationReport:
        """
        Run a persisted migration to completion.

        Moves the Migration through in_progress to completed, failed or partial,
        keeping one MigrationProduct row per product and the counters current
        after every item. Products whose row is already terminal (a rerun after
        an interruption) are not processed again; their outcome still counts.

        A migration that already reached completed, failed or partial is not
        run again; its stored outcome is returned unchanged.

        Raises:
            MigrationNotFoundError: the Migration record is missing or vanished
                mid-run. The record is marked failed (if it still exists) first.
        """
        migration = await self.storage.get_migration(migration_id)
        if migration is None:
            raise MigrationNotFoundError(f"Migration {migration_id} not found")
        if MigrationStatus(migration.status).is_terminal:
            logger.warning(f"Migration {migration_id} already {migration.status}, not running it again")
            return await self._stored_report(migration)

        try:
            direction = MigrationDirection(direction or migration.direction)
            options = MigrationOptions.model_validate(migration.options or {})

            await self._update_migration(migration_id, {"status": MigrationStatus.IN_PROGRESS.value})
            logger.info(f"Migration {migration_id} started: {len(product_ids)} products ({direction.value})")

            started = time.monotonic()
            report = MigrationReport(total=len(product_ids))
            # Plain snapshots; they must survive a session rollback mid-batch
            rows = {
                row.product_id: _RowState(row.id, row.status, row.target_product_id, row.error_message)
                for row in await self.storage.get_migration_products(migration_id)
            }

            for product_id in product_ids:
                row = rows.get(product_id)
                if row is not None and row.status != MigrationProductStatus.PENDING.value:
                    logger.info(f"Migration {migration_id}: product {product_id} already {row.status}, skipping")
                    report.record(ItemResult(
                        product_id=product_id,
                        status=MigrationProductStatus(row.status),
                        target_product_id=row.target_product_id,
                        error_message=row.error_message,
                    ))
                    continue

                if row is None:
                    created = await self.storage.create_migration_product({
                        "migration_id": migration_id,
                        "product_id": product_id,
                        "status": MigrationProductStatus.PENDING.value,
                    })
                    row = _RowState(created.id, MigrationProductStatus.PENDING.value, None, None)
                    rows[product_id] = row

                result = await self.migrate_product(product_id, options, direction)
                await self.storage.update_migration_product(row.id, {
                    "status": result.status.value,
                    "error_message": result.error_message,
                    "target_product_id": result.target_product_id,
                })
                report.record(result)

                if result.succeeded:
                    await self._update_migration(migration_id, {"successful_products": report.successful})
                else:
                    await self._update_migration(migration_id, {"failed_products": report.failed})

            status = final_status(report.successful, report.failed)
            await self._update_migration(migration_id, {
                "status": status.value,
                "successful_products": report.successful,
                "failed_products": report.failed,
                "completed_at": datetime.now(timezone.utc),
                "duration": int(time.monotonic() - started),
            })
            logger.info(
                f"Migration {migration_id} {status.value}: "
                f"{report.successful} successful, {report.failed} failed"
            )
            return report
        except Exception as e:
            logger.error(f"Error in migration {migration_id}: {e}")
            try:
                await self.storage.update_migration(migration_id, {
                    "status": MigrationStatus.FAILED.value,
                    "completed_at": datetime.now(timezone.utc),
                    "duration": 0,
                })
            except Exception as update_error:
                logger.error(f"Could not mark migration {migration_id} as failed: {update_error}")
            raise

    async def _stored_report(self, migration) -> MigrationReport:
        rows = await self.storage.get_migration_products(migration.id)
        return MigrationReport(
            total=migration.total_products,
            successful=migration.successful_products or 0,
            failed=migration.failed_products or 0,
            results=[
                ItemResult(
                    product_id=row.product_id,
                    status=MigrationProductStatus(row.status),
                    target_product_id=row.target_product_id,
                    error_message=row.error_message,
                )
                for row in rows
            ],
        )

    async def _update_migration(self, migration_id: int, data: Dict[str, Any]):
        migration = await self.storage.update_migration(migration_id, data)
        if migration is None:
            raise MigrationNotFoundError(f"Migration {migration_id} not found")
        return migration

    async def get_migration_status(self, migration_id: int):
        migration = await self.storage.get_migration(migration_id)
        if migration is None:
            raise MigrationNotFoundError(f"Migration {migration_id} not found")
        return migration


def create_migration_service(storage) -> MigrationService:
    """Wire the resolvers, transformer and both marketplace clients around one storage"""
    transformer = ProductTransformer(CategoryResolver(storage), AttributeResolver(storage))
    return MigrationService(storage, transformer, OzonClient(), WildberriesClient())
