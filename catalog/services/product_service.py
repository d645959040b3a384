"""
Purpose: The write path for product prices, stock, state, files and data sheets.

Every write follows the same order:
1. validate the typed input (CreatePriceRecord, AdjustStock, BulkStateUpdate...)
2. write the rows in one transaction and commit
3. hand a WriteEvent to CacheInvalidationService

Invalidation is never issued before the commit. If it were, a concurrent read
could repopulate the cache with pre-write data between the delete and the
commit.

Price and stock are never stored on the product row: a price change is a new
price_histories row, and a stock movement is a stock_histories row plus an
upsert of the agency snapshot in the same transaction.
"""

import logging
import math
from contextlib import asynccontextmanager
from typing import List, Optional, Sequence, AsyncIterator

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.core.config import Settings, get_settings
from catalog.core.exceptions import (
    FileNotLinkedError,
    InsufficientStockError,
    InvalidPriceError,
    ProductNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from catalog.core.utils import utc_now
from catalog.integrations.events import WriteEvent
from catalog.models import (
    Agency,
    AgencyProduct,
    DataSheet,
    DataSheetField,
    DataSheetValue,
    PriceHistory,
    Product,
    ProductFile,
    StockHistory,
)
from catalog.schemas.data_sheet import DataSheetValueInput
from catalog.schemas.price import CreatePriceRecord, PriceHistoryPage, PriceHistoryRead, PriceStats
from catalog.schemas.product import BulkStateUpdate, ProductRead, ProductUpdate
from catalog.schemas.stock import AdjustStock, StockMovementRead
from catalog.services.cache_invalidation import CacheInvalidationService
from catalog.services.computed_values import ComputedValueResolver
from catalog.services.pricing import apply_write_rounding, round_price
from catalog.services.product_store import AgencyStock, ProductStore

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        invalidation: CacheInvalidationService,
        store: ProductStore,
        resolver: ComputedValueResolver,
        settings: Optional[Settings] = None,
    ):
        self.session_factory = session_factory
        self.invalidation = invalidation
        self.store = store
        self.resolver = resolver
        self.settings = settings or get_settings()

    @asynccontextmanager
    async def _transaction(self, operation: str, product_id: Optional[int] = None) -> AsyncIterator[AsyncSession]:
        """Session for one write. Driver errors roll back and surface as StoreUnavailableError."""
        async with self.session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Write '{operation}' failed for product {product_id}: {e}")
                raise StoreUnavailableError(operation, product_id, str(e)) from e
            except Exception:
                await session.rollback()
                raise

    async def _get_product(self, session: AsyncSession, product_id: int) -> Product:
        product = await session.get(Product, product_id)
        if not product:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")
        return product

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    async def record_price(self, data: CreatePriceRecord) -> PriceHistoryRead:
        """
        Append a price to the product's history and invalidate its caches.

        Args:
            data: Validated price record

        Returns:
            The stored row, with write-time rounding applied

        Raises:
            InvalidPriceError: If a price is negative or not finite
            ProductNotFoundError: If the product does not exist
        """
        amounts = (data.price, data.min_final_price, data.unit_cost)
        if any(not math.isfinite(amount) or amount < 0 for amount in amounts):
            raise InvalidPriceError(data.product_id, data.price)

        round_to_thousands = self.settings.PRICE_ROUND_TO_THOUSAND
        async with self._transaction("record_price", data.product_id) as session:
            await self._get_product(session, data.product_id)

            record = PriceHistory(
                product_id=data.product_id,
                price=apply_write_rounding(data.price, round_to_thousands),
                min_final_price=apply_write_rounding(data.min_final_price, round_to_thousands),
                unit_cost=round_price(data.unit_cost),
                user_id=data.user_id,
                created_at=data.created_at or utc_now(),
            )
            session.add(record)
            await session.commit()

        logger.info(f"Recorded price {record.price} for product {data.product_id}")
        await self.invalidation.handle(WriteEvent.price_inserted(data.product_id))
        return PriceHistoryRead.model_validate(record)

    async def get_price_history(self, product_id: int, limit: int = 20, offset: int = 0) -> PriceHistoryPage:
        rows, count = await self.store.get_price_history(product_id, limit=limit, offset=offset)
        return PriceHistoryPage(rows=[PriceHistoryRead.model_validate(row) for row in rows], count=count)

    async def get_price_stats(self, product_id: int) -> PriceStats:
        average, minimum, maximum = await self.store.get_price_stats(product_id)
        return PriceStats(
            average=round_price(average) if average is not None else None,
            minimum=round_price(minimum) if minimum is not None else None,
            maximum=round_price(maximum) if maximum is not None else None,
        )

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    async def adjust_stock(self, data: AdjustStock) -> StockMovementRead:
        """
        Apply a signed stock movement at one agency.

        The agency snapshot is read with FOR UPDATE, checked, upserted and the
        ledger row inserted in the same transaction. New snapshots start active;
        an existing snapshot keeps its state.

        Raises:
            InsufficientStockError: If the movement would leave the agency below zero
            ProductNotFoundError: If the product does not exist
            ValidationError: If the agency does not exist
        """
        async with self._transaction("adjust_stock", data.product_id) as session:
            await self._get_product(session, data.product_id)
            if not await session.get(Agency, data.agency_id):
                raise ValidationError(f"Agency with ID {data.agency_id} not found")

            query = (
                select(AgencyProduct)
                .where(
                    AgencyProduct.product_id == data.product_id,
                    AgencyProduct.agency_id == data.agency_id,
                )
                .with_for_update()
            )
            snapshot = (await session.execute(query)).scalar_one_or_none()

            previous_stock = snapshot.current_stock if snapshot else 0
            current_stock = previous_stock + data.quantity
            if current_stock < 0:
                raise InsufficientStockError(data.product_id, abs(data.quantity), previous_stock)

            if snapshot:
                snapshot.current_stock = current_stock
                snapshot.updated_at = utc_now()
            else:
                session.add(
                    AgencyProduct(
                        agency_id=data.agency_id,
                        product_id=data.product_id,
                        current_stock=current_stock,
                        state=True,
                    )
                )

            movement = StockHistory(
                product_id=data.product_id,
                agency_id=data.agency_id,
                user_id=data.user_id,
                quantity=data.quantity,
                previous_stock=previous_stock,
                current_stock=current_stock,
                type=data.movement_type,
                reference=data.reference,
            )
            session.add(movement)
            await session.commit()

        logger.info(
            f"Stock {data.movement_type.value} for product {data.product_id} at agency {data.agency_id}: "
            f"{previous_stock} -> {current_stock}"
        )
        await self.invalidation.handle(WriteEvent.stock_adjusted(data.product_id))
        return StockMovementRead.model_validate(movement)

    async def set_agency_stock_state(self, product_id: int, agency_id: int, active: bool) -> None:
        """Include or exclude one agency's snapshot from the product's stock total."""
        async with self._transaction("set_agency_stock_state", product_id) as session:
            query = select(AgencyProduct).where(
                AgencyProduct.product_id == product_id,
                AgencyProduct.agency_id == agency_id,
            )
            snapshot = (await session.execute(query)).scalar_one_or_none()
            if not snapshot:
                raise ProductNotFoundError(f"Product {product_id} has no stock at agency {agency_id}")
            snapshot.state = active
            await session.commit()

        await self.invalidation.handle(WriteEvent.stock_adjusted(product_id))

    async def get_stock_by_agency(self, product_id: int) -> List[AgencyStock]:
        return await self.resolver.get_stock_by_agency(product_id)

    # ------------------------------------------------------------------
    # Product rows
    # ------------------------------------------------------------------

    async def bulk_update_state(self, data: BulkStateUpdate) -> int:
        """
        Activate or deactivate many products in one statement.

        The product lines of the given ids are read in the same transaction so
        their brand listings can be dropped along with the product keys.

        Returns:
            Number of rows updated
        """
        async with self._transaction("bulk_update_state") as session:
            product_line_ids = (
                await session.execute(
                    select(Product.product_line_id)
                    .where(Product.id.in_(data.ids), Product.product_line_id.is_not(None))
                    .distinct()
                )
            ).scalars().all()
            result = await session.execute(
                update(Product)
                .where(Product.id.in_(data.ids))
                .values(state=data.state, updated_at=utc_now())
            )
            await session.commit()
            affected = result.rowcount or 0

        logger.info(f"Set state={data.state} on {affected} of {len(data.ids)} products")
        await self.invalidation.handle(WriteEvent.bulk_updated(data.ids, sorted(product_line_ids)))
        return affected

    async def update_product(self, product_id: int, data: ProductUpdate) -> ProductRead:
        """
        Partially update identity fields.

        Raises:
            ProductNotFoundError: If the product does not exist
            ValidationError: If reference or ERP code collide with another product
        """
        changes = data.model_dump(exclude_unset=True)
        async with self._transaction("update_product", product_id) as session:
            product = await self._get_product(session, product_id)

            # Moving between lines or brands, or toggling state, changes the listings of both lines
            affected_lines = set()
            if {"product_line_id", "brand_id", "state"} & changes.keys():
                affected_lines.update(
                    line_id for line_id in (product.product_line_id, changes.get("product_line_id")) if line_id
                )

            for attr, value in changes.items():
                setattr(product, attr, value)
            product.updated_at = utc_now()

            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ValidationError(f"Product {product_id} conflicts with an existing product: {e.orig}") from e

        await self.invalidation.handle(WriteEvent.product_updated(product_id, sorted(affected_lines)))
        return ProductRead.model_validate(product)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def set_principal_image(self, product_id: int, file_id: int) -> None:
        """Mark one linked file as principal and clear the flag on the others."""
        async with self._transaction("set_principal_image", product_id) as session:
            links = (
                await session.execute(select(ProductFile).where(ProductFile.product_id == product_id))
            ).scalars().all()
            if not any(link.file_id == file_id for link in links):
                raise FileNotLinkedError(f"File {file_id} is not linked to product {product_id}")

            for link in links:
                link.principal = link.file_id == file_id
            await session.commit()

        await self.invalidation.handle(WriteEvent.files_changed(product_id))

    async def remove_product_file(self, product_id: int, file_id: int) -> None:
        """Unlink a file from a product. The stored blob is not touched."""
        async with self._transaction("remove_product_file", product_id) as session:
            result = await session.execute(
                delete(ProductFile).where(
                    ProductFile.product_id == product_id,
                    ProductFile.file_id == file_id,
                )
            )
            if not result.rowcount:
                raise FileNotLinkedError(f"File {file_id} is not linked to product {product_id}")
            await session.commit()

        await self.invalidation.handle(WriteEvent.files_changed(product_id))

    # ------------------------------------------------------------------
    # Data sheets
    # ------------------------------------------------------------------

    async def upsert_data_sheet_values(self, data_sheet_id: int, values: Sequence[DataSheetValueInput]) -> int:
        """
        Create or update one value per field on a data sheet.

        Returns:
            Number of values written
        """
        async with self._transaction("upsert_data_sheet_values") as session:
            data_sheet = await session.get(DataSheet, data_sheet_id)
            if not data_sheet:
                raise ValidationError(f"Data sheet with ID {data_sheet_id} not found")

            existing = {
                value.data_sheet_field_id: value
                for value in (
                    await session.execute(
                        select(DataSheetValue).where(DataSheetValue.data_sheet_id == data_sheet_id)
                    )
                ).scalars().all()
            }

            for item in values:
                row = existing.get(item.data_sheet_field_id)
                if row:
                    row.value = item.value
                    row.updated_at = utc_now()
                else:
                    row = DataSheetValue(
                        data_sheet_id=data_sheet_id,
                        data_sheet_field_id=item.data_sheet_field_id,
                        value=item.value,
                    )
                    session.add(row)
                    existing[item.data_sheet_field_id] = row

            product_line_id = data_sheet.product_line_id
            product_id = data_sheet.product_id
            await session.commit()

        await self.invalidation.handle(
            WriteEvent.data_sheet_changed(
                product_line_ids=[product_line_id],
                product_ids=[product_id] if product_id else [],
            )
        )
        return len(values)

    async def delete_data_sheet_values(self, field_ids: Sequence[int]) -> int:
        """
        Delete every value of the given fields, across all data sheets.

        The products whose sheets hold those values and the lines owning the
        fields are read before the delete, so their info and filter entries
        are dropped afterwards.
        """
        if not field_ids:
            return 0

        field_ids = list(field_ids)
        async with self._transaction("delete_data_sheet_values") as session:
            product_ids = (
                await session.execute(
                    select(DataSheet.product_id)
                    .join(DataSheetValue, DataSheetValue.data_sheet_id == DataSheet.id)
                    .where(
                        DataSheetValue.data_sheet_field_id.in_(field_ids),
                        DataSheet.product_id.is_not(None),
                    )
                    .distinct()
                )
            ).scalars().all()
            product_line_ids = (
                await session.execute(
                    select(DataSheetField.product_line_id).where(DataSheetField.id.in_(field_ids)).distinct()
                )
            ).scalars().all()

            result = await session.execute(
                delete(DataSheetValue).where(DataSheetValue.data_sheet_field_id.in_(field_ids))
            )
            await session.commit()
            deleted = result.rowcount or 0

        logger.info(f"Deleted {deleted} data sheet values for fields {field_ids}")
        await self.invalidation.handle(
            WriteEvent.data_sheet_changed(
                product_line_ids=sorted(product_line_ids),
                product_ids=sorted(product_ids),
            )
        )
        return deleted
