"""
Purpose: Read-only queries against the persistent store used by the cache layer
and the services built on it.

Every public method opens its own AsyncSession from the session factory, so
callers can run several lookups concurrently with asyncio.gather (price, stock
and joined lookups for one product) without sharing a session between tasks.

Driver and connection failures are logged with the product id and operation
and re-raised as StoreUnavailableError. "No rows" is never an error here:
methods return None, 0 or empty collections.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Dict, AsyncIterator

from sqlalchemy import select, func, or_, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.core.enums import PromotionState
from catalog.core.exceptions import StoreUnavailableError
from catalog.core.utils import utc_now
from catalog.models import (
    Agency,
    AgencyProduct,
    Brand,
    DataSheet,
    DataSheetField,
    DataSheetValue,
    File,
    PriceHistory,
    Product,
    ProductFile,
    ProductLine,
    Promotion,
    promotions_products,
)

logger = logging.getLogger(__name__)


@dataclass
class ProductLookups:
    """Rows joined to a product for the info payload."""
    brand: Optional[Brand] = None
    product_line: Optional[ProductLine] = None
    files: List[Tuple[File, bool]] = field(default_factory=list)  # (file, principal)
    data_sheet: Optional[DataSheet] = None
    data_sheet_values: List[Tuple[DataSheetField, Optional[str]]] = field(default_factory=list)

    @property
    def principal_file(self) -> Optional[File]:
        for file, principal in self.files:
            if principal:
                return file
        return None


@dataclass
class AgencyStock:
    agency_id: int
    agency_name: str
    current_stock: int
    active: bool


class ProductStore:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str, product_id: Optional[int] = None) -> AsyncIterator[AsyncSession]:
        try:
            async with self.session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Store query '{operation}' failed for product {product_id}: {e}")
            raise StoreUnavailableError(operation, product_id, str(e)) from e

    # ------------------------------------------------------------------
    # Computed value sources
    # ------------------------------------------------------------------

    async def find_latest_price_history(self, product_id: int) -> Optional[PriceHistory]:
        """Most recent price row by created_at, ties broken by highest id."""
        async with self._session("find_latest_price_history", product_id) as session:
            query = (
                select(PriceHistory)
                .where(PriceHistory.product_id == product_id)
                .order_by(PriceHistory.created_at.desc(), PriceHistory.id.desc())
                .limit(1)
            )
            result = await session.execute(query)
            return result.scalars().first()

    async def sum_active_agency_stock(self, product_id: int) -> int:
        async with self._session("sum_active_agency_stock", product_id) as session:
            query = (
                select(func.coalesce(func.sum(AgencyProduct.current_stock), 0))
                .where(
                    AgencyProduct.product_id == product_id,
                    AgencyProduct.state.is_(True),
                )
            )
            total = await session.scalar(query)
            return int(total or 0)

    async def find_agency_stock(self, product_id: int) -> List[AgencyStock]:
        async with self._session("find_agency_stock", product_id) as session:
            query = (
                select(AgencyProduct, Agency.name)
                .join(Agency, Agency.id == AgencyProduct.agency_id)
                .where(AgencyProduct.product_id == product_id)
                .order_by(Agency.id)
            )
            result = await session.execute(query)
            return [
                AgencyStock(
                    agency_id=row.agency_id,
                    agency_name=name,
                    current_stock=row.current_stock,
                    active=row.state,
                )
                for row, name in result.all()
            ]

    # ------------------------------------------------------------------
    # Identity and joined lookups
    # ------------------------------------------------------------------

    async def find_product(self, product_id: int) -> Optional[Product]:
        async with self._session("find_product", product_id) as session:
            result = await session.execute(select(Product).where(Product.id == product_id))
            return result.scalar_one_or_none()

    async def find_brand(self, product_id: int) -> Optional[Brand]:
        async with self._session("find_brand", product_id) as session:
            query = (
                select(Brand)
                .join(Product, Product.brand_id == Brand.id)
                .where(Product.id == product_id)
            )
            result = await session.execute(query)
            return result.scalars().first()

    async def find_product_line(self, product_id: int) -> Optional[ProductLine]:
        async with self._session("find_product_line", product_id) as session:
            query = (
                select(ProductLine)
                .join(Product, Product.product_line_id == ProductLine.id)
                .where(Product.id == product_id)
            )
            result = await session.execute(query)
            return result.scalars().first()

    async def find_product_files(self, product_id: int) -> List[Tuple[File, bool]]:
        """Linked files, principal first."""
        async with self._session("find_product_files", product_id) as session:
            query = (
                select(File, ProductFile.principal)
                .join(ProductFile, ProductFile.file_id == File.id)
                .where(ProductFile.product_id == product_id)
                .order_by(ProductFile.principal.desc(), File.id)
            )
            result = await session.execute(query)
            return [(file, bool(principal)) for file, principal in result.all()]

    async def find_product_data_sheet(
        self, product_id: int
    ) -> Tuple[Optional[DataSheet], List[Tuple[DataSheetField, Optional[str]]]]:
        """
        The product's data sheet (the original one wins) with its field values.
        Fields of the product line without a value are returned with None.
        """
        async with self._session("find_product_data_sheet", product_id) as session:
            sheet_query = (
                select(DataSheet)
                .where(DataSheet.product_id == product_id)
                .order_by(DataSheet.original.desc(), DataSheet.id)
                .limit(1)
            )
            data_sheet = (await session.execute(sheet_query)).scalars().first()
            if not data_sheet:
                return None, []

            values_query = (
                select(DataSheetField, DataSheetValue.value)
                .outerjoin(
                    DataSheetValue,
                    and_(
                        DataSheetValue.data_sheet_field_id == DataSheetField.id,
                        DataSheetValue.data_sheet_id == data_sheet.id,
                    ),
                )
                .where(DataSheetField.product_line_id == data_sheet.product_line_id)
                .order_by(DataSheetField.id)
            )
            result = await session.execute(values_query)
            return data_sheet, [(data_field, value) for data_field, value in result.all()]

    async def find_joined_lookups(self, product_id: int) -> ProductLookups:
        """Brand, product line, files and data sheet, fetched concurrently."""
        brand, product_line, files, (data_sheet, values) = await asyncio.gather(
            self.find_brand(product_id),
            self.find_product_line(product_id),
            self.find_product_files(product_id),
            self.find_product_data_sheet(product_id),
        )
        return ProductLookups(
            brand=brand,
            product_line=product_line,
            files=files,
            data_sheet=data_sheet,
            data_sheet_values=values,
        )

    async def find_active_promotion(self, product_id: int) -> Optional[Promotion]:
        """Latest active promotion currently in its date window."""
        now = utc_now()
        async with self._session("find_active_promotion", product_id) as session:
            query = (
                select(Promotion)
                .join(promotions_products, promotions_products.c.promotion_id == Promotion.id)
                .where(
                    promotions_products.c.product_id == product_id,
                    Promotion.state == PromotionState.ACTIVE.value,
                    or_(Promotion.start_date.is_(None), Promotion.start_date <= now),
                    or_(Promotion.end_date.is_(None), Promotion.end_date >= now),
                )
                .order_by(Promotion.created_at.desc(), Promotion.id.desc())
                .limit(1)
            )
            result = await session.execute(query)
            return result.scalars().first()

    # ------------------------------------------------------------------
    # Price history reads
    # ------------------------------------------------------------------

    async def get_price_history(
        self, product_id: int, limit: int = 20, offset: int = 0
    ) -> Tuple[List[PriceHistory], int]:
        async with self._session("get_price_history", product_id) as session:
            count = await session.scalar(
                select(func.count(PriceHistory.id)).where(PriceHistory.product_id == product_id)
            )
            query = (
                select(PriceHistory)
                .where(PriceHistory.product_id == product_id)
                .order_by(PriceHistory.created_at.desc(), PriceHistory.id.desc())
                .limit(limit)
                .offset(offset)
            )
            rows = (await session.execute(query)).scalars().all()
            return list(rows), int(count or 0)

    async def get_price_stats(self, product_id: int) -> Tuple[Optional[float], Optional[float], Optional[float]]:
        """(average, minimum, maximum) of the product's prices, all None without history."""
        async with self._session("get_price_stats", product_id) as session:
            query = select(
                func.avg(PriceHistory.price),
                func.min(PriceHistory.price),
                func.max(PriceHistory.price),
            ).where(PriceHistory.product_id == product_id)
            average, minimum, maximum = (await session.execute(query)).one()
            return (
                float(average) if average is not None else None,
                float(minimum) if minimum is not None else None,
                float(maximum) if maximum is not None else None,
            )

    # ------------------------------------------------------------------
    # Product line filters
    # ------------------------------------------------------------------

    async def find_filter_fields(self, product_line_id: int) -> List[DataSheetField]:
        async with self._session("find_filter_fields") as session:
            query = (
                select(DataSheetField)
                .where(
                    DataSheetField.product_line_id == product_line_id,
                    DataSheetField.use_to_filter.is_(True),
                )
                .order_by(DataSheetField.id)
            )
            return list((await session.execute(query)).scalars().all())

    async def find_product_line_brands(self, product_line_id: int) -> List[Tuple[Brand, Optional[File], int]]:
        """Brands with at least one active product in the line, with their logo and active product count."""
        async with self._session("find_product_line_brands") as session:
            query = (
                select(Brand, File, func.count(Product.id))
                .join(Product, Product.brand_id == Brand.id)
                .outerjoin(File, File.id == Brand.file_id)
                .where(
                    Product.product_line_id == product_line_id,
                    Product.state.is_(True),
                )
                .group_by(Brand.id, File.id)
                .order_by(Brand.name)
            )
            result = await session.execute(query)
            return [(brand, file, int(count)) for brand, file, count in result.all()]

    async def find_field_values_in_use(self, field_ids: Sequence[int]) -> Dict[int, List[str]]:
        """Distinct non-empty values per field, across data sheets attached to products."""
        if not field_ids:
            return {}
        async with self._session("find_field_values_in_use") as session:
            query = (
                select(DataSheetValue.data_sheet_field_id, DataSheetValue.value)
                .join(DataSheet, DataSheet.id == DataSheetValue.data_sheet_id)
                .where(
                    DataSheetValue.data_sheet_field_id.in_(field_ids),
                    DataSheet.product_id.isnot(None),
                    DataSheetValue.value.isnot(None),
                    DataSheetValue.value != "",
                )
                .distinct()
            )
            values: Dict[int, List[str]] = {field_id: [] for field_id in field_ids}
            for field_id, value in (await session.execute(query)).all():
                values[field_id].append(value)
            return {field_id: sorted(items) for field_id, items in values.items()}

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search_products(
        self,
        query: Optional[str] = None,
        brand_id: Optional[int] = None,
        product_line_id: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Product], int]:
        """Active products matching the text on name, display name, reference or ERP code."""
        conditions = [Product.state.is_(True)]
        if query:
            pattern = f"%{query.strip()}%"
            conditions.append(
                or_(
                    Product.name.ilike(pattern),
                    Product.display_name.ilike(pattern),
                    Product.reference.ilike(pattern),
                    Product.magister_code.ilike(pattern),
                )
            )
        if brand_id:
            conditions.append(Product.brand_id == brand_id)
        if product_line_id:
            conditions.append(Product.product_line_id == product_line_id)

        async with self._session("search_products") as session:
            count = await session.scalar(select(func.count(Product.id)).where(*conditions))
            rows_query = (
                select(Product)
                .where(*conditions)
                .order_by(Product.display_name, Product.id)
                .limit(limit)
                .offset(offset)
            )
            rows = (await session.execute(rows_query)).scalars().all()
            return list(rows), int(count or 0)
