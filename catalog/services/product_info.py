"""
Purpose: Build the denormalized product info payload served to the storefront.

get_info(product_id) reads product:{id}:info first. A hit is returned as is:
it embeds the price and stock resolved when it was assembled, and stays valid
until TTL expiry or invalidation. On a miss the identity row is loaded, price,
stock and joined lookups are resolved concurrently, and the composite is cached
for CACHE_TTL_INFO before returning.
"""

import asyncio
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from catalog.core.config import Settings, get_settings
from catalog.core.exceptions import ProductNotFoundError
from catalog.schemas.product import (
    BrandSummary,
    DataSheetFieldValue,
    DataSheetInfo,
    FileDetails,
    ImageSizes,
    ProductInfo,
    ProductLineSummary,
    ProductRead,
)
from catalog.services.cache import CacheKeys, CacheStore
from catalog.services.computed_values import ComputedValueResolver
from catalog.services.product_store import ProductLookups, ProductStore

logger = logging.getLogger(__name__)


class ProductInfoAssembler:
    def __init__(
        self,
        store: ProductStore,
        resolver: ComputedValueResolver,
        cache: CacheStore,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.resolver = resolver
        self.cache = cache
        self.settings = settings or get_settings()

    async def get_info(self, product_id: int) -> ProductInfo:
        """
        Get the product info payload, cache first.

        Raises:
            ProductNotFoundError: If the product row does not exist
            StoreUnavailableError: If the store cannot be queried
        """
        key = CacheKeys.info(product_id)
        cached = await self.cache.get(key)
        if cached is not None:
            try:
                return ProductInfo.model_validate(cached)
            except PydanticValidationError as e:
                logger.warning(f"Discarding malformed cached info for product {product_id}: {e}")

        product = await self.store.find_product(product_id)
        if not product:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")

        price, stock, lookups = await asyncio.gather(
            self.resolver.get_current_price(product_id),
            self.resolver.get_current_stock(product_id),
            self.store.find_joined_lookups(product_id),
        )

        info = self._build(product, price, stock, lookups)
        await self.cache.set(key, info.model_dump(mode="json"), self.settings.CACHE_TTL_INFO)
        return info

    def _build(self, product, price: float, stock: int, lookups: ProductLookups) -> ProductInfo:
        base = ProductRead.model_validate(product).model_dump()

        files = [
            FileDetails(
                id=file.id,
                name=file.name,
                original_name=file.original_name,
                location=file.location,
                mime_type=file.mime_type,
                size=file.size or 0,
                principal=principal,
                url=file.get_url(),
                sizes=ImageSizes.from_urls(file.get_image_sizes_url()),
            )
            for file, principal in lookups.files
        ]

        principal = lookups.principal_file
        file_url = principal.get_url() if principal else None
        images = ImageSizes.from_urls(principal.get_image_sizes_url()) if principal else None

        data_sheet = None
        if lookups.data_sheet:
            data_sheet = DataSheetInfo(
                id=lookups.data_sheet.id,
                name=lookups.data_sheet.name,
                year=lookups.data_sheet.year,
                fields=[
                    DataSheetFieldValue(
                        id=data_field.id,
                        name=data_field.field_name,
                        type=data_field.type,
                        value=value or "",
                    )
                    for data_field, value in lookups.data_sheet_values
                ],
            )

        return ProductInfo(
            **base,
            current_price=price,
            stock=stock,
            brand=BrandSummary.model_validate(lookups.brand) if lookups.brand else None,
            product_line=(
                ProductLineSummary.model_validate(lookups.product_line) if lookups.product_line else None
            ),
            files=files,
            file_url=file_url,
            images=images,
            data_sheet=data_sheet,
        )
