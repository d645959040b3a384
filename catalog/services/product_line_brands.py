"""
Purpose: Brands listed on a product line page, cached at category:{id}:brands.

A brand is listed while it has at least one active product in the line. The
entry is dropped when a product changes line, brand or state, and otherwise
expires after CACHE_TTL_BRANDS.
"""

import logging
from typing import List, Optional

from catalog.core.config import Settings, get_settings
from catalog.core.utils import slugify
from catalog.schemas.product import BrandImage, ImageSizes, ProductLineBrand
from catalog.services.cache import CacheKeys, CacheStore
from catalog.services.product_store import ProductStore

logger = logging.getLogger(__name__)


class ProductLineBrandService:
    def __init__(self, store: ProductStore, cache: CacheStore, settings: Optional[Settings] = None):
        self.store = store
        self.cache = cache
        self.settings = settings or get_settings()

    async def get_brands(self, product_line_id: int) -> List[ProductLineBrand]:
        key = CacheKeys.category_brands(product_line_id)
        cached = await self.cache.get(key)
        if cached is not None:
            return [ProductLineBrand.model_validate(item) for item in cached]

        brands = []
        for brand, logo, active_products in await self.store.find_product_line_brands(product_line_id):
            image = None
            if logo:
                image = BrandImage(url=logo.get_url(), sizes=ImageSizes.from_urls(logo.get_image_sizes_url()))
            brands.append(
                ProductLineBrand(
                    id=brand.id,
                    name=brand.name,
                    slug=slugify(brand.name),
                    image=image,
                    active_products_count=active_products,
                )
            )

        logger.debug(f"Listed {len(brands)} brands for product line {product_line_id}")
        await self.cache.set(
            key,
            [item.model_dump(mode="json") for item in brands],
            self.settings.CACHE_TTL_BRANDS,
        )
        return brands
