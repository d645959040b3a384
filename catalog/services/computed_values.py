"""
Purpose: Resolve a product's current price and current stock, cache first.

- Current price is the latest price_histories row (created_at DESC, id DESC).
  Cached at product:{id}:price for CACHE_TTL_PRICE. Only positive prices are
  cached so a product without a price is re-checked on every read.
- Current stock is the sum of active agencies_products snapshots. Cached at
  product:{id}:stock for CACHE_TTL_STOCK, zero included.

Returned prices get the 2-decimal display rounding only. Rounding to the
thousand happens when prices are written, never here.

Error policy (same for price and stock):
- no rows -> 0, debug log
- store failure -> StoreUnavailableError propagates to the caller
- cache read failure -> treated as a miss (RedisCache logs it)
"""

import logging
from typing import List, Optional

from catalog.core.config import Settings, get_settings
from catalog.services.cache import CacheKeys, CacheStore
from catalog.services.pricing import round_price
from catalog.services.product_store import AgencyStock, ProductStore

logger = logging.getLogger(__name__)


class ComputedValueResolver:
    def __init__(self, store: ProductStore, cache: CacheStore, settings: Optional[Settings] = None):
        self.store = store
        self.cache = cache
        self.settings = settings or get_settings()

    async def get_current_price(self, product_id: int) -> float:
        key = CacheKeys.price(product_id)
        cached = await self.cache.get(key)
        if cached is not None:
            try:
                return round_price(cached)
            except (TypeError, ValueError, ArithmeticError):
                logger.warning(f"Ignoring malformed cached price for product {product_id}: {cached!r}")

        latest = await self.store.find_latest_price_history(product_id)
        if latest is None:
            logger.debug(f"No price history for product {product_id}")
            return 0.0

        price = round_price(latest.price)
        if price > 0:
            await self.cache.set(key, price, self.settings.CACHE_TTL_PRICE)
        return price

    async def get_current_stock(self, product_id: int) -> int:
        key = CacheKeys.stock(product_id)
        cached = await self.cache.get(key)
        if cached is not None:
            try:
                return int(cached)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring malformed cached stock for product {product_id}: {cached!r}")

        stock = await self.store.sum_active_agency_stock(product_id)
        if stock == 0:
            logger.debug(f"No active agency stock for product {product_id}")

        await self.cache.set(key, stock, self.settings.CACHE_TTL_STOCK)
        return stock

    async def get_stock_by_agency(self, product_id: int) -> List[AgencyStock]:
        """Per-agency breakdown, always read from the store."""
        return await self.store.find_agency_stock(product_id)
