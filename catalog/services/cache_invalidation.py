"""
Purpose: Drop cached derived values after source-of-truth writes.

The write path commits first and then hands a WriteEvent to handle(). Keys are
deleted synchronously within the same logical operation. A failed delete is
logged at warning level and swallowed: it widens the staleness window up to the
entry's TTL, but it never fails the write that triggered it.

Key selection:
- PRICE_INSERTED, STOCK_ADJUSTED, PRODUCT_UPDATED, FILES_CHANGED and
  BULK_UPDATED with ids: product:{id}, product:{id}:info, product:{id}:price,
  product:{id}:stock for every id.
- PRODUCT_UPDATED and BULK_UPDATED with line ids: product-line:{id}:filters and
  category:{id}:brands per line. Every PRODUCT_UPDATED and BULK_UPDATED also
  pattern deletes search:*, since a cached page may list the product under its
  old name, state or line.
- BULK_UPDATED without ids: pattern deletes product:*, product-line:*:filters,
  category:*:brands and search:*. Over-invalidating beats serving stale values.
- DATA_SHEET_CHANGED: product-line:{id}:filters per line id, or the
  product-line:*:filters pattern when no line is known. Product ids on the
  event get their key set dropped; with neither products nor lines known the
  product:*:info pattern is deleted as well.

Deleting an absent key is a no-op, so every operation here is idempotent.
"""

import logging
from typing import Iterable, List

from catalog.core.exceptions import CacheError
from catalog.integrations.events import WriteEvent, WriteEventKind
from catalog.services.cache import CacheKeys, CacheStore

logger = logging.getLogger(__name__)


class CacheInvalidationService:
    def __init__(self, cache: CacheStore):
        self.cache = cache

    async def handle(self, event: WriteEvent) -> bool:
        """
        Invalidate everything the event's write could have changed.

        Returns:
            True when every delete succeeded, False when at least one failed
            (already logged).
        """
        logger.debug(
            f"Invalidating caches for {event.kind.value} "
            f"(products={event.product_ids}, product_lines={event.product_line_ids})"
        )

        if event.kind == WriteEventKind.BULK_UPDATED and event.is_unscoped:
            logger.info("Bulk update without explicit ids, clearing all product caches")
            results = [
                await self.invalidate_all_products(),
                await self.invalidate_all_product_line_filters(),
                await self.invalidate_all_category_brands(),
                await self.invalidate_search_results(),
            ]
            return all(results)

        ok = True
        if event.product_ids:
            ok = await self.invalidate_many(event.product_ids)

        if event.kind == WriteEventKind.DATA_SHEET_CHANGED:
            if event.product_line_ids:
                ok = await self.invalidate_product_line_filters(*event.product_line_ids) and ok
            else:
                ok = await self.invalidate_all_product_line_filters() and ok
            if event.is_unscoped:
                # Sheet values feed product info
                ok = await self._delete_pattern(CacheKeys.ALL_PRODUCT_INFO) and ok
        elif event.kind in (WriteEventKind.PRODUCT_UPDATED, WriteEventKind.BULK_UPDATED):
            if event.product_line_ids:
                # Brand, line or state changes move the product between listings
                ok = await self.invalidate_product_related_caches(event.product_line_ids) and ok
            # Cached pages may list the product under its old name, state or line
            ok = await self.invalidate_search_results() and ok

        return ok

    async def invalidate(self, product_id: int) -> bool:
        """Manual trigger for one product."""
        return await self._delete_keys(CacheKeys.product_family(product_id))

    async def invalidate_many(self, product_ids: Iterable[int]) -> bool:
        keys: List[str] = []
        for product_id in dict.fromkeys(product_ids):
            keys.extend(CacheKeys.product_family(product_id))
        return await self._delete_keys(keys)

    async def invalidate_product_line_filters(self, *product_line_ids: int) -> bool:
        return await self._delete_keys([CacheKeys.product_line_filters(pl_id) for pl_id in product_line_ids])

    async def invalidate_category_brands(self, *product_line_ids: int) -> bool:
        return await self._delete_keys([CacheKeys.category_brands(pl_id) for pl_id in product_line_ids])

    async def invalidate_product_related_caches(self, product_line_ids: Iterable[int]) -> bool:
        line_ids = list(dict.fromkeys(product_line_ids))
        filters_ok = await self.invalidate_product_line_filters(*line_ids)
        brands_ok = await self.invalidate_category_brands(*line_ids)
        return filters_ok and brands_ok

    async def invalidate_all_products(self) -> bool:
        return await self._delete_pattern(CacheKeys.ALL_PRODUCTS)

    async def invalidate_all_product_line_filters(self) -> bool:
        return await self._delete_pattern(CacheKeys.ALL_PRODUCT_LINE_FILTERS)

    async def invalidate_all_category_brands(self) -> bool:
        return await self._delete_pattern(CacheKeys.ALL_CATEGORY_BRANDS)

    async def invalidate_search_results(self) -> bool:
        return await self._delete_pattern(CacheKeys.ALL_SEARCH)

    async def _delete_keys(self, keys: List[str]) -> bool:
        if not keys:
            return True
        try:
            await self.cache.delete(*keys)
            return True
        except CacheError as e:
            logger.warning(f"Cache invalidation failed for {keys}, entries stay until TTL expiry: {e}")
            return False

    async def _delete_pattern(self, pattern: str) -> bool:
        try:
            deleted = await self.cache.delete_pattern(pattern)
            logger.info(f"Cleared {deleted} cache entries matching {pattern}")
            return True
        except CacheError as e:
            logger.warning(f"Cache invalidation failed for pattern {pattern}: {e}")
            return False
