# catalog/cli/invalidate_cache.py
import asyncio
import logging

import click

from catalog.core.config import get_settings
from catalog.core.exceptions import CacheError
from catalog.core.logging_config import configure_logging
from catalog.services.cache import RedisCache
from catalog.services.cache_invalidation import CacheInvalidationService

logger = logging.getLogger(__name__)


async def run_invalidation(
    cache,
    product_ids=(),
    all_products: bool = False,
    filters: bool = False,
) -> bool:
    """Drop the requested cache entries. Returns False if any delete failed."""
    invalidation = CacheInvalidationService(cache)
    ok = True
    if product_ids:
        ok = await invalidation.invalidate_many(product_ids) and ok
    if all_products:
        ok = await invalidation.invalidate_all_products() and ok
    if filters:
        ok = await invalidation.invalidate_all_product_line_filters() and ok
    return ok


@click.command()
@click.argument('product_ids', nargs=-1, type=int)
@click.option('--all-products', is_flag=True, help='Drop every product:* entry')
@click.option('--filters', is_flag=True, help='Drop every product line filter entry')
def invalidate_cache(product_ids, all_products, filters):
    """Manually invalidate cached product values, e.g. after a bulk import"""
    if not product_ids and not all_products and not filters:
        raise click.UsageError("Give product ids, --all-products or --filters")

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    async def _invalidate():
        cache = RedisCache.from_url(settings.REDIS_URL, socket_timeout=settings.REDIS_SOCKET_TIMEOUT)
        try:
            await cache.connect()
            return await run_invalidation(cache, product_ids, all_products, filters)
        finally:
            await cache.close()

    try:
        ok = asyncio.run(_invalidate())
    except CacheError as e:
        raise click.ClickException(str(e))

    if not ok:
        raise click.ClickException("Some cache entries could not be deleted, see log")
    click.echo("Cache invalidated")


if __name__ == "__main__":
    invalidate_cache()
