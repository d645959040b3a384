# tests/unit/services/test_cache.py
import json

import pytest
from unittest.mock import AsyncMock, MagicMock
from redis.exceptions import ConnectionError as RedisConnectionError

from catalog.core.exceptions import CacheError
from catalog.services.cache import CacheKeys, RedisCache


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.get.return_value = None
    client.set.return_value = True
    client.delete.return_value = 0
    return client


@pytest.fixture
def cache(redis_client):
    return RedisCache(redis_client)


def _scan(keys):
    async def _iter(*args, **kwargs):
        for key in keys:
            yield key
    return MagicMock(side_effect=_iter)


def test_key_names():
    assert CacheKeys.product(42) == "product:42"
    assert CacheKeys.price(42) == "product:42:price"
    assert CacheKeys.stock(42) == "product:42:stock"
    assert CacheKeys.info(42) == "product:42:info"
    assert CacheKeys.product_line_filters(3) == "product-line:3:filters"
    assert CacheKeys.category_brands(3) == "category:3:brands"
    assert CacheKeys.search("ab12") == "search:ab12"
    assert set(CacheKeys.product_family(42)) == {
        "product:42", "product:42:info", "product:42:price", "product:42:stock",
    }


"""
1. Reads
"""

@pytest.mark.asyncio
async def test_get_decodes_json(cache, redis_client):
    redis_client.get.return_value = json.dumps({"price": 12000})

    assert await cache.get("product:1:price") == {"price": 12000}
    redis_client.get.assert_awaited_once_with("product:1:price")


@pytest.mark.asyncio
async def test_get_miss(cache):
    assert await cache.get("product:1:price") is None


@pytest.mark.asyncio
async def test_get_connection_error_is_a_miss(cache, redis_client):
    redis_client.get.side_effect = RedisConnectionError("refused")

    assert await cache.get("product:1:price") is None


@pytest.mark.asyncio
async def test_get_undecodable_value_is_a_miss(cache, redis_client):
    redis_client.get.return_value = "{not json"

    assert await cache.get("product:1:info") is None


"""
2. Writes
"""

@pytest.mark.asyncio
async def test_set_with_ttl(cache, redis_client):
    assert await cache.set("product:1:stock", 8, ttl_seconds=300) is True

    redis_client.set.assert_awaited_once_with("product:1:stock", "8", ex=300)


@pytest.mark.asyncio
async def test_set_without_ttl(cache, redis_client):
    await cache.set("product:1", {"id": 1})

    redis_client.set.assert_awaited_once_with("product:1", json.dumps({"id": 1}))


@pytest.mark.asyncio
async def test_set_failure_returns_false(cache, redis_client):
    redis_client.set.side_effect = RedisConnectionError("refused")

    assert await cache.set("product:1:price", 1000, ttl_seconds=3600) is False


"""
3. Deletes
"""

@pytest.mark.asyncio
async def test_delete_keys(cache, redis_client):
    redis_client.delete.return_value = 2

    assert await cache.delete("product:1", "product:1:price") == 2
    redis_client.delete.assert_awaited_once_with("product:1", "product:1:price")


@pytest.mark.asyncio
async def test_delete_nothing_skips_redis(cache, redis_client):
    assert await cache.delete() == 0
    redis_client.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_failure_raises_cache_error(cache, redis_client):
    redis_client.delete.side_effect = RedisConnectionError("refused")

    with pytest.raises(CacheError):
        await cache.delete("product:1")


@pytest.mark.asyncio
async def test_delete_pattern_scans_and_deletes(cache, redis_client):
    redis_client.scan_iter = _scan(["product:1", "product:1:price", "product:2:info"])
    redis_client.delete.return_value = 3

    assert await cache.delete_pattern("product:*") == 3

    redis_client.scan_iter.assert_called_once_with(match="product:*", count=RedisCache.SCAN_COUNT)
    redis_client.delete.assert_awaited_once_with("product:1", "product:1:price", "product:2:info")


@pytest.mark.asyncio
async def test_delete_pattern_batches_large_scans(cache, redis_client):
    keys = [f"product:{i}" for i in range(RedisCache.DELETE_BATCH + 10)]
    redis_client.scan_iter = _scan(keys)
    redis_client.delete.side_effect = lambda *batch: len(batch)

    assert await cache.delete_pattern("product:*") == len(keys)
    assert redis_client.delete.await_count == 2


@pytest.mark.asyncio
async def test_delete_pattern_without_matches(cache, redis_client):
    redis_client.scan_iter = _scan([])

    assert await cache.delete_pattern("product-line:*:filters") == 0
    redis_client.delete.assert_not_awaited()


"""
4. Lifecycle
"""

@pytest.mark.asyncio
async def test_connect_failure_raises(cache, redis_client):
    redis_client.ping.side_effect = RedisConnectionError("refused")

    with pytest.raises(CacheError):
        await cache.connect()
    assert await cache.ping() is False


@pytest.mark.asyncio
async def test_close_uses_aclose(cache, redis_client):
    await cache.close()

    redis_client.aclose.assert_awaited_once()
