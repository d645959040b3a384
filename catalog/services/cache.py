"""
Redis cache layer for derived catalog values (price, stock, product info,
product line filters, search results).

Redis is ONLY a cache, never the source of truth. Postgres is always
authoritative: any miss or invalidation re-derives from the database.

Cache keys follow a clear naming pattern:
- product:{id}                 : legacy product payload
- product:{id}:price           : current price (TTL 1 hour)
- product:{id}:stock           : current stock (TTL 5 min)
- product:{id}:info            : assembled product info (TTL 1 hour)
- product-line:{id}:filters    : filter options of a product line
- category:{id}:brands         : brands with active products in a product line (TTL 5 min)
- search:{hash}                : search result pages (TTL 5 min)

The client is built explicitly (RedisCache.from_url), connected once at
startup and closed at shutdown; services receive it by injection.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from catalog.core.exceptions import CacheError

logger = logging.getLogger(__name__)


class CacheKeys:
    PRODUCT_PREFIX = "product:"
    ALL_PRODUCTS = "product:*"
    ALL_PRODUCT_INFO = "product:*:info"
    ALL_PRODUCT_LINE_FILTERS = "product-line:*:filters"
    ALL_CATEGORY_BRANDS = "category:*:brands"
    ALL_SEARCH = "search:*"

    @classmethod
    def product(cls, product_id: int) -> str:
        return f"{cls.PRODUCT_PREFIX}{product_id}"

    @classmethod
    def price(cls, product_id: int) -> str:
        return f"{cls.PRODUCT_PREFIX}{product_id}:price"

    @classmethod
    def stock(cls, product_id: int) -> str:
        return f"{cls.PRODUCT_PREFIX}{product_id}:stock"

    @classmethod
    def info(cls, product_id: int) -> str:
        return f"{cls.PRODUCT_PREFIX}{product_id}:info"

    @classmethod
    def product_family(cls, product_id: int) -> List[str]:
        """Every key derived from one product's rows."""
        return [
            cls.product(product_id),
            cls.info(product_id),
            cls.price(product_id),
            cls.stock(product_id),
        ]

    @staticmethod
    def product_line_filters(product_line_id: int) -> str:
        return f"product-line:{product_line_id}:filters"

    @staticmethod
    def category_brands(product_line_id: int) -> str:
        return f"category:{product_line_id}:brands"

    @staticmethod
    def search(digest: str) -> str:
        return f"search:{digest}"


class CacheStore(ABC):
    """
    Key/value cache with TTL and glob-pattern deletion.

    Reads never raise: an unreachable cache is a miss. Deletes raise CacheError
    so callers can decide how loudly to report a failed invalidation.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the decoded value or None on miss"""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """Store a JSON-serializable value, optionally expiring after ttl_seconds"""
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys, absent keys are ignored. Returns number deleted"""
        pass

    @abstractmethod
    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern. Returns number deleted"""
        pass

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class RedisCache(CacheStore):
    """Redis implementation using the asyncio client from redis-py."""

    SCAN_COUNT = 100
    DELETE_BATCH = 500

    def __init__(self, client: aioredis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 2.0) -> "RedisCache":
        client = aioredis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )
        return cls(client)

    async def connect(self) -> None:
        """Verify the connection. Raises CacheError when Redis is unreachable."""
        try:
            await self.client.ping()
            logger.info("Redis cache connected")
        except (RedisError, OSError) as e:
            raise CacheError(f"Failed to connect to Redis: {e}") from e

    async def close(self) -> None:
        try:
            await self.client.aclose()
            logger.info("Redis cache connection closed")
        except (RedisError, OSError) as e:
            logger.warning(f"Error closing Redis connection: {e}")

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError):
            return False

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self.client.get(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Cache read error for {key}: {e}")
            return None

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Discarding undecodable cache value for {key}")
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        payload = value if isinstance(value, str) else json.dumps(value, default=str)
        try:
            if ttl_seconds:
                await self.client.set(key, payload, ex=ttl_seconds)
            else:
                await self.client.set(key, payload)
            return True
        except (RedisError, OSError) as e:
            logger.warning(f"Cache write error for {key}: {e}")
            return False

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self.client.delete(*keys)
        except (RedisError, OSError) as e:
            raise CacheError(f"Failed to delete cache keys {list(keys)}: {e}") from e

    async def delete_pattern(self, pattern: str) -> int:
        deleted = 0
        batch: List[str] = []
        try:
            async for key in self.client.scan_iter(match=pattern, count=self.SCAN_COUNT):
                batch.append(key)
                if len(batch) >= self.DELETE_BATCH:
                    deleted += await self.client.delete(*batch)
                    batch = []
            if batch:
                deleted += await self.client.delete(*batch)
        except (RedisError, OSError) as e:
            raise CacheError(f"Failed to clear cache pattern {pattern}: {e}") from e
        return deleted
