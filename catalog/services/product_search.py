"""
Purpose: Text search over active products, cached at search:{digest}.

The digest is the first 16 hex chars of the SHA-256 of the normalized
parameters. Product updates and bulk state changes drop every search:* entry,
since a cached page may list a product under its old name, state or line.
New products show up once the entries expire after CACHE_TTL_SEARCH.
"""

import hashlib
import json
import logging
from typing import Optional

from catalog.core.config import Settings, get_settings
from catalog.schemas.product import ProductRead, ProductSearchResult
from catalog.services.cache import CacheKeys, CacheStore
from catalog.services.product_store import ProductStore

logger = logging.getLogger(__name__)

MAX_LIMIT = 100


def search_digest(**params) -> str:
    normalized = {
        name: (value.strip().lower() if isinstance(value, str) else value)
        for name, value in params.items()
    }
    payload = json.dumps(normalized, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


class ProductSearchService:
    def __init__(self, store: ProductStore, cache: CacheStore, settings: Optional[Settings] = None):
        self.store = store
        self.cache = cache
        self.settings = settings or get_settings()

    async def search(
        self,
        query: Optional[str] = None,
        brand_id: Optional[int] = None,
        product_line_id: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ProductSearchResult:
        limit = max(1, min(limit, MAX_LIMIT))
        offset = max(0, offset)

        key = CacheKeys.search(
            search_digest(
                query=query or "",
                brand_id=brand_id,
                product_line_id=product_line_id,
                limit=limit,
                offset=offset,
            )
        )
        cached = await self.cache.get(key)
        if cached is not None:
            return ProductSearchResult.model_validate(cached)

        rows, count = await self.store.search_products(
            query=query,
            brand_id=brand_id,
            product_line_id=product_line_id,
            limit=limit,
            offset=offset,
        )
        result = ProductSearchResult(rows=[ProductRead.model_validate(row) for row in rows], count=count)
        await self.cache.set(key, result.model_dump(mode="json"), self.settings.CACHE_TTL_SEARCH)
        return result
