"""
Purpose: Filter options shown on a product line listing, cached at
product-line:{id}:filters.

Only data sheet fields flagged use_to_filter are listed. Selectable fields
offer their configured comma separated options; any other field offers the
distinct non-empty values currently used on product data sheets.
"""

import logging
from typing import List, Optional

from catalog.core.config import Settings, get_settings
from catalog.core.enums import DataSheetFieldType
from catalog.schemas.data_sheet import ProductLineFilter
from catalog.services.cache import CacheKeys, CacheStore
from catalog.services.product_store import ProductStore

logger = logging.getLogger(__name__)


def split_options(raw: Optional[str]) -> List[str]:
    """'12V, 24V,,6V' -> ['12V', '24V', '6V']"""
    if not raw:
        return []
    return [option.strip() for option in raw.split(",") if option.strip()]


class ProductLineFilterService:
    def __init__(self, store: ProductStore, cache: CacheStore, settings: Optional[Settings] = None):
        self.store = store
        self.cache = cache
        self.settings = settings or get_settings()

    async def get_filters(self, product_line_id: int) -> List[ProductLineFilter]:
        key = CacheKeys.product_line_filters(product_line_id)
        cached = await self.cache.get(key)
        if cached is not None:
            return [ProductLineFilter.model_validate(item) for item in cached]

        fields = await self.store.find_filter_fields(product_line_id)
        free_field_ids = [f.id for f in fields if f.type != DataSheetFieldType.SELECTABLE.value]
        values_in_use = await self.store.find_field_values_in_use(free_field_ids)

        filters = []
        for data_field in fields:
            if data_field.type == DataSheetFieldType.SELECTABLE.value:
                values = split_options(data_field.values)
            else:
                values = values_in_use.get(data_field.id, [])
            filters.append(
                ProductLineFilter(data_sheet_field=data_field.id, label=data_field.field_name, values=values)
            )

        logger.debug(f"Built {len(filters)} filters for product line {product_line_id}")
        await self.cache.set(
            key,
            [item.model_dump(mode="json") for item in filters],
            self.settings.CACHE_TTL_FILTERS,
        )
        return filters
