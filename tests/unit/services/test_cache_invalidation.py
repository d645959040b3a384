# tests/unit/services/test_cache_invalidation.py
import logging

import pytest

from catalog.integrations.events import WriteEvent
from catalog.services.cache import CacheKeys


async def _fill(cache, *product_ids):
    for product_id in product_ids:
        for key in CacheKeys.product_family(product_id):
            await cache.set(key, {"product": product_id})


@pytest.mark.asyncio
async def test_invalidate_drops_full_key_set(mock_cache, invalidation):
    await _fill(mock_cache, 1, 2)

    assert await invalidation.invalidate(1) is True

    for key in CacheKeys.product_family(1):
        assert not mock_cache.has(key)
    for key in CacheKeys.product_family(2):
        assert mock_cache.has(key)


@pytest.mark.asyncio
async def test_invalidate_twice_is_idempotent(mock_cache, invalidation):
    await _fill(mock_cache, 5)

    assert await invalidation.invalidate(5) is True
    assert await invalidation.invalidate(5) is True

    assert not any(mock_cache.has(key) for key in CacheKeys.product_family(5))


@pytest.mark.asyncio
@pytest.mark.parametrize("event", [
    WriteEvent.price_inserted(9),
    WriteEvent.stock_adjusted(9),
    WriteEvent.files_changed(9),
])
async def test_product_scoped_events_drop_product_keys(mock_cache, invalidation, event):
    await _fill(mock_cache, 9)
    await mock_cache.set(CacheKeys.search("abc"), {"rows": [], "count": 0})

    await invalidation.handle(event)

    assert set(mock_cache.deleted_keys) == set(CacheKeys.product_family(9))
    assert mock_cache.deleted_patterns == []
    assert mock_cache.has(CacheKeys.search("abc"))


@pytest.mark.asyncio
async def test_product_update_drops_keys_and_search_pages(mock_cache, invalidation):
    await _fill(mock_cache, 9)
    await mock_cache.set(CacheKeys.search("abc"), {"rows": [{"id": 9}], "count": 1})

    await invalidation.handle(WriteEvent.product_updated(9))

    assert set(mock_cache.deleted_keys) == set(CacheKeys.product_family(9))
    assert mock_cache.deleted_patterns == ["search:*"]
    assert not mock_cache.has(CacheKeys.search("abc"))


@pytest.mark.asyncio
async def test_bulk_update_with_ids_invalidates_exactly_those_ids(mock_cache, invalidation):
    await _fill(mock_cache, 1, 2, 3, 4)
    await mock_cache.set(CacheKeys.search("abc"), {"rows": [{"id": 1}], "count": 1})

    await invalidation.handle(WriteEvent.bulk_updated([1, 2, 3]))

    expected = {key for product_id in (1, 2, 3) for key in CacheKeys.product_family(product_id)}
    assert set(mock_cache.deleted_keys) == expected
    assert {"product:1", "product:2", "product:3"} <= set(mock_cache.deleted_keys)
    # no product pattern, only the search pages
    assert mock_cache.deleted_patterns == ["search:*"]
    assert all(mock_cache.has(key) for key in CacheKeys.product_family(4))
    assert not mock_cache.has(CacheKeys.search("abc"))


@pytest.mark.asyncio
async def test_bulk_update_with_lines_drops_their_brand_listings(mock_cache, invalidation):
    await mock_cache.set(CacheKeys.category_brands(2), [{"id": 1}])
    await mock_cache.set(CacheKeys.category_brands(3), [{"id": 1}])

    await invalidation.handle(WriteEvent.bulk_updated([1], product_line_ids=[2]))

    assert not mock_cache.has(CacheKeys.category_brands(2))
    assert mock_cache.has(CacheKeys.category_brands(3))


@pytest.mark.asyncio
async def test_bulk_update_without_ids_falls_back_to_patterns(mock_cache, invalidation):
    event = WriteEvent.bulk_updated()
    assert event.is_unscoped

    await _fill(mock_cache, 1, 2)
    await mock_cache.set(CacheKeys.product_line_filters(3), [])
    await mock_cache.set(CacheKeys.category_brands(3), [])
    await mock_cache.set(CacheKeys.search("abc"), {"rows": [], "count": 0})

    assert await invalidation.handle(event) is True

    assert mock_cache.deleted_patterns == [
        "product:*", "product-line:*:filters", "category:*:brands", "search:*",
    ]
    assert not mock_cache.has("product:1:price")
    assert not mock_cache.has(CacheKeys.product_line_filters(3))
    assert not mock_cache.has(CacheKeys.category_brands(3))
    assert not mock_cache.has(CacheKeys.search("abc"))


@pytest.mark.asyncio
async def test_data_sheet_change_with_lines(mock_cache, invalidation):
    await mock_cache.set(CacheKeys.product_line_filters(4), [])
    await mock_cache.set(CacheKeys.product_line_filters(5), [])
    await _fill(mock_cache, 11, 12)

    await invalidation.handle(WriteEvent.data_sheet_changed(product_line_ids=[4], product_ids=[11]))

    assert not mock_cache.has(CacheKeys.product_line_filters(4))
    assert mock_cache.has(CacheKeys.product_line_filters(5))
    assert not mock_cache.has(CacheKeys.info(11))
    assert mock_cache.has(CacheKeys.info(12))
    assert mock_cache.deleted_patterns == []


@pytest.mark.asyncio
async def test_data_sheet_change_with_lines_only_keeps_product_info(mock_cache, invalidation):
    # a sheet that belongs to no product feeds filters only
    await mock_cache.set(CacheKeys.product_line_filters(4), [])
    await _fill(mock_cache, 11)

    await invalidation.handle(WriteEvent.data_sheet_changed(product_line_ids=[4]))

    assert not mock_cache.has(CacheKeys.product_line_filters(4))
    assert mock_cache.has(CacheKeys.info(11))


@pytest.mark.asyncio
async def test_data_sheet_change_without_scope_drops_filters_and_info(mock_cache, invalidation):
    await mock_cache.set(CacheKeys.product_line_filters(4), [])
    await _fill(mock_cache, 11)

    await invalidation.handle(WriteEvent.data_sheet_changed())

    assert mock_cache.deleted_patterns == ["product-line:*:filters", "product:*:info"]
    assert not mock_cache.has(CacheKeys.product_line_filters(4))
    assert not mock_cache.has(CacheKeys.info(11))
    # price and stock do not depend on sheet values
    assert mock_cache.has(CacheKeys.price(11))
    assert mock_cache.has(CacheKeys.stock(11))


@pytest.mark.asyncio
async def test_product_moved_between_lines_drops_line_listings(mock_cache, invalidation):
    await mock_cache.set(CacheKeys.category_brands(1), ["A"])
    await mock_cache.set(CacheKeys.product_line_filters(2), [])

    await invalidation.handle(WriteEvent.product_updated(8, product_line_ids=[1, 2]))

    assert not mock_cache.has(CacheKeys.category_brands(1))
    assert not mock_cache.has(CacheKeys.product_line_filters(2))


@pytest.mark.asyncio
async def test_delete_failures_are_logged_and_swallowed(mock_cache, invalidation, caplog):
    mock_cache.should_fail_deletes = True

    with caplog.at_level(logging.WARNING, logger="catalog.services.cache_invalidation"):
        assert await invalidation.handle(WriteEvent.price_inserted(3)) is False
        assert await invalidation.handle(WriteEvent.bulk_updated()) is False

    assert any("Cache invalidation failed" in record.message for record in caplog.records)
    assert all(record.levelno == logging.WARNING for record in caplog.records)
