import pytest

from catalog.schemas.product import ProductUpdate
from catalog.services.cache import CacheKeys
from catalog.services.product_search import MAX_LIMIT, search_digest


def test_digest_is_normalized_and_short():
    first = search_digest(query="  Bateria ", brand_id=None, limit=20)
    second = search_digest(limit=20, brand_id=None, query="bateria")

    assert first == second
    assert len(first) == 16
    assert search_digest(query="filtro", limit=20) != search_digest(query="filtro", limit=40)


@pytest.mark.asyncio
async def test_search_matches_active_products(seed, search_service):
    await seed.product(display_name="Bateria MAC 12V", reference="MAC-1")
    await seed.product(display_name="Bateria Willard", reference="WIL-1")
    await seed.product(display_name="Bateria vieja", reference="OLD-1", state=False)
    await seed.product(display_name="Filtro de aceite", name="filtro", reference="FIL-1")

    result = await search_service.search(query="bateria")

    assert result.count == 2
    assert [row.reference for row in result.rows] == ["MAC-1", "WIL-1"]


@pytest.mark.asyncio
async def test_search_by_reference_and_brand(seed, search_service):
    brand = await seed.brand("Bosch")
    await seed.product(display_name="Bujia", name="bujia", reference="BOS-77", brand_id=brand.id)
    await seed.product(display_name="Bujia generica", name="bujia", reference="GEN-77")

    by_reference = await search_service.search(query="bos-77")
    by_brand = await search_service.search(query="bujia", brand_id=brand.id)

    assert [row.reference for row in by_reference.rows] == ["BOS-77"]
    assert [row.reference for row in by_brand.rows] == ["BOS-77"]


@pytest.mark.asyncio
async def test_search_cached_with_search_ttl(seed, search_service, mock_cache, settings):
    await seed.product(display_name="Bateria MAC", reference="MAC-1")

    await search_service.search(query="bateria")

    key = CacheKeys.search(search_digest(query="bateria", brand_id=None, product_line_id=None, limit=20, offset=0))
    assert mock_cache.has(key)
    assert mock_cache.ttl_of(key) == settings.CACHE_TTL_SEARCH == 300


@pytest.mark.asyncio
async def test_new_products_show_up_after_search_ttl(seed, search_service, mock_cache, invalidation):
    product = await seed.product(display_name="Bateria MAC", reference="MAC-1")
    await search_service.search(query="bateria")
    await seed.product(display_name="Bateria Willard", reference="WIL-1")

    # product keys only, search pages stay
    await invalidation.invalidate(product.id)
    assert (await search_service.search(query="bateria")).count == 1

    for key in [k for k in mock_cache.entries if k.startswith("search:")]:
        mock_cache.expire(key)
    assert (await search_service.search(query="bateria")).count == 2


@pytest.mark.asyncio
async def test_limit_is_clamped(seed, search_service, mock_cache):
    await seed.product()

    result = await search_service.search(limit=1000, offset=-5)

    assert result.count == 1
    key = CacheKeys.search(search_digest(query="", brand_id=None, product_line_id=None, limit=MAX_LIMIT, offset=0))
    assert mock_cache.has(key)


@pytest.mark.asyncio
async def test_renamed_product_is_found_right_after_update(seed, search_service, product_service):
    product = await seed.product(display_name="Bateria MAC", reference="MAC-1")
    assert (await search_service.search(query="willard")).count == 0

    await product_service.update_product(product.id, ProductUpdate(display_name="Bateria Willard"))

    result = await search_service.search(query="willard")
    assert [row.id for row in result.rows] == [product.id]
