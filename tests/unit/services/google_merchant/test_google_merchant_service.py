# tests/unit/services/google_merchant/test_google_merchant_service.py
import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

from catalog.core.enums import PromotionType
from catalog.core.exceptions import GoogleMerchantAPIError, ProductNotFoundError
from catalog.services.cache import CacheKeys
from catalog.services.google_merchant import GoogleMerchantClient, GoogleMerchantService
from catalog.services.google_merchant.service import AUTO_PARTS_CATEGORY, DATA_SHEET_SECTION, DEFAULT_BRAND

T0 = datetime(2024, 2, 1, 10, 0, 0)


@pytest.fixture
def merchant_client():
    client = GoogleMerchantClient("5551234", MagicMock())
    client.insert_product = AsyncMock(return_value={"id": "online:es:CO:1"})
    client.update_product = AsyncMock(return_value={})
    client.delete_product = AsyncMock(return_value=None)
    return client


@pytest.fixture
def merchant_service(store, resolver, invalidation, merchant_client, settings):
    return GoogleMerchantService(store, resolver, invalidation, merchant_client, settings)


async def _battery(seed):
    brand = await seed.brand("Willard")
    line = await seed.product_line("Baterías")
    product = await seed.product(
        display_name="Batería Willard 42",
        reference="WIL-42",
        brand_id=brand.id,
        product_line_id=line.id,
        description="Batería sellada",
    )
    await seed.price(product.id, 349600, T0)
    agency = await seed.agency()
    await seed.agency_stock(product.id, agency.id, 3)

    front = await seed.file("front.webp")
    back = await seed.file("back.webp")
    manual = await seed.file("manual.pdf", mime_type="application/pdf")
    await seed.link_file(product.id, front.id, principal=True)
    await seed.link_file(product.id, back.id)
    await seed.link_file(product.id, manual.id)

    voltage = await seed.data_sheet_field(line.id, "Voltaje")
    await seed.data_sheet_field(line.id, "Borne")
    sheet = await seed.data_sheet(line.id, product_id=product.id)
    await seed.data_sheet_value(sheet.id, voltage.id, "12V")
    return product


@pytest.mark.asyncio
async def test_format_product_data(seed, merchant_service):
    product = await _battery(seed)

    data = await merchant_service.format_product_data(product.id)

    assert data["offerId"] == str(product.id)
    assert data["title"] == "Batería Willard 42 - WIL-42"
    assert data["description"] == "Batería sellada"
    assert data["link"] == f"https://shop.test/productos/detalle/{product.id}"
    assert data["imageLink"].endswith("/products/front.webp")
    assert len(data["additionalImageLinks"]) == 1
    assert data["additionalImageLinks"][0].endswith("/products/back.webp")
    assert data["availability"] == "in_stock"
    assert data["brand"] == "Willard"
    assert data["googleProductCategory"] == AUTO_PARTS_CATEGORY
    # price is pushed rounded to the thousand
    assert data["price"] == {"value": "350000", "currency": "COP"}
    assert data["productDetails"] == [
        {"sectionName": DATA_SHEET_SECTION, "attributeName": "Voltaje", "attributeValue": "12V"}
    ]
    assert data["customAttributes"] == [{"name": "reference", "value": "WIL-42"}]
    assert "salePrice" not in data


@pytest.mark.asyncio
async def test_format_out_of_stock_without_brand_or_images(seed, merchant_service, mocker):
    product = await seed.product(reference="X-1")
    mocker.patch.object(merchant_service.store, "find_brand", AsyncMock(return_value=None))

    data = await merchant_service.format_product_data(product.id)

    assert data["availability"] == "out_of_stock"
    assert data["brand"] == DEFAULT_BRAND
    assert data["imageLink"] == ""
    assert data["price"]["value"] == "0"


@pytest.mark.asyncio
async def test_active_promotion_sets_sale_price(seed, merchant_service):
    product = await _battery(seed)
    await seed.promotion([product.id], 10, PromotionType.PERCENTAGE.value, start_date=T0 - timedelta(days=1))

    data = await merchant_service.format_product_data(product.id)

    assert data["salePrice"] == {"value": "315000", "currency": "COP"}


@pytest.mark.asyncio
async def test_format_unknown_product(merchant_service):
    with pytest.raises(ProductNotFoundError):
        await merchant_service.format_product_data(404)


@pytest.mark.asyncio
async def test_upload_product(seed, merchant_service, merchant_client):
    product = await _battery(seed)

    result = await merchant_service.upload_product(product.id)

    assert result == {"id": "online:es:CO:1"}
    sent = merchant_client.insert_product.call_args.args[0]
    assert sent["offerId"] == str(product.id)


@pytest.mark.asyncio
async def test_update_product_reads_fresh_values(seed, merchant_service, merchant_client, resolver):
    product = await _battery(seed)
    assert await resolver.get_current_price(product.id) == 349600

    # written without invalidation, so the cached price is stale
    await seed.price(product.id, 401000, T0 + timedelta(days=1))

    await merchant_service.update_product(product.id)

    rest_id, update_data, update_mask = merchant_client.update_product.call_args.args
    assert rest_id == f"online:es:CO:{product.id}"
    assert update_mask == ["price", "availability"]
    assert update_data == {
        "price": {"value": "401000", "currency": "COP"},
        "availability": "in_stock",
    }


@pytest.mark.asyncio
async def test_update_product_includes_sale_price(seed, merchant_service, merchant_client):
    product = await _battery(seed)
    await seed.promotion([product.id], 50000, PromotionType.FIXED.value)

    await merchant_service.update_product(product.id)

    _, update_data, update_mask = merchant_client.update_product.call_args.args
    assert update_mask == ["price", "availability", "salePrice"]
    assert update_data["salePrice"]["value"] == "300000"


@pytest.mark.asyncio
async def test_update_product_invalidates_caches(seed, merchant_service, mock_cache):
    product = await _battery(seed)

    await merchant_service.update_product(product.id)

    assert set(CacheKeys.product_family(product.id)) <= set(mock_cache.deleted_keys)


@pytest.mark.asyncio
async def test_delete_product_propagates_api_errors(merchant_service, merchant_client):
    merchant_client.delete_product.side_effect = GoogleMerchantAPIError("Request failed (404): not found")

    with pytest.raises(GoogleMerchantAPIError):
        await merchant_service.delete_product(9)

    merchant_client.delete_product.assert_awaited_once_with("online:es:CO:9")
