# tests/unit/services/google_merchant/test_google_merchant_client.py
import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock

from catalog.core.config import Settings
from catalog.core.exceptions import GoogleMerchantAPIError
from catalog.services.google_merchant import GoogleMerchantAuth, GoogleMerchantClient


@pytest.fixture
def merchant_settings():
    return Settings(
        _env_file=None,
        GOOGLE_MERCHANT_ID="5551234",
        GOOGLE_MERCHANT_CLIENT_ID="client-id",
        GOOGLE_MERCHANT_CLIENT_SECRET="client-secret",
        GOOGLE_MERCHANT_REFRESH_TOKEN="refresh-token",
    )


def _response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = text
    response.content = b"{}" if payload is not None else b""
    return response


"""
1. OAuth token refresh
"""

def test_auth_requires_credentials():
    with pytest.raises(ValueError):
        GoogleMerchantAuth(Settings(_env_file=None, GOOGLE_MERCHANT_REFRESH_TOKEN=""))


@pytest.mark.asyncio
async def test_access_token_refreshed_once(mocker, merchant_settings):
    mock_post = AsyncMock(return_value=_response(payload={"access_token": "token-1", "expires_in": 3600}))
    mocker.patch("httpx.AsyncClient.post", mock_post)
    auth = GoogleMerchantAuth(merchant_settings)

    assert await auth.get_access_token() == "token-1"
    assert await auth.get_access_token() == "token-1"

    mock_post.assert_awaited_once()
    assert mock_post.call_args.kwargs["data"]["grant_type"] == "refresh_token"


@pytest.mark.asyncio
async def test_invalid_grant_message(mocker, merchant_settings):
    mocker.patch(
        "httpx.AsyncClient.post",
        AsyncMock(return_value=_response(400, text='{"error": "invalid_grant"}')),
    )
    auth = GoogleMerchantAuth(merchant_settings)

    with pytest.raises(GoogleMerchantAPIError, match="Invalid refresh token"):
        await auth.get_access_token()


@pytest.mark.asyncio
async def test_token_network_error(mocker, merchant_settings):
    mocker.patch("httpx.AsyncClient.post", AsyncMock(side_effect=httpx.ConnectError("down")))
    auth = GoogleMerchantAuth(merchant_settings)

    with pytest.raises(GoogleMerchantAPIError):
        await auth.get_access_token()


"""
2. Content API calls
"""

@pytest.fixture
def merchant_client():
    auth = MagicMock()
    auth.get_access_token = AsyncMock(return_value="access-token")
    return GoogleMerchantClient("5551234", auth)


def test_client_requires_merchant_id():
    with pytest.raises(ValueError):
        GoogleMerchantClient("", MagicMock())


def test_rest_product_id():
    assert GoogleMerchantClient.rest_product_id(42) == "online:es:CO:42"


@pytest.mark.asyncio
async def test_insert_product(mocker, merchant_client):
    mock_request = AsyncMock(return_value=_response(200, {"id": "online:es:CO:42"}))
    mocker.patch("httpx.AsyncClient.request", mock_request)

    result = await merchant_client.insert_product({"offerId": "42"})

    assert result == {"id": "online:es:CO:42"}
    kwargs = mock_request.call_args.kwargs
    assert kwargs["method"] == "POST"
    assert kwargs["url"] == f"{GoogleMerchantClient.BASE_URL}/5551234/products"
    assert kwargs["headers"]["Authorization"] == "Bearer access-token"
    assert kwargs["json"] == {"offerId": "42"}


@pytest.mark.asyncio
async def test_update_product_sends_update_mask(mocker, merchant_client):
    mock_request = AsyncMock(return_value=_response(200, {}))
    mocker.patch("httpx.AsyncClient.request", mock_request)

    await merchant_client.update_product(
        "online:es:CO:42", {"price": {"value": "12000", "currency": "COP"}}, ["price", "availability"]
    )

    kwargs = mock_request.call_args.kwargs
    assert kwargs["method"] == "PATCH"
    assert kwargs["url"].endswith("/5551234/products/online:es:CO:42")
    assert kwargs["params"] == {"updateMask": "price,availability"}


@pytest.mark.asyncio
async def test_delete_product_no_content(mocker, merchant_client):
    mocker.patch("httpx.AsyncClient.request", AsyncMock(return_value=_response(204)))

    assert await merchant_client.delete_product("online:es:CO:42") is None


@pytest.mark.asyncio
async def test_error_status_raises(mocker, merchant_client):
    mocker.patch(
        "httpx.AsyncClient.request",
        AsyncMock(return_value=_response(404, text="item not found")),
    )

    with pytest.raises(GoogleMerchantAPIError, match=r"Request failed \(404\): item not found"):
        await merchant_client.delete_product("online:es:CO:99")


@pytest.mark.asyncio
async def test_network_error_raises(mocker, merchant_client):
    mocker.patch("httpx.AsyncClient.request", AsyncMock(side_effect=httpx.ReadTimeout("timeout")))

    with pytest.raises(GoogleMerchantAPIError):
        await merchant_client.insert_product({"offerId": "1"})
