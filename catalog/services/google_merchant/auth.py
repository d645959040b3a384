"""
Google Merchant Center authentication using the OAuth2 refresh token flow.
The access token is only kept in memory, until shortly before it expires.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import httpx

from catalog.core.config import Settings, get_settings
from catalog.core.exceptions import GoogleMerchantAPIError

logger = logging.getLogger(__name__)


class GoogleMerchantAuth:
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    SCOPE = "https://www.googleapis.com/auth/content"
    EXPIRY_MARGIN_SECONDS = 60

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.client_id = self.settings.GOOGLE_MERCHANT_CLIENT_ID
        self.client_secret = self.settings.GOOGLE_MERCHANT_CLIENT_SECRET
        self.refresh_token = self.settings.GOOGLE_MERCHANT_REFRESH_TOKEN

        if not self.client_id or not self.client_secret or not self.refresh_token:
            raise ValueError(
                "Missing Google Merchant OAuth credentials. "
                "Set GOOGLE_MERCHANT_CLIENT_ID, GOOGLE_MERCHANT_CLIENT_SECRET and GOOGLE_MERCHANT_REFRESH_TOKEN."
            )

        self._access_token: Optional[str] = None
        self._expires_at: Optional[datetime] = None

    def _token_valid(self) -> bool:
        return bool(self._access_token) and self._expires_at is not None and datetime.now() < self._expires_at

    async def get_access_token(self) -> str:
        """Get a valid access token, refreshing if necessary"""
        if self._token_valid():
            logger.debug("Using cached Google access token")
            return self._access_token

        logger.info("Refreshing Google Merchant access token")
        refresh_data = {
            "grant_type": "refresh_token",
            "refresh_token": self.refresh_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }

        try:
            async with httpx.AsyncClient(timeout=self.settings.GOOGLE_MERCHANT_TIMEOUT) as client:
                response = await client.post(self.TOKEN_URL, data=refresh_data)
        except httpx.RequestError as e:
            logger.error(f"Network error refreshing Google token: {str(e)}")
            raise GoogleMerchantAPIError(f"Network error refreshing access token: {str(e)}") from e

        if response.status_code != 200:
            error_text = response.text
            logger.error(f"Google token refresh failed: {error_text}")
            if "invalid_grant" in error_text:
                raise GoogleMerchantAPIError("Invalid refresh token. Please regenerate the Google Merchant token.")
            raise GoogleMerchantAPIError(f"Failed to refresh access token: {error_text}")

        token_data = response.json()
        expires_in = int(token_data.get("expires_in", 3600))
        self._access_token = token_data["access_token"]
        self._expires_at = datetime.now() + timedelta(seconds=max(0, expires_in - self.EXPIRY_MARGIN_SECONDS))
        return self._access_token
