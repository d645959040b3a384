import json
import logging
from typing import Dict, List, Optional

import httpx

from catalog.core.exceptions import GoogleMerchantAPIError
from .auth import GoogleMerchantAuth

logger = logging.getLogger(__name__)


class GoogleMerchantClient:
    """
    Async client for the Content API for Shopping (v2.1) products resource.

    Only the calls the catalog sync needs: insert, partial update with an
    updateMask, and delete. Products are addressed by their REST id,
    ``online:<language>:<country>:<offerId>``.

    Documentation: https://developers.google.com/shopping-content/reference/rest/v2.1/products
    """

    BASE_URL = "https://shoppingcontent.googleapis.com/content/v2.1"

    def __init__(self, merchant_id: str, auth: GoogleMerchantAuth, timeout: float = 30.0):
        if not merchant_id:
            raise ValueError("GOOGLE_MERCHANT_ID is required")
        self.merchant_id = merchant_id
        self.auth = auth
        self.timeout = timeout

    @staticmethod
    def rest_product_id(offer_id, content_language: str = "es", target_country: str = "CO", channel: str = "online") -> str:
        return f"{channel}:{content_language}:{target_country}:{offer_id}"

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Dict:
        """
        Make a request to the Content API

        Raises:
            GoogleMerchantAPIError: If the request fails or returns a non-2xx status
        """
        url = f"{self.BASE_URL}/{self.merchant_id}/{endpoint.lstrip('/')}"
        token = await self.auth.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        logger.debug(f"Making {method} request to {url}")
        if data:
            logger.debug(f"Data: {json.dumps(data)[:500]}...")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    json=data,
                    params=params,
                )
        except httpx.RequestError as e:
            logger.error(f"Network error calling Google Merchant: {str(e)}")
            raise GoogleMerchantAPIError(f"Network error: {str(e)}") from e

        if response.status_code not in (200, 201, 202, 204):
            logger.error(f"Google Merchant API error {response.status_code}: {response.text}")
            raise GoogleMerchantAPIError(f"Request failed ({response.status_code}): {response.text}")

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    async def insert_product(self, product_data: Dict) -> Dict:
        return await self._make_request("POST", "/products", data=product_data)

    async def update_product(self, product_id: str, product_data: Dict, update_mask: List[str]) -> Dict:
        return await self._make_request(
            "PATCH",
            f"/products/{product_id}",
            data=product_data,
            params={"updateMask": ",".join(update_mask)},
        )

    async def delete_product(self, product_id: str) -> None:
        await self._make_request("DELETE", f"/products/{product_id}")
