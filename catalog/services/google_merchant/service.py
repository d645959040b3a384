"""
Purpose: Keep the Google Merchant Center catalog in line with the store.

The pushed price and availability come from the same ComputedValueResolver the
storefront reads, so both sides agree on the current values:
- price: current price rounded to the thousand
- availability: in_stock when current stock > 0
- salePrice: from the active promotion, when there is one

update_product() drops the product's cached values before formatting, so the
partial update is derived from the store and not from a cached copy.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from catalog.core.config import Settings, get_settings
from catalog.core.enums import Availability
from catalog.core.exceptions import ProductNotFoundError
from catalog.services.cache_invalidation import CacheInvalidationService
from catalog.services.computed_values import ComputedValueResolver
from catalog.services.pricing import calculate_discounted_price, round_to_thousand
from catalog.services.product_store import ProductLookups, ProductStore
from .client import GoogleMerchantClient

logger = logging.getLogger(__name__)

AUTO_PARTS_CATEGORY = "888"
DATA_SHEET_SECTION = "Ficha Técnica"
DEFAULT_BRAND = "Generic"
MAX_ADDITIONAL_IMAGES = 10


class GoogleMerchantService:
    def __init__(
        self,
        store: ProductStore,
        resolver: ComputedValueResolver,
        invalidation: CacheInvalidationService,
        client: GoogleMerchantClient,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.resolver = resolver
        self.invalidation = invalidation
        self.client = client
        self.settings = settings or get_settings()

    def _money(self, value) -> Dict[str, str]:
        return {"value": str(int(value)), "currency": self.settings.GOOGLE_MERCHANT_CURRENCY}

    def _rest_id(self, product_id: int) -> str:
        return self.client.rest_product_id(
            product_id,
            content_language=self.settings.GOOGLE_MERCHANT_CONTENT_LANGUAGE,
            target_country=self.settings.GOOGLE_MERCHANT_TARGET_COUNTRY,
        )

    @staticmethod
    def _image_links(lookups: ProductLookups) -> Tuple[str, List[str]]:
        principal = lookups.principal_file
        image_link = principal.get_url() if principal else ""
        additional = [
            file.get_url()
            for file, is_principal in lookups.files
            if not is_principal and file.is_image
        ]
        return image_link, additional[:MAX_ADDITIONAL_IMAGES]

    @staticmethod
    def _product_details(lookups: ProductLookups) -> List[Dict[str, str]]:
        return [
            {
                "sectionName": DATA_SHEET_SECTION,
                "attributeName": data_field.field_name,
                "attributeValue": value,
            }
            for data_field, value in lookups.data_sheet_values
            if value
        ]

    async def format_product_data(self, product_id: int) -> Dict[str, Any]:
        """
        Build the Content API product resource for one product.

        Raises:
            ProductNotFoundError: If the product does not exist
        """
        product = await self.store.find_product(product_id)
        if not product:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")

        current_price, stock, lookups, promotion = await asyncio.gather(
            self.resolver.get_current_price(product_id),
            self.resolver.get_current_stock(product_id),
            self.store.find_joined_lookups(product_id),
            self.store.find_active_promotion(product_id),
        )
        price = round_to_thousand(current_price)
        image_link, additional_image_links = self._image_links(lookups)
        country = self.settings.GOOGLE_MERCHANT_TARGET_COUNTRY

        product_data = {
            "offerId": str(product.id),
            "title": f"{product.display_name} - {product.reference}",
            "description": product.description or product.display_name,
            "link": f"{self.settings.SITE_BASE_URL.rstrip('/')}/productos/detalle/{product.id}",
            "imageLink": image_link,
            "additionalImageLinks": additional_image_links,
            "contentLanguage": self.settings.GOOGLE_MERCHANT_CONTENT_LANGUAGE,
            "targetCountry": country,
            "channel": "online",
            "availability": (Availability.IN_STOCK if stock > 0 else Availability.OUT_OF_STOCK).value,
            "condition": "new",
            "googleProductCategory": AUTO_PARTS_CATEGORY,
            "brand": lookups.brand.name if lookups.brand else DEFAULT_BRAND,
            "price": self._money(price),
            "identifierExists": True,
            "productDetails": self._product_details(lookups),
            "customAttributes": [{"name": "reference", "value": product.reference}],
            "shipping": [
                {
                    "country": country,
                    "service": "Standard shipping",
                    "price": self._money(0),
                }
            ],
        }

        if promotion:
            sale_price = calculate_discounted_price(price, promotion.discount, promotion.type)
            product_data["salePrice"] = self._money(sale_price)

        return product_data

    async def upload_product(self, product_id: int) -> Dict[str, Any]:
        product_data = await self.format_product_data(product_id)
        try:
            result = await self.client.insert_product(product_data)
        except Exception as e:
            logger.error(f"Error uploading product {product_id} to Google Merchant: {e}")
            raise
        logger.info(f"Uploaded product {product_id} to Google Merchant Center")
        return result

    async def update_product(self, product_id: int) -> Dict[str, Any]:
        """Push price, availability and salePrice only."""
        await self.invalidation.invalidate(product_id)
        product_data = await self.format_product_data(product_id)

        update_data = {
            "price": product_data["price"],
            "availability": product_data["availability"],
        }
        update_mask = ["price", "availability"]
        if "salePrice" in product_data:
            update_data["salePrice"] = product_data["salePrice"]
            update_mask.append("salePrice")

        try:
            result = await self.client.update_product(self._rest_id(product_id), update_data, update_mask)
        except Exception as e:
            logger.error(f"Error updating product {product_id} in Google Merchant: {e}")
            raise
        logger.info(f"Updated product {product_id} in Google Merchant Center with fields: {update_mask}")
        return result

    async def delete_product(self, product_id: int) -> None:
        try:
            await self.client.delete_product(self._rest_id(product_id))
        except Exception as e:
            logger.error(f"Error deleting product {product_id} from Google Merchant: {e}")
            raise
        logger.info(f"Deleted product {product_id} from Google Merchant Center")
