"""
Service wiring and FastAPI dependencies.

build_services() constructs every service once, around one cache client and
one session factory. The lifespan stores the result on app.state; routes pull
what they need through the get_* dependencies below, which tests override.
"""
import logging
from dataclasses import dataclass
from typing import AsyncGenerator, Optional

from fastapi import HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.core.config import Settings, get_settings
from catalog.database import async_session
from catalog.services.cache import CacheStore
from catalog.services.cache_invalidation import CacheInvalidationService
from catalog.services.computed_values import ComputedValueResolver
from catalog.services.google_merchant import GoogleMerchantAuth, GoogleMerchantClient, GoogleMerchantService
from catalog.services.product_info import ProductInfoAssembler
from catalog.services.product_line_brands import ProductLineBrandService
from catalog.services.product_line_filters import ProductLineFilterService
from catalog.services.product_search import ProductSearchService
from catalog.services.product_service import ProductService
from catalog.services.product_store import ProductStore

logger = logging.getLogger(__name__)


@dataclass
class CatalogServices:
    cache: CacheStore
    store: ProductStore
    resolver: ComputedValueResolver
    invalidation: CacheInvalidationService
    info: ProductInfoAssembler
    products: ProductService
    filters: ProductLineFilterService
    brands: ProductLineBrandService
    search: ProductSearchService
    google_merchant: Optional[GoogleMerchantService] = None


def build_services(
    session_factory: async_sessionmaker,
    cache: CacheStore,
    settings: Optional[Settings] = None,
) -> CatalogServices:
    settings = settings or get_settings()

    store = ProductStore(session_factory)
    resolver = ComputedValueResolver(store, cache, settings)
    invalidation = CacheInvalidationService(cache)

    google_merchant = None
    if settings.google_merchant_enabled:
        auth = GoogleMerchantAuth(settings)
        client = GoogleMerchantClient(settings.GOOGLE_MERCHANT_ID, auth, timeout=settings.GOOGLE_MERCHANT_TIMEOUT)
        google_merchant = GoogleMerchantService(store, resolver, invalidation, client, settings)
    else:
        logger.info("Google Merchant credentials not configured, sync disabled")

    return CatalogServices(
        cache=cache,
        store=store,
        resolver=resolver,
        invalidation=invalidation,
        info=ProductInfoAssembler(store, resolver, cache, settings),
        products=ProductService(session_factory, invalidation, store, resolver, settings),
        filters=ProductLineFilterService(store, cache, settings),
        brands=ProductLineBrandService(store, cache, settings),
        search=ProductSearchService(store, cache, settings),
        google_merchant=google_merchant,
    )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


def get_cache(request: Request) -> CacheStore:
    return request.app.state.services.cache


def get_resolver(request: Request) -> ComputedValueResolver:
    return request.app.state.services.resolver


def get_invalidation(request: Request) -> CacheInvalidationService:
    return request.app.state.services.invalidation


def get_info_assembler(request: Request) -> ProductInfoAssembler:
    return request.app.state.services.info


def get_product_service(request: Request) -> ProductService:
    return request.app.state.services.products


def get_filter_service(request: Request) -> ProductLineFilterService:
    return request.app.state.services.filters


def get_brand_service(request: Request) -> ProductLineBrandService:
    return request.app.state.services.brands


def get_search_service(request: Request) -> ProductSearchService:
    return request.app.state.services.search


def get_google_merchant(request: Request) -> GoogleMerchantService:
    service = request.app.state.services.google_merchant
    if service is None:
        raise HTTPException(status_code=503, detail="Google Merchant sync is not configured")
    return service
