# tests/conftest.py
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from catalog.core.config import Settings
from catalog.database import Base
from catalog.services.cache_invalidation import CacheInvalidationService
from catalog.services.computed_values import ComputedValueResolver
from catalog.services.product_info import ProductInfoAssembler
from catalog.services.product_line_brands import ProductLineBrandService
from catalog.services.product_search import ProductSearchService
from catalog.services.product_service import ProductService
from catalog.services.product_store import ProductStore

from tests.fixtures.catalog_fixtures import CatalogSeeder
from tests.mocks.mock_cache import MockCache


@pytest.fixture
def settings():
    """Provide test settings, ignoring any local .env"""
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite://",
        REDIS_URL="redis://localhost:6379/15",
        CDN_URL="https://cdn.test",
        SITE_BASE_URL="https://shop.test",
        PRICE_ROUND_TO_THOUSAND=True,
        GOOGLE_MERCHANT_ID="",
    )


@pytest.fixture
async def test_engine(tmp_path):
    """File-backed SQLite database, created fresh for each test function."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog_test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Provide a database session for tests"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def seed(session_factory):
    return CatalogSeeder(session_factory)


@pytest.fixture
def mock_cache():
    return MockCache()


@pytest.fixture
def store(session_factory):
    return ProductStore(session_factory)


@pytest.fixture
def resolver(store, mock_cache, settings):
    return ComputedValueResolver(store, mock_cache, settings)


@pytest.fixture
def invalidation(mock_cache):
    return CacheInvalidationService(mock_cache)


@pytest.fixture
def assembler(store, resolver, mock_cache, settings):
    return ProductInfoAssembler(store, resolver, mock_cache, settings)


@pytest.fixture
def product_service(session_factory, invalidation, store, resolver, settings):
    return ProductService(session_factory, invalidation, store, resolver, settings)


@pytest.fixture
def search_service(store, mock_cache, settings):
    return ProductSearchService(store, mock_cache, settings)


@pytest.fixture
def brand_service(store, mock_cache, settings):
    return ProductLineBrandService(store, mock_cache, settings)
