# catalog/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from catalog.core.config import get_settings
from catalog.core.exceptions import CacheError
from catalog.core.logging_config import configure_logging
from catalog.database import async_session, engine
from catalog.dependencies import build_services
from catalog.routes import google_merchant, health, product_lines, products
from catalog.services.cache import RedisCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    # Startup: one cache client for the whole process
    cache = RedisCache.from_url(settings.REDIS_URL, socket_timeout=settings.REDIS_SOCKET_TIMEOUT)
    try:
        await cache.connect()
    except CacheError as e:
        # Reads fall through to the database until Redis is back
        logger.warning(f"Starting without cache: {e}")

    app.state.services = build_services(async_session, cache, settings)
    try:
        yield  # This is where the app runs
    finally:
        await cache.close()
        await engine.dispose()
        logger.info("Cache closed and database engine disposed")


app = FastAPI(
    title="Auto Parts Catalog",
    lifespan=lifespan
)

app.include_router(products.router)
app.include_router(product_lines.router)
app.include_router(google_merchant.router)
app.include_router(health.router)  # Health check should be accessible without auth
