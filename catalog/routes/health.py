from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.dependencies import get_cache, get_db
from catalog.services.cache import CacheStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "Auto Parts Catalog"}


@router.get("/health/db")
async def database_health(db: AsyncSession = Depends(get_db)):
    """Check database connectivity"""
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except (SQLAlchemyError, OSError) as e:
        return {"status": "unhealthy", "database": "error", "error": str(e)}


@router.get("/health/cache")
async def cache_health(cache: CacheStore = Depends(get_cache)):
    """Check Redis connectivity. The app keeps serving from the database without it."""
    if await cache.ping():
        return {"status": "healthy", "cache": "connected"}
    return {"status": "degraded", "cache": "unreachable"}
