# catalog/database.py

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base

from catalog.core.config import get_settings

settings = get_settings()


def normalize_database_url(url: str) -> str:
    """Convert postgres:// and postgresql:// to postgresql+asyncpg:// for async support"""
    if not url:
        raise ValueError("DATABASE_URL is not set in environment variables")
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


database_url = normalize_database_url(settings.DATABASE_URL)

engine = create_async_engine(
    database_url,
    echo=False,
    future=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
)


async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

Base = declarative_base()
