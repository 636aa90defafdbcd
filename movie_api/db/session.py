# movie_api/db/session.py
from functools import lru_cache
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from movie_api.core.settings import get_settings


def _normalise_url(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.strip().strip('"').strip("'")


def to_async_driver(url: str) -> str:
    """
    Ensure the SQLAlchemy URL uses an async driver.
    - postgresql+psycopg:// -> postgresql+asyncpg://
    - postgresql://          -> postgresql+asyncpg://
    - sqlite://              -> sqlite+aiosqlite://
    """
    if url.startswith("postgresql+asyncpg://") or url.startswith("sqlite+aiosqlite://"):
        return url
    if url.startswith("postgresql+psycopg://"):
        return "postgresql+asyncpg://" + url.split("postgresql+psycopg://", 1)[1]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url.split("postgresql://", 1)[1]
    if url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + url.split("sqlite://", 1)[1]
    return url


@lru_cache
def get_engine() -> AsyncEngine:
    url = _normalise_url(get_settings().database_url)
    if not url:
        raise RuntimeError("DATABASE_URL not set (use postgresql+asyncpg://...)")
    return create_async_engine(to_async_driver(url), pool_pre_ping=True, future=True)


@lru_cache
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=get_engine(), expire_on_commit=False, class_=AsyncSession)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an AsyncSession."""
    async with get_sessionmaker()() as session:
        yield session
