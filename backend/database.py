"""Database engine, session management and cache store selection."""

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from backend.cache.base import CacheStore
from backend.cache.memory import InMemoryCacheStore
from backend.cache.sql import SqlCacheStore
from backend.config import Settings, settings
from backend.models import Base

engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db() -> None:
    """Create tables if they don't exist (and the SQLite directory with them)."""
    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def create_cache_store(config: Settings = settings) -> CacheStore:
    """Build the cache backend named by ``cache_backend``."""
    if config.cache_backend == "sql":
        return SqlCacheStore(async_session)
    return InMemoryCacheStore()
