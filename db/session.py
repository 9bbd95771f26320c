from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from redis.asyncio import Redis
from core.config import settings
from models.base import Base

def create_engine(url: Optional[str] = None) -> AsyncEngine:
    # PostgreSQL driver for async operations is asyncpg
    return create_async_engine(
        url or settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        future=True
    )

def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

async def init_db(engine: AsyncEngine):
    """Create the saved_states table if it does not exist yet."""
    import models.snapshot  # noqa: F401 registers the table on Base.metadata
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

def create_redis(url: Optional[str] = None) -> Redis:
    return Redis.from_url(url or settings.REDIS_URL, decode_responses=True)
