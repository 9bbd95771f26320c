from typing import Dict, Optional, Protocol, Union
from redis.asyncio import Redis
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from core.config import settings
from models.snapshot import SavedState

Raw = Union[str, bytes]


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[Raw]: ...

    async def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Process-local store, handy for tests and single-process runs."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


class RedisStore:
    def __init__(self, redis: Redis, ttl: Optional[int] = None):
        self.redis = redis
        self.ttl = settings.SNAPSHOT_TTL_SECONDS if ttl is None else ttl

    @classmethod
    def from_settings(cls) -> "RedisStore":
        from db.session import create_redis
        return cls(create_redis())

    async def get(self, key: str) -> Optional[Raw]:
        return await self.redis.get(key)

    async def set(self, key: str, value: str) -> None:
        await self.redis.set(key, value, ex=self.ttl or None)


class SqlStore:
    """Keeps snapshots in the saved_states table."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        async with self.session_factory() as db:
            result = await db.execute(select(SavedState).filter(SavedState.key == key))
            row = result.scalar_one_or_none()
            return row.value if row else None

    async def set(self, key: str, value: str) -> None:
        async with self.session_factory() as db:
            await db.merge(SavedState(key=key, value=value))
            await db.commit()
