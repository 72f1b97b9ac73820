"""Key/value stores backing the response cache."""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

import structlog

from .redis_client import RedisClient

logger = structlog.get_logger()


@runtime_checkable
class CacheStore(Protocol):
    """Storage collaborator used by ResponseCache.

    Values are serialized strings; every entry carries its own TTL.
    """

    async def has(self, key: str) -> bool: ...

    async def get(self, key: str) -> str | None: ...

    async def put(self, key: str, value: str, ttl: int) -> None: ...

    async def forget(self, key: str) -> bool: ...

    async def clear(self, prefix: str = "") -> int: ...


class MemoryStore:
    """In-process store with monotonic-clock expiry."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, float]] = {}

    def _live(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def has(self, key: str) -> bool:
        return self._live(key) is not None

    async def get(self, key: str) -> str | None:
        return self._live(key)

    async def put(self, key: str, value: str, ttl: int) -> None:
        self._entries[key] = (value, time.monotonic() + ttl)

    async def forget(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def clear(self, prefix: str = "") -> int:
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)


class RedisStore:
    """Redis-backed store; expiry is enforced by Redis itself."""

    SCAN_BATCH_SIZE = 500

    def __init__(self, redis_client: RedisClient) -> None:
        """Initialize Redis store.

        Args:
            redis_client: Redis client instance
        """
        self._redis = redis_client

    async def has(self, key: str) -> bool:
        client = await self._redis.get_client()
        return bool(await client.exists(key))

    async def get(self, key: str) -> str | None:
        client = await self._redis.get_client()
        value = await client.get(key)
        return value if value is None or isinstance(value, str) else value.decode()

    async def put(self, key: str, value: str, ttl: int) -> None:
        client = await self._redis.get_client()
        await client.setex(key, ttl, value)

    async def forget(self, key: str) -> bool:
        client = await self._redis.get_client()
        return bool(await client.delete(key))

    async def clear(self, prefix: str = "") -> int:
        client = await self._redis.get_client()
        deleted = 0
        batch: list[str] = []

        async for key in client.scan_iter(match=f"{prefix}*", count=self.SCAN_BATCH_SIZE):
            batch.append(key)
            if len(batch) >= self.SCAN_BATCH_SIZE:
                deleted += await client.delete(*batch)
                batch = []

        if batch:
            deleted += await client.delete(*batch)

        logger.debug("redis_store_cleared", prefix=prefix, deleted=deleted)
        return deleted

    async def close(self) -> None:
        await self._redis.close()
