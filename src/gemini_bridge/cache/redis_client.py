"""Async Redis connection wrapper for the response cache."""

from __future__ import annotations

from typing import Any

import redis.asyncio as redis
import structlog

from gemini_bridge.config import CacheSettings, get_cache_settings

logger = structlog.get_logger()


class RedisClient:
    """Lazily connected Redis client with connection pooling."""

    def __init__(self, redis_url: str, max_connections: int = 20) -> None:
        """Initialize Redis client.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            max_connections: Maximum pool connections
        """
        self.redis_url = redis_url
        self.max_connections = max_connections
        self._pool: redis.ConnectionPool | None = None
        self._client: redis.Redis | None = None

    @classmethod
    def from_settings(cls, settings: CacheSettings | None = None) -> RedisClient:
        settings = settings or get_cache_settings()
        return cls(
            redis_url=settings.redis_url,
            max_connections=settings.redis_max_connections,
        )

    async def connect(self) -> None:
        """Open the pool and verify the server answers."""
        if self._client is not None:
            return

        self._pool = redis.ConnectionPool.from_url(
            self.redis_url,
            decode_responses=True,
            max_connections=self.max_connections,
        )
        self._client = redis.Redis(connection_pool=self._pool)

        await self._client.ping()
        logger.info("redis_connected", url=mask_url(self.redis_url))

    async def close(self) -> None:
        """Close client and pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None
        logger.info("redis_disconnected")

    async def get_client(self) -> Any:
        """Connected Redis client, connecting on first use."""
        if self._client is None:
            await self.connect()
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None


def mask_url(url: str) -> str:
    """Hide credentials in a Redis URL for logging."""
    if "@" in url:
        scheme = url.split("://", 1)[0] if "://" in url else "redis"
        return f"{scheme}://***@{url.rsplit('@', 1)[-1]}"
    return url
