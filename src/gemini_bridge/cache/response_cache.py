"""Fingerprint-keyed response cache.

Memoizes response envelopes under ``prefix + fingerprint`` with a TTL.
Within one process, concurrent misses for the same fingerprint share a
single in-flight computation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog
from pydantic import ValidationError
from redis.exceptions import RedisError

from gemini_bridge.config import CacheSettings, get_cache_settings
from gemini_bridge.llm.response import GeminiResponse

from .redis_client import RedisClient
from .stores import CacheStore, MemoryStore, RedisStore

logger = structlog.get_logger()

Compute = Callable[[], Awaitable[GeminiResponse]]

# Backend failures that degrade to an uncached call
STORE_ERRORS = (RedisError, OSError)


def _retrieve_exception(task: asyncio.Task[GeminiResponse]) -> None:
    # Mark the outcome retrieved when every caller has gone away
    if not task.cancelled():
        task.exception()


class ResponseCache:
    """Compute-if-absent cache for Gemini responses."""

    def __init__(
        self,
        store: CacheStore,
        enabled: bool = False,
        ttl: int = 3600,
        prefix: str = "gemini_cache_",
    ) -> None:
        """Initialize response cache.

        Args:
            store: Key/value store holding serialized envelopes
            enabled: When False, every call computes and storage is untouched
            ttl: Default entry TTL in seconds
            prefix: Prefix prepended to every fingerprint
        """
        self._store = store
        self.enabled = enabled
        self.ttl = ttl
        self.prefix = prefix
        self._inflight: dict[str, asyncio.Task[GeminiResponse]] = {}

    @classmethod
    def from_settings(
        cls,
        settings: CacheSettings | None = None,
        store: CacheStore | None = None,
    ) -> ResponseCache:
        """Create a cache from settings.

        Args:
            settings: Cache settings (default: cached environment settings)
            store: Explicit store (default: chosen by ``settings.backend``)

        Returns:
            Configured cache
        """
        settings = settings or get_cache_settings()
        if store is None:
            if settings.backend == "redis":
                store = RedisStore(RedisClient.from_settings(settings))
            else:
                store = MemoryStore()

        return cls(
            store=store,
            enabled=settings.enabled,
            ttl=settings.ttl,
            prefix=settings.prefix,
        )

    def key_for(self, fingerprint: str) -> str:
        return f"{self.prefix}{fingerprint}"

    async def compute_if_absent(
        self,
        fingerprint: str,
        compute: Compute,
        ttl: int | None = None,
    ) -> GeminiResponse:
        """Return the cached response for a fingerprint, computing it on a miss.

        The computation runs in its own task. Cancelling one caller leaves
        the shared computation, and every other caller waiting on it, intact.
        Store failures are logged and treated as misses.

        Args:
            fingerprint: Request fingerprint
            compute: Coroutine factory producing the response
            ttl: TTL override in seconds (default: configured TTL)

        Returns:
            Cached or freshly computed response
        """
        if not self.enabled:
            return await compute()

        key = self.key_for(fingerprint)

        cached = await self._load(key)
        if cached is not None:
            logger.debug("gemini_cache_hit", key=key)
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._compute_and_store(key, compute, ttl or self.ttl))
            task.add_done_callback(_retrieve_exception)
            self._inflight[key] = task
        else:
            logger.debug("gemini_cache_join_inflight", key=key)

        return await asyncio.shield(task)

    async def _compute_and_store(self, key: str, compute: Compute, ttl: int) -> GeminiResponse:
        try:
            response = await compute()
        finally:
            self._inflight.pop(key, None)

        try:
            await self._store.put(key, response.model_dump_json(), ttl)
        except STORE_ERRORS as e:
            logger.warning("gemini_cache_store_failed", key=key, operation="put", error=str(e))
            return response

        logger.debug("gemini_cache_stored", key=key, ttl=ttl)
        return response

    async def _load(self, key: str) -> GeminiResponse | None:
        try:
            data = await self._store.get(key)
        except STORE_ERRORS as e:
            logger.warning("gemini_cache_store_failed", key=key, operation="get", error=str(e))
            return None

        if data is None:
            return None

        try:
            return GeminiResponse.model_validate_json(data)
        except ValidationError:
            logger.warning("gemini_cache_entry_invalid", key=key)
            try:
                await self._store.forget(key)
            except STORE_ERRORS as e:
                logger.warning(
                    "gemini_cache_store_failed", key=key, operation="forget", error=str(e)
                )
            return None

    async def forget(self, fingerprint: str) -> bool:
        """Remove the entry for a fingerprint.

        Returns:
            True if an entry was removed
        """
        return await self._store.forget(self.key_for(fingerprint))

    async def has(self, fingerprint: str) -> bool:
        """Check whether a live entry exists for a fingerprint."""
        return await self._store.has(self.key_for(fingerprint))

    async def clear(self) -> int:
        """Remove every entry under the cache prefix.

        Returns:
            Number of removed entries
        """
        removed = await self._store.clear(self.prefix)
        logger.info("gemini_cache_cleared", prefix=self.prefix, removed=removed)
        return removed

    async def close(self) -> None:
        """Release the store's connections, if it holds any."""
        if isinstance(self._store, RedisStore):
            await self._store.close()
