"""Response caching.

Provides the fingerprint-keyed response cache and the stores behind it.
"""

from .redis_client import RedisClient
from .response_cache import ResponseCache
from .stores import CacheStore, MemoryStore, RedisStore

__all__ = [
    "CacheStore",
    "MemoryStore",
    "RedisClient",
    "RedisStore",
    "ResponseCache",
]
