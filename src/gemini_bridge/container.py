"""Process-wide wiring of Gemini dependencies.

Provides singleton instances for:
- GeminiClient
- ResponseCache
- RequestLogger
- Gemini facade

All are built from environment settings on first initialization.
"""

from __future__ import annotations

import structlog

from gemini_bridge.cache import ResponseCache
from gemini_bridge.config import (
    get_cache_settings,
    get_gemini_settings,
    get_logging_settings,
)
from gemini_bridge.gemini import Gemini
from gemini_bridge.llm import GeminiClient, RequestLogger, get_token_counter

logger = structlog.get_logger()


class GeminiContainer:
    """Singleton container for shared Gemini dependencies.

    Usage:
        container = get_container()
        container.initialize()

        gemini = container.gemini
    """

    _instance: GeminiContainer | None = None

    def __init__(self) -> None:
        """Initialize empty container."""
        self._client: GeminiClient | None = None
        self._cache: ResponseCache | None = None
        self._request_logger: RequestLogger | None = None
        self._gemini: Gemini | None = None
        self._initialized = False

    @classmethod
    def get_instance(cls) -> GeminiContainer:
        """Get or create singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance.

        Useful for testing to ensure clean state between tests.
        """
        if cls._instance is not None:
            cls._instance._initialized = False
            cls._instance._client = None
            cls._instance._cache = None
            cls._instance._request_logger = None
            cls._instance._gemini = None
        cls._instance = None

    def initialize(self) -> None:
        """Build dependencies from settings (idempotent).

        Raises:
            ConfigurationError: If GEMINI_API_KEY is not set
        """
        if self._initialized:
            return

        self._client = GeminiClient.from_settings(get_gemini_settings())
        self._cache = ResponseCache.from_settings(get_cache_settings())
        self._request_logger = RequestLogger.from_settings(get_logging_settings())
        self._gemini = Gemini(
            client=self._client,
            cache=self._cache,
            request_logger=self._request_logger,
            token_counter=get_token_counter(),
        )

        self._initialized = True
        logger.info("gemini_container_initialized", model=self._client.get_model())

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def client(self) -> GeminiClient:
        """Get GeminiClient singleton.

        Raises:
            RuntimeError: If container not initialized
        """
        if self._client is None:
            raise RuntimeError("Container not initialized. Call initialize() first.")
        return self._client

    @property
    def cache(self) -> ResponseCache:
        """Get ResponseCache singleton.

        Raises:
            RuntimeError: If container not initialized
        """
        if self._cache is None:
            raise RuntimeError("Container not initialized. Call initialize() first.")
        return self._cache

    @property
    def gemini(self) -> Gemini:
        """Get Gemini facade singleton.

        Raises:
            RuntimeError: If container not initialized
        """
        if self._gemini is None:
            raise RuntimeError("Container not initialized. Call initialize() first.")
        return self._gemini

    async def close(self) -> None:
        """Release client and cache connections."""
        if self._gemini is not None:
            await self._gemini.aclose()
        self._initialized = False
        logger.info("gemini_container_closed")


def get_container() -> GeminiContainer:
    """Get the global container singleton."""
    return GeminiContainer.get_instance()


def reset_container() -> None:
    """Reset the global container singleton."""
    GeminiContainer.reset()
