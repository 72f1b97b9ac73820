"""Configuration settings.

Provides settings for the API client, response caching, request logging,
and retry behavior of background jobs.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelPricing(BaseModel):
    """Token limit and pricing for a single model."""

    max_tokens: int = Field(default=8192, gt=0)
    input_price_per_1k: float = Field(default=0.0, ge=0.0)
    output_price_per_1k: float = Field(default=0.0, ge=0.0)


DEFAULT_MODEL_PRICING: dict[str, ModelPricing] = {
    "gemini-pro": ModelPricing(
        max_tokens=8192,
        input_price_per_1k=0.00025,
        output_price_per_1k=0.0005,
    ),
    "gemini-pro-vision": ModelPricing(
        max_tokens=8192,
        input_price_per_1k=0.0025,
        output_price_per_1k=0.0005,
    ),
    "gemini-ultra": ModelPricing(
        max_tokens=8192,
        input_price_per_1k=0.0025,
        output_price_per_1k=0.0075,
    ),
    "gemini-ultra-vision": ModelPricing(
        max_tokens=8192,
        input_price_per_1k=0.0025,
        output_price_per_1k=0.0075,
    ),
}


class GeminiSettings(BaseSettings):
    """Gemini API client settings."""

    api_key: str = Field(
        default="",
        description="Gemini API key (checked by the client, not here)",
    )
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1",
        description="Base URL for the Gemini API",
    )
    default_model: str = Field(
        default="gemini-pro",
        description="Model used when a request does not name one",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds",
    )
    models: dict[str, ModelPricing] = Field(
        default_factory=lambda: dict(DEFAULT_MODEL_PRICING),
        description="Per-model token limits and pricing",
    )

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        extra="ignore",
    )


class CacheSettings(BaseSettings):
    """Response cache settings."""

    enabled: bool = Field(default=False, description="Enable response caching")
    ttl: int = Field(default=3600, gt=0, description="Default entry TTL in seconds")
    prefix: str = Field(default="gemini_cache_", description="Cache key prefix")
    backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Storage backend for cached responses",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    redis_max_connections: int = Field(
        default=20,
        description="Maximum number of Redis connections",
    )

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_CACHE_",
        env_file=".env",
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Request logging settings."""

    enabled: bool = Field(default=False, description="Log requests and responses")
    channel: str = Field(default="gemini", description="Logger name for request logs")
    level: str = Field(default="INFO", description="Log level used by the CLI")

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_LOG_",
        env_file=".env",
        extra="ignore",
    )


class RateLimitSettings(BaseSettings):
    """Retry settings for background jobs."""

    max_retries: int = Field(default=3, ge=1, description="Maximum job attempts")
    retry_delay: int = Field(
        default=1000,
        ge=0,
        description="Retry delay in ms (accepted, unused: jobs wait on BACKOFF_SCHEDULE)",
    )
    backoff_multiplier: float = Field(
        default=2,
        ge=1,
        description="Backoff multiplier (accepted, unused: jobs wait on BACKOFF_SCHEDULE)",
    )

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_RATE_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_gemini_settings() -> GeminiSettings:
    """Get cached Gemini settings."""
    return GeminiSettings()


@lru_cache
def get_cache_settings() -> CacheSettings:
    """Get cached cache settings."""
    return CacheSettings()


@lru_cache
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


@lru_cache
def get_rate_limit_settings() -> RateLimitSettings:
    """Get cached rate limit settings."""
    return RateLimitSettings()
