"""Async client library for the Google Gemini API.

Text generation, chat, vision and embeddings with typed errors, response
caching and cost estimation.
"""

from .exceptions import (
    ApiError,
    AuthenticationError,
    BadRequestError,
    ConfigurationError,
    ErrorKind,
    GeminiError,
    InvalidInputError,
    ModelNotFoundError,
    NetworkError,
    RateLimitExceededError,
)
from .gemini import Gemini
from .llm import (
    ChatMessage,
    EmbeddingOptions,
    GeminiClient,
    GeminiResponse,
    GenerationOptions,
    TokenCounter,
    TokenUsage,
)

__version__ = "0.1.0"

__all__ = [
    "Gemini",
    "GeminiClient",
    "GeminiResponse",
    "TokenUsage",
    "TokenCounter",
    "ChatMessage",
    "GenerationOptions",
    "EmbeddingOptions",
    # Errors
    "GeminiError",
    "ErrorKind",
    "ConfigurationError",
    "ModelNotFoundError",
    "ApiError",
    "BadRequestError",
    "AuthenticationError",
    "RateLimitExceededError",
    "NetworkError",
    "InvalidInputError",
]
