"""Gemini API client layer.

Async HTTP client for the Gemini REST API with model catalog resolution,
typed error classification, response envelopes and cost estimation.
"""

from .catalog import ModelCatalog
from .client import EMBED_CONTENT, GENERATE_CONTENT, GeminiClient
from .logger import RequestLogger
from .models import DEFAULT_EMBEDDING_MODEL, DEFAULT_VISION_MODEL, ModelDescriptor
from .response import GeminiResponse, TokenUsage
from .schemas import (
    ChatMessage,
    ChatRequest,
    EmbeddingOptions,
    EmbedRequest,
    GeminiRequest,
    GenerateRequest,
    GenerationOptions,
    InlineImage,
    VisionBase64Request,
    VisionMultiRequest,
    VisionSingleRequest,
)
from .tokens import TokenCounter, get_token_counter

__all__ = [
    # Client
    "GeminiClient",
    "GENERATE_CONTENT",
    "EMBED_CONTENT",
    "ModelCatalog",
    # Logger
    "RequestLogger",
    # Models
    "ModelDescriptor",
    "DEFAULT_VISION_MODEL",
    "DEFAULT_EMBEDDING_MODEL",
    # Responses
    "GeminiResponse",
    "TokenUsage",
    # Schemas
    "ChatMessage",
    "GenerationOptions",
    "InlineImage",
    "GeminiRequest",
    "GenerateRequest",
    "ChatRequest",
    "VisionSingleRequest",
    "VisionMultiRequest",
    "VisionBase64Request",
    "EmbedRequest",
    "EmbeddingOptions",
    # Tokens
    "TokenCounter",
    "get_token_counter",
]
