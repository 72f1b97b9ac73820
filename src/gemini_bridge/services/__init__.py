"""Request services for text, vision and embedding operations."""

from .base import BaseService, coerce_options, fingerprint
from .embedding import EmbeddingService
from .jobs import GeminiJob, is_retryable
from .text import TextGenerationService
from .vision import VisionService

__all__ = [
    "BaseService",
    "EmbeddingService",
    "GeminiJob",
    "TextGenerationService",
    "VisionService",
    "coerce_options",
    "fingerprint",
    "is_retryable",
]
