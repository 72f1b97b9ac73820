"""Embedding service.

Embeds text with the embedContent operation and compares vectors.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import structlog
from pydantic import ValidationError

from gemini_bridge.exceptions import InvalidInputError
from gemini_bridge.llm.client import EMBED_CONTENT
from gemini_bridge.llm.models import DEFAULT_EMBEDDING_MODEL
from gemini_bridge.llm.response import GeminiResponse
from gemini_bridge.llm.schemas import EmbeddingOptions, EmbedRequest

from .base import BaseService, fingerprint

logger = structlog.get_logger()

EmbeddingOptionsInput = EmbeddingOptions | Mapping[str, Any] | None


def coerce_embedding_options(options: EmbeddingOptionsInput) -> EmbeddingOptions:
    if options is None:
        return EmbeddingOptions()
    if isinstance(options, EmbeddingOptions):
        return options
    try:
        return EmbeddingOptions.model_validate(dict(options))
    except ValidationError as e:
        raise InvalidInputError(f"Invalid embedding options: {e}", cause=e) from e


class EmbeddingService(BaseService):
    """Text embeddings and cosine similarity."""

    async def embed_text(
        self,
        text: str,
        options: EmbeddingOptionsInput = None,
    ) -> GeminiResponse:
        """Embed a single text.

        Args:
            text: Text to embed
            options: Embedding options (model, title, task type)

        Returns:
            Response envelope; the vector is available via ``embedding()``
        """
        opts = coerce_embedding_options(options)
        model = opts.model or DEFAULT_EMBEDDING_MODEL
        request = EmbedRequest(text=text, model=model, title=opts.title, task_type=opts.task_type)

        key = fingerprint("embedding", text, opts.fingerprint_data(), model)
        return await self._execute(key, request, model, operation=EMBED_CONTENT, ttl=opts.cache_ttl)

    async def embed_batch(
        self,
        texts: Sequence[str],
        options: EmbeddingOptionsInput = None,
    ) -> GeminiResponse:
        """Embed texts one by one and return the last envelope.

        Every text is embedded (and cached) in order; only the final
        item's envelope is returned. Use ``embed_batch_all`` to get all.

        Raises:
            InvalidInputError: If ``texts`` is empty
        """
        results = await self.embed_batch_all(texts, options)
        return results[-1]

    async def embed_batch_all(
        self,
        texts: Sequence[str],
        options: EmbeddingOptionsInput = None,
    ) -> list[GeminiResponse]:
        """Embed texts sequentially.

        Args:
            texts: Texts to embed
            options: Embedding options shared by every text

        Returns:
            One envelope per text, in input order

        Raises:
            InvalidInputError: If ``texts`` is empty
        """
        if not texts:
            raise InvalidInputError("At least one text is required for batch embedding.")

        logger.debug("embedding_batch_start", count=len(texts))

        results: list[GeminiResponse] = []
        for text in texts:
            results.append(await self.embed_text(text, options))
        return results

    def calculate_similarity(
        self,
        embedding1: Sequence[float],
        embedding2: Sequence[float],
    ) -> float:
        """Calculate cosine similarity between two embeddings.

        Args:
            embedding1: First embedding vector
            embedding2: Second embedding vector

        Returns:
            Cosine similarity; 0.0 when either vector has zero magnitude

        Raises:
            InvalidInputError: If the vectors differ in dimension
        """
        if len(embedding1) != len(embedding2):
            raise InvalidInputError("Embeddings must have the same dimension")

        vec1 = np.asarray(embedding1, dtype=float)
        vec2 = np.asarray(embedding2, dtype=float)

        norm1 = np.linalg.norm(vec1)
        norm2 = np.linalg.norm(vec2)

        if norm1 == 0 or norm2 == 0:
            return 0.0

        return float(np.dot(vec1, vec2) / (norm1 * norm2))
