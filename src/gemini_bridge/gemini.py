"""Gemini facade.

Single entry point composing the text, vision and embedding services
over one client and one response cache.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from types import TracebackType
from typing import Any

import structlog

from gemini_bridge.cache import ResponseCache
from gemini_bridge.llm.client import GeminiClient
from gemini_bridge.llm.logger import RequestLogger
from gemini_bridge.llm.response import GeminiResponse
from gemini_bridge.llm.schemas import ChatRequest, GenerateRequest
from gemini_bridge.llm.tokens import TokenCounter, get_token_counter
from gemini_bridge.services import (
    EmbeddingService,
    GeminiJob,
    TextGenerationService,
    VisionService,
)
from gemini_bridge.services.base import OptionsInput, coerce_options
from gemini_bridge.services.embedding import EmbeddingOptionsInput
from gemini_bridge.services.text import MessageInput, to_chat_message

logger = structlog.get_logger()


class Gemini:
    """High-level Gemini API access.

    Usage:
        async with Gemini.from_settings() as gemini:
            response = await gemini.generate("Hello")
            print(response.content())
    """

    def __init__(
        self,
        client: GeminiClient,
        cache: ResponseCache,
        request_logger: RequestLogger | None = None,
        token_counter: TokenCounter | None = None,
    ) -> None:
        """Initialize facade.

        Args:
            client: Gemini API client
            cache: Response cache shared by all services
            request_logger: Request logger (default: disabled)
            token_counter: Token counter (default: built from settings)
        """
        self.client = client
        self.cache = cache
        self.token_counter = token_counter or get_token_counter()
        self.text = TextGenerationService(client, cache, request_logger, self.token_counter)
        self.vision = VisionService(client, cache, request_logger, self.token_counter)
        self.embeddings = EmbeddingService(client, cache, request_logger, self.token_counter)

    @classmethod
    def from_settings(cls) -> Gemini:
        """Create a facade wired from environment settings."""
        return cls(
            client=GeminiClient.from_settings(),
            cache=ResponseCache.from_settings(),
            request_logger=RequestLogger.from_settings(),
        )

    # Text

    async def generate(self, prompt: str, options: OptionsInput = None) -> GeminiResponse:
        """Generate text from a prompt."""
        return await self.text.generate(prompt, options)

    async def chat(
        self,
        messages: Sequence[MessageInput],
        options: OptionsInput = None,
    ) -> GeminiResponse:
        """Generate a reply to a conversation."""
        return await self.text.chat(messages, options)

    # Vision

    async def generate_from_image(
        self,
        image_path: str | Path,
        prompt: str | None = None,
        options: OptionsInput = None,
    ) -> GeminiResponse:
        return await self.vision.generate_from_image(image_path, prompt, options)

    async def generate_from_multiple_images(
        self,
        image_paths: Sequence[str | Path],
        prompt: str | None = None,
        options: OptionsInput = None,
    ) -> GeminiResponse:
        return await self.vision.generate_from_multiple_images(image_paths, prompt, options)

    async def generate_from_base64_image(
        self,
        base64_image: str,
        prompt: str | None = None,
        options: OptionsInput = None,
    ) -> GeminiResponse:
        return await self.vision.generate_from_base64_image(base64_image, prompt, options)

    # Embeddings

    async def embed_text(self, text: str, options: EmbeddingOptionsInput = None) -> GeminiResponse:
        return await self.embeddings.embed_text(text, options)

    async def embed_batch(
        self,
        texts: Sequence[str],
        options: EmbeddingOptionsInput = None,
    ) -> GeminiResponse:
        """Embed texts sequentially; returns the last envelope."""
        return await self.embeddings.embed_batch(texts, options)

    async def embed_batch_all(
        self,
        texts: Sequence[str],
        options: EmbeddingOptionsInput = None,
    ) -> list[GeminiResponse]:
        """Embed texts sequentially; returns every envelope in order."""
        return await self.embeddings.embed_batch_all(texts, options)

    def calculate_similarity(
        self,
        embedding1: Sequence[float],
        embedding2: Sequence[float],
    ) -> float:
        return self.embeddings.calculate_similarity(embedding1, embedding2)

    # Client configuration

    def set_model(self, model: str) -> Gemini:
        """Set the client's default model."""
        self.client.set_model(model)
        return self

    def set_api_key(self, api_key: str) -> Gemini:
        """Set the client's API key."""
        self.client.set_api_key(api_key)
        return self

    # Background dispatch

    def generate_async(
        self,
        prompt: str,
        options: OptionsInput = None,
        callback_target: str | object | None = None,
        callback_method: str | None = None,
        callback_params: Sequence[Any] = (),
    ) -> asyncio.Task[GeminiResponse]:
        """Send a prompt in the background.

        The response bypasses the cache and is handed to
        ``callback_target.callback_method(response, *callback_params)``.

        Returns:
            Task resolving to the response envelope
        """
        opts = coerce_options(options)
        job = GeminiJob(
            GenerateRequest(prompt=prompt, options=opts),
            model=opts.model,
            callback_target=callback_target,
            callback_method=callback_method,
            callback_params=callback_params,
        )
        return job.dispatch(self.client)

    def chat_async(
        self,
        messages: Sequence[MessageInput],
        options: OptionsInput = None,
        callback_target: str | object | None = None,
        callback_method: str | None = None,
        callback_params: Sequence[Any] = (),
    ) -> asyncio.Task[GeminiResponse]:
        """Send a conversation in the background.

        Returns:
            Task resolving to the response envelope
        """
        opts = coerce_options(options)
        turns = [to_chat_message(message) for message in messages]
        job = GeminiJob(
            ChatRequest(messages=turns, options=opts),
            model=opts.model,
            callback_target=callback_target,
            callback_method=callback_method,
            callback_params=callback_params,
        )
        return job.dispatch(self.client)

    # Lifecycle

    async def aclose(self) -> None:
        """Close the client and the cache's connections."""
        await self.client.aclose()
        await self.cache.close()
        logger.debug("gemini_closed")

    async def __aenter__(self) -> Gemini:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
