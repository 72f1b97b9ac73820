"""Text generation service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from gemini_bridge.llm.response import GeminiResponse
from gemini_bridge.llm.schemas import ChatMessage, ChatRequest, GenerateRequest

from .base import BaseService, OptionsInput, coerce_options, fingerprint

logger = structlog.get_logger()

MessageInput = ChatMessage | Mapping[str, Any]


class TextGenerationService(BaseService):
    """Single-prompt and multi-turn text generation."""

    async def generate(self, prompt: str, options: OptionsInput = None) -> GeminiResponse:
        """Generate text from a prompt.

        Args:
            prompt: Prompt text
            options: Generation options (model, temperature, ...)

        Returns:
            Response envelope
        """
        opts = coerce_options(options)
        model = opts.model or self.client.get_model()
        request = GenerateRequest(prompt=prompt, options=opts)

        logger.debug("text_generate_start", model=model, prompt_length=len(prompt))

        key = fingerprint("text", prompt, opts.fingerprint_data(), model)
        return await self._execute(key, request, model, ttl=opts.cache_ttl)

    async def chat(
        self,
        messages: Sequence[MessageInput],
        options: OptionsInput = None,
    ) -> GeminiResponse:
        """Generate a reply to a conversation.

        Args:
            messages: Ordered turns; a missing role defaults to "user"
            options: Generation options (model, temperature, ...)

        Returns:
            Response envelope
        """
        opts = coerce_options(options)
        model = opts.model or self.client.get_model()
        turns = [to_chat_message(message) for message in messages]
        request = ChatRequest(messages=turns, options=opts)

        logger.debug("text_chat_start", model=model, message_count=len(turns))

        key = fingerprint(
            "chat",
            [turn.model_dump() for turn in turns],
            opts.fingerprint_data(),
            model,
        )
        return await self._execute(key, request, model, ttl=opts.cache_ttl)


def to_chat_message(message: MessageInput) -> ChatMessage:
    """Normalize a chat turn given as a model or a mapping."""
    if isinstance(message, ChatMessage):
        return message

    role = message.get("role") or "user"
    content = message.get("content") or ""
    return ChatMessage(role=str(role), content=str(content))
