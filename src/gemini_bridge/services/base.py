"""Shared plumbing for request services.

Every service shapes a request, fingerprints it, logs it and runs it through
the response cache around a single client call.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from gemini_bridge.cache import ResponseCache
from gemini_bridge.exceptions import InvalidInputError
from gemini_bridge.llm.client import GENERATE_CONTENT, GeminiClient
from gemini_bridge.llm.logger import RequestLogger
from gemini_bridge.llm.response import GeminiResponse
from gemini_bridge.llm.schemas import GenerationOptions, RequestVariant
from gemini_bridge.llm.tokens import TokenCounter, get_token_counter

OptionsInput = GenerationOptions | Mapping[str, Any] | None


def coerce_options(options: OptionsInput) -> GenerationOptions:
    """Accept options as a model, a plain mapping or None."""
    if options is None:
        return GenerationOptions()
    if isinstance(options, GenerationOptions):
        return options
    try:
        return GenerationOptions.model_validate(dict(options))
    except ValidationError as e:
        raise InvalidInputError(f"Invalid generation options: {e}", cause=e) from e


def fingerprint(operation: str, data: Any, options: dict[str, Any], model: str) -> str:
    """Deterministic fingerprint of a request's semantic content.

    Args:
        operation: Fingerprint namespace (e.g. "text", "vision")
        data: JSON-serializable request input
        options: Options that change the reply
        model: Resolved model name

    Returns:
        "<operation>:<sha256 hex>"
    """
    canonical = json.dumps(
        {"operation": operation, "input": data, "options": options, "model": model},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return f"{operation}:{hashlib.sha256(canonical.encode('utf-8')).hexdigest()}"


class BaseService:
    """Base class for text, vision and embedding services."""

    def __init__(
        self,
        client: GeminiClient,
        cache: ResponseCache,
        request_logger: RequestLogger | None = None,
        token_counter: TokenCounter | None = None,
    ) -> None:
        """Initialize service.

        Args:
            client: Gemini API client
            cache: Response cache wrapped around every call
            request_logger: Request logger (default: disabled)
            token_counter: Token counter (default: built from settings)
        """
        self.client = client
        self.cache = cache
        self.request_logger = request_logger or RequestLogger(enabled=False)
        self.token_counter = token_counter or get_token_counter()

    async def _execute(
        self,
        key: str,
        request: RequestVariant,
        model: str,
        operation: str = GENERATE_CONTENT,
        ttl: int | None = None,
    ) -> GeminiResponse:
        self.request_logger.log_request(request.to_payload(), model)

        async def compute() -> GeminiResponse:
            try:
                response = await self.client.send(request, model, operation)
            except Exception as e:
                self.request_logger.log_error(e)
                raise
            self.request_logger.log_response(response, self.token_counter)
            return response

        return await self.cache.compute_if_absent(key, compute, ttl)
