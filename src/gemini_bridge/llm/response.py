"""Gemini response envelope.

Wraps a decoded API reply together with the model that produced it and
derives content, usage, finish reason and cost on demand.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .tokens import TokenCounter, get_token_counter


class TokenUsage(BaseModel):
    """Token usage information."""

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)


class GeminiResponse(BaseModel):
    """Immutable envelope around a raw generateContent/embedContent reply."""

    model_config = ConfigDict(frozen=True)

    raw: dict[str, Any]
    model: str

    def _first_candidate(self) -> dict[str, Any] | None:
        candidates = self.raw.get("candidates") or []
        if not candidates:
            return None
        first = candidates[0]
        return first if isinstance(first, dict) else None

    def content(self) -> str:
        """Text of the first candidate's first part, or an empty string."""
        candidate = self._first_candidate()
        if candidate is None:
            return ""

        content = candidate.get("content")
        if not isinstance(content, dict):
            return ""

        parts = content.get("parts")
        if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
            return ""

        text = parts[0].get("text", "")
        return text if isinstance(text, str) else ""

    def raw_data(self) -> dict[str, Any]:
        """Raw decoded response."""
        return self.raw

    def token_usage(self) -> TokenUsage:
        """Token usage from usageMetadata (zeros when absent)."""
        usage = self.raw.get("usageMetadata") or {}
        return TokenUsage(
            prompt_tokens=usage.get("promptTokenCount", 0),
            completion_tokens=usage.get("candidatesTokenCount", 0),
            total_tokens=usage.get("totalTokenCount", 0),
        )

    def finish_reason(self) -> str | None:
        """Finish reason of the first candidate."""
        candidate = self._first_candidate()
        if candidate is None:
            return None
        return candidate.get("finishReason")

    def successful(self) -> bool:
        """True when the reply carries at least one candidate."""
        return bool(self.raw.get("candidates"))

    def embedding(self) -> list[float]:
        """Embedding values of an embedContent reply (empty when absent)."""
        embedding = self.raw.get("embedding") or {}
        return list(embedding.get("values") or [])

    def estimated_cost(self, counter: TokenCounter | None = None) -> float:
        """Estimated cost in USD from token usage and the model pricing table.

        Args:
            counter: Token counter holding the pricing table
                (default: counter built from settings)

        Returns:
            Estimated cost, 0.0 when the model is not priced
        """
        if counter is None:
            counter = get_token_counter()

        usage = self.token_usage()
        return counter.estimate_cost(usage.prompt_tokens, usage.completion_tokens, self.model)
