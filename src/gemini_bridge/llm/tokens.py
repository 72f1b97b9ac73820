"""Token counting and cost estimation.

Token counts are a length-based approximation, not a real tokenizer.
"""

import math
from collections.abc import Mapping
from functools import lru_cache

from gemini_bridge.config import get_gemini_settings

from .models import ModelDescriptor, build_descriptors

# Rough estimate for English text
CHARS_PER_TOKEN = 4


class TokenCounter:
    """Approximate token counts and price requests from the model table."""

    def __init__(self, models: Mapping[str, ModelDescriptor]) -> None:
        """Initialize token counter.

        Args:
            models: Model descriptors keyed by model name
        """
        self.models = dict(models)

    def count_tokens(self, text: str) -> int:
        """Estimate token count (1 token ≈ 4 characters, rounded up).

        Args:
            text: Text to count tokens for

        Returns:
            Estimated number of tokens
        """
        return math.ceil(len(text) / CHARS_PER_TOKEN)

    def estimate_cost(self, input_tokens: int, output_tokens: int, model: str) -> float:
        """Calculate cost for given token usage.

        Args:
            input_tokens: Number of input tokens
            output_tokens: Number of output tokens
            model: Model name

        Returns:
            Total cost in USD, 0.0 for models missing from the table
        """
        descriptor = self.models.get(model.removeprefix("models/"))
        if descriptor is None:
            return 0.0

        input_cost = (input_tokens / 1000) * descriptor.input_price_per_1k
        output_cost = (output_tokens / 1000) * descriptor.output_price_per_1k
        return input_cost + output_cost


@lru_cache(maxsize=1)
def get_token_counter() -> TokenCounter:
    """Get token counter built from the configured model table."""
    return TokenCounter(build_descriptors(get_gemini_settings().models))
