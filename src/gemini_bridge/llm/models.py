"""Gemini model definitions.

Defines the ModelDescriptor dataclass and builds descriptors from the
configured pricing table.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from gemini_bridge.config import ModelPricing


@dataclass(frozen=True)
class ModelDescriptor:
    """Static token limit and pricing for one model."""

    name: str  # Model name as configured (no "models/" prefix)
    max_tokens: int
    input_price_per_1k: float  # USD per 1k input tokens
    output_price_per_1k: float  # USD per 1k output tokens


# Used when vision requests name a model that cannot handle images
DEFAULT_VISION_MODEL = "gemini-pro-vision"

DEFAULT_EMBEDDING_MODEL = "embedding-001"


def build_descriptors(table: Mapping[str, ModelPricing]) -> dict[str, ModelDescriptor]:
    """Build descriptors keyed by model name from a pricing table.

    Args:
        table: Mapping of model name to pricing

    Returns:
        Dictionary of model name to descriptor
    """
    return {
        name: ModelDescriptor(
            name=name,
            max_tokens=pricing.max_tokens,
            input_price_per_1k=pricing.input_price_per_1k,
            output_price_per_1k=pricing.output_price_per_1k,
        )
        for name, pricing in table.items()
    }
