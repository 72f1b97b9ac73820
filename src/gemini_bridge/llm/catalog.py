"""Remote model catalog.

Holds the model names reported by the API's models listing and resolves
user-facing model names ("gemini-pro") to API paths ("models/gemini-pro").
The catalog is loaded once per client; reloading is explicit.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


class ModelCatalog:
    """Ordered model names fetched from the API."""

    def __init__(self) -> None:
        self._names: list[str] | None = None

    @property
    def is_loaded(self) -> bool:
        return self._names is not None

    def load(self, entries: Iterable[Mapping[str, Any]]) -> None:
        """Replace catalog contents with entries of a models listing.

        Args:
            entries: Items of the listing's "models" array
        """
        self._names = [str(entry["name"]) for entry in entries if entry.get("name")]

    def clear(self) -> None:
        self._names = None

    def names(self) -> list[str]:
        return list(self._names or [])

    def find(self, model: str) -> str | None:
        """Find the catalog entry matching a model name.

        Tries an exact match, then the "models/<name>" form, then a
        "/<name>" suffix match.

        Args:
            model: Model name, with or without the "models/" prefix

        Returns:
            Matching catalog name, or None
        """
        names = self._names or []
        for candidate in (model, f"models/{model}"):
            if candidate in names:
                return candidate

        suffix = f"/{model}"
        for name in names:
            if name.endswith(suffix):
                return name

        return None

    def contains(self, model: str) -> bool:
        return self.find(model) is not None

    def resolve_path(self, model: str) -> str:
        """Resolve the API path used to invoke a model.

        Args:
            model: Model name

        Returns:
            Path relative to the base URL, without the operation suffix
        """
        if model.startswith("models/"):
            return model

        match = self.find(model)
        if match is not None:
            return match

        return fallback_paths(model)[0]


def fallback_paths(model: str) -> tuple[str, str]:
    """Literal path shapes used when the catalog has no matching entry."""
    return (model, f"models/{model}")
