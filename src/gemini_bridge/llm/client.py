"""Gemini API client.

Async HTTP client for the Gemini REST API: model catalog resolution,
endpoint construction, the outbound call and error classification.
No retries are performed here; retry policy belongs to the caller.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx
import structlog

from gemini_bridge.config import GeminiSettings, get_gemini_settings
from gemini_bridge.exceptions import ApiError, ConfigurationError, ModelNotFoundError

from .catalog import ModelCatalog
from .errors import network_error, raise_for_response
from .response import GeminiResponse
from .schemas import RequestVariant

logger = structlog.get_logger()

GENERATE_CONTENT = "generateContent"
EMBED_CONTENT = "embedContent"

SendableRequest = RequestVariant | Mapping[str, Any]


@dataclass(frozen=True)
class RequestContext:
    """Snapshot of client configuration taken at the start of one call."""

    model: str
    api_key: str
    timeout: float


class GeminiClient:
    """Async Gemini API client.

    The API key travels as the ``key`` query parameter. The model catalog is
    fetched on first use and kept for the lifetime of the instance unless
    ``refresh_models`` is called.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1",
        model: str = "gemini-pro",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key
            base_url: API base URL
            model: Default model for requests that do not name one
            timeout: Request timeout in seconds
            http_client: Optional shared HTTP client (not closed by this client)

        Raises:
            ConfigurationError: If the API key is empty
        """
        if not api_key:
            raise ConfigurationError(
                "Gemini API key is not set. Please set GEMINI_API_KEY in your environment."
            )

        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._model = model
        self.timeout = timeout
        self._http = http_client
        self._owns_http = http_client is None
        self._catalog = ModelCatalog()
        self._catalog_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: GeminiSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> GeminiClient:
        """Create a client from settings.

        Args:
            settings: Gemini settings (default: cached environment settings)
            http_client: Optional shared HTTP client

        Returns:
            Configured client
        """
        settings = settings or get_gemini_settings()
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            model=settings.default_model,
            timeout=settings.request_timeout,
            http_client=http_client,
        )

    # Instance configuration

    def set_model(self, model: str) -> GeminiClient:
        """Set the default model for subsequent requests."""
        self._model = model
        return self

    def get_model(self) -> str:
        """Get the default model."""
        return self._model

    def set_api_key(self, api_key: str) -> GeminiClient:
        """Set the API key for subsequent requests.

        Raises:
            ConfigurationError: If the API key is empty
        """
        if not api_key:
            raise ConfigurationError("Gemini API key must not be empty.")
        self._api_key = api_key
        return self

    def _context(self, model: str | None) -> RequestContext:
        return RequestContext(
            model=model or self._model,
            api_key=self._api_key,
            timeout=self.timeout,
        )

    @property
    def http(self) -> httpx.AsyncClient:
        """HTTP client, created on first use when not injected."""
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json"},
            )
        return self._http

    # Requests

    async def send(
        self,
        request: SendableRequest,
        model: str | None = None,
        operation: str = GENERATE_CONTENT,
    ) -> GeminiResponse:
        """Send one request to the Gemini API.

        Args:
            request: Request variant or an already-built wire payload
            model: Model override (default: the client's current model)
            operation: API operation appended to the model path

        Returns:
            Response envelope

        Raises:
            ModelNotFoundError: If the model is not in the catalog (or HTTP 404)
            BadRequestError: On HTTP 400
            AuthenticationError: On HTTP 401
            RateLimitExceededError: On HTTP 429
            ApiError: On any other non-2xx status
            NetworkError: If no HTTP status was received
        """
        context = self._context(model)
        await self._validate_model(context)

        endpoint = self.endpoint_for(context.model, operation)
        payload = dict(request) if isinstance(request, Mapping) else request.to_payload()

        logger.debug(
            "gemini_request_start",
            model=context.model,
            operation=operation,
            content_count=len(payload.get("contents", [])),
        )

        try:
            response = await self.http.post(
                endpoint,
                json=payload,
                params={"key": context.api_key},
                headers={"Content-Type": "application/json"},
                timeout=context.timeout,
            )
        except httpx.HTTPError as e:
            raise network_error("connecting to Gemini API", e) from e

        raise_for_response(response)
        data = self._decode(response)

        logger.debug(
            "gemini_request_success",
            model=context.model,
            operation=operation,
            status_code=response.status_code,
        )

        return GeminiResponse(raw=data, model=context.model)

    def endpoint_for(self, model: str, operation: str) -> str:
        """Build the endpoint URL for a model and operation.

        Args:
            model: Model name
            operation: API operation (e.g. "generateContent")

        Returns:
            Absolute endpoint URL
        """
        return f"{self.base_url}/{self._catalog.resolve_path(model)}:{operation}"

    # Model catalog

    async def available_models(self) -> list[str]:
        """Model names reported by the API (fetched on first use)."""
        await self._ensure_catalog(self._context(None))
        return self._catalog.names()

    async def refresh_models(self) -> list[str]:
        """Discard the cached catalog and fetch it again."""
        self._catalog.clear()
        return await self.available_models()

    async def _validate_model(self, context: RequestContext) -> None:
        await self._ensure_catalog(context)

        if not self._catalog.contains(context.model):
            available = ", ".join(self._catalog.names())
            raise ModelNotFoundError(
                f"Model '{context.model}' not found or not supported. "
                f"Available models: {available}"
            )

    async def _ensure_catalog(self, context: RequestContext) -> None:
        if self._catalog.is_loaded:
            return

        async with self._catalog_lock:
            if self._catalog.is_loaded:
                return
            await self._fetch_models(context)

    async def _fetch_models(self, context: RequestContext) -> None:
        try:
            response = await self.http.get(
                f"{self.base_url}/models",
                params={"key": context.api_key},
                timeout=context.timeout,
            )
        except httpx.HTTPError as e:
            raise network_error("fetching available models", e) from e

        raise_for_response(response)
        data = self._decode(response)

        models = data.get("models") or []
        if not models:
            raise ModelNotFoundError("No models returned from the API.")

        self._catalog.load(models)
        logger.debug("gemini_catalog_fetched", model_count=len(self._catalog.names()))

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise ApiError(
                "Gemini API returned a response that is not valid JSON.",
                status_code=response.status_code,
                cause=e,
            ) from e

        if not isinstance(data, dict):
            raise ApiError(
                "Gemini API returned an unexpected response shape.",
                status_code=response.status_code,
            )
        return data

    # Lifecycle

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> GeminiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
