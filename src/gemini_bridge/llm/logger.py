"""Gemini request logger.

Logs requests, responses and errors to the configured channel when
request logging is enabled.
"""

from __future__ import annotations

import copy
from typing import Any

import structlog

from gemini_bridge.config import LoggingSettings, get_logging_settings
from gemini_bridge.exceptions import ErrorKind, GeminiError

from .response import GeminiResponse
from .tokens import TokenCounter

MAX_TEXT_LENGTH = 100


class RequestLogger:
    """Logger for Gemini API traffic."""

    def __init__(self, enabled: bool = False, channel: str = "gemini") -> None:
        """Initialize request logger.

        Args:
            enabled: Whether anything is logged at all
            channel: Logger name
        """
        self.enabled = enabled
        self.channel = channel
        self._log = structlog.get_logger(channel)

    @classmethod
    def from_settings(cls, settings: LoggingSettings | None = None) -> RequestLogger:
        settings = settings or get_logging_settings()
        return cls(enabled=settings.enabled, channel=settings.channel)

    def log_request(self, payload: dict[str, Any], model: str) -> None:
        """Log an outgoing request.

        Args:
            payload: Wire payload (not modified)
            model: Model the request is sent to
        """
        if not self.enabled:
            return

        self._log.info(
            "gemini_api_request",
            model=model,
            payload=sanitize_payload(payload),
        )

    def log_response(
        self, response: GeminiResponse, counter: TokenCounter | None = None
    ) -> None:
        """Log a response envelope.

        Args:
            response: Response envelope
            counter: Token counter pricing the response (default: from settings)
        """
        if not self.enabled:
            return

        self._log.info(
            "gemini_api_response",
            model=response.model,
            successful=response.successful(),
            finish_reason=response.finish_reason(),
            token_usage=response.token_usage().model_dump(),
            estimated_cost=response.estimated_cost(counter),
        )

    def log_error(self, exception: BaseException) -> None:
        """Log a failed request."""
        if not self.enabled:
            return

        kind: ErrorKind | None = None
        status_code: int | None = None
        if isinstance(exception, GeminiError):
            kind = exception.kind
            status_code = exception.status_code

        self._log.error(
            "gemini_api_error",
            message=str(exception),
            kind=str(kind) if kind is not None else None,
            status_code=status_code,
            error_type=type(exception).__name__,
        )


def sanitize_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Copy a payload with long text truncated and image data elided.

    Args:
        payload: Wire payload

    Returns:
        Sanitized deep copy
    """
    sanitized = copy.deepcopy(payload)

    contents = sanitized.get("contents")
    if isinstance(contents, list):
        for content in contents:
            _sanitize_parts(content.get("parts") if isinstance(content, dict) else None)

    content = sanitized.get("content")
    if isinstance(content, dict):
        _sanitize_parts(content.get("parts"))

    return sanitized


def _sanitize_parts(parts: Any) -> None:
    if not isinstance(parts, list):
        return

    for part in parts:
        if not isinstance(part, dict):
            continue

        text = part.get("text")
        if isinstance(text, str) and len(text) > MAX_TEXT_LENGTH:
            part["text"] = text[:MAX_TEXT_LENGTH] + "... [truncated]"

        inline = part.get("inline_data")
        if isinstance(inline, dict) and isinstance(inline.get("data"), str):
            inline["data"] = f"<{len(inline['data'])} base64 chars>"
