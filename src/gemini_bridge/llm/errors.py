"""HTTP outcome classification.

Maps completed HTTP exchanges and transport failures onto the closed set of
Gemini error kinds. Classification never retries.
"""

from __future__ import annotations

from typing import Any

import httpx

from gemini_bridge.exceptions import (
    ApiError,
    AuthenticationError,
    BadRequestError,
    GeminiError,
    ModelNotFoundError,
    NetworkError,
    RateLimitExceededError,
)

UNKNOWN_ERROR = "Unknown error"

_STATUS_ERRORS: dict[int, tuple[type[GeminiError], str]] = {
    400: (BadRequestError, "Bad request"),
    401: (AuthenticationError, "Authentication error"),
    404: (ModelNotFoundError, "Model not found"),
    429: (RateLimitExceededError, "Rate limit exceeded"),
}


def extract_error_message(body: Any) -> str:
    """Pull the server-supplied error.message out of a decoded body."""
    if not isinstance(body, dict):
        return UNKNOWN_ERROR

    error = body.get("error")
    if not isinstance(error, dict):
        return UNKNOWN_ERROR

    message = error.get("message")
    return message if isinstance(message, str) and message else UNKNOWN_ERROR


def classify_status(status_code: int, body: Any) -> GeminiError | None:
    """Classify an HTTP status and decoded body.

    Args:
        status_code: HTTP status code
        body: Decoded JSON body (any shape)

    Returns:
        Classified error, or None for 2xx statuses
    """
    if 200 <= status_code < 300:
        return None

    message = extract_error_message(body)
    known = _STATUS_ERRORS.get(status_code)
    if known is not None:
        error_cls, label = known
        return error_cls(f"{label}: {message}", status_code=status_code)

    return ApiError(f"Gemini API error ({status_code}): {message}", status_code=status_code)


def raise_for_response(response: httpx.Response) -> None:
    """Raise the classified error for a non-2xx response.

    Args:
        response: Completed HTTP response

    Raises:
        GeminiError: Classified failure for non-2xx responses
    """
    if response.is_success:
        return

    try:
        body = response.json()
    except ValueError:
        body = None

    error = classify_status(response.status_code, body)
    if error is not None:
        raise error


def network_error(context: str, cause: Exception) -> NetworkError:
    """Wrap a transport failure.

    Args:
        context: What the client was doing (e.g. "connecting to Gemini API")
        cause: Underlying transport exception

    Returns:
        NetworkError carrying the original cause
    """
    return NetworkError(f"Network error while {context}: {cause}", cause=cause)
