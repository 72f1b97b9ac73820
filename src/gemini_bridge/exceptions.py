"""Custom exceptions for Gemini API operations."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Closed set of failure kinds surfaced by the client."""

    CONFIGURATION = "configuration_error"
    MODEL_NOT_FOUND = "model_not_found"
    BAD_REQUEST = "bad_request"
    AUTHENTICATION = "authentication_error"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    API_ERROR = "api_error"
    NETWORK = "network_error"
    INVALID_INPUT = "invalid_input"


class GeminiError(Exception):
    """Base exception for Gemini operations.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status of the failed exchange, if one was received
        cause: Original exception that caused this error
    """

    kind: ErrorKind = ErrorKind.API_ERROR

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize Gemini error.

        Args:
            message: Error description
            status_code: HTTP status code, if any
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.cause = cause


class ConfigurationError(GeminiError):
    """Missing or invalid client configuration (fatal).

    Raised at construction time, e.g. when the API key is empty.
    """

    kind = ErrorKind.CONFIGURATION


class ModelNotFoundError(GeminiError):
    """Requested model is unknown to the API.

    Recoverable by choosing another model.
    """

    kind = ErrorKind.MODEL_NOT_FOUND


class ApiError(GeminiError):
    """Non-2xx response from the API."""

    kind = ErrorKind.API_ERROR


class BadRequestError(ApiError):
    """HTTP 400."""

    kind = ErrorKind.BAD_REQUEST


class AuthenticationError(ApiError):
    """HTTP 401."""

    kind = ErrorKind.AUTHENTICATION


class RateLimitExceededError(ApiError):
    """HTTP 429. Callers should back off before retrying."""

    kind = ErrorKind.RATE_LIMIT_EXCEEDED


class NetworkError(GeminiError):
    """Transport failure before any HTTP status was received."""

    kind = ErrorKind.NETWORK


class InvalidInputError(GeminiError, ValueError):
    """Request input failed validation (missing image, bad MIME type)."""

    kind = ErrorKind.INVALID_INPUT
