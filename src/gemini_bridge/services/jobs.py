"""Background Gemini requests.

A job sends one prepared request with bounded retries and hands the
response to an optional callback.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from pydantic import ImportString, TypeAdapter, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_chain,
    wait_fixed,
)

from gemini_bridge.config import get_rate_limit_settings
from gemini_bridge.exceptions import ApiError, NetworkError, RateLimitExceededError
from gemini_bridge.llm.client import GENERATE_CONTENT, GeminiClient, SendableRequest
from gemini_bridge.llm.response import GeminiResponse

logger = structlog.get_logger()

# Seconds to wait before the 2nd, 3rd and later attempts
BACKOFF_SCHEDULE = (1, 5, 10)

_import_adapter: TypeAdapter[Any] = TypeAdapter(ImportString)


def is_retryable(error: BaseException) -> bool:
    """Transient failures worth another attempt."""
    if isinstance(error, RateLimitExceededError | NetworkError):
        return True
    if isinstance(error, ApiError):
        return (error.status_code or 0) >= 500
    return False


class GeminiJob:
    """One request dispatched outside the caller's flow.

    Only transient failures are retried: rate limits, network errors and
    5xx replies (see ``is_retryable``). Client-side errors such as a bad
    request, an invalid key or an unknown model fail on the first attempt,
    since repeating an identical request cannot change their outcome.
    """

    def __init__(
        self,
        request: SendableRequest,
        model: str | None = None,
        callback_target: str | object | None = None,
        callback_method: str | None = None,
        callback_params: Sequence[Any] = (),
        operation: str = GENERATE_CONTENT,
        max_attempts: int | None = None,
        backoff: Sequence[float] = BACKOFF_SCHEDULE,
    ) -> None:
        """Initialize job.

        Args:
            request: Request variant or prepared wire payload
            model: Model name (default: the client's current model)
            callback_target: Dotted import path or object receiving the response
            callback_method: Method called as ``method(response, *callback_params)``
            callback_params: Extra positional arguments for the callback
            operation: API operation
            max_attempts: Attempt limit (default: GEMINI_RATE_MAX_RETRIES)
            backoff: Fixed waits between attempts, last one repeated
        """
        self.request = dict(request) if isinstance(request, Mapping) else request
        self.model = model
        self.callback_target = callback_target
        self.callback_method = callback_method
        self.callback_params = list(callback_params)
        self.operation = operation
        self.max_attempts = max_attempts or get_rate_limit_settings().max_retries
        self.backoff = list(backoff)

    async def run(self, client: GeminiClient) -> GeminiResponse:
        """Send the request with retries, then run the callback.

        Returns:
            Response envelope

        Raises:
            GeminiError: The last failure once attempts are exhausted,
                or the first non-retryable one
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_chain(*[wait_fixed(seconds) for seconds in self.backoff]),
            retry=retry_if_exception(is_retryable),
            before_sleep=self._log_retry,
            reraise=True,
        )

        response: GeminiResponse = await retrying(
            client.send, self.request, self.model, self.operation
        )

        logger.info(
            "gemini_job_completed",
            model=response.model,
            successful=response.successful(),
        )

        await self._run_callback(response)
        return response

    def dispatch(self, client: GeminiClient) -> asyncio.Task[GeminiResponse]:
        """Schedule ``run`` on the running event loop."""
        return asyncio.create_task(self.run(client))

    async def _run_callback(self, response: GeminiResponse) -> None:
        if self.callback_target is None or not self.callback_method:
            return

        target = self._resolve_target()
        if target is None:
            return

        method = getattr(target, self.callback_method, None)
        if not callable(method):
            logger.debug(
                "gemini_job_callback_method_missing",
                target=repr(target),
                method=self.callback_method,
            )
            return

        result = method(response, *self.callback_params)
        if inspect.isawaitable(result):
            await result

    def _resolve_target(self) -> object | None:
        target = self.callback_target
        if isinstance(target, str):
            try:
                target = _import_adapter.validate_python(target)
            except ValidationError:
                logger.debug("gemini_job_callback_unresolved", target=self.callback_target)
                return None

        if inspect.isclass(target):
            target = target()
        return target

    @staticmethod
    def _log_retry(retry_state: Any) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "gemini_job_retry",
            attempt=retry_state.attempt_number,
            error=str(error),
        )
