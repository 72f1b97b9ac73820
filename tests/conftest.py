"""
Pytest configuration and fixtures
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from gemini_bridge.cache import MemoryStore, ResponseCache
from gemini_bridge.config import (
    get_cache_settings,
    get_gemini_settings,
    get_logging_settings,
    get_rate_limit_settings,
)
from gemini_bridge.container import reset_container
from gemini_bridge.llm import GeminiClient, get_token_counter

BASE_URL = "https://generativelanguage.googleapis.com/v1"

MODELS_LISTING = {
    "models": [
        {"name": "models/gemini-pro"},
        {"name": "models/gemini-pro-vision"},
        {"name": "models/embedding-001"},
    ]
}

SUCCESS_BODY = {
    "candidates": [
        {
            "content": {"parts": [{"text": "Hello, world!"}], "role": "model"},
            "finishReason": "STOP",
        }
    ],
    "usageMetadata": {
        "promptTokenCount": 10,
        "candidatesTokenCount": 20,
        "totalTokenCount": 30,
    },
}

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from the environment and cached settings"""
    for name in (
        "GEMINI_API_KEY",
        "GEMINI_DEFAULT_MODEL",
        "GEMINI_CACHE_ENABLED",
        "GEMINI_CACHE_BACKEND",
        "GEMINI_LOG_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)

    caches = (
        get_gemini_settings,
        get_cache_settings,
        get_logging_settings,
        get_rate_limit_settings,
        get_token_counter,
    )
    for getter in caches:
        getter.cache_clear()
    reset_container()

    yield

    for getter in caches:
        getter.cache_clear()
    reset_container()


class GeminiApiStub:
    """Scripted Gemini API behind httpx.MockTransport.

    Answers the models listing from ``models`` and every POST with
    ``status`` / ``body``. All requests are recorded.
    """

    def __init__(self) -> None:
        self.models: dict[str, Any] = MODELS_LISTING
        self.status = 200
        self.body: Any = SUCCESS_BODY
        self.requests: list[httpx.Request] = []
        self.post_handler: Handler | None = None

    @property
    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def listings(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def last_payload(self) -> dict[str, Any]:
        return json.loads(self.posts[-1].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.method == "GET":
            return httpx.Response(200, json=self.models)

        if self.post_handler is not None:
            return self.post_handler(request)

        if isinstance(self.body, str):
            return httpx.Response(self.status, text=self.body)
        return httpx.Response(self.status, json=self.body)


@pytest.fixture
def api() -> GeminiApiStub:
    """Scripted API"""
    return GeminiApiStub()


@pytest.fixture
def client(api: GeminiApiStub) -> GeminiClient:
    """Gemini client talking to the scripted API"""
    http = httpx.AsyncClient(transport=httpx.MockTransport(api))
    return GeminiClient(api_key="test-key", base_url=BASE_URL, http_client=http)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def enabled_cache(memory_store: MemoryStore) -> ResponseCache:
    """Enabled cache on an in-memory store"""
    return ResponseCache(memory_store, enabled=True, ttl=60)


@pytest.fixture
def disabled_cache(memory_store: MemoryStore) -> ResponseCache:
    return ResponseCache(memory_store, enabled=False)
