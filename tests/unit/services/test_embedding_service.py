"""Embedding service tests."""

from __future__ import annotations

import json

import httpx
import pytest

from gemini_bridge.cache import ResponseCache
from gemini_bridge.exceptions import InvalidInputError
from gemini_bridge.llm import GeminiClient
from gemini_bridge.services import EmbeddingService


@pytest.fixture
def service(client: GeminiClient, disabled_cache: ResponseCache, api) -> EmbeddingService:
    def embed(request: httpx.Request) -> httpx.Response:
        text = json.loads(request.content)["content"]["parts"][0]["text"]
        return httpx.Response(200, json={"embedding": {"values": [float(len(text)), 1.0]}})

    api.post_handler = embed
    return EmbeddingService(client, disabled_cache)


class TestEmbedText:
    """Tests for EmbeddingService.embed_text."""

    @pytest.mark.asyncio
    async def test_payload_and_endpoint(self, service: EmbeddingService, api) -> None:
        response = await service.embed_text("hello")

        request = api.posts[0]
        assert request.url.path == "/v1/models/embedding-001:embedContent"
        assert json.loads(request.content) == {
            "model": "models/embedding-001",
            "content": {"parts": [{"text": "hello"}]},
            "taskType": "RETRIEVAL_DOCUMENT",
        }
        assert response.embedding() == [5.0, 1.0]

    @pytest.mark.asyncio
    async def test_title_option(self, service: EmbeddingService, api) -> None:
        await service.embed_text("hello", {"title": "Greeting"})

        assert api.last_payload()["title"] == "Greeting"

    @pytest.mark.asyncio
    async def test_invalid_option_is_input_error(self, service: EmbeddingService, api) -> None:
        """Rejected options fail before any request is sent."""
        with pytest.raises(InvalidInputError, match="Invalid embedding options"):
            await service.embed_text("hello", {"cache_ttl": 0})

        assert api.posts == []

    @pytest.mark.asyncio
    async def test_cached(self, client: GeminiClient, enabled_cache: ResponseCache, api) -> None:
        api.body = {"embedding": {"values": [1.0]}}
        service = EmbeddingService(client, enabled_cache)

        await service.embed_text("hello")
        await service.embed_text("hello")

        assert len(api.posts) == 1


class TestEmbedBatch:
    """Tests for batch embedding."""

    @pytest.mark.asyncio
    async def test_returns_last(self, service: EmbeddingService, api) -> None:
        """Every text is sent in order; the last envelope is returned."""
        response = await service.embed_batch(["a", "bb", "ccc"])

        assert response.embedding() == [3.0, 1.0]
        assert [json.loads(r.content)["content"]["parts"][0]["text"] for r in api.posts] == [
            "a",
            "bb",
            "ccc",
        ]

    @pytest.mark.asyncio
    async def test_all_in_order(self, service: EmbeddingService) -> None:
        responses = await service.embed_batch_all(["a", "bb"])

        assert [r.embedding() for r in responses] == [[1.0, 1.0], [2.0, 1.0]]

    @pytest.mark.asyncio
    async def test_empty_batch(self, service: EmbeddingService) -> None:
        with pytest.raises(InvalidInputError):
            await service.embed_batch([])


class TestCalculateSimilarity:
    """Tests for cosine similarity."""

    def test_equal_vectors(self, service: EmbeddingService) -> None:
        assert service.calculate_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self, service: EmbeddingService) -> None:
        assert service.calculate_similarity([1, 0, 0], [0, 1, 0]) == 0.0

    def test_opposite_vectors(self, service: EmbeddingService) -> None:
        assert service.calculate_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)

    def test_zero_vector(self, service: EmbeddingService) -> None:
        """Zero magnitude yields 0.0 instead of dividing by zero."""
        assert service.calculate_similarity([0, 0, 0], [0, 0, 0]) == 0.0
        assert service.calculate_similarity([1, 2, 3], [0, 0, 0]) == 0.0

    def test_dimension_mismatch(self, service: EmbeddingService) -> None:
        with pytest.raises(InvalidInputError, match="same dimension"):
            service.calculate_similarity([1, 2], [1, 2, 3])
