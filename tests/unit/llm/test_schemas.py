"""Request schema tests."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from gemini_bridge.llm.schemas import (
    ChatMessage,
    ChatRequest,
    EmbeddingOptions,
    EmbedRequest,
    GeminiRequest,
    GenerateRequest,
    GenerationOptions,
    InlineImage,
    VisionBase64Request,
    VisionMultiRequest,
)


class TestGenerationOptions:
    """Tests for GenerationOptions."""

    def test_unset_options_produce_empty_config(self) -> None:
        assert GenerationOptions().generation_config() == {}

    def test_wire_names(self) -> None:
        """Options map one-to-one onto generationConfig fields."""
        options = GenerationOptions(
            temperature=0.2, top_p=0.9, top_k=40, max_tokens=256, stop="END"
        )

        assert options.generation_config() == {
            "temperature": 0.2,
            "topP": 0.9,
            "topK": 40,
            "maxOutputTokens": 256,
            "stopSequences": ["END"],
        }

    def test_zero_temperature_is_kept(self) -> None:
        """Falsy values are still sent."""
        assert GenerationOptions(temperature=0).generation_config() == {"temperature": 0.0}

    def test_temperature_range(self) -> None:
        with pytest.raises(ValidationError):
            GenerationOptions(temperature=3.0)

    def test_fingerprint_data_ignores_ttl(self) -> None:
        """Cache TTL does not change the request's identity."""
        a = GenerationOptions(temperature=0.5, cache_ttl=10)
        b = GenerationOptions(temperature=0.5)

        assert a.fingerprint_data() == b.fingerprint_data() == {"temperature": 0.5}


class TestPayloads:
    """Tests for request variant payloads."""

    def test_generate_minimal(self) -> None:
        """No generationConfig or safetySettings when nothing is set."""
        assert GenerateRequest(prompt="Hi").to_payload() == {
            "contents": [{"parts": [{"text": "Hi"}]}]
        }

    def test_generate_with_options(self) -> None:
        safety = [{"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"}]
        request = GenerateRequest(
            prompt="Hi",
            options=GenerationOptions(max_tokens=10, stop=["a", "b"], safety_settings=safety),
        )

        payload = request.to_payload()

        assert payload["generationConfig"] == {"maxOutputTokens": 10, "stopSequences": ["a", "b"]}
        assert payload["safetySettings"] == safety

    def test_chat_keeps_roles_in_order(self) -> None:
        request = ChatRequest(
            messages=[
                ChatMessage(role="user", content="Hi"),
                ChatMessage(role="model", content="Hello"),
                ChatMessage(content="How are you?"),
            ]
        )

        assert request.to_payload()["contents"] == [
            {"role": "user", "parts": [{"text": "Hi"}]},
            {"role": "model", "parts": [{"text": "Hello"}]},
            {"role": "user", "parts": [{"text": "How are you?"}]},
        ]

    def test_vision_prompt_before_images(self) -> None:
        images = [
            InlineImage(mime_type="image/png", data="AAA"),
            InlineImage(mime_type="image/jpeg", data="BBB"),
        ]
        request = VisionMultiRequest(prompt="Compare", images=images)

        assert request.to_payload()["contents"] == [
            {
                "parts": [
                    {"text": "Compare"},
                    {"inline_data": {"mime_type": "image/png", "data": "AAA"}},
                    {"inline_data": {"mime_type": "image/jpeg", "data": "BBB"}},
                ]
            }
        ]

    def test_vision_without_prompt(self) -> None:
        """An absent prompt adds no text part."""
        request = VisionBase64Request(image=InlineImage(mime_type="image/gif", data="R0lG"))

        assert request.to_payload()["contents"][0]["parts"] == [
            {"inline_data": {"mime_type": "image/gif", "data": "R0lG"}}
        ]

    def test_embed_payload(self) -> None:
        request = EmbedRequest(text="doc", model="embedding-001", title="Title")

        assert request.to_payload() == {
            "model": "models/embedding-001",
            "content": {"parts": [{"text": "doc"}]},
            "taskType": "RETRIEVAL_DOCUMENT",
            "title": "Title",
        }

    def test_embed_payload_keeps_prefixed_model(self) -> None:
        payload = EmbedRequest(text="doc", model="models/text-embedding-004").to_payload()

        assert payload["model"] == "models/text-embedding-004"
        assert "title" not in payload


class TestDiscriminatedUnion:
    """Tests for the tagged request union."""

    def test_validates_by_kind(self) -> None:
        adapter = TypeAdapter(GeminiRequest)

        request = adapter.validate_python({"kind": "chat", "messages": [{"content": "Hi"}]})

        assert isinstance(request, ChatRequest)
        assert request.messages[0].role == "user"

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TypeAdapter(GeminiRequest).validate_python({"kind": "stream", "prompt": "x"})


class TestEmbeddingOptions:
    def test_defaults(self) -> None:
        options = EmbeddingOptions()

        assert options.task_type == "RETRIEVAL_DOCUMENT"
        assert options.fingerprint_data() == {"task_type": "RETRIEVAL_DOCUMENT"}
