"""Gemini request schemas.

Type-safe Pydantic models for each request variant. Every variant knows how
to serialize itself into the wire payload sent to the API.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Individual chat turn."""

    model_config = ConfigDict(frozen=True)

    role: str = "user"
    content: str = ""


class GenerationOptions(BaseModel):
    """Per-request generation options.

    Unset fields are left out of the wire payload entirely.
    """

    model_config = ConfigDict(frozen=True)

    model: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    top_k: int | None = Field(default=None, ge=1)
    max_tokens: int | None = Field(default=None, ge=1)
    stop: str | list[str] | None = None
    safety_settings: list[dict[str, Any]] | None = None
    cache_ttl: int | None = Field(default=None, gt=0)

    def generation_config(self) -> dict[str, Any]:
        """Wire-format generationConfig (empty when nothing is set)."""
        config: dict[str, Any] = {}

        if self.temperature is not None:
            config["temperature"] = float(self.temperature)

        if self.top_p is not None:
            config["topP"] = float(self.top_p)

        if self.top_k is not None:
            config["topK"] = int(self.top_k)

        if self.max_tokens is not None:
            config["maxOutputTokens"] = int(self.max_tokens)

        if self.stop is not None:
            config["stopSequences"] = [self.stop] if isinstance(self.stop, str) else list(self.stop)

        return config

    def fingerprint_data(self) -> dict[str, Any]:
        """Options that change the reply (cache TTL excluded)."""
        return self.model_dump(exclude={"cache_ttl"}, exclude_none=True)


class EmbeddingOptions(BaseModel):
    """Per-request embedding options."""

    model_config = ConfigDict(frozen=True)

    model: str | None = None
    title: str | None = None
    task_type: str = "RETRIEVAL_DOCUMENT"
    cache_ttl: int | None = Field(default=None, gt=0)

    def fingerprint_data(self) -> dict[str, Any]:
        return self.model_dump(exclude={"cache_ttl"}, exclude_none=True)


class InlineImage(BaseModel):
    """Base64-encoded image with its MIME type."""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    data: str

    def to_part(self) -> dict[str, Any]:
        return {"inline_data": {"mime_type": self.mime_type, "data": self.data}}


class _GenerationRequest(BaseModel):
    """Shared serialization of generationConfig and safetySettings."""

    model_config = ConfigDict(frozen=True)

    options: GenerationOptions = Field(default_factory=GenerationOptions)

    def _contents(self) -> list[dict[str, Any]]:
        raise NotImplementedError

    def to_payload(self) -> dict[str, Any]:
        """Build the generateContent wire payload."""
        payload: dict[str, Any] = {"contents": self._contents()}

        generation_config = self.options.generation_config()
        if generation_config:
            payload["generationConfig"] = generation_config

        if self.options.safety_settings:
            payload["safetySettings"] = [dict(s) for s in self.options.safety_settings]

        return payload


class GenerateRequest(_GenerationRequest):
    """Single-turn text generation."""

    kind: Literal["generate"] = "generate"
    prompt: str

    def _contents(self) -> list[dict[str, Any]]:
        return [{"parts": [{"text": self.prompt}]}]


class ChatRequest(_GenerationRequest):
    """Multi-turn chat generation."""

    kind: Literal["chat"] = "chat"
    messages: list[ChatMessage]

    def _contents(self) -> list[dict[str, Any]]:
        return [{"role": msg.role, "parts": [{"text": msg.content}]} for msg in self.messages]


class _VisionRequest(_GenerationRequest):
    prompt: str | None = None

    def _images(self) -> list[InlineImage]:
        raise NotImplementedError

    def _contents(self) -> list[dict[str, Any]]:
        parts: list[dict[str, Any]] = []
        if self.prompt:
            parts.append({"text": self.prompt})
        parts.extend(image.to_part() for image in self._images())
        return [{"parts": parts}]


class VisionSingleRequest(_VisionRequest):
    """Prompt plus one image read from disk."""

    kind: Literal["vision_single"] = "vision_single"
    image: InlineImage

    def _images(self) -> list[InlineImage]:
        return [self.image]


class VisionMultiRequest(_VisionRequest):
    """Prompt plus several images read from disk."""

    kind: Literal["vision_multi"] = "vision_multi"
    images: list[InlineImage]

    def _images(self) -> list[InlineImage]:
        return list(self.images)


class VisionBase64Request(_VisionRequest):
    """Prompt plus one caller-supplied base64 image."""

    kind: Literal["vision_base64"] = "vision_base64"
    image: InlineImage

    def _images(self) -> list[InlineImage]:
        return [self.image]


class EmbedRequest(BaseModel):
    """Embedding of a single text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["embed"] = "embed"
    text: str
    model: str
    title: str | None = None
    task_type: str = "RETRIEVAL_DOCUMENT"

    def to_payload(self) -> dict[str, Any]:
        """Build the embedContent wire payload."""
        payload: dict[str, Any] = {
            "model": self.model if self.model.startswith("models/") else f"models/{self.model}",
            "content": {"parts": [{"text": self.text}]},
            "taskType": self.task_type,
        }
        if self.title is not None:
            payload["title"] = self.title
        return payload


RequestVariant = (
    GenerateRequest
    | ChatRequest
    | VisionSingleRequest
    | VisionMultiRequest
    | VisionBase64Request
    | EmbedRequest
)

GeminiRequest = Annotated[RequestVariant, Field(discriminator="kind")]
