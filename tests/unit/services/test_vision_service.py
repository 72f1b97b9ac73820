"""Vision service tests."""

from __future__ import annotations

import base64
import io
from pathlib import Path

import pytest
from PIL import Image

from gemini_bridge.cache import ResponseCache
from gemini_bridge.exceptions import InvalidInputError
from gemini_bridge.llm import GeminiClient
from gemini_bridge.services import VisionService
from gemini_bridge.services.vision import parse_base64_image


def encode_image(image_format: str = "PNG", color: tuple[int, int, int] = (255, 0, 0)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (2, 2), color).save(buffer, format=image_format)
    return buffer.getvalue()


PNG_BYTES = encode_image()
JPEG_BYTES = encode_image("JPEG")
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def image_file(tmp_path: Path) -> Path:
    path = tmp_path / "cat.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def service(client: GeminiClient, disabled_cache: ResponseCache) -> VisionService:
    return VisionService(client, disabled_cache)


class TestGenerateFromImage:
    """Tests for single image requests."""

    @pytest.mark.asyncio
    async def test_payload(self, service: VisionService, image_file: Path, api) -> None:
        """Prompt text comes first, then the inline image."""
        await service.generate_from_image(image_file, "Describe this")

        assert api.last_payload()["contents"] == [
            {
                "parts": [
                    {"text": "Describe this"},
                    {"inline_data": {"mime_type": "image/png", "data": PNG_B64}},
                ]
            }
        ]

    @pytest.mark.asyncio
    async def test_non_vision_model_is_replaced(
        self, service: VisionService, image_file: Path, api
    ) -> None:
        """A text-only model is swapped for the default vision model."""
        response = await service.generate_from_image(image_file, options={"model": "gemini-pro"})

        assert response.model == "gemini-pro-vision"
        assert api.posts[0].url.path == "/v1/models/gemini-pro-vision:generateContent"

    @pytest.mark.asyncio
    async def test_missing_file(self, service: VisionService, tmp_path: Path, api) -> None:
        with pytest.raises(InvalidInputError, match="Image file not found"):
            await service.generate_from_image(tmp_path / "missing.png")

        assert api.requests == []

    @pytest.mark.asyncio
    async def test_not_an_image(self, service: VisionService, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(InvalidInputError, match="Invalid image file"):
            await service.generate_from_image(path)

    @pytest.mark.asyncio
    async def test_renamed_text_file_rejected(
        self, service: VisionService, tmp_path: Path, api
    ) -> None:
        """An image extension alone does not make a file an image."""
        path = tmp_path / "notes.png"
        path.write_text("not really a picture")

        with pytest.raises(InvalidInputError, match="Invalid image file"):
            await service.generate_from_image(path)

        assert api.posts == []

    @pytest.mark.asyncio
    async def test_mime_type_from_content(
        self, service: VisionService, tmp_path: Path, api
    ) -> None:
        """A PNG saved under a .jpg name is sent as image/png."""
        path = tmp_path / "photo.jpg"
        path.write_bytes(PNG_BYTES)

        await service.generate_from_image(path)

        part = api.last_payload()["contents"][0]["parts"][0]
        assert part["inline_data"]["mime_type"] == "image/png"

    @pytest.mark.asyncio
    async def test_cached_by_content(
        self, client: GeminiClient, enabled_cache: ResponseCache, image_file: Path, api
    ) -> None:
        """Changing the file's bytes changes the cache entry."""
        service = VisionService(client, enabled_cache)

        await service.generate_from_image(image_file, "Describe")
        await service.generate_from_image(image_file, "Describe")
        image_file.write_bytes(encode_image(color=(0, 0, 255)))
        await service.generate_from_image(image_file, "Describe")

        assert len(api.posts) == 2


class TestGenerateFromMultipleImages:
    """Tests for multi-image requests."""

    @pytest.mark.asyncio
    async def test_images_in_order(self, service: VisionService, tmp_path: Path, api) -> None:
        first = tmp_path / "a.png"
        first.write_bytes(PNG_BYTES)
        second = tmp_path / "b.jpg"
        second.write_bytes(JPEG_BYTES)

        await service.generate_from_multiple_images([first, second], "Compare")

        parts = api.last_payload()["contents"][0]["parts"]
        assert parts[0] == {"text": "Compare"}
        assert parts[1]["inline_data"]["mime_type"] == "image/png"
        assert parts[2]["inline_data"] == {
            "mime_type": "image/jpeg",
            "data": base64.b64encode(JPEG_BYTES).decode("ascii"),
        }

    @pytest.mark.asyncio
    async def test_empty_list(self, service: VisionService) -> None:
        with pytest.raises(InvalidInputError):
            await service.generate_from_multiple_images([])

    @pytest.mark.asyncio
    async def test_one_bad_path_fails_all(
        self, service: VisionService, image_file: Path, tmp_path: Path, api
    ) -> None:
        with pytest.raises(InvalidInputError):
            await service.generate_from_multiple_images([image_file, tmp_path / "gone.png"])

        assert api.posts == []


class TestGenerateFromBase64Image:
    """Tests for base64 requests."""

    @pytest.mark.asyncio
    async def test_data_uri(self, service: VisionService, api) -> None:
        """The data URI prefix supplies the MIME type and is not sent."""
        await service.generate_from_base64_image(f"data:image/jpeg;base64,{PNG_B64}", "What?")

        assert api.last_payload()["contents"][0]["parts"][1] == {
            "inline_data": {"mime_type": "image/jpeg", "data": PNG_B64}
        }

    @pytest.mark.asyncio
    async def test_plain_base64_defaults_to_png(self, service: VisionService, api) -> None:
        await service.generate_from_base64_image(PNG_B64)

        assert api.last_payload()["contents"][0]["parts"] == [
            {"inline_data": {"mime_type": "image/png", "data": PNG_B64}}
        ]


class TestParseBase64Image:
    def test_invalid_data(self) -> None:
        with pytest.raises(InvalidInputError, match="not valid base64"):
            parse_base64_image("not base64!!")

    def test_empty_after_prefix(self) -> None:
        with pytest.raises(InvalidInputError, match="empty"):
            parse_base64_image("data:image/png;base64,")

    def test_mime_with_plus(self) -> None:
        image = parse_base64_image(f"data:image/svg+xml;base64,{PNG_B64}")

        assert image.mime_type == "image/svg+xml"
