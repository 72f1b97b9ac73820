"""Vision service.

Sends images (from disk or base64) with an optional prompt to a
vision-capable model.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import hashlib
import io
import re
from collections.abc import Sequence
from pathlib import Path

import structlog
from PIL import Image, UnidentifiedImageError

from gemini_bridge.exceptions import InvalidInputError
from gemini_bridge.llm.models import DEFAULT_VISION_MODEL
from gemini_bridge.llm.response import GeminiResponse
from gemini_bridge.llm.schemas import (
    GenerationOptions,
    InlineImage,
    VisionBase64Request,
    VisionMultiRequest,
    VisionSingleRequest,
)

from .base import BaseService, OptionsInput, coerce_options, fingerprint

logger = structlog.get_logger()

DATA_URI_PATTERN = re.compile(r"^data:(image/[a-zA-Z0-9+.-]+);base64,")

DEFAULT_BASE64_MIME_TYPE = "image/png"


class VisionService(BaseService):
    """Image + text generation."""

    async def generate_from_image(
        self,
        image_path: str | Path,
        prompt: str | None = None,
        options: OptionsInput = None,
    ) -> GeminiResponse:
        """Describe or reason about one image file.

        Args:
            image_path: Path to an image file
            prompt: Optional prompt placed before the image
            options: Generation options

        Returns:
            Response envelope

        Raises:
            InvalidInputError: If the file is missing or not an image
        """
        opts = coerce_options(options)
        model = self._vision_model(opts)
        image = await load_image(image_path)
        request = VisionSingleRequest(prompt=prompt, image=image, options=opts)

        key = fingerprint(
            "vision",
            {"prompt": prompt, "images": [image_digest(image)]},
            opts.fingerprint_data(),
            model,
        )
        return await self._execute(key, request, model, ttl=opts.cache_ttl)

    async def generate_from_multiple_images(
        self,
        image_paths: Sequence[str | Path],
        prompt: str | None = None,
        options: OptionsInput = None,
    ) -> GeminiResponse:
        """Reason about several image files in one request.

        Args:
            image_paths: Paths to image files, sent in order
            prompt: Optional prompt placed before the images
            options: Generation options

        Returns:
            Response envelope

        Raises:
            InvalidInputError: If any file is missing or not an image
        """
        if not image_paths:
            raise InvalidInputError("At least one image path is required.")

        opts = coerce_options(options)
        model = self._vision_model(opts)
        images = [await load_image(path) for path in image_paths]
        request = VisionMultiRequest(prompt=prompt, images=images, options=opts)

        key = fingerprint(
            "vision",
            {"prompt": prompt, "images": [image_digest(image) for image in images]},
            opts.fingerprint_data(),
            model,
        )
        return await self._execute(key, request, model, ttl=opts.cache_ttl)

    async def generate_from_base64_image(
        self,
        base64_image: str,
        prompt: str | None = None,
        options: OptionsInput = None,
    ) -> GeminiResponse:
        """Reason about a base64-encoded image.

        Args:
            base64_image: Base64 data, optionally as a ``data:<mime>;base64,`` URI
            prompt: Optional prompt placed before the image
            options: Generation options

        Returns:
            Response envelope

        Raises:
            InvalidInputError: If the data is not valid base64
        """
        opts = coerce_options(options)
        model = self._vision_model(opts)
        image = parse_base64_image(base64_image)
        request = VisionBase64Request(prompt=prompt, image=image, options=opts)

        key = fingerprint(
            "vision",
            {"prompt": prompt, "images": [image_digest(image)]},
            opts.fingerprint_data(),
            model,
        )
        return await self._execute(key, request, model, ttl=opts.cache_ttl)

    def _vision_model(self, options: GenerationOptions) -> str:
        model = options.model or self.client.get_model()
        if "vision" not in model:
            logger.debug("vision_model_substituted", requested=model, model=DEFAULT_VISION_MODEL)
            return DEFAULT_VISION_MODEL
        return model


async def load_image(image_path: str | Path) -> InlineImage:
    """Read an image file as base64 with its MIME type.

    The MIME type comes from the file content, not its extension.

    Raises:
        InvalidInputError: If the file is missing or not an image
    """
    path = Path(image_path)
    if not path.is_file():
        raise InvalidInputError(f"Image file not found: {path}")

    raw, mime_type = await asyncio.to_thread(_read_image, path)
    if not mime_type or not mime_type.startswith("image/"):
        raise InvalidInputError(f"Invalid image file: {path}")

    return InlineImage(mime_type=mime_type, data=base64.b64encode(raw).decode("ascii"))


def _read_image(path: Path) -> tuple[bytes, str | None]:
    raw = path.read_bytes()
    try:
        with Image.open(io.BytesIO(raw)) as image:
            return raw, Image.MIME.get(image.format or "")
    except UnidentifiedImageError:
        return raw, None


def parse_base64_image(base64_image: str) -> InlineImage:
    """Split an optional data URI prefix off base64 image data.

    Raises:
        InvalidInputError: If the payload is empty or not valid base64
    """
    match = DATA_URI_PATTERN.match(base64_image)
    if match:
        mime_type = match.group(1)
        data = base64_image[match.end() :]
    else:
        mime_type = DEFAULT_BASE64_MIME_TYPE
        data = base64_image

    data = data.strip()
    if not data:
        raise InvalidInputError("Base64 image data is empty.")

    try:
        base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError("Image data is not valid base64.", cause=e) from e

    return InlineImage(mime_type=mime_type, data=data)


def image_digest(image: InlineImage) -> str:
    return f"{image.mime_type}:{hashlib.sha256(image.data.encode('ascii')).hexdigest()}"
