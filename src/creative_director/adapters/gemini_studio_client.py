"""Google Gemini backend for scene description and image rendering."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from google import genai
from google.genai import types

from creative_director.domain.images import ImageRef
from creative_director.services.generation import ImageClient
from creative_director.services.prompts import SceneClient

logger = logging.getLogger(__name__)


@dataclass
class GeminiStudioClient(SceneClient, ImageClient):
    """Studio backend backed by the google-genai async client."""

    client: genai.Client

    @classmethod
    def create(cls, api_key: str) -> "GeminiStudioClient":
        """Create a Gemini client for the developer API."""
        return cls(client=genai.Client(api_key=api_key))

    async def describe(
        self,
        *,
        model: str,
        prompt: str,
        images: list[ImageRef],
        temperature: float | None,
    ) -> str:
        """Ask a multimodal model to describe a scene for the given images."""
        contents: list[Any] = [_to_part(image) for image in images]
        contents.append(prompt)
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=contents,
            config=types.GenerateContentConfig(temperature=temperature),
        )
        return response.text or ""

    async def render(
        self,
        *,
        model: str,
        prompt: str,
        aspect_ratio: str,
        images: list[ImageRef],
    ) -> ImageRef | None:
        """Render one image at the requested aspect ratio."""
        contents: list[Any] = [prompt]
        contents.extend(_to_part(image) for image in images)
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=contents,
            config=types.GenerateContentConfig(
                response_modalities=["IMAGE"],
                image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
            ),
        )
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            logger.error("Gemini returned no candidates", extra={"model": model})
            return None
        content = getattr(candidates[0], "content", None)
        picked = _pick_largest_inline_image(getattr(content, "parts", None) or [])
        if picked is None:
            logger.error(
                "Gemini returned no inline image",
                extra={
                    "model": model,
                    "finish_reason": str(getattr(candidates[0], "finish_reason", "")),
                },
            )
        return picked


def _to_part(image: ImageRef) -> types.Part:
    return types.Part.from_bytes(data=image.data, mime_type=image.mime_type)


def _pick_largest_inline_image(parts: Iterable[Any]) -> ImageRef | None:
    """Return the largest inline image among the response parts."""
    best: ImageRef | None = None
    for part in parts:
        inline = getattr(part, "inline_data", None)
        data = getattr(inline, "data", None)
        if not data:
            continue
        if best is None or len(data) > len(best.data):
            mime_type = getattr(inline, "mime_type", None) or "image/png"
            best = ImageRef(data=data, mime_type=mime_type)
    return best
