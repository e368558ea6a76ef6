"""Generation requests for the final commercial image."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from creative_director.domain.errors import GenerationFailure
from creative_director.domain.images import ImageRef
from creative_director.domain.wizard import ImageSize, SessionRecord, ShotType

logger = logging.getLogger(__name__)

QUALITY_QUALIFIERS = (
    "Commercial ad-grade realism, ultra-high resolution, sharp focus, "
    "professional lighting. NO TEXT, NO LOGOS."
)


def build_generation_prompt(prompt: str, shot_type: ShotType) -> str:
    """Append the shot style and the fixed quality qualifiers to a prompt."""
    return f"{prompt}. Shot style: {shot_type.value}. {QUALITY_QUALIFIERS}"


class ImageClient(Protocol):
    """Interface for prompt-plus-reference image generation."""

    async def render(
        self,
        *,
        model: str,
        prompt: str,
        aspect_ratio: str,
        images: list[ImageRef],
    ) -> ImageRef | None:
        """Return the rendered image, or None when nothing was produced."""


@dataclass
class GenerationInvoker:
    """Builds generation requests and maps failures to ``GenerationFailure``."""

    client: ImageClient
    model: str
    timeout_seconds: float | None = None

    async def render_image(  # noqa: PLR0913
        self,
        prompt: str,
        aspect_ratio: ImageSize,
        shot_type: ShotType,
        product_image: ImageRef | None = None,
        model_image: ImageRef | None = None,
    ) -> ImageRef:
        """Render one image; reference images are optional."""
        images = [image for image in (product_image, model_image) if image]
        try:
            result = await asyncio.wait_for(
                self.client.render(
                    model=self.model,
                    prompt=build_generation_prompt(prompt, shot_type),
                    aspect_ratio=aspect_ratio.value,
                    images=images,
                ),
                timeout=self.timeout_seconds,
            )
        except Exception as exc:
            logger.exception(
                "Image generation failed",
                extra={"shot_type": shot_type.name, "aspect_ratio": aspect_ratio.value},
            )
            raise GenerationFailure(str(exc) or type(exc).__name__) from exc
        if result is None or not result.data:
            logger.error("Image generation returned no image")
            raise GenerationFailure("No image was generated")
        return result

    async def invoke(self, session: SessionRecord, prompt: str) -> ImageRef:
        """Render the session's current shot with the given active prompt."""
        if session.selected_size is None or session.shot_type is None:
            logger.error("Generation requested without size or shot type")
            raise GenerationFailure("Size and shot type must be selected")
        return await self.render_image(
            prompt,
            session.selected_size,
            session.shot_type,
            product_image=session.product_image,
            model_image=session.model_image,
        )
