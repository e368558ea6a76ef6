"""Scene prompt acquisition: user-written or generated from the uploads."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from creative_director.domain.errors import AnalysisFailure, InvalidTransition
from creative_director.domain.images import ImageRef
from creative_director.domain.wizard import CreativeDirection, PromptMode, SessionRecord

logger = logging.getLogger(__name__)

DEFAULT_SCENE_DESCRIPTION = "A high-end commercial photo of the product with the model."


def build_scene_prompt(direction: CreativeDirection) -> str:
    """Build the creative-director instruction for the analysis call."""
    return (
        "You are a Senior Creative Director. "
        "Analyze the provided product image and model image. "
        f'Based on the direction "{direction.value}", create a single highly '
        "detailed, commercial-grade image generation prompt. "
        "The prompt should describe the scene, lighting, composition, and mood, "
        "combining the product and model naturally. "
        "Do not include any text, logos, or frames in the description. "
        "Return ONLY the prompt string."
    )


class SceneClient(Protocol):
    """Interface for multimodal text generation."""

    async def describe(
        self,
        *,
        model: str,
        prompt: str,
        images: list[ImageRef],
        temperature: float | None,
    ) -> str:
        """Return free text describing the images."""


@dataclass
class SceneDescriber:
    """Turns the two uploads and a creative direction into a scene prompt."""

    client: SceneClient
    model: str
    temperature: float | None = 0.8
    timeout_seconds: float | None = None

    async def describe_scene(
        self,
        product_image: ImageRef,
        model_image: ImageRef,
        direction: CreativeDirection,
    ) -> str:
        """Return a non-empty scene description or raise ``AnalysisFailure``."""
        try:
            text = await asyncio.wait_for(
                self.client.describe(
                    model=self.model,
                    prompt=build_scene_prompt(direction),
                    images=[product_image, model_image],
                    temperature=self.temperature,
                ),
                timeout=self.timeout_seconds,
            )
        except Exception as exc:
            logger.exception(
                "Scene description failed", extra={"direction": direction.name}
            )
            raise AnalysisFailure(str(exc) or type(exc).__name__) from exc
        cleaned = (text or "").strip()
        if not cleaned:
            logger.warning("Scene description came back empty; using default")
            return DEFAULT_SCENE_DESCRIPTION
        return cleaned


class PromptStrategy(Protocol):
    """How the prompt for a session is produced."""

    mode: PromptMode

    async def acquire(self, session: SessionRecord) -> str:
        """Produce a fresh prompt for the session."""

    def active_prompt(self, session: SessionRecord) -> str:
        """Return the prompt that generation should use."""


@dataclass
class UserPromptStrategy:
    """The user's own text, used verbatim apart from trimming."""

    mode: PromptMode = PromptMode.USER

    async def acquire(self, session: SessionRecord) -> str:
        return self.active_prompt(session)

    def active_prompt(self, session: SessionRecord) -> str:
        text = (session.user_prompt or "").strip()
        if not text:
            raise InvalidTransition("Write a prompt before continuing.")
        return text


@dataclass
class SystemPromptStrategy:
    """Ask the backend to describe a scene from the uploaded images."""

    describer: SceneDescriber
    mode: PromptMode = PromptMode.SYSTEM

    async def acquire(self, session: SessionRecord) -> str:
        if session.product_image is None or session.model_image is None:
            logger.error("Scene description requested without both images")
            raise AnalysisFailure("Both images are required for analysis")
        if session.creative_direction is None:
            logger.error("Scene description requested without a direction")
            raise AnalysisFailure("No creative direction selected")
        return await self.describer.describe_scene(
            session.product_image,
            session.model_image,
            session.creative_direction,
        )

    def active_prompt(self, session: SessionRecord) -> str:
        if not session.system_prompt:
            raise InvalidTransition("No generated prompt yet.")
        return session.system_prompt


def strategy_for(mode: PromptMode | None, describer: SceneDescriber) -> PromptStrategy:
    """Select the strategy matching the session's prompt mode."""
    if mode is PromptMode.USER:
        return UserPromptStrategy()
    if mode is PromptMode.SYSTEM:
        return SystemPromptStrategy(describer)
    raise InvalidTransition("Choose how the prompt should be written first.")
