"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from creative_director.adapters.telegram_client import TelegramClient
from creative_director.adapters.telegram_file_client import TelegramFileClient
from creative_director.config import Settings
from creative_director.containers import AppContainer, StudioModels, build_session_store
from creative_director.domain.images import ImageRef
from creative_director.services.generation import GenerationInvoker, ImageClient
from creative_director.services.prompts import SceneClient, SceneDescriber
from creative_director.services.studio import StudioSession

PRODUCT_IMAGE = ImageRef(data=b"\x89PNG\r\n\x1a\nproduct", mime_type="image/png")
MODEL_IMAGE = ImageRef(data=b"\xff\xd8\xffmodel", mime_type="image/jpeg")
RENDERED_IMAGE = ImageRef(data=b"\x89PNG\r\n\x1a\nrendered", mime_type="image/png")


@dataclass
class FakeSceneClient(SceneClient):
    """Fake scene client returning a fixed description."""

    text: str = "A model holding the product in warm studio light"
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def describe(
        self,
        *,
        model: str,
        prompt: str,
        images: list[ImageRef],
        temperature: float | None,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "images": images,
                "temperature": temperature,
            }
        )
        if self.error is not None:
            raise self.error
        return self.text


@dataclass
class FakeImageClient(ImageClient):
    """Fake image client returning a fixed render."""

    image: ImageRef | None = RENDERED_IMAGE
    error: Exception | None = None
    gate: asyncio.Event | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def render(
        self,
        *,
        model: str,
        prompt: str,
        aspect_ratio: str,
        images: list[ImageRef],
    ) -> ImageRef | None:
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "aspect_ratio": aspect_ratio,
                "images": images,
            }
        )
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.image


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    keyboards: list[dict | None] = field(default_factory=list)
    photos: list[tuple[int, ImageRef, str | None]] = field(default_factory=list)
    callbacks: list[tuple[str, str | None]] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    menu_button: dict[str, object] | None = None

    async def send_message(
        self, chat_id: int, text: str, reply_markup: dict | None = None
    ) -> None:
        self.messages.append((chat_id, text))
        self.keyboards.append(reply_markup)

    async def send_photo(
        self,
        chat_id: int,
        image: ImageRef,
        caption: str | None = None,
        reply_markup: dict | None = None,
    ) -> None:
        self.photos.append((chat_id, image, caption))
        self.keyboards.append(reply_markup)

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        self.callbacks.append((callback_query_id, text))

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        self.menu_button = menu_button


@dataclass
class FakeTelegramFileClient(TelegramFileClient):
    """Fake Telegram file client that returns a static image."""

    image: ImageRef = PRODUCT_IMAGE
    error: Exception | None = None
    downloads: list[str] = field(default_factory=list)

    async def download_image(
        self, file_id: str, mime_type: str | None = None
    ) -> ImageRef:
        self.downloads.append(file_id)
        if self.error is not None:
            raise self.error
        return self.image


def make_studio(
    scene_client: FakeSceneClient | None = None,
    image_client: FakeImageClient | None = None,
) -> StudioSession:
    """Build a studio session wired to fake backends."""
    return StudioSession(
        describer=SceneDescriber(
            client=scene_client or FakeSceneClient(), model="prompt-model"
        ),
        invoker=GenerationInvoker(
            client=image_client or FakeImageClient(), model="image-model"
        ),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        admin_token="admin-token",
        gemini_api_key="gemini-key",
        environment="test",
    )


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def telegram_file_client() -> FakeTelegramFileClient:
    return FakeTelegramFileClient()


@pytest.fixture
def scene_client() -> FakeSceneClient:
    return FakeSceneClient()


@pytest.fixture
def image_client() -> FakeImageClient:
    return FakeImageClient()


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    telegram_client: FakeTelegramClient,
    telegram_file_client: FakeTelegramFileClient,
    scene_client: FakeSceneClient,
    image_client: FakeImageClient,
) -> AppContainer:
    session_store = build_session_store(
        settings,
        scene_client,
        image_client,
        StudioModels(prompt_model="prompt-model", image_model="image-model"),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        session_store=session_store,
        close_resources=close_resources,
    )
