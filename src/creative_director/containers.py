"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from creative_director.adapters.gemini_studio_client import GeminiStudioClient
from creative_director.adapters.openai_studio_client import OpenAIStudioClient
from creative_director.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from creative_director.adapters.telegram_file_client import (
    HttpxTelegramFileClient,
    TelegramFileClient,
)
from creative_director.config import Settings
from creative_director.services.generation import GenerationInvoker, ImageClient
from creative_director.services.prompts import SceneClient, SceneDescriber
from creative_director.services.sessions import InMemorySessionStore
from creative_director.services.studio import StudioSession


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    telegram_file_client: TelegramFileClient
    session_store: InMemorySessionStore
    close_resources: Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class StudioModels:
    """Model names for the selected backend."""

    prompt_model: str
    image_model: str


def build_studio_backend(
    settings: Settings,
) -> tuple[SceneClient, ImageClient, StudioModels]:
    """Create the configured generation backend."""
    backend = settings.studio_backend.strip().lower()
    if backend == "gemini":
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required for the gemini backend")
        gemini = GeminiStudioClient.create(settings.gemini_api_key)
        return (
            gemini,
            gemini,
            StudioModels(settings.gemini_prompt_model, settings.gemini_image_model),
        )
    if backend == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for the openai backend")
        openai_client = OpenAIStudioClient.create(settings.openai_api_key)
        return (
            openai_client,
            openai_client,
            StudioModels(settings.openai_prompt_model, settings.openai_image_model),
        )
    raise ValueError(f"Unknown studio backend: {settings.studio_backend}")


def build_session_store(
    settings: Settings,
    scene_client: SceneClient,
    image_client: ImageClient,
    models: StudioModels,
) -> InMemorySessionStore:
    """Create the session store; every session shares the same backend."""
    describer = SceneDescriber(
        client=scene_client,
        model=models.prompt_model,
        temperature=settings.prompt_temperature,
        timeout_seconds=settings.generation_timeout_seconds,
    )
    invoker = GenerationInvoker(
        client=image_client,
        model=models.image_model,
        timeout_seconds=settings.generation_timeout_seconds,
    )
    return InMemorySessionStore(
        factory=lambda: StudioSession(describer=describer, invoker=invoker),
        idle_ttl_seconds=settings.session_idle_ttl_seconds,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    scene_client, image_client, models = build_studio_backend(resolved_settings)
    session_store = build_session_store(
        resolved_settings, scene_client, image_client, models
    )
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    telegram_file_client = HttpxTelegramFileClient.create(
        resolved_settings.telegram_bot_token
    )

    async def close_resources() -> None:
        await telegram_client.close()
        await telegram_file_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        session_store=session_store,
        close_resources=close_resources,
    )
