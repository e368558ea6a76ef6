"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    admin_token: str
    telegram_allowed_user_ids: str | None = None
    studio_backend: str = "gemini"
    gemini_api_key: str | None = None
    gemini_prompt_model: str = "gemini-3-flash-preview"
    gemini_image_model: str = "gemini-2.5-flash-image"
    openai_api_key: str | None = None
    openai_prompt_model: str = "gpt-4.1"
    openai_image_model: str = "gpt-image-1"
    prompt_temperature: float | None = 0.8
    generation_timeout_seconds: float | None = None
    session_idle_ttl_seconds: int = 3600
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_user_ids(raw: str | None) -> set[int] | None:
    """Parse allowed Telegram user IDs from env."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    ids: set[int] = set()
    for chunk in cleaned.split(","):
        value = chunk.strip()
        if value.isdigit():
            ids.add(int(value))
    return ids or None
