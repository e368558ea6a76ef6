"""Downloads of images users send to the bot."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from creative_director.domain.images import ImageRef, detect_mime_type


class TelegramFileClient(Protocol):
    """Interface for downloading Telegram files."""

    async def download_image(
        self, file_id: str, mime_type: str | None = None
    ) -> ImageRef:
        """Download a Telegram file as an image handle."""


@dataclass
class HttpxTelegramFileClient(TelegramFileClient):
    """Telegram file client using httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramFileClient":
        """Create a Telegram file client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def download_image(
        self, file_id: str, mime_type: str | None = None
    ) -> ImageRef:
        """Resolve the file path with getFile, then fetch the bytes.

        ``mime_type`` comes from document uploads; photos are sniffed.
        """
        get_file_url = f"https://api.telegram.org/bot{self.bot_token}/getFile"
        response = await self.http_client.get(
            get_file_url, params={"file_id": file_id}, timeout=10
        )
        response.raise_for_status()
        payload = response.json()
        if not payload.get("ok"):
            raise RuntimeError("Telegram getFile failed")
        file_path = payload["result"]["file_path"]
        download_url = f"https://api.telegram.org/file/bot{self.bot_token}/{file_path}"
        file_response = await self.http_client.get(download_url, timeout=30)
        file_response.raise_for_status()
        content = file_response.content
        if not content:
            raise RuntimeError("Telegram returned an empty file")
        return ImageRef(data=content, mime_type=mime_type or detect_mime_type(content))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
