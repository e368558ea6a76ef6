"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    START = TelegramCommand("start", "Start a new product shoot")
    STATUS = TelegramCommand("status", "Show where you are in the shoot")
    RESET = TelegramCommand("reset", "Discard everything and start over")
    HELP = TelegramCommand("help", "How the studio works")


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


def parse_command(text: str) -> BotCommand | None:
    """Match ``/name`` or ``/name@botname`` against the known commands."""
    words = text[1:].split(maxsplit=1) if text.startswith("/") else []
    if not words:
        return None
    name = words[0].split("@", maxsplit=1)[0].lower()
    for entry in BotCommand:
        if entry.value.command == name:
            return entry
    return None


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}
