"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from creative_director.api.admin import router as admin_router
from creative_director.api.studio import router as studio_router
from creative_director.api.telegram_models import (
    TelegramCallbackQuery,
    TelegramMessage,
    TelegramPhotoSize,
    TelegramUpdate,
)
from creative_director.api.views import inline_keyboard, parse_callback, render_step
from creative_director.app_logging import configure_logging
from creative_director.config import parse_allowed_user_ids
from creative_director.containers import AppContainer
from creative_director.domain.errors import SessionBusy, StudioError
from creative_director.domain.images import ImageRef
from creative_director.domain.wizard import SessionRecord, Step
from creative_director.services.studio import StudioSession
from creative_director.services.wizard import available_actions
from creative_director.telegram_commands import (
    CHAT_MENU_BUTTON,
    BotCommand,
    parse_command,
    telegram_commands,
)

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Creative Director AI: Premium Commercial Asset Studio.\n"
    "Send me a product photo and a model photo to get started."
)
HELP_TEXT = (
    "1. Send a product photo and a model photo (caption them 'product' or "
    "'model' to replace one).\n"
    "2. Pick an output size.\n"
    "3. Write your own prompt or let the studio write one from your photos.\n"
    "4. Pick a shot type and wait for the render.\n"
    "Use /status to see where you are and /reset to start over."
)
PROGRESS_MESSAGES: dict[str, str] = {
    "pick_direction": "Analyzing visual assets...",
    "regenerate_prompt": "Analyzing visual assets...",
    "generate": "Composing Commercial Masterpiece...",
    "regenerate_same": "Composing Commercial Masterpiece...",
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    allowed_user_ids = parse_allowed_user_ids(
        container.settings.telegram_allowed_user_ids
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.telegram_client.set_my_commands(
                telegram_commands()
            )
            await app.state.container.telegram_client.set_chat_menu_button(
                CHAT_MENU_BUTTON
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(studio_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        user_id = _extract_user_id(update)
        if user_id is not None and not _is_user_allowed(user_id, allowed_user_ids):
            if update.callback_query:
                await state_container.telegram_client.answer_callback_query(
                    update.callback_query.id,
                    text="Not authorized.",
                )
            elif update.message:
                await state_container.telegram_client.send_message(
                    chat_id=update.message.chat.id,
                    text="This bot is private.",
                )
            return {"status": "ok"}
        if update.callback_query:
            await _handle_callback(state_container, update.callback_query)
        elif update.message:
            await _handle_message(state_container, update.message)
        return {"status": "ok"}

    return app


async def _handle_callback(
    container: AppContainer, callback: TelegramCallbackQuery
) -> None:
    """Run the transition encoded in an inline button."""
    await container.telegram_client.answer_callback_query(callback.id)
    parsed = parse_callback(callback.data or "")
    if parsed is None or callback.message is None:
        return
    chat_id = callback.message.chat.id
    studio = container.session_store.get_or_create(_chat_key(chat_id))
    action, value = parsed
    await _run_action(container, chat_id, studio, action, value)


async def _handle_message(  # noqa: PLR0911
    container: AppContainer, message: TelegramMessage
) -> None:
    """Handle commands, uploads and free-text prompts."""
    chat_id = message.chat.id
    key = _chat_key(chat_id)
    store = container.session_store
    command = parse_command(message.text or "")
    if command is BotCommand.START:
        current = store.get(key)
        if current is not None and current.is_loading():
            await container.telegram_client.send_message(
                chat_id=chat_id, text=str(SessionBusy())
            )
            return
        _, studio = store.create(key)
        await container.telegram_client.send_message(chat_id=chat_id, text=WELCOME_TEXT)
        await _send_view(container, chat_id, studio)
        return
    if command is BotCommand.HELP:
        await container.telegram_client.send_message(chat_id=chat_id, text=HELP_TEXT)
        return

    studio = store.get_or_create(key)
    if command is BotCommand.STATUS:
        await _send_view(container, chat_id, studio)
        return
    if command is BotCommand.RESET:
        if studio.current_step() in {Step.UPLOAD, Step.SESSION_END}:
            _, studio = store.create(key)
            await _send_view(container, chat_id, studio)
            return
        await _run_action(container, chat_id, studio, "reset")
        return

    upload = _extract_upload(message)
    if upload is not None:
        await _handle_upload(container, chat_id, studio, message, upload)
        return

    if message.text and studio.current_step() is Step.USER_PROMPT_INPUT:
        try:
            studio.update_user_prompt(message.text)
            studio.proceed_with_user_prompt()
        except StudioError as exc:
            await container.telegram_client.send_message(chat_id=chat_id, text=str(exc))
            return
    await _send_view(container, chat_id, studio)


async def _handle_upload(
    container: AppContainer,
    chat_id: int,
    studio: StudioSession,
    message: TelegramMessage,
    upload: tuple[str, str | None],
) -> None:
    if studio.current_step() is not Step.UPLOAD:
        await container.telegram_client.send_message(
            chat_id=chat_id,
            text="Photos are only used on the upload step. Send /reset to start over.",
        )
        return
    action = _upload_action(message.caption, studio.current_session())
    if action is None:
        await container.telegram_client.send_message(
            chat_id=chat_id,
            text="Both images are in. Caption a photo 'product' or 'model' to "
            "replace one.",
        )
        return
    file_id, mime_type = upload
    try:
        image = await container.telegram_file_client.download_image(file_id, mime_type)
    except Exception as exc:
        logger.exception(
            "Failed to download Telegram photo", extra={"file_id": file_id}
        )
        await container.telegram_client.send_message(
            chat_id=chat_id,
            text=_format_error(container, exc, "Couldn't download that photo."),
        )
        return
    await _run_action(container, chat_id, studio, action, image=image)


async def _run_action(  # noqa: PLR0913
    container: AppContainer,
    chat_id: int,
    studio: StudioSession,
    action: str,
    value: str | None = None,
    image: ImageRef | None = None,
) -> None:
    """Perform a transition and show the resulting step."""
    progress = PROGRESS_MESSAGES.get(action)
    if progress and action in available_actions(studio.state):
        await container.telegram_client.send_message(chat_id=chat_id, text=progress)
    try:
        await studio.perform(action, value, image=image)
    except StudioError as exc:
        await container.telegram_client.send_message(chat_id=chat_id, text=str(exc))
        return
    except ValueError:
        logger.warning("Rejected studio action", extra={"action": action})
        await container.telegram_client.send_message(
            chat_id=chat_id, text="That option is no longer available."
        )
        return
    await _send_view(container, chat_id, studio)


async def _send_view(
    container: AppContainer, chat_id: int, studio: StudioSession
) -> None:
    view = render_step(studio.state)
    reply_markup = inline_keyboard(view.options)
    if view.image is not None:
        await container.telegram_client.send_photo(
            chat_id=chat_id,
            image=view.image,
            caption=view.as_text(),
            reply_markup=reply_markup,
        )
        return
    await container.telegram_client.send_message(
        chat_id=chat_id, text=view.as_text(), reply_markup=reply_markup
    )


def _chat_key(chat_id: int) -> str:
    return f"tg:{chat_id}"


def _extract_upload(message: TelegramMessage) -> tuple[str, str | None] | None:
    """Return (file_id, mime_type) for a photo or an image document."""
    if message.photo:
        return _select_largest_photo(message.photo).file_id, None
    if message.document and message.document.is_image:
        return message.document.file_id, message.document.mime_type
    return None


def _upload_action(caption: str | None, session: SessionRecord) -> str | None:
    """Pick the slot named by the caption's first word, else the first empty slot."""
    words = (caption or "").lower().split(maxsplit=1)
    label = words[0].strip(".,:;!-") if words else ""
    if label == "model":
        return "upload_model"
    if label == "product":
        return "upload_product"
    if session.product_image is None:
        return "upload_product"
    if session.model_image is None:
        return "upload_model"
    return None


def _select_largest_photo(photos: list[TelegramPhotoSize]) -> TelegramPhotoSize:
    """Select the largest photo size from the Telegram payload."""
    return max(photos, key=lambda photo: (photo.width * photo.height))


def _extract_user_id(update: TelegramUpdate) -> int | None:
    """Extract Telegram user id from update, if present."""
    if update.callback_query:
        return update.callback_query.from_user.id
    if update.message:
        return update.message.from_user.id
    return None


def _is_user_allowed(user_id: int, allowed: set[int] | None) -> bool:
    """Return true when the user is allowed to interact with the bot."""
    return allowed is None or user_id in allowed


def _format_error(container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a user-facing error message with local debug info."""
    if container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
