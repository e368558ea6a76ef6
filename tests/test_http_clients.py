"""Tests for HTTP-based adapters."""

import asyncio
import base64
import json
from types import SimpleNamespace

import httpx
import pytest

from creative_director.adapters.gemini_studio_client import GeminiStudioClient
from creative_director.adapters.openai_studio_client import OpenAIStudioClient
from creative_director.adapters.telegram_client import HttpxTelegramClient
from creative_director.adapters.telegram_file_client import HttpxTelegramFileClient
from tests.conftest import MODEL_IMAGE, PRODUCT_IMAGE


class _FakeResponses:
    def __init__(self) -> None:
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": "A sunny rooftop scene"})()


class _FakeImages:
    def __init__(self) -> None:
        self.edits: list[dict[str, object]] = []
        self.generations: list[dict[str, object]] = []

    async def edit(self, **kwargs):  # type: ignore[no-untyped-def]
        self.edits.append(kwargs)
        return _images_response(b"edited")

    async def generate(self, **kwargs):  # type: ignore[no-untyped-def]
        self.generations.append(kwargs)
        return _images_response(b"generated")


def _images_response(data: bytes) -> SimpleNamespace:
    encoded = base64.b64encode(data).decode()
    return SimpleNamespace(data=[SimpleNamespace(b64_json=encoded)])


class _FakeOpenAI:
    def __init__(self) -> None:
        self.responses = _FakeResponses()
        self.images = _FakeImages()


class _FakeGeminiModels:
    def __init__(self, response: object) -> None:
        self.response = response
        self.calls: list[dict[str, object]] = []

    async def generate_content(self, **kwargs):  # type: ignore[no-untyped-def]
        self.calls.append(kwargs)
        return self.response


def _fake_gemini(response: object) -> SimpleNamespace:
    return SimpleNamespace(aio=SimpleNamespace(models=_FakeGeminiModels(response)))


def test_openai_client_describes_with_images() -> None:
    fake = _FakeOpenAI()
    client = OpenAIStudioClient(client=fake)

    result = asyncio.run(
        client.describe(
            model="gpt-4.1",
            prompt="Describe the scene",
            images=[PRODUCT_IMAGE, MODEL_IMAGE],
            temperature=0.8,
        )
    )

    assert result == "A sunny rooftop scene"
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["temperature"] == 0.8
    assert payload["store"] is False
    content = payload["input"][0]["content"]
    assert content[0]["image_url"].startswith("data:image/png;base64,")
    assert content[-1] == {"type": "input_text", "text": "Describe the scene"}


def test_openai_client_edits_with_references() -> None:
    fake = _FakeOpenAI()
    client = OpenAIStudioClient(client=fake)

    result = asyncio.run(
        client.render(
            model="gpt-image-1",
            prompt="scene",
            aspect_ratio="16:9",
            images=[PRODUCT_IMAGE, MODEL_IMAGE],
        )
    )

    assert result is not None
    assert result.data == b"edited"
    request = fake.images.edits[0]
    assert request["size"] == "1536x1024"
    assert [upload[0] for upload in request["image"]] == [
        "reference-0.png",
        "reference-1.jpg",
    ]


def test_openai_client_generates_without_references() -> None:
    fake = _FakeOpenAI()
    client = OpenAIStudioClient(client=fake)

    result = asyncio.run(
        client.render(model="gpt-image-1", prompt="scene", aspect_ratio="1:1", images=[])
    )

    assert result is not None
    assert result.data == b"generated"
    assert fake.images.generations[0]["size"] == "1024x1024"


def test_gemini_client_describe_returns_text() -> None:
    fake = _fake_gemini(SimpleNamespace(text="Studio scene"))
    client = GeminiStudioClient(client=fake)

    result = asyncio.run(
        client.describe(
            model="gemini-test",
            prompt="Describe",
            images=[PRODUCT_IMAGE, MODEL_IMAGE],
            temperature=0.8,
        )
    )

    assert result == "Studio scene"
    call = fake.aio.models.calls[0]
    assert call["model"] == "gemini-test"
    assert call["contents"][-1] == "Describe"
    assert len(call["contents"]) == 3


def test_gemini_client_render_picks_largest_inline_image() -> None:
    parts = [
        SimpleNamespace(inline_data=None, text="here you go"),
        SimpleNamespace(
            inline_data=SimpleNamespace(data=b"small", mime_type="image/png")
        ),
        SimpleNamespace(
            inline_data=SimpleNamespace(data=b"much larger", mime_type="image/jpeg")
        ),
    ]
    response = SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))]
    )
    fake = _fake_gemini(response)
    client = GeminiStudioClient(client=fake)

    result = asyncio.run(
        client.render(
            model="gemini-image",
            prompt="scene",
            aspect_ratio="4:5",
            images=[PRODUCT_IMAGE],
        )
    )

    assert result is not None
    assert result.data == b"much larger"
    assert result.mime_type == "image/jpeg"
    call = fake.aio.models.calls[0]
    assert call["contents"][0] == "scene"
    assert call["config"].image_config.aspect_ratio == "4:5"


def test_gemini_client_render_without_image_returns_none() -> None:
    empty = _fake_gemini(SimpleNamespace(candidates=[]))
    text_only = _fake_gemini(
        SimpleNamespace(
            candidates=[
                SimpleNamespace(
                    content=SimpleNamespace(
                        parts=[SimpleNamespace(inline_data=None, text="refused")]
                    ),
                    finish_reason="SAFETY",
                )
            ]
        )
    )

    for fake in (empty, text_only):
        result = asyncio.run(
            GeminiStudioClient(client=fake).render(
                model="m", prompt="p", aspect_ratio="1:1", images=[]
            )
        )
        assert result is None


def test_telegram_client_send_and_callback() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/sendMessage") or request.url.path.endswith(
            "/answerCallbackQuery"
        )
        return httpx.Response(200, json={"ok": True, "result": {}})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    asyncio.run(client.send_message(chat_id=1, text="Hi"))
    asyncio.run(client.answer_callback_query(callback_query_id="cbq-1"))


def test_telegram_client_send_photo_uses_multipart() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "result": {}})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    asyncio.run(
        client.send_photo(
            chat_id=7,
            image=PRODUCT_IMAGE,
            caption="Generate next image?",
            reply_markup={"inline_keyboard": []},
        )
    )

    request = seen[0]
    assert request.url.path.endswith("/sendPhoto")
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.read()
    assert b'name="photo"; filename="creative-asset.png"' in body
    assert b"Generate next image?" in body
    assert json.dumps({"inline_keyboard": []}).encode() in body


def test_telegram_client_commands_and_menu_button() -> None:
    seen_paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_paths.append(request.url.path)
        payload = json.loads(request.content.decode())
        if request.url.path.endswith("/setMyCommands"):
            assert payload["commands"][0]["command"] == "start"
        if request.url.path.endswith("/setChatMenuButton"):
            assert payload["menu_button"]["type"] == "commands"
        return httpx.Response(200, json={"ok": True, "result": True})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    asyncio.run(
        client.set_my_commands(
            [{"command": "start", "description": "Start a new product shoot"}]
        )
    )
    asyncio.run(client.set_chat_menu_button({"type": "commands"}))

    assert any(path.endswith("/setMyCommands") for path in seen_paths)
    assert any(path.endswith("/setChatMenuButton") for path in seen_paths)


def test_telegram_file_client_downloads_image() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/getFile"):
            return httpx.Response(
                200,
                json={
                    "ok": True,
                    "result": {"file_path": "photos/file.jpg"},
                },
            )
        return httpx.Response(200, content=b"\xff\xd8\xffimage-bytes")

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramFileClient(bot_token="token", http_client=async_client)

    image = asyncio.run(client.download_image("file-id"))

    assert image.data == b"\xff\xd8\xffimage-bytes"
    assert image.mime_type == "image/jpeg"


def test_telegram_file_client_raises_when_lookup_fails() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": False})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramFileClient(bot_token="token", http_client=async_client)

    with pytest.raises(RuntimeError):
        asyncio.run(client.download_image("file-id", "image/png"))
