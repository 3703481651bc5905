"""Tests for the Telegram Bot API client using httpx.MockTransport."""

import json

import httpx
import pytest

from weekly_wrap.core.telegram_client import (
    MAX_MESSAGE_LENGTH,
    TelegramClient,
    TelegramError,
    truncate_message,
)


@pytest.fixture
def mock_client():
    """Factory that creates a TelegramClient with a mocked transport."""
    async def _make(handler, topic_id: int = 0):
        client = TelegramClient(bot_token="test-token", chat_id=-100123, topic_id=topic_id)
        client._client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url="https://api.telegram.org/bottest-token",
            timeout=30.0,
        )
        return client
    return _make


def _ok_handler(seen: list[httpx.Request]):
    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})
    return handler


class TestSendMessage:
    async def test_posts_markdown_message(self, mock_client):
        seen: list[httpx.Request] = []
        client = await mock_client(_ok_handler(seen))
        assert await client.send_message("hello") is True

        assert seen[0].url.path == "/bottest-token/sendMessage"
        body = json.loads(seen[0].content)
        assert body == {
            "chat_id": -100123,
            "text": "hello",
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
        }

    async def test_plain_text(self, mock_client):
        seen: list[httpx.Request] = []
        client = await mock_client(_ok_handler(seen))
        await client.send_message("hello", markdown=False)
        assert "parse_mode" not in json.loads(seen[0].content)

    async def test_configured_topic(self, mock_client):
        seen: list[httpx.Request] = []
        client = await mock_client(_ok_handler(seen), topic_id=42)
        await client.send_message("hello")
        assert json.loads(seen[0].content)["message_thread_id"] == 42

    async def test_explicit_destination_overrides_config(self, mock_client):
        seen: list[httpx.Request] = []
        client = await mock_client(_ok_handler(seen), topic_id=42)
        await client.send_message("hello", chat_id=555, topic_id=0)
        body = json.loads(seen[0].content)
        assert body["chat_id"] == 555
        assert "message_thread_id" not in body

    async def test_truncates_long_messages(self, mock_client):
        seen: list[httpx.Request] = []
        client = await mock_client(_ok_handler(seen))
        await client.send_message("x" * (MAX_MESSAGE_LENGTH + 100))
        text = json.loads(seen[0].content)["text"]
        assert len(text) == MAX_MESSAGE_LENGTH
        assert text.endswith("...")

    async def test_api_error_raises(self, mock_client):
        def handler(request):
            return httpx.Response(400, json={
                "ok": False,
                "error_code": 400,
                "description": "Bad Request: chat not found",
            })

        client = await mock_client(handler)
        with pytest.raises(TelegramError) as exc_info:
            await client.send_message("hello")
        assert exc_info.value.status_code == 400
        assert "chat not found" in exc_info.value.detail

    async def test_not_ok_with_200_raises(self, mock_client):
        def handler(request):
            return httpx.Response(200, json={"ok": False, "description": "nope"})

        client = await mock_client(handler)
        with pytest.raises(TelegramError, match="nope"):
            await client.send_message("hello")

    async def test_unparseable_response(self, mock_client):
        def handler(request):
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        client = await mock_client(handler)
        with pytest.raises(TelegramError) as exc_info:
            await client.send_message("hello")
        assert exc_info.value.status_code == 502

    async def test_non_object_response(self, mock_client):
        def handler(request):
            return httpx.Response(200, json=["ok"])

        client = await mock_client(handler)
        with pytest.raises(TelegramError) as exc_info:
            await client.send_message("hello")
        assert exc_info.value.status_code == 200

    async def test_timeout(self, mock_client):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = await mock_client(handler)
        with pytest.raises(TelegramError) as exc_info:
            await client.send_message("hello")
        assert exc_info.value.status_code == 408


class TestSendWeeklyWrap:
    async def test_sends_to_configured_chat(self, mock_client):
        seen: list[httpx.Request] = []
        client = await mock_client(_ok_handler(seen))
        assert await client.send_weekly_wrap("wrap") is True
        assert json.loads(seen[0].content)["chat_id"] == -100123


class TestGetMe:
    async def test_returns_bot_user(self, mock_client):
        def handler(request):
            assert request.url.path == "/bottest-token/getMe"
            return httpx.Response(200, json={"ok": True, "result": {"id": 1, "username": "wrap_bot"}})

        client = await mock_client(handler)
        me = await client.get_me()
        assert me["username"] == "wrap_bot"

    async def test_bad_token(self, mock_client):
        def handler(request):
            return httpx.Response(401, json={"ok": False, "error_code": 401, "description": "Unauthorized"})

        client = await mock_client(handler)
        with pytest.raises(TelegramError, match="Unauthorized"):
            await client.get_me()


class TestTruncateMessage:
    def test_short_message_untouched(self):
        assert truncate_message("hi") == "hi"

    def test_custom_limit(self):
        assert truncate_message("abcdefghij", limit=6) == "abc..."
