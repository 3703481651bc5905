"""Telegram Bot API client.

Async HTTP client for https://api.telegram.org, just enough to post the
weekly wrap to a chat or a forum topic inside a supergroup.
"""

import logging
from typing import Any, Optional

import httpx

BASE_URL = "https://api.telegram.org"
DEFAULT_TIMEOUT = 30.0
MAX_MESSAGE_LENGTH = 4096

logger = logging.getLogger(__name__)


class TelegramError(Exception):
    """Raised when the Bot API rejects a request or can't be reached."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Telegram API Error [{status_code}]: {detail}")


def truncate_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class TelegramClient:
    """Async client for the Telegram Bot API."""

    def __init__(self, bot_token: str, chat_id: int = 0, topic_id: int = 0):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.topic_id = topic_id
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=f"{BASE_URL}/bot{self.bot_token}",
                timeout=DEFAULT_TIMEOUT,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _call(
        self, method: str, payload: Optional[dict[str, Any]] = None
    ) -> Any:
        """Call a Bot API method and return its ``result``.

        The Bot API reports failures as ``{"ok": false, "description": ...}``,
        usually alongside a 4xx status.
        """
        try:
            response = await self.client.post(f"/{method}", json=payload or {})
        except httpx.TimeoutException as e:
            raise TelegramError(408, "Request to Telegram timed out.") from e

        try:
            body = response.json()
        except ValueError as e:
            raise TelegramError(
                response.status_code, f"Unparseable response from Telegram: {response.text[:200]}"
            ) from e
        if not isinstance(body, dict):
            raise TelegramError(response.status_code, f"Unexpected response from Telegram: {body!r:.200}")

        if response.is_error or not body.get("ok", False):
            detail = body.get("description") or body.get("error") or "unknown error"
            raise TelegramError(body.get("error_code", response.status_code), detail)

        return body.get("result")

    async def get_me(self) -> dict[str, Any]:
        """Check the bot token; returns the bot's own user object."""
        logger.info("Testing Telegram bot connection...")
        me = await self._call("getMe")
        logger.info("Telegram bot connection test successful")
        return me

    async def send_message(
        self,
        text: str,
        chat_id: Optional[int] = None,
        topic_id: Optional[int] = None,
        markdown: bool = True,
    ) -> bool:
        """Send *text* to a chat, optionally inside a forum topic."""
        target_chat = chat_id or self.chat_id
        target_topic = self.topic_id if topic_id is None else topic_id

        payload: dict[str, Any] = {
            "chat_id": target_chat,
            "text": truncate_message(text),
            "disable_web_page_preview": True,
        }
        if markdown:
            payload["parse_mode"] = "Markdown"
        if target_topic and target_topic > 0:
            payload["message_thread_id"] = target_topic
            logger.info("Sending message to topic ID: %d", target_topic)

        await self._call("sendMessage", payload)
        return True

    async def send_weekly_wrap(self, message: str) -> bool:
        """Send the weekly wrap to the configured chat and topic."""
        logger.info("Sending weekly wrap to chat ID: %d", self.chat_id)
        sent = await self.send_message(message)
        logger.info("Weekly wrap sent successfully")
        return sent
