"""Tests for MCP error handling decorator."""

import httpx

from weekly_wrap.core.analyzers import InvalidInputError
from weekly_wrap.core.config import ConfigError
from weekly_wrap.core.telegram_client import TelegramError
from weekly_wrap.core.ynab_client import YNABError
from weekly_wrap.mcp.error_handling import handle_tool_errors


class TestHandleToolErrors:
    async def test_returns_result_on_success(self):
        @handle_tool_errors
        async def tool():
            return "ok"

        assert await tool() == "ok"

    async def test_catches_ynab_error(self):
        @handle_tool_errors
        async def tool():
            raise YNABError(404, "not_found", "not_found", "Resource not found")

        result = await tool()
        assert result == "YNAB API error: Resource not found"

    async def test_catches_telegram_error(self):
        @handle_tool_errors
        async def tool():
            raise TelegramError(400, "Bad Request: chat not found")

        result = await tool()
        assert result == "Telegram API error: Bad Request: chat not found"

    async def test_catches_config_error(self):
        @handle_tool_errors
        async def tool():
            raise ConfigError("YNAB budget ID is required (set YNAB_BUDGET_ID)")

        result = await tool()
        assert "YNAB_BUDGET_ID" in result

    async def test_catches_invalid_input(self):
        @handle_tool_errors
        async def tool():
            raise InvalidInputError("limit must be non-negative, got -1")

        result = await tool()
        assert "non-negative" in result

    async def test_catches_connect_error(self):
        @handle_tool_errors
        async def tool():
            raise httpx.ConnectError("Connection refused")

        result = await tool()
        assert "Cannot connect" in result

    async def test_catches_timeout(self):
        @handle_tool_errors
        async def tool():
            raise httpx.ReadTimeout("timed out")

        result = await tool()
        assert "timed out" in result.lower()

    async def test_catches_validation_error(self):
        @handle_tool_errors
        async def tool():
            from weekly_wrap.models.schemas import Transaction
            Transaction(id="t1", date="not-a-date", amount=0)

        result = await tool()
        assert "Invalid data" in result
        assert "validation error" in result

    async def test_catches_unexpected_exception(self):
        @handle_tool_errors
        async def tool():
            raise RuntimeError("boom")

        result = await tool()
        assert "Unexpected error" in result
        assert "RuntimeError" in result
        assert "boom" in result

    async def test_preserves_tool_name(self):
        @handle_tool_errors
        async def ynab_weekly_wrap_preview():
            return "ok"

        assert ynab_weekly_wrap_preview.__name__ == "ynab_weekly_wrap_preview"
