"""YNAB Weekly Wrap MCP Server.

Exposes the weekly wrap as MCP tools so it can be previewed or sent on
demand, outside the cron schedule.
"""

from contextlib import asynccontextmanager

from dotenv import load_dotenv
from mcp.server.fastmcp import Context, FastMCP

load_dotenv()

from weekly_wrap.core.config import Settings, load_settings, validate_settings
from weekly_wrap.core.pipeline import build_weekly_wrap, run_weekly_wrap
from weekly_wrap.core.scheduler import resolve_timezone
from weekly_wrap.core.telegram_client import TelegramClient
from weekly_wrap.core.ynab_client import YNABClient
from weekly_wrap.mcp.error_handling import handle_tool_errors
from weekly_wrap.mcp.formatters import format_send_confirmation


# --- Lifespan: initialize shared resources ---


@asynccontextmanager
async def app_lifespan(server: FastMCP):
    settings = load_settings()
    validate_settings(settings, test_mode=True)

    ynab = YNABClient(api_token=settings.ynab.api_token, budget_id=settings.ynab.budget_id)
    telegram = None
    if settings.telegram.bot_token and settings.telegram.chat_id:
        telegram = TelegramClient(
            bot_token=settings.telegram.bot_token,
            chat_id=settings.telegram.chat_id,
            topic_id=settings.telegram.topic_id,
        )

    yield {"settings": settings, "ynab": ynab, "telegram": telegram}

    await ynab.close()
    if telegram is not None:
        await telegram.close()


mcp = FastMCP("ynab_weekly_wrap", lifespan=app_lifespan)


# --- Helper to get dependencies from context ---


def _get_deps(ctx) -> tuple[Settings, YNABClient, TelegramClient | None]:
    state = ctx.request_context.lifespan_context
    return state["settings"], state["ynab"], state["telegram"]


# --- Tools ---


@mcp.tool(
    name="ynab_weekly_wrap_preview",
    annotations={
        "title": "Preview Weekly Wrap",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
@handle_tool_errors
async def ynab_weekly_wrap_preview(ctx: Context) -> str:
    """Build the weekly wrap for the last seven days without sending it."""
    settings, ynab, _ = _get_deps(ctx)
    tz = resolve_timezone(settings.schedule.timezone)
    _, message = await build_weekly_wrap(ynab, settings, tz=tz)
    return message


@mcp.tool(
    name="ynab_send_weekly_wrap",
    annotations={
        "title": "Send Weekly Wrap",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
@handle_tool_errors
async def ynab_send_weekly_wrap(ctx: Context) -> str:
    """Build the weekly wrap for the last seven days and post it to Telegram."""
    settings, ynab, telegram = _get_deps(ctx)
    if telegram is None:
        return "Telegram is not configured. Set TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID."

    tz = resolve_timezone(settings.schedule.timezone)
    outcome = await run_weekly_wrap(ynab, telegram, settings, tz=tz)
    if not outcome.ok:
        return f"Weekly wrap failed during {outcome.failed_step}: {outcome.error}"

    return format_send_confirmation(outcome.date_range, settings.telegram.chat_id, settings.telegram.topic_id)


# --- Entry point ---

if __name__ == "__main__":
    mcp.run()
