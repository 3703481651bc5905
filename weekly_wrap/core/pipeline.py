"""The weekly wrap cycle: fetch -> analyze -> format -> send.

Each step either hands its output to the next one or stops the cycle.
A failed cycle is logged and reported through :class:`WrapOutcome`; it
is never retried, and the next scheduled run starts from scratch.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, tzinfo
from typing import Optional, Protocol

import httpx

from weekly_wrap.core.analyzers import InvalidInputError, analyze_weekly_data
from weekly_wrap.core.config import Settings
from weekly_wrap.core.telegram_client import TelegramError
from weekly_wrap.core.ynab_client import YNABError
from weekly_wrap.mcp.formatters import format_weekly_wrap
from weekly_wrap.models.results import AnalysisResult, WrapOutcome
from weekly_wrap.models.schemas import WeeklyData

logger = logging.getLogger(__name__)

WINDOW_DAYS = 7
DRY_RUN_SEPARATOR = "=" * 80


class WeeklyDataSource(Protocol):
    async def get_weekly_data(self, week_start: datetime, week_end: datetime) -> WeeklyData: ...


class WrapNotifier(Protocol):
    async def send_weekly_wrap(self, message: str) -> bool: ...


def compute_week_window(
    now: Optional[datetime] = None, tz: Optional[tzinfo] = None
) -> tuple[datetime, datetime]:
    """The trailing seven days ending at *now*."""
    week_end = now or datetime.now(tz=tz)
    return week_end - timedelta(days=WINDOW_DAYS), week_end


def _analyze(data: Optional[WeeklyData], settings: Settings) -> AnalysisResult:
    return analyze_weekly_data(
        data,
        top_limit=settings.thresholds.top_categories_count,
        at_risk_percent=settings.thresholds.at_risk_percent,
        over_budget_percent=settings.thresholds.over_budget_percent,
    )


async def _fetch(
    source: WeeklyDataSource, now: Optional[datetime], tz: Optional[tzinfo]
) -> WeeklyData:
    week_start, week_end = compute_week_window(now, tz)
    logger.info(
        "Processing week from %s to %s",
        week_start.date().isoformat(), week_end.date().isoformat(),
    )
    return await source.get_weekly_data(week_start, week_end)


def _failed(step: str, error: Exception, message: Optional[str] = None) -> WrapOutcome:
    detail = getattr(error, "detail", None) or str(error)
    return WrapOutcome(
        status="failed",
        message=message,
        failed_step=step,
        error=f"{type(error).__name__}: {detail}",
    )


async def build_weekly_wrap(
    source: WeeklyDataSource,
    settings: Settings,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> tuple[AnalysisResult, str]:
    """Fetch, analyze and format one week without sending anything.

    Errors propagate to the caller.
    """
    data = await _fetch(source, now, tz)
    result = _analyze(data, settings)
    return result, format_weekly_wrap(result)


async def run_weekly_wrap(
    source: WeeklyDataSource,
    notifier: Optional[WrapNotifier],
    settings: Settings,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    dry_run: bool = False,
) -> WrapOutcome:
    """Run one full cycle and report how it went."""
    logger.info("Running weekly wrap...")

    try:
        data = await _fetch(source, now, tz)
    except (YNABError, httpx.HTTPError) as e:
        logger.error("Failed to get weekly data: %s", e)
        return _failed("fetch", e)

    try:
        result = _analyze(data, settings)
    except InvalidInputError as e:
        logger.error("Failed to analyze data: %s", e)
        return _failed("analyze", e)

    message = format_weekly_wrap(result)

    if dry_run:
        logger.info("\n%s\nDRY RUN MODE - Output that would be sent to Telegram:\n%s",
                    DRY_RUN_SEPARATOR, DRY_RUN_SEPARATOR)
        print(message)
        logger.info(DRY_RUN_SEPARATOR)
        logger.info("Weekly wrap dry-run completed successfully (not sent to Telegram)")
        return WrapOutcome(status="dry_run", message=message, date_range=result.date_range)

    if notifier is None:
        logger.warning("Telegram bot is not configured, skipping message send")
        return WrapOutcome(status="skipped", message=message, date_range=result.date_range)

    try:
        await notifier.send_weekly_wrap(message)
    except (TelegramError, httpx.HTTPError) as e:
        logger.error("Failed to send Telegram message: %s", e)
        return _failed("send", e, message)

    logger.info("Weekly wrap completed successfully")
    return WrapOutcome(status="sent", message=message, date_range=result.date_range)
