"""Cron trigger for the weekly wrap, built on APScheduler."""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from weekly_wrap.core.config import ConfigError, Settings
from weekly_wrap.core.pipeline import WeeklyDataSource, WrapNotifier, run_weekly_wrap
from weekly_wrap.models.results import WrapOutcome

logger = logging.getLogger(__name__)

JOB_ID = "weekly_wrap"


def resolve_timezone(name: str) -> tzinfo:
    """Load *name*, falling back to the system zone and then UTC."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass

    local = datetime.now().astimezone().tzinfo
    if local is not None:
        logger.warning("Could not load timezone '%s', using system local timezone", name)
        return local

    logger.warning("Could not load timezone '%s' or system local timezone, using UTC", name)
    return timezone.utc


def build_trigger(cron: str, tz: tzinfo) -> CronTrigger:
    try:
        return CronTrigger.from_crontab(cron, timezone=tz)
    except ValueError as e:
        raise ConfigError(f"Invalid cron expression '{cron}': {e}") from e


class WeeklyWrapScheduler:
    """Runs the weekly wrap on a cron schedule, one cycle at a time."""

    def __init__(
        self,
        settings: Settings,
        source: WeeklyDataSource,
        notifier: Optional[WrapNotifier],
        dry_run: bool = False,
    ):
        self.settings = settings
        self.source = source
        self.notifier = notifier
        self.dry_run = dry_run
        self.tz = resolve_timezone(settings.schedule.timezone)
        self.trigger = build_trigger(settings.schedule.cron, self.tz)
        self._scheduler = AsyncIOScheduler(timezone=self.tz)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        """Register the job and start the scheduler. Needs a running event loop."""
        logger.info(
            "Starting scheduler with cron expression: %s in timezone: %s",
            self.settings.schedule.cron, self.tz,
        )
        self._scheduler.add_job(
            self.run_once,
            trigger=self.trigger,
            id=JOB_ID,
            name="YNAB Weekly Wrap",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Scheduler started successfully")

    def next_run_time(self) -> Optional[datetime]:
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    async def run_once(self) -> WrapOutcome:
        outcome = await run_weekly_wrap(
            self.source,
            self.notifier,
            self.settings,
            tz=self.tz,
            dry_run=self.dry_run,
        )
        if not outcome.ok:
            logger.error("Weekly wrap failed at %s: %s", outcome.failed_step, outcome.error)
        return outcome
