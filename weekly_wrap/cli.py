"""Command-line entry point for the YNAB weekly wrap.

Run: ynab-weekly-wrap [--once | --dry-run | --check-telegram]
Reads its configuration from the environment (and .env).
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import httpx
from dotenv import load_dotenv

from weekly_wrap.core.config import ConfigError, Settings, load_settings, validate_settings
from weekly_wrap.core.scheduler import WeeklyWrapScheduler
from weekly_wrap.core.telegram_client import TelegramClient, TelegramError
from weekly_wrap.core.ynab_client import YNABClient

logger = logging.getLogger("weekly_wrap")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ynab-weekly-wrap",
        description="Post a weekly YNAB spending summary to Telegram on a cron schedule.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--dry-run",
        action="store_true",
        help="Run once and print output to stdout without sending to Telegram",
    )
    mode.add_argument(
        "--once",
        action="store_true",
        help="Run once and exit (for manual testing)",
    )
    mode.add_argument(
        "--check-telegram",
        action="store_true",
        help="Check the Telegram bot token and exit",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _check_telegram(settings: Settings) -> int:
    telegram = TelegramClient(bot_token=settings.telegram.bot_token)
    try:
        me = await telegram.get_me()
    except (TelegramError, httpx.HTTPError) as e:
        logger.error("Telegram connection test failed: %s", e)
        return 1
    finally:
        await telegram.close()
    print(f"Connected as @{me.get('username', '?')}")
    return 0


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    ynab = YNABClient(api_token=settings.ynab.api_token, budget_id=settings.ynab.budget_id)
    telegram = None
    if not args.dry_run and settings.telegram.bot_token:
        telegram = TelegramClient(
            bot_token=settings.telegram.bot_token,
            chat_id=settings.telegram.chat_id,
            topic_id=settings.telegram.topic_id,
        )

    scheduler = WeeklyWrapScheduler(settings, ynab, telegram, dry_run=args.dry_run)
    try:
        if args.once or args.dry_run:
            logger.info("Running once and exiting...")
            outcome = await scheduler.run_once()
            return 0 if outcome.ok else 1

        scheduler.start()
        logger.info("Next run at %s", scheduler.next_run_time())
        await asyncio.Event().wait()
        return 0
    finally:
        scheduler.shutdown()
        await ynab.close()
        if telegram is not None:
            await telegram.close()


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()

    try:
        settings = load_settings()
    except ConfigError as e:
        configure_logging("info")
        logger.error("Failed to load configuration: %s", e)
        return 1

    configure_logging(settings.log_level)

    if args.check_telegram:
        if not settings.telegram.bot_token:
            logger.error("Invalid configuration: Telegram bot token is required (set TELEGRAM_BOT_TOKEN)")
            return 1
        return asyncio.run(_check_telegram(settings))

    logger.info("Starting YNAB Weekly Wrap...")

    test_mode = args.dry_run or args.once
    try:
        validate_settings(settings, test_mode=test_mode)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    logger.info("Configuration loaded successfully")
    logger.info("Budget ID: %s", settings.ynab.budget_id)
    if settings.telegram.chat_id:
        logger.info("Telegram Chat ID: %d", settings.telegram.chat_id)
    if args.dry_run:
        logger.info("[DRY RUN MODE] Will print output to stdout instead of sending to Telegram")
    if args.once:
        logger.info("[ONCE MODE] Will run once and exit")

    try:
        return asyncio.run(_run(args, settings))
    except ConfigError as e:
        logger.error("Failed to start scheduler: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down")
        return 0


if __name__ == "__main__":
    sys.exit(main())
