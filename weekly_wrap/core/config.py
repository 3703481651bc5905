"""Runtime configuration.

Everything is read from the environment once, at startup, into a
:class:`Settings` object that is passed explicitly to the clients,
the pipeline and the scheduler. Entry points call ``load_dotenv()``
first, so ``.env`` values show up here as ordinary environment variables.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CRON = "0 9 * * 1"  # Mondays at 09:00


class ConfigError(Exception):
    """Raised when configuration is missing or malformed."""


class YNABSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="YNAB_", env_ignore_empty=True, str_strip_whitespace=True, extra="ignore",
    )

    api_token: str = ""
    budget_id: str = ""


class TelegramSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TELEGRAM_", env_ignore_empty=True, str_strip_whitespace=True, extra="ignore",
    )

    bot_token: str = ""
    chat_id: int = 0
    topic_id: int = Field(default=0, ge=0, description="Forum topic; 0 posts to the main chat")


class ScheduleSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SCHEDULE_",
        env_ignore_empty=True,
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    cron: str = DEFAULT_CRON
    timezone: str = Field(default="UTC", validation_alias=AliasChoices("TIMEZONE", "TZ"))


class ThresholdSettings(BaseSettings):
    model_config = SettingsConfigDict(env_ignore_empty=True, extra="ignore")

    at_risk_percent: float = Field(default=75.0, ge=0)
    over_budget_percent: float = Field(default=100.0, gt=0)
    top_categories_count: int = Field(default=5, ge=0, description="0 lists every category")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_ignore_empty=True, str_strip_whitespace=True, extra="ignore")

    ynab: YNABSettings = Field(default_factory=YNABSettings)
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)
    thresholds: ThresholdSettings = Field(default_factory=ThresholdSettings)
    log_level: str = "info"


def load_settings() -> Settings:
    """Build :class:`Settings` from environment variables.

    Unset or empty variables fall back to defaults. Values that don't parse
    raise :class:`ConfigError`.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e.error_count()} validation error(s)\n{e}") from e


def validate_settings(settings: Settings, test_mode: bool = False) -> None:
    """Check required credentials.

    YNAB credentials are always required. Telegram credentials are only
    required when the wrap will actually be sent (not in test mode).
    """
    if not settings.ynab.api_token:
        raise ConfigError("YNAB API token is required (set YNAB_API_TOKEN)")
    if not settings.ynab.budget_id:
        raise ConfigError("YNAB budget ID is required (set YNAB_BUDGET_ID)")

    if test_mode:
        return

    validate_telegram_settings(settings)


def validate_telegram_settings(settings: Settings) -> None:
    if not settings.telegram.bot_token:
        raise ConfigError("Telegram bot token is required (set TELEGRAM_BOT_TOKEN)")
    if not settings.telegram.chat_id:
        raise ConfigError("Telegram chat ID is required (set TELEGRAM_CHAT_ID)")
