"""Shared test fixtures for weekly wrap tests."""

from datetime import datetime, timezone

import pytest

from weekly_wrap.models.schemas import (
    Budget,
    Category,
    CategoryGroup,
    Transaction,
    WeeklyData,
)

WEEK_START = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)
WEEK_END = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)

ENV_VARS = (
    "YNAB_API_TOKEN", "YNAB_BUDGET_ID", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID",
    "TELEGRAM_TOPIC_ID", "SCHEDULE_CRON", "TIMEZONE", "TZ", "LOG_LEVEL",
    "TOP_CATEGORIES_COUNT", "AT_RISK_PERCENT", "OVER_BUDGET_PERCENT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's shell and .env out of Settings()."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def make_category(
    name: str = "Groceries",
    group_id: str = "grp-1",
    hidden: bool = False,
    deleted: bool = False,
    budgeted: int = 0,
    activity: int = 0,
    balance: int = 0,
) -> Category:
    return Category(
        id=f"cat-{name.lower().replace(' ', '-')}",
        category_group_id=group_id,
        name=name,
        hidden=hidden,
        deleted=deleted,
        budgeted=budgeted,
        activity=activity,
        balance=balance,
    )


def make_category_group(
    name: str = "Monthly Bills",
    categories: list[Category] | None = None,
    hidden: bool = False,
    deleted: bool = False,
) -> CategoryGroup:
    return CategoryGroup(
        id=f"grp-{name.lower().replace(' ', '-')}",
        name=name,
        hidden=hidden,
        deleted=deleted,
        categories=categories or [],
    )


def make_transaction(
    payee_name: str = "HEB",
    amount: int = -45000,
    category_name: str | None = "Groceries",
    category_id: str | None = "cat-groceries",
    account_name: str = "Checking",
    date: str | None = "2025-03-05",
    memo: str | None = None,
    deleted: bool = False,
) -> Transaction:
    return Transaction(
        id=f"txn-{payee_name.lower().replace(' ', '-')}-{date}",
        date=date,
        amount=amount,
        memo=memo,
        account_id="acc-checking",
        account_name=account_name,
        payee_name=payee_name,
        category_id=category_id,
        category_name=category_name,
        deleted=deleted,
    )


def make_weekly_data(
    categories: list[Category] | None = None,
    transactions: list[Transaction] | None = None,
    week_start: datetime = WEEK_START,
    week_end: datetime = WEEK_END,
) -> WeeklyData:
    return WeeklyData(
        budget=Budget(id="budget-1", name="My Budget"),
        categories=categories or [],
        transactions=transactions or [],
        week_start=week_start,
        week_end=week_end,
    )


class FakeSource:
    """Stands in for YNABClient.get_weekly_data."""

    def __init__(self, data=None, error: Exception | None = None):
        self.data = data if data is not None else make_weekly_data(
            categories=[make_category("Dining", budgeted=50000, balance=-10000)],
            transactions=[
                make_transaction(payee_name="Olive Garden", amount=-60000,
                                 category_name="Dining", date="2025-03-04"),
            ],
        )
        self.error = error
        self.calls: list[tuple[datetime, datetime]] = []

    async def get_weekly_data(self, week_start, week_end):
        self.calls.append((week_start, week_end))
        if self.error:
            raise self.error
        return self.data


class FakeNotifier:
    """Stands in for TelegramClient.send_weekly_wrap."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.sent: list[str] = []

    async def send_weekly_wrap(self, message):
        if self.error:
            raise self.error
        self.sent.append(message)
        return True
