"""Pure analysis functions for the weekly wrap.

All functions take already-fetched domain objects and return result
dataclasses. No I/O, which keeps business logic testable without mocking.
Input lists are never reordered in place.
"""

import math
from datetime import date, datetime, time, tzinfo

from weekly_wrap.models.results import (
    AheadFocus,
    AnalysisResult,
    CategoryConcern,
    CategorySpending,
    CategoryWin,
    Overview,
    TopSpendingCategory,
)
from weekly_wrap.models.schemas import Category, Transaction, WeeklyData

DEFAULT_TOP_LIMIT = 5
DEFAULT_AT_RISK_PERCENT = 75.0
DEFAULT_OVER_BUDGET_PERCENT = 100.0
MAX_WINS = 3


class InvalidInputError(ValueError):
    """Raised when the analyzer is handed missing or malformed input."""


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _as_instant(value: date | datetime, tz: tzinfo | None) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min, tzinfo=tz)


# --- Window Filtering ---


def filter_transactions_in_window(
    transactions: list[Transaction],
    week_start: date | datetime,
    week_end: date | datetime,
) -> list[Transaction]:
    """Keep transactions dated inside [week_start, week_end].

    A transaction date stands for midnight at the start of that day, in
    week_start's timezone. A window opening at 09:00 therefore excludes its
    first calendar day, which the previous window already covered.
    Transactions without a date can't be placed in the window and are dropped.
    """
    tz = week_start.tzinfo if isinstance(week_start, datetime) else None
    start, end = _as_instant(week_start, tz), _as_instant(week_end, tz)
    return [
        t for t in transactions
        if t.date is not None and start <= _as_instant(t.date, tz) <= end
    ]


# --- Category Spending ---


def _counts_as_spending(t: Transaction) -> bool:
    return not t.deleted and t.category_id is not None and t.amount < 0


def calculate_category_spending(
    categories: list[Category],
    transactions: list[Transaction],
    window: tuple[date | datetime, date | datetime] | None = None,
) -> list[CategorySpending]:
    """Sum outflows per category for every category with a budget.

    Transactions are matched to categories by *name*, so two categories
    sharing a name (in different groups) share their transactions too.
    Categories with nothing budgeted are skipped entirely.
    """
    if window is not None:
        transactions = filter_transactions_in_window(transactions, *window)

    spent_by_name: dict[str, int] = {}
    txns_by_name: dict[str, list[Transaction]] = {}
    for t in transactions:
        if not _counts_as_spending(t):
            continue
        name = t.category_name or ""
        spent_by_name[name] = spent_by_name.get(name, 0) - t.amount
        txns_by_name.setdefault(name, []).append(t)

    spending: list[CategorySpending] = []
    for cat in categories:
        if cat.budgeted == 0:
            continue
        spent = spent_by_name.get(cat.name, 0)
        spending.append(CategorySpending(
            category=cat,
            spent=spent,
            budgeted=cat.budgeted,
            balance=cat.balance,
            percentage=spent / cat.budgeted * 100,
            transactions=list(txns_by_name.get(cat.name, [])),
        ))
    return spending


# --- Overview ---


def calculate_overview(spending: list[CategorySpending]) -> Overview:
    total_spent = sum(s.spent for s in spending)
    total_budgeted = sum(s.budgeted for s in spending)
    total_balance = sum(s.balance for s in spending)
    health = total_spent / total_budgeted * 100 if total_budgeted else 0.0
    return Overview(
        total_spent=total_spent,
        total_budgeted=total_budgeted,
        total_balance=total_balance,
        health_percentage=health,
    )


# --- Selectors ---


def get_top_spending_categories(
    spending: list[CategorySpending],
    limit: int = DEFAULT_TOP_LIMIT,
) -> list[TopSpendingCategory]:
    """Categories with any spend, biggest first. ``limit=0`` means no limit.

    Ties keep their input order.
    """
    if limit < 0:
        raise InvalidInputError(f"Top spending limit must be >= 0, got {limit}")

    ranked = sorted(
        (s for s in spending if s.spent > 0),
        key=lambda s: s.spent,
        reverse=True,
    )
    if limit:
        ranked = ranked[:limit]

    return [
        TopSpendingCategory(
            category_name=s.category.name,
            spent=s.spent,
            budgeted=s.budgeted,
            balance=s.balance,
            percentage=s.percentage,
        )
        for s in ranked
    ]


def identify_wins(spending: list[CategorySpending]) -> list[CategoryWin]:
    """Up to three categories with the most money left, if any is left."""
    richest = sorted(spending, key=lambda s: s.balance, reverse=True)[:MAX_WINS]
    return [
        CategoryWin(
            category_name=s.category.name,
            balance=s.balance,
            percentage=s.percentage,
        )
        for s in richest
        if s.balance > 0
    ]


def identify_concerns(spending: list[CategorySpending]) -> list[CategoryConcern]:
    """Every overspent category, most overspent first, with its transactions."""
    return [
        CategoryConcern(
            category_name=s.category.name,
            budgeted=s.budgeted,
            spent=s.spent,
            balance=s.balance,
            over=-s.balance,
            percentage=s.percentage,
            transactions=list(s.transactions),
        )
        for s in sorted(spending, key=lambda s: s.balance)
        if s.balance < 0
    ]


# --- Forward Focus ---


def calculate_ahead_focus(
    spending: list[CategorySpending],
    week_end: datetime,
    at_risk_percent: float = DEFAULT_AT_RISK_PERCENT,
    over_budget_percent: float = DEFAULT_OVER_BUDGET_PERCENT,
    now: datetime | None = None,
) -> AheadFocus:
    """Split categories into ones to watch and ones whose budget needs a rethink.

    ``weeks_left`` counts whole weeks from *now* until *week_end*, rounded
    up. Once week_end has passed it is zero or negative.
    """
    now = now or datetime.now(tz=week_end.tzinfo)

    watch: list[str] = []
    adjustments: list[str] = []
    for s in spending:
        if at_risk_percent <= s.percentage < over_budget_percent:
            watch.append(s.category.name)
        if s.percentage >= over_budget_percent:
            adjustments.append(f"Consider reducing {s.category.name} budget")

    hours_left = (week_end - now).total_seconds() / 3600
    return AheadFocus(
        watch=watch,
        adjustments=adjustments,
        weeks_left=math.ceil(hours_left / 24 / 7),
    )


# --- Entry Point ---


def format_date_range(week_start: date | datetime, week_end: date | datetime) -> str:
    return f"{_as_date(week_start).isoformat()} to {_as_date(week_end).isoformat()}"


def analyze_weekly_data(
    data: WeeklyData | None,
    top_limit: int = DEFAULT_TOP_LIMIT,
    at_risk_percent: float = DEFAULT_AT_RISK_PERCENT,
    over_budget_percent: float = DEFAULT_OVER_BUDGET_PERCENT,
    now: datetime | None = None,
) -> AnalysisResult:
    """Build the full weekly analysis from one week of YNAB data.

    Raises :class:`InvalidInputError` when *data* is missing; there is no
    partial result in that case.
    """
    if data is None:
        raise InvalidInputError("weekly data is missing")

    spending = calculate_category_spending(
        data.categories,
        data.transactions,
        window=(data.week_start, data.week_end),
    )

    return AnalysisResult(
        overview=calculate_overview(spending),
        date_range=format_date_range(data.week_start, data.week_end),
        top_spending=get_top_spending_categories(spending, top_limit),
        wins=identify_wins(spending),
        concerns=identify_concerns(spending),
        ahead_focus=calculate_ahead_focus(
            spending,
            data.week_end,
            at_risk_percent=at_risk_percent,
            over_budget_percent=over_budget_percent,
            now=now,
        ),
    )
