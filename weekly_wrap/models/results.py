"""Result dataclasses for the weekly wrap analyzer.

These are internal types consumed by formatters. Lightweight dataclasses
rather than Pydantic models since they don't need validation.
"""

from dataclasses import dataclass, field

from weekly_wrap.models.schemas import Category, Transaction


@dataclass
class CategorySpending:
    """One budgeted category's activity inside the report window."""
    category: Category
    spent: int           # milliunits, positive magnitude
    budgeted: int        # milliunits, monthly budget
    balance: int         # milliunits, straight from YNAB
    percentage: float    # spent / budgeted * 100
    transactions: list[Transaction] = field(default_factory=list)


@dataclass
class Overview:
    total_spent: int = 0
    total_budgeted: int = 0
    total_balance: int = 0
    health_percentage: float = 0.0


@dataclass
class TopSpendingCategory:
    category_name: str
    spent: int
    budgeted: int
    balance: int
    percentage: float


@dataclass
class CategoryWin:
    """A category with money left over."""
    category_name: str
    balance: int
    percentage: float


@dataclass
class CategoryConcern:
    """An overspent category with the transactions that got it there."""
    category_name: str
    budgeted: int
    spent: int
    balance: int         # negative
    over: int            # -balance
    percentage: float
    transactions: list[Transaction] = field(default_factory=list)


@dataclass
class AheadFocus:
    watch: list[str] = field(default_factory=list)
    adjustments: list[str] = field(default_factory=list)
    weeks_left: int = 0


@dataclass
class AnalysisResult:
    overview: Overview
    date_range: str
    top_spending: list[TopSpendingCategory] = field(default_factory=list)
    wins: list[CategoryWin] = field(default_factory=list)
    concerns: list[CategoryConcern] = field(default_factory=list)
    ahead_focus: AheadFocus = field(default_factory=AheadFocus)


@dataclass
class WrapOutcome:
    """What happened during one fetch -> analyze -> format -> send cycle."""
    status: str                   # "sent", "dry_run", "skipped" or "failed"
    message: str | None = None
    date_range: str | None = None
    failed_step: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"
