"""Pydantic models for YNAB API data types."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


# --- YNAB uses "milliunits" for currency (1000 = $1.00) ---

def milliunits_to_dollars(milliunits: int) -> float:
    """Convert YNAB milliunits to dollars."""
    return milliunits / 1000.0


# --- Enums ---

class TransactionClearedStatus(str, Enum):
    CLEARED = "cleared"
    UNCLEARED = "uncleared"
    RECONCILED = "reconciled"


# --- Response Models ---

class Budget(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    last_modified_on: Optional[str] = None


class CategoryGroupInfo(BaseModel):
    """Group details copied onto each category when groups are flattened."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    hidden: bool = False
    deleted: bool = False


class Category(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    category_group_id: str
    category_group_name: Optional[str] = None
    group: Optional[CategoryGroupInfo] = None
    name: str
    budgeted: int  # milliunits
    activity: int  # milliunits
    balance: int  # milliunits
    hidden: bool = False
    deleted: bool = False
    note: Optional[str] = None


class CategoryGroup(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    hidden: bool = False
    deleted: bool = False
    categories: list[Category] = []

    def flatten(self) -> list[Category]:
        """Return this group's categories, each tagged with the group info."""
        info = CategoryGroupInfo(
            id=self.id, name=self.name, hidden=self.hidden, deleted=self.deleted,
        )
        return [
            c.model_copy(update={"group": info, "category_group_name": self.name})
            for c in self.categories
        ]


class Transaction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    date: Optional[dt.date] = None
    amount: int  # milliunits
    memo: Optional[str] = None
    cleared: TransactionClearedStatus = TransactionClearedStatus.UNCLEARED
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    payee_id: Optional[str] = None
    payee_name: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    deleted: bool = False

    @property
    def amount_dollars(self) -> float:
        return milliunits_to_dollars(self.amount)


class WeeklyData(BaseModel):
    """Everything one weekly wrap needs, fetched in a single pass."""
    model_config = ConfigDict(extra="forbid")

    budget: Budget
    categories: list[Category] = []
    transactions: list[Transaction] = []  # already limited to the window
    week_start: dt.datetime
    week_end: dt.datetime
