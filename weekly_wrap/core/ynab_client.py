"""YNAB API client wrapper.

Async HTTP client for the YNAB REST API (https://api.ynab.com/v1).
Handles authentication and error handling. Every call goes to the API;
nothing is cached between runs.
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from weekly_wrap.core.analyzers import filter_transactions_in_window
from weekly_wrap.models.schemas import Budget, Category, CategoryGroup, Transaction, WeeklyData

BASE_URL = "https://api.ynab.com/v1"
DEFAULT_TIMEOUT = 30.0

logger = logging.getLogger(__name__)


class YNABError(Exception):
    """Base exception for YNAB API errors."""

    def __init__(self, status_code: int, error_id: str, name: str, detail: str):
        self.status_code = status_code
        self.error_id = error_id
        self.name = name
        self.detail = detail
        super().__init__(f"YNAB API Error [{status_code}] {name}: {detail}")


class YNABClient:
    """Async client for the YNAB API."""

    def __init__(self, api_token: str, budget_id: str = "default"):
        self.api_token = api_token
        self.budget_id = budget_id
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=BASE_URL,
                headers={"Authorization": f"Bearer {self.api_token}"},
                timeout=DEFAULT_TIMEOUT,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Make an authenticated request to the YNAB API and return its ``data``."""
        try:
            response = await self.client.request(method=method, url=path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            try:
                body = e.response.json() if e.response.content else {}
            except ValueError:
                body = {}
            error = body.get("error", {}) if isinstance(body, dict) else {}
            raise YNABError(
                status_code=e.response.status_code,
                error_id=error.get("id", str(e.response.status_code)),
                name=error.get("name", "unknown_error"),
                detail=error.get("detail", str(e)),
            ) from e
        except httpx.TimeoutException as e:
            raise YNABError(
                status_code=408,
                error_id="timeout",
                name="request_timeout",
                detail="Request to YNAB API timed out. Please try again.",
            ) from e

        return response.json().get("data", {})

    # --- Budgets ---

    async def get_budget(self, budget_id: Optional[str] = None) -> Budget:
        """Get a specific budget."""
        bid = budget_id or self.budget_id
        data = await self._request("GET", f"/budgets/{bid}")
        budget = data.get("budget")
        if not budget:
            raise YNABError(404, "not_found", "no_budget_data", f"No budget data returned for '{bid}'")
        return Budget(**budget)

    # --- Categories ---

    async def get_categories(
        self, budget_id: Optional[str] = None
    ) -> list[CategoryGroup]:
        """Get all category groups and their categories."""
        bid = budget_id or self.budget_id
        data = await self._request("GET", f"/budgets/{bid}/categories")
        return [CategoryGroup(**cg) for cg in data.get("category_groups", [])]

    # --- Transactions ---

    async def get_transactions(
        self,
        budget_id: Optional[str] = None,
        since_date: Optional[str] = None,
    ) -> list[Transaction]:
        """Get transactions on or after *since_date* (YYYY-MM-DD)."""
        bid = budget_id or self.budget_id
        params: dict[str, Any] = {}
        if since_date:
            params["since_date"] = since_date

        data = await self._request("GET", f"/budgets/{bid}/transactions", params=params)
        return [Transaction(**t) for t in data.get("transactions", [])]

    # --- Weekly Data ---

    async def get_weekly_data(
        self,
        week_start: datetime,
        week_end: datetime,
        budget_id: Optional[str] = None,
    ) -> WeeklyData:
        """Fetch the budget, its categories and the week's transactions.

        The API's ``since_date`` has no upper bound, so transactions are
        trimmed to [week_start, week_end] here.
        """
        bid = budget_id or self.budget_id
        logger.info(
            "Fetching weekly data from %s to %s",
            week_start.date().isoformat(), week_end.date().isoformat(),
        )

        budget = await self.get_budget(bid)
        groups = await self.get_categories(bid)
        categories: list[Category] = [c for g in groups for c in g.flatten()]
        transactions = await self.get_transactions(
            bid, since_date=week_start.date().isoformat()
        )
        in_window = filter_transactions_in_window(transactions, week_start, week_end)

        logger.info(
            "Retrieved %d categories and %d transactions (%d in window)",
            len(categories), len(transactions), len(in_window),
        )
        return WeeklyData(
            budget=budget,
            categories=categories,
            transactions=in_window,
            week_start=week_start,
            week_end=week_end,
        )
