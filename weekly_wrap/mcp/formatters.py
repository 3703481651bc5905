"""Markdown formatters for the weekly wrap message.

Pure functions that take analysis results and return human-readable Markdown strings.
"""

from __future__ import annotations

from weekly_wrap.models.results import AnalysisResult, CategoryConcern, TopSpendingCategory
from weekly_wrap.models.schemas import Transaction, milliunits_to_dollars

MAX_CONCERN_TRANSACTIONS = 3


def format_amount(value: float) -> str:
    """Render a dollar value with no more decimals than it needs.

    ``20.0 -> "20"``, ``0.5 -> "0.5"``, ``7518.834 -> "7518.83"``.
    """
    if value == int(value):
        text = f"{value:.0f}"
    else:
        text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_milliunits(milliunits: int) -> str:
    return format_amount(milliunits_to_dollars(milliunits))


def format_signed_milliunits(milliunits: int) -> str:
    """``$12.5`` or ``-$10``; the sign never lands after the dollar sign."""
    if milliunits < 0:
        return f"-${format_milliunits(-milliunits)}"
    return f"${format_milliunits(milliunits)}"


def spending_categories_label(count: int) -> str:
    if count == 0:
        return "No Spending Categories"
    if count == 1:
        return "1 Spending Category"
    return f"{count} Spending Categories"


def _category_line(name: str, spent: int, balance: int) -> str:
    return (
        f"**{name}**: Activity: ${format_milliunits(spent)} "
        f"| Remaining: {format_signed_milliunits(balance)}"
    )


def format_top_spending(top: list[TopSpendingCategory]) -> list[str]:
    lines = [f"🏆 **{spending_categories_label(len(top))}**"]
    for c in top:
        lines.append(f"• {_category_line(c.category_name, c.spent, c.balance)}")
    return lines


def format_concern_transaction(t: Transaction) -> str:
    day = t.date.strftime("%m-%d") if t.date else ""
    label = t.memo or t.payee_name or ""
    return f"  • {day}: ${format_milliunits(-t.amount)} - {label}"


def format_concern(concern: CategoryConcern) -> list[str]:
    lines = ["", _category_line(concern.category_name, concern.spent, concern.balance)]
    if concern.transactions:
        lines.append("Transactions:")
        for t in concern.transactions[:MAX_CONCERN_TRANSACTIONS]:
            lines.append(format_concern_transaction(t))
    return lines


def format_weekly_wrap(result: AnalysisResult) -> str:
    """The full weekly wrap message sent to chat."""
    lines = [
        f"📊 **Weekly Financial Wrap - {result.date_range}**",
        "",
        f"💰 **Total Spent**: ${format_milliunits(result.overview.total_spent)}",
        "",
    ]
    lines.extend(format_top_spending(result.top_spending))

    lines.append("")
    lines.append("⚠️ **Over Budget Categories**")
    if result.concerns:
        for concern in result.concerns:
            lines.extend(format_concern(concern))
    else:
        lines.append("• No categories over budget - great job! 🎉")

    return "\n".join(lines) + "\n"


def format_send_confirmation(date_range: str, chat_id: int, topic_id: int = 0) -> str:
    """Tool-facing confirmation after the wrap has been delivered."""
    target = f"chat `{chat_id}`"
    if topic_id:
        target += f" (topic `{topic_id}`)"
    return f"Weekly wrap for {date_range} sent to {target}."
