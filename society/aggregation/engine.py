"""
Aggregation Engine

DESIGN DECISION: Every figure on the dashboard is computed from the records
already in memory, by pure functions. Nothing here touches storage, so the
same inputs always give the same totals.

The engine trusts its input: amounts are validated on write, before a
record can exist, and are never re-checked on read.
"""

from decimal import Decimal
from operator import attrgetter
from typing import Callable, Iterable, Sequence, TypeVar

from society.models import ChartSlice, DashboardSummary, Expense, Member, Payment

T = TypeVar("T")

# Pie chart colours, assigned to categories in first-seen order
CHART_COLORS = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884d8"]

_amount = attrgetter("amount")


def total_of(
    records: Iterable[T],
    amount_of: Callable[[T], Decimal] = _amount,
) -> Decimal:
    """Sum the amounts of a set of records. Empty input sums to zero."""
    return sum((amount_of(record) for record in records), Decimal("0"))


def balance(payments: Iterable[Payment], expenses: Iterable[Expense]) -> Decimal:
    """Money collected minus money spent. Negative when overspent."""
    return total_of(payments) - total_of(expenses)


def group_by_category(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """
    Total expenses per category.

    Only categories that actually occur become keys, in the order they are
    first seen.
    """
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        label = expense.category.value
        totals[label] = totals.get(label, Decimal("0")) + expense.amount
    return totals


def chart_slices(breakdown: dict[str, Decimal]) -> list[ChartSlice]:
    """Pair each category total with a colour index in first-seen order."""
    return [
        ChartSlice(name=name, value=value, color_index=index % len(CHART_COLORS))
        for index, (name, value) in enumerate(breakdown.items())
    ]


def chart_color(slice_: ChartSlice) -> str:
    return CHART_COLORS[slice_.color_index]


def newest_first(records: Sequence[T]) -> list[T]:
    """
    Reverse-chronological order for display.

    Payments and expenses sort by their ISO date, members by created_at.
    Storage order is never relied upon.
    """
    def sort_key(record):
        if isinstance(record, Member):
            return record.created_at
        return record.date

    return sorted(records, key=sort_key, reverse=True)


def payments_for_month(payments: Iterable[Payment], month: str) -> list[Payment]:
    """Payments made for a given YYYY-MM month."""
    return [payment for payment in payments if payment.month == month]


def members_without_payment(
    members: Iterable[Member],
    payments: Iterable[Payment],
    month: str,
) -> list[Member]:
    """Members with no payment recorded for a month, by flat number."""
    paid = {payment.member_id for payment in payments if payment.month == month}
    return sorted(
        (member for member in members if member.id not in paid),
        key=attrgetter("flat_number"),
    )


def summarize(
    members: Sequence[Member],
    payments: Sequence[Payment],
    expenses: Sequence[Expense],
) -> DashboardSummary:
    """Build every dashboard figure in one pass over the snapshot."""
    collected = total_of(payments)
    spent = total_of(expenses)
    breakdown = group_by_category(expenses)
    return DashboardSummary(
        total_collected=collected,
        total_expenses=spent,
        balance=collected - spent,
        expense_breakdown=breakdown,
        chart_slices=chart_slices(breakdown),
        member_count=len(members),
    )
