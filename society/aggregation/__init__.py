"""Dashboard aggregation package."""

from society.aggregation.engine import (
    CHART_COLORS,
    balance,
    chart_color,
    chart_slices,
    group_by_category,
    members_without_payment,
    newest_first,
    payments_for_month,
    summarize,
    total_of,
)

__all__ = [
    "CHART_COLORS",
    "balance",
    "chart_color",
    "chart_slices",
    "group_by_category",
    "members_without_payment",
    "newest_first",
    "payments_for_month",
    "summarize",
    "total_of",
]
