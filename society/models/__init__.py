"""
Data Models Package

All records, form inputs and derived summaries used by the Society Manager
are Pydantic models defined here.
"""

from society.models.records import (
    ChartSlice,
    Collection,
    DashboardSummary,
    Expense,
    ExpenseCategory,
    MAX_AMOUNT,
    Member,
    NewExpenseInput,
    NewMemberInput,
    NewPaymentInput,
    Payment,
    Record,
    ValidationIssue,
    new_record_id,
    now_iso,
    now_millis,
)

__all__ = [
    # Records
    "Collection",
    "Expense",
    "ExpenseCategory",
    "Member",
    "Payment",
    "Record",
    # Inputs
    "NewExpenseInput",
    "NewMemberInput",
    "NewPaymentInput",
    # Derived
    "ChartSlice",
    "DashboardSummary",
    "ValidationIssue",
    # Helpers
    "MAX_AMOUNT",
    "new_record_id",
    "now_iso",
    "now_millis",
]
