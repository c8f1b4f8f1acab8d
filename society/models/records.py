"""
Core Data Models for the Society Manager

These models define the strict schemas for every record the society keeps:
residents (members), maintenance payments and expenses.

DESIGN DECISION: Records are frozen Pydantic models. Once a record is
persisted it is never updated, so the in-memory copy must not be mutable
either. Amounts are Decimal end to end so currency never drifts through
float rounding.
"""

import time
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

# Largest amount a single payment or expense may carry (just under 10,000 crore)
MAX_AMOUNT = Decimal("99999999999.99")


def new_record_id() -> str:
    """Generate a fresh opaque record identifier."""
    return str(uuid4())


def now_millis() -> int:
    """Current time as milliseconds since the epoch."""
    return int(time.time() * 1000)


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    The values are the labels shown on the dashboard, so they are
    capitalised exactly as users see them.
    """
    REPAIR = "Repair"
    CLEANING = "Cleaning"
    ELECTRICITY = "Electricity"
    WATER = "Water"
    OTHER = "Other"


# =============================================================================
# RECORDS
# =============================================================================

class Member(BaseModel):
    """
    A resident of the society.

    Created by the "add member" action and never updated or deleted.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Unique member ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Full name"
    )
    flat_number: str = Field(
        ...,
        min_length=1,
        max_length=20,
        description="Flat number (e.g. 101, B-204)"
    )
    mobile: str = Field(
        default="",
        max_length=20,
        description="Mobile number, may be empty"
    )
    photo_base64: Optional[str] = Field(
        default=None,
        description="Photo encoded as a data URL"
    )
    created_at: int = Field(
        default_factory=now_millis,
        ge=0,
        description="Creation time in milliseconds since epoch"
    )


class Payment(BaseModel):
    """
    A maintenance payment received from a member.

    CRITICAL: member_name is a snapshot taken when the payment is recorded.
    Receipts print this value, so it is never re-derived from the current
    Member record.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Unique payment ID"
    )
    member_id: str = Field(
        ...,
        min_length=1,
        description="ID of the paying member (not enforced by storage)"
    )
    member_name: str = Field(
        default="",
        max_length=200,
        description="Member name at payment time"
    )
    month: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
        description="Month paid for, as YYYY-MM"
    )
    amount: Annotated[
        Decimal,
        Field(ge=0, le=MAX_AMOUNT, description="Amount in INR")
    ]
    date: str = Field(
        default_factory=now_iso,
        description="When the payment was recorded (ISO-8601)"
    )
    note: Optional[str] = Field(
        default=None,
        max_length=1000,
    )


class Expense(BaseModel):
    """An expense paid out of the society fund."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Unique expense ID"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was spent on"
    )
    amount: Annotated[
        Decimal,
        Field(ge=0, le=MAX_AMOUNT, description="Amount in INR")
    ]
    date: str = Field(
        default_factory=now_iso,
        description="When the expense was logged (ISO-8601)"
    )
    category: ExpenseCategory = Field(
        default=ExpenseCategory.OTHER,
    )


Record = Union[Member, Payment, Expense]


class Collection(str, Enum):
    """
    The three record collections kept by the store.

    Each collection knows its record model and which fields carry a
    secondary index, so the store never has to guess.
    """
    MEMBERS = "members"
    PAYMENTS = "payments"
    EXPENSES = "expenses"

    @property
    def record_type(self) -> type:
        return _RECORD_TYPES[self]

    @property
    def index_fields(self) -> tuple[str, ...]:
        return _INDEX_FIELDS[self]

    @classmethod
    def for_record(cls, record: Record) -> "Collection":
        """Find the collection a record belongs to."""
        for collection, record_type in _RECORD_TYPES.items():
            if isinstance(record, record_type):
                return collection
        raise TypeError(f"Not a society record: {type(record).__name__}")


_RECORD_TYPES: dict[Collection, type] = {
    Collection.MEMBERS: Member,
    Collection.PAYMENTS: Payment,
    Collection.EXPENSES: Expense,
}

_INDEX_FIELDS: dict[Collection, tuple[str, ...]] = {
    Collection.MEMBERS: (),
    Collection.PAYMENTS: ("member_id", "month"),
    Collection.EXPENSES: (),
}


# =============================================================================
# INPUT MODELS - raw form values, validated at the boundary
# =============================================================================

RawAmount = Union[Decimal, int, float, str, None]


class NewMemberInput(BaseModel):
    """Form values for the "add member" action."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    flat_number: Optional[str] = None
    mobile: Optional[str] = None
    photo_base64: Optional[str] = None


class NewPaymentInput(BaseModel):
    """
    Form values for the "record payment" action.

    member_name is only consulted when member_id cannot be found among
    the loaded members.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    member_id: Optional[str] = None
    month: Optional[str] = None
    amount: RawAmount = None
    note: Optional[str] = None
    member_name: Optional[str] = None


class NewExpenseInput(BaseModel):
    """Form values for the "log expense" action."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = None
    amount: RawAmount = None
    category: Optional[str] = None


# =============================================================================
# VALIDATION & PRESENTATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
    )
    suggested_fix: Optional[str] = None


class ChartSlice(BaseModel):
    """One slice of the expense breakdown chart."""

    name: str
    value: Decimal
    color_index: int = Field(ge=0)


class DashboardSummary(BaseModel):
    """Derived totals shown on the home screen."""

    total_collected: Decimal
    total_expenses: Decimal
    balance: Decimal
    expense_breakdown: dict[str, Decimal] = Field(default_factory=dict)
    chart_slices: list[ChartSlice] = Field(default_factory=list)
    member_count: int = Field(default=0, ge=0)
