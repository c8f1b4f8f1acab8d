"""
Input Validation

DESIGN DECISION: Form values arrive exactly as the user typed them.
Every "add" action runs through this validator before anything is written,
so storage never sees a record with a missing name or a negative amount.

IMPORTANT: Validation NEVER silently fixes issues. A missing field is
reported with a field-level message instead of being quietly dropped.
The only values filled in are documented defaults (empty mobile number,
"Other" expense category).
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from society.models import (
    MAX_AMOUNT,
    ExpenseCategory,
    NewExpenseInput,
    NewMemberInput,
    NewPaymentInput,
    ValidationIssue,
)
from society.models.records import RawAmount

MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")


class ValidationError(Exception):
    """User input failed validation. Carries one issue per bad field."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]


def _missing(field: str, label: str) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type="missing",
        message=f"{label} is required",
        severity="error",
    )


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class RecordValidator:
    """Checks form input for the add-member, record-payment and log-expense actions."""

    def _check_amount(
        self,
        amount: RawAmount,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        """Parse an amount, appending an issue if it is missing or unusable."""
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            issues.append(_missing("amount", "Amount"))
            return None

        if isinstance(amount, bool):
            parsed = None
        else:
            try:
                parsed = Decimal(str(amount).strip())
            except InvalidOperation:
                parsed = None

        if parsed is None or not parsed.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount must be a number, got {amount!r}",
                severity="error",
                suggested_fix="Enter the amount in rupees, e.g. 2500",
            ))
            return None

        if parsed < 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount cannot be negative",
                severity="error",
            ))
            return None

        if parsed > MAX_AMOUNT:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="out_of_range",
                message=f"Amount cannot exceed {MAX_AMOUNT:,}",
                severity="error",
                suggested_fix="Check for extra zeros",
            ))
            return None

        return parsed

    @staticmethod
    def _raise_if_errors(issues: list[ValidationIssue]) -> None:
        if any(issue.severity == "error" for issue in issues):
            raise ValidationError(issues)

    def validate_member(self, data: NewMemberInput) -> NewMemberInput:
        """
        Validate new-member input.

        Returns:
            A cleaned input with defaults applied

        Raises:
            ValidationError: If name or flat number is missing
        """
        issues = []
        if _blank(data.name):
            issues.append(_missing("name", "Name"))
        if _blank(data.flat_number):
            issues.append(_missing("flat_number", "Flat number"))
        self._raise_if_errors(issues)

        return NewMemberInput(
            name=data.name,
            flat_number=data.flat_number,
            mobile=data.mobile or "",
            photo_base64=data.photo_base64 or None,
        )

    def validate_payment(self, data: NewPaymentInput) -> NewPaymentInput:
        """
        Validate record-payment input.

        The month must look like YYYY-MM; its range is not checked.

        Raises:
            ValidationError: If member, amount or month is missing or invalid
        """
        issues = []
        if _blank(data.member_id):
            issues.append(_missing("member_id", "Member"))

        if _blank(data.month):
            issues.append(_missing("month", "Month"))
        elif not MONTH_PATTERN.match(data.month):
            issues.append(ValidationIssue(
                field="month",
                issue_type="invalid_format",
                message=f"Month must be in YYYY-MM form, got {data.month!r}",
                severity="error",
                suggested_fix="e.g. 2024-03",
            ))

        amount = self._check_amount(data.amount, issues)
        self._raise_if_errors(issues)

        return NewPaymentInput(
            member_id=data.member_id,
            month=data.month,
            amount=amount,
            note=data.note or None,
            member_name=data.member_name,
        )

    def validate_expense(self, data: NewExpenseInput) -> NewExpenseInput:
        """
        Validate log-expense input. A blank category becomes "Other".

        Raises:
            ValidationError: If title or amount is missing, or the category
                is not one of the known ones
        """
        issues = []
        if _blank(data.title):
            issues.append(_missing("title", "Title"))

        amount = self._check_amount(data.amount, issues)

        category = ExpenseCategory.OTHER
        if not _blank(data.category):
            try:
                category = ExpenseCategory(data.category)
            except ValueError:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="invalid_value",
                    message=f"Unknown expense category: {data.category}",
                    severity="error",
                    suggested_fix=(
                        "Choose one of: "
                        + ", ".join(c.value for c in ExpenseCategory)
                    ),
                ))
        self._raise_if_errors(issues)

        return NewExpenseInput(
            title=data.title,
            amount=amount,
            category=category.value,
        )

    def get_user_friendly_summary(self, error: ValidationError) -> str:
        """One line per problem, ready to show next to the form."""
        lines = []
        for issue in error.issues:
            lines.append(f"• {issue.message}")
            if issue.suggested_fix:
                lines.append(f"  💡 {issue.suggested_fix}")
        return "\n".join(lines)
