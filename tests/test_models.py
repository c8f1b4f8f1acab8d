"""
Tests for the Society Manager

Test strategy:
1. Unit tests for individual components (models, validator, aggregation)
2. Store tests against a real SQLite file in a temp directory
3. Controller tests with a fault-injecting store wrapper
"""

import pytest
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from society.models import (
    MAX_AMOUNT,
    ChartSlice,
    Collection,
    Expense,
    ExpenseCategory,
    Member,
    NewPaymentInput,
    Payment,
    ValidationIssue,
)


class TestRecordModels:
    """Tests for the Member, Payment and Expense models."""

    def test_member_creation(self):
        """Test Member model creation with defaults."""
        member = Member(name="A. Rao", flat_number="101")
        assert member.name == "A. Rao"
        assert member.mobile == ""
        assert member.photo_base64 is None
        assert member.id
        assert member.created_at > 0

    def test_member_strips_whitespace(self):
        """Test that whitespace is stripped from names."""
        member = Member(name="  A. Rao  ", flat_number=" 101 ")
        assert member.name == "A. Rao"
        assert member.flat_number == "101"

    def test_member_requires_name(self):
        with pytest.raises(PydanticValidationError):
            Member(name="", flat_number="101")

    def test_member_ids_are_unique(self):
        ids = {Member(name="X", flat_number="1").id for _ in range(50)}
        assert len(ids) == 50

    def test_records_are_immutable(self):
        """Records cannot be edited once created."""
        member = Member(name="A. Rao", flat_number="101")
        with pytest.raises(PydanticValidationError):
            member.name = "B. Rao"

    def test_payment_creation(self):
        payment = Payment(
            member_id="m1",
            member_name="A. Rao",
            month="2024-03",
            amount=Decimal("2500"),
        )
        assert payment.amount == Decimal("2500")
        assert payment.note is None
        assert "T" in payment.date  # ISO-8601 timestamp

    def test_payment_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Payment(member_id="m1", month="2024-03", amount=Decimal("-1"))

    def test_amount_upper_bound(self):
        """Amounts beyond MAX_AMOUNT are rejected on the record itself."""
        with pytest.raises(ValueError):
            Payment(member_id="m1", month="2024-03", amount=Decimal("1e30"))
        with pytest.raises(ValueError):
            Expense(title="Typo", amount=MAX_AMOUNT + Decimal("0.01"))

    def test_payment_month_shape(self):
        with pytest.raises(ValueError):
            Payment(member_id="m1", month="March 2024", amount=Decimal("100"))

    def test_payment_month_range_not_checked(self):
        payment = Payment(member_id="m1", month="2024-13", amount=Decimal("100"))
        assert payment.month == "2024-13"

    def test_expense_defaults_to_other(self):
        expense = Expense(title="Diwali lights", amount=Decimal("600"))
        assert expense.category == ExpenseCategory.OTHER

    def test_json_round_trip_keeps_decimal_precision(self):
        expense = Expense(title="Cleaning", amount=Decimal("1234.56"),
                          category=ExpenseCategory.CLEANING)
        restored = Expense.model_validate_json(expense.model_dump_json())
        assert restored == expense
        assert restored.amount == Decimal("1234.56")


class TestCollections:
    """Tests for the Collection discriminator."""

    def test_record_types(self):
        assert Collection.MEMBERS.record_type is Member
        assert Collection.PAYMENTS.record_type is Payment
        assert Collection.EXPENSES.record_type is Expense

    def test_payment_indexes(self):
        assert Collection.PAYMENTS.index_fields == ("member_id", "month")
        assert Collection.MEMBERS.index_fields == ()

    def test_for_record(self):
        expense = Expense(title="Pump", amount=Decimal("1"))
        assert Collection.for_record(expense) is Collection.EXPENSES

    def test_for_record_rejects_other_types(self):
        with pytest.raises(TypeError):
            Collection.for_record("not a record")


class TestExpenseCategories:
    """Tests for the expense category enum."""

    def test_all_categories_exist(self):
        expected = ["Repair", "Cleaning", "Electricity", "Water", "Other"]
        assert [c.value for c in ExpenseCategory] == expected

    def test_category_lookup_by_label(self):
        assert ExpenseCategory("Water") is ExpenseCategory.WATER


class TestSupportModels:
    """Tests for inputs and derived models."""

    def test_payment_input_accepts_raw_form_values(self):
        data = NewPaymentInput(member_id=" m1 ", month="2024-03", amount="2500")
        assert data.member_id == "m1"
        assert data.amount == "2500"

    def test_validation_issue_severity(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="missing", message="x", severity="fatal")

    def test_chart_slice(self):
        slice_ = ChartSlice(name="Repair", value=Decimal("1800"), color_index=0)
        assert slice_.value == Decimal("1800")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
