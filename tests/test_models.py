"""
Tests for Pocketbook models

Test strategy:
1. Unit tests for individual models (validation, derived values)
2. Categories are checked against the transaction type they belong to
3. No storage or UI involved
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from pocketbook.models.finance import (
    Budget,
    BudgetProgress,
    DataKind,
    ExpenseCategory,
    FinancialSummary,
    IncomeCategory,
    Investment,
    InvestmentType,
    Transaction,
    TransactionPage,
    TransactionType,
    categories_for,
    resolve_category,
)
from pocketbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from pocketbook.session import Session


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_expense_creation(self):
        """Test a plain expense is built with its enum category."""
        transaction = Transaction(
            type="expense",
            amount=Decimal("42.50"),
            category="Food & Dining",
            date=date(2024, 3, 1),
            description="Groceries",
        )
        assert transaction.type == TransactionType.EXPENSE
        assert transaction.category == ExpenseCategory.FOOD_AND_DINING
        assert transaction.is_recurring is False

    def test_category_matching_ignores_case(self):
        """Test category names are matched case-insensitively."""
        transaction = Transaction(
            type="INCOME",
            amount=Decimal("100"),
            category="  salary ",
            date=date(2024, 3, 1),
        )
        assert transaction.category == IncomeCategory.SALARY

    def test_income_category_rejected_for_expense(self):
        """Test an expense cannot carry an income category."""
        with pytest.raises(ValidationError):
            Transaction(
                type="expense",
                amount=Decimal("10"),
                category="Salary",
                date=date(2024, 3, 1),
            )

    def test_expense_category_rejected_for_income(self):
        """Test an income cannot carry an expense category."""
        with pytest.raises(ValidationError):
            Transaction(
                type="income",
                amount=Decimal("10"),
                category=ExpenseCategory.HOUSING,
                date=date(2024, 3, 1),
            )

    def test_other_resolves_per_type(self):
        """Test "Other" maps onto the enum of the transaction's type."""
        income = Transaction(
            type="income",
            amount=Decimal("5"),
            category=ExpenseCategory.OTHER,
            date=date(2024, 3, 1),
        )
        assert isinstance(income.category, IncomeCategory)
        assert income.category == IncomeCategory.OTHER

    def test_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            Transaction(
                type="expense",
                amount=Decimal("-1"),
                category="Other",
                date=date(2024, 3, 1),
            )

    def test_signed_amount(self):
        """Test the sign of the amount follows the type."""
        expense = Transaction(type="expense", amount=Decimal("3"), category="Other", date=date(2024, 1, 1))
        income = Transaction(type="income", amount=Decimal("3"), category="Other", date=date(2024, 1, 1))
        assert expense.signed_amount == Decimal("-3")
        assert income.signed_amount == Decimal("3")
        assert income.is_income and not expense.is_income

    def test_json_round_trip_keeps_category_type(self):
        """Test a serialized transaction comes back with the same enum category."""
        original = Transaction(
            type="income",
            amount=Decimal("1200.00"),
            category="Rental Income",
            date=date(2024, 2, 29),
            is_recurring=True,
        )
        restored = Transaction.model_validate_json(original.model_dump_json())
        assert restored == original
        assert isinstance(restored.category, IncomeCategory)


class TestCategories:
    """Tests for the category helpers."""

    def test_categories_for_type(self):
        """Test each type lists its own categories in display order."""
        expense = categories_for(TransactionType.EXPENSE)
        income = categories_for("income")
        assert expense[0] == ExpenseCategory.FOOD_AND_DINING
        assert expense[-1] == ExpenseCategory.OTHER
        assert income[0] == IncomeCategory.SALARY
        assert len(expense) == 12
        assert len(income) == 7

    def test_resolve_unknown_category(self):
        """Test an unknown name raises ValueError naming the type."""
        with pytest.raises(ValueError, match="not a valid expense category"):
            resolve_category(TransactionType.EXPENSE, "Yachts")


class TestBudgetModel:
    """Tests for the Budget model."""

    def test_defaults(self):
        """Test a fresh budget has every category at zero."""
        budget = Budget()
        assert budget.monthly_limit == Decimal("1000")
        assert set(budget.category_limits) == set(ExpenseCategory)
        assert all(limit == 0 for limit in budget.category_limits.values())

    def test_with_limit_returns_new_budget(self):
        """Test with_limit leaves the original untouched."""
        budget = Budget()
        updated = budget.with_limit(ExpenseCategory.TRAVEL, Decimal("250"))
        assert updated.limit_for(ExpenseCategory.TRAVEL) == Decimal("250")
        assert budget.limit_for(ExpenseCategory.TRAVEL) == Decimal("0")

    def test_rejects_negative_limits(self):
        """Test negative category limits are rejected."""
        with pytest.raises(ValidationError):
            Budget(category_limits={ExpenseCategory.HOUSING: Decimal("-5")})

    def test_progress_over_flag(self):
        """Test is_over needs a limit and spend above it."""
        assert BudgetProgress(spent=Decimal("11"), limit=Decimal("10"), percentage=110).is_over
        assert not BudgetProgress(spent=Decimal("11"), limit=Decimal("0"), percentage=0).is_over


class TestInvestmentModel:
    """Tests for the Investment model."""

    def test_return_values(self):
        """Test gain and percentage are derived from amount and value."""
        investment = Investment(
            type=InvestmentType.ETF,
            name="World ETF",
            amount=Decimal("1000"),
            current_value=Decimal("1150"),
            purchase_date=date(2023, 5, 1),
        )
        assert investment.return_value == Decimal("150")
        assert investment.return_percentage == Decimal("15.00")

    def test_zero_amount_percentage(self):
        """Test a zero investment reports a zero percentage."""
        investment = Investment(
            name="Gift shares",
            amount=Decimal("0"),
            current_value=Decimal("20"),
            purchase_date=date(2023, 5, 1),
        )
        assert investment.return_percentage == Decimal("0")

    def test_type_labels(self):
        """Test investment types have display labels."""
        assert InvestmentType("realestate").label == "Real Estate"
        assert InvestmentType.P2P.label == "P2P Lending"


class TestSummaryAndPaging:
    """Tests for the ledger view models."""

    def test_balance(self):
        """Test balance is income minus expenses."""
        summary = FinancialSummary(total_income=Decimal("100"), total_expenses=Decimal("130"))
        assert summary.balance == Decimal("-30")

    def test_page_navigation_flags(self):
        """Test has_next / has_previous."""
        page = TransactionPage(items=[], page=2, total_pages=3, total_matches=25)
        assert page.has_next
        assert page.has_previous


class TestSession:
    """Tests for the Session value."""

    def test_guest_keys(self):
        """Test guest data lives under the _guest keys."""
        session = Session.guest()
        assert session.is_guest
        assert session.storage_key(DataKind.TRANSACTIONS) == "transactions_guest"

    def test_account_keys(self):
        """Test account data is keyed by the account id."""
        user_id = uuid4()
        session = Session(user_id=user_id, email="a@b.c")
        assert not session.is_guest
        assert session.storage_key(DataKind.BUDGET) == f"budget_{user_id}"

    def test_state_keys_differ_between_sessions(self):
        """Test a report cached for an account is not visible to a guest."""
        account = Session(user_id=uuid4(), email="a@b.c")
        guest = Session.guest()

        assert account.state_key("report_pdf") == f"report_pdf_{account.user_id}"
        assert guest.state_key("report_pdf") == "report_pdf_guest"
        assert account.state_key("report_pdf") != guest.state_key("report_pdf")


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Test event",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_builder_transaction_added(self):
        """Test AuditEventBuilder.transaction_added."""
        transaction_id = uuid4()
        event = AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            scope="guest",
            transaction_type="expense",
            amount="12.50",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.entity_id == transaction_id
        assert event.scope == "guest"
        assert event.is_user_action is True

    def test_login_failed_is_warning(self):
        """Test failed logins are recorded as warnings."""
        event = AuditEventBuilder.login_failed("someone@example.com")
        assert event.severity == AuditSeverity.WARNING

    def test_builders_accept_oversized_user_input(self):
        """Test long emails and filenames land in details, not the description."""
        email = "a" * 600 + "@x.io"
        filename = "f" * 600 + ".csv"

        events = [
            AuditEventBuilder.login_failed(email),
            AuditEventBuilder.signup_failed(email, "Passwords do not match"),
            AuditEventBuilder.import_failed("guest", filename, "bad date"),
            AuditEventBuilder.transactions_imported("guest", filename, 3, 0),
        ]

        assert [e.details["email"] for e in events[:2]] == [email, email]
        assert [e.details["filename"] for e in events[2:]] == [filename, filename]

    def test_to_log_dict(self):
        """Test AuditEvent.to_log_dict."""
        event = AuditEventBuilder.import_failed("guest", "bank.csv", "bad date")
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "import_failed"
        assert log_dict["error_message"] == "bad date"
        assert log_dict["details"] == {"filename": "bank.csv"}
