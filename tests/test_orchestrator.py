"""
Tests for the user-facing flows

Flows run against in-memory storage except where persistence itself is
under test.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from pocketbook.models.audit import AuditEventType
from pocketbook.models.finance import (
    AdviceType,
    Budget,
    ExpenseCategory,
    InvestmentType,
    TransactionQuery,
    TransactionType,
)
from pocketbook.orchestrator import create_app_components
from pocketbook.services.importer import CSVImportError, NoValidTransactionsError
from pocketbook.services.storage import NotFoundError

from helpers import TODAY


@pytest.fixture
def components(settings):
    return create_app_components(use_storage=False, settings=settings)


@pytest.fixture
def flows(components):
    return components.open_session(components.accounts.guest())


def event_types(components):
    return [e["event_type"] for e in components.audit_logger.recent_events()]


class TestLedgerFlow:
    """Tests for adding, deleting, importing and exporting transactions."""

    def test_add_and_summary(self, flows):
        """Test added transactions show up in the totals."""
        flows.ledger.add_transaction(TransactionType.INCOME, Decimal("1000"), "Salary", TODAY)
        flows.ledger.add_transaction(TransactionType.EXPENSE, Decimal("250"), "Housing", TODAY)

        summary = flows.ledger.summary()

        assert summary.total_income == Decimal("1000")
        assert summary.total_expenses == Decimal("250")
        assert summary.balance == Decimal("750")

    def test_add_defaults_to_today(self, flows):
        """Test a transaction without a date is dated today."""
        transaction = flows.ledger.add_transaction(TransactionType.EXPENSE, Decimal("5"), "Other")
        assert transaction.date == date.today()

    def test_invalid_add_stores_nothing(self, flows):
        """Test a category of the wrong type is rejected before storing."""
        with pytest.raises(ValidationError):
            flows.ledger.add_transaction(TransactionType.EXPENSE, Decimal("5"), "Salary", TODAY)
        assert flows.ledger.transactions() == []

    def test_add_is_audited(self, components, flows):
        """Test each addition leaves an audit event."""
        flows.ledger.add_transaction(TransactionType.EXPENSE, Decimal("5"), "Other", TODAY)
        assert event_types(components)[0] == AuditEventType.TRANSACTION_ADDED.value

    def test_delete(self, components, flows):
        """Test deleting removes the transaction and is audited."""
        transaction = flows.ledger.add_transaction(TransactionType.EXPENSE, Decimal("5"), "Other", TODAY)

        assert flows.ledger.delete_transaction(transaction.id) is True
        assert flows.ledger.delete_transaction(transaction.id) is False

        assert flows.ledger.transactions() == []
        assert event_types(components)[0] == AuditEventType.TRANSACTION_DELETED.value

    def test_import_csv(self, components, flows):
        """Test a CSV import appends rows and records the counts."""
        result = flows.ledger.import_csv(b"amount,category\n12,Travel\n0,Travel\n", "bank.csv", TODAY)

        assert result.imported_count == 1
        assert flows.ledger.transactions()[0].category == ExpenseCategory.TRAVEL
        event = components.audit_logger.recent_events()[0]
        assert event["event_type"] == AuditEventType.TRANSACTIONS_IMPORTED.value
        assert event["details"] == {"filename": "bank.csv", "imported": 1, "skipped_rows": 1}

    def test_failed_import_is_audited(self, components, flows):
        """Test a rejected file is audited as a warning and re-raised."""
        with pytest.raises(NoValidTransactionsError):
            flows.ledger.import_csv(b"amount\n0\n", "empty.csv", TODAY)
        with pytest.raises(CSVImportError):
            flows.ledger.import_csv(b"date,amount\nnever,1\n", "bad.csv", TODAY)

        events = components.audit_logger.recent_events()
        assert [e["event_type"] for e in events[:2]] == [AuditEventType.IMPORT_FAILED.value] * 2
        assert events[0]["severity"] == "warning"
        assert flows.ledger.transactions() == []

    def test_export_pdf(self, components, flows, tmp_path):
        """Test exporting writes a PDF and audits the page count."""
        flows.ledger.add_transaction(TransactionType.EXPENSE, Decimal("5"), "Other", TODAY)
        path = tmp_path / "report.pdf"

        pdf = flows.ledger.export_pdf(path, generated_on=TODAY)

        assert pdf.startswith(b"%PDF")
        assert path.read_bytes() == pdf
        event = components.audit_logger.recent_events()[0]
        assert event["event_type"] == AuditEventType.REPORT_EXPORTED.value
        assert event["details"] == {"transaction_count": 1, "pages": 1}

    def test_page_uses_query(self, flows):
        """Test the ledger view honours search and paging."""
        for amount in ("1", "2", "3"):
            flows.ledger.add_transaction(TransactionType.EXPENSE, Decimal(amount), "Other", TODAY, "coffee")

        page = flows.ledger.page(TransactionQuery(search="coffee", sort_key="amount", per_page=2))

        assert page.total_matches == 3
        assert [t.amount for t in page.items] == [Decimal("3"), Decimal("2")]


class TestHabitsFlow:
    """Tests for budget settings and advice."""

    def test_default_budget(self, flows):
        """Test a new session starts from the configured default budget."""
        assert flows.habits.budget().monthly_limit == Decimal("1000")

    def test_update_budget_and_advice(self, components, flows):
        """Test a saved budget drives the advice."""
        flows.ledger.add_transaction(TransactionType.EXPENSE, Decimal("300"), "Entertainment", TODAY)
        flows.habits.update_budget(
            Budget().with_limit(ExpenseCategory.ENTERTAINMENT, Decimal("100"))
        )

        advice = flows.habits.advice(today=TODAY)

        assert [a.type for a in advice] == [AdviceType.WARNING]
        assert event_types(components)[0] == AuditEventType.BUDGET_UPDATED.value

    def test_progress_and_trend(self, flows):
        """Test progress and trend read the session's transactions."""
        flows.ledger.add_transaction(TransactionType.EXPENSE, Decimal("40"), "Utilities", TODAY)

        progress = flows.habits.progress(today=TODAY)

        assert progress[0].spent == Decimal("40")
        assert flows.habits.spending_trend() == {"2024-06": Decimal("40")}


class TestInvestmentFlow:
    """Tests for the investment portfolio."""

    def test_add_update_delete(self, components, flows):
        """Test the full lifecycle of an investment."""
        investment = flows.investments.add_investment(
            InvestmentType.CRYPTO, "Bitcoin", Decimal("100"), Decimal("100"), TODAY,
        )

        updated = flows.investments.update_value(investment.id, Decimal("180"))
        assert updated.return_percentage == Decimal("80.00")
        assert flows.investments.totals() == (Decimal("100"), Decimal("180"))

        assert flows.investments.delete_investment(investment.id) is True
        assert flows.investments.investments() == []
        assert event_types(components)[:3] == [
            AuditEventType.INVESTMENT_DELETED.value,
            AuditEventType.INVESTMENT_VALUE_UPDATED.value,
            AuditEventType.INVESTMENT_ADDED.value,
        ]

    def test_update_unknown(self, flows):
        """Test revaluing a missing investment raises NotFoundError."""
        with pytest.raises(NotFoundError):
            flows.investments.update_value(uuid4(), Decimal("1"))


class TestSessions:
    """Tests for data isolation between sessions."""

    def test_guest_and_account_do_not_share_data(self, components):
        """Test an account never sees guest data and vice versa."""
        guest_flows = components.open_session(components.accounts.guest())
        guest_flows.ledger.add_transaction(TransactionType.EXPENSE, Decimal("5"), "Other", TODAY)

        session = components.accounts.sign_up("ann@example.com", "secret", "secret")
        user_flows = components.open_session(session)

        assert user_flows.ledger.transactions() == []
        assert len(guest_flows.ledger.transactions()) == 1

    def test_data_persists_across_components(self, settings):
        """Test file storage keeps an account's data between app starts."""
        first = create_app_components(use_storage=True, settings=settings)
        session = first.accounts.sign_up("ann@example.com", "secret", "secret")
        first.open_session(session).ledger.add_transaction(
            TransactionType.INCOME, Decimal("10"), "Gifts", TODAY,
        )

        second = create_app_components(use_storage=True, settings=settings)
        again = second.accounts.log_in("ann@example.com", "secret")

        assert len(second.open_session(again).ledger.transactions()) == 1
        assert settings.storage.audit_log_path.exists()
