"""
Main Orchestrator for Pocketbook

This module ties together all the components and defines the
user-facing flows:
1. Ledger (add / delete / import / export transactions)
2. Habits (budget settings, spending advice, trends)
3. Investments (add / revalue / delete positions)

DESIGN DECISION: Every flow is bound to one Session.
The stores it uses are keyed by that session, so a guest flow can never
touch an account's data and vice versa. Every mutation is audited.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

import structlog

from pocketbook.audit import AuditLogger
from pocketbook.config import Settings, get_settings
from pocketbook.models.audit import AuditEventBuilder
from pocketbook.models.finance import (
    Advice,
    Budget,
    BudgetProgress,
    FinancialSummary,
    Investment,
    InvestmentType,
    Transaction,
    TransactionPage,
    TransactionQuery,
    TransactionType,
)
from pocketbook.queries import query_transactions, summarize
from pocketbook.services.accounts import AccountService
from pocketbook.services.budget import BudgetEvaluator
from pocketbook.services.importer import CSVImporter, CSVImportError, ImportResult
from pocketbook.services.importer.csv_importer import CSVSource
from pocketbook.services.reports import FinancialReport, PdfReportRenderer, build_report
from pocketbook.services.storage import (
    BudgetStore,
    InMemoryAuditStorage,
    InMemoryBackend,
    InvestmentStore,
    JsonFileBackend,
    JsonLinesAuditStorage,
    KeyValueBackend,
    TransactionStore,
)
from pocketbook.session import Session


logger = structlog.get_logger(__name__)


class LedgerFlow:
    """
    Orchestrates the transaction list of one session.
    """

    def __init__(
        self,
        session: Session,
        backend: KeyValueBackend,
        audit_logger: Optional[AuditLogger] = None,
        importer: Optional[CSVImporter] = None,
        settings: Optional[Settings] = None,
    ):
        self._session = session
        self._settings = settings or get_settings()
        self._store = TransactionStore(backend, session)
        self._audit_logger = audit_logger
        self._importer = importer or CSVImporter(
            max_bytes=self._settings.app.max_upload_size_bytes
        )

    @property
    def session(self) -> Session:
        return self._session

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def transactions(self) -> list[Transaction]:
        return self._store.load()

    def add_transaction(
        self,
        transaction_type: TransactionType,
        amount: Decimal,
        category: str,
        transaction_date: Optional[date] = None,
        description: str = "",
        is_recurring: bool = False,
    ) -> Transaction:
        """
        Validate and append one transaction.

        Raises:
            pydantic.ValidationError: If the amount is negative or the
                category does not fit the type (nothing is stored)
        """
        transaction = Transaction(
            type=transaction_type,
            amount=amount,
            category=category,
            date=transaction_date or date.today(),
            description=description,
            is_recurring=is_recurring,
        )
        self._store.add(transaction)
        self._audit(AuditEventBuilder.transaction_added(
            transaction_id=transaction.id,
            scope=self._session.scope,
            transaction_type=transaction.type.value,
            amount=str(transaction.amount),
        ))
        return transaction

    def delete_transaction(self, transaction_id: Union[UUID, str]) -> bool:
        deleted = self._store.delete(transaction_id)
        if deleted:
            self._audit(AuditEventBuilder.transaction_deleted(
                transaction_id=UUID(str(transaction_id)),
                scope=self._session.scope,
            ))
        return deleted

    def import_csv(
        self,
        source: CSVSource,
        filename: str = "upload.csv",
        today: Optional[date] = None,
    ) -> ImportResult:
        """
        Import a CSV file into the ledger.

        Raises:
            CSVImportError: On any parse failure or when no row is usable.
                The ledger is unchanged in that case.
        """
        try:
            result = self._importer.import_into(self._store, source, today=today)
        except CSVImportError as e:
            self._audit(AuditEventBuilder.import_failed(
                scope=self._session.scope,
                filename=filename,
                error_message=str(e),
            ))
            raise

        self._audit(AuditEventBuilder.transactions_imported(
            scope=self._session.scope,
            filename=filename,
            imported=result.imported_count,
            skipped=result.skipped_rows,
        ))
        return result

    def build_report(self, generated_on: Optional[date] = None) -> FinancialReport:
        return build_report(
            self.transactions(),
            generated_on=generated_on,
            settings=self._settings.report,
        )

    def export_pdf(
        self,
        path: Optional[Path] = None,
        generated_on: Optional[date] = None,
    ) -> bytes:
        """
        Render the report as PDF bytes, writing them to `path` if given.
        """
        report = self.build_report(generated_on)
        pdf = PdfReportRenderer(self._settings.report).render(report)
        if path is not None:
            Path(path).write_bytes(pdf)

        self._audit(AuditEventBuilder.report_exported(
            scope=self._session.scope,
            transaction_count=report.transaction_count,
            pages=len(report.pages),
        ))
        return pdf

    def summary(self) -> FinancialSummary:
        return summarize(self.transactions())

    def page(self, query: Optional[TransactionQuery] = None) -> TransactionPage:
        query = query or TransactionQuery(per_page=self._settings.app.items_per_page)
        return query_transactions(self.transactions(), query)


class HabitsFlow:
    """
    Budget settings, advice and spending trends for one session.
    """

    def __init__(
        self,
        session: Session,
        backend: KeyValueBackend,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
    ):
        self._session = session
        settings = settings or get_settings()
        budget_settings = settings.budget
        self._transactions = TransactionStore(backend, session)
        self._budgets = BudgetStore(
            backend,
            session,
            default_monthly_limit=budget_settings.default_monthly_limit,
        )
        self._evaluator = BudgetEvaluator(budget_settings)
        self._audit_logger = audit_logger

    def budget(self) -> Budget:
        return self._budgets.load()

    def update_budget(self, budget: Budget) -> Budget:
        """Replace the stored budget as a whole."""
        self._budgets.save(budget)
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.budget_updated(
                scope=self._session.scope,
                monthly_limit=str(budget.monthly_limit),
                limited_categories=sum(1 for limit in budget.category_limits.values() if limit > 0),
            ))
        return budget

    def advice(self, today: Optional[date] = None) -> list[Advice]:
        return self._evaluator.evaluate(self._transactions.load(), self.budget(), today)

    def progress(self, today: Optional[date] = None) -> list[BudgetProgress]:
        return self._evaluator.budget_progress(self._transactions.load(), self.budget(), today)

    def spending_trend(self) -> dict[str, Decimal]:
        return self._evaluator.spending_trend(self._transactions.load())


class InvestmentFlow:
    """
    Investment positions for one session.
    """

    def __init__(
        self,
        session: Session,
        backend: KeyValueBackend,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._session = session
        self._store = InvestmentStore(backend, session)
        self._audit_logger = audit_logger

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def investments(self) -> list[Investment]:
        return self._store.load()

    def add_investment(
        self,
        investment_type: InvestmentType,
        name: str,
        amount: Decimal,
        current_value: Decimal,
        purchase_date: Optional[date] = None,
    ) -> Investment:
        investment = Investment(
            type=investment_type,
            name=name,
            amount=amount,
            current_value=current_value,
            purchase_date=purchase_date or date.today(),
        )
        self._store.add(investment)
        self._audit(AuditEventBuilder.investment_added(
            investment_id=investment.id,
            scope=self._session.scope,
            name=investment.name,
            amount=str(investment.amount),
        ))
        return investment

    def update_value(self, investment_id: Union[UUID, str], current_value: Decimal) -> Investment:
        """
        Raises:
            NotFoundError: If the investment does not exist
        """
        previous = self._store.get(investment_id)
        updated = self._store.update_value(investment_id, current_value)
        self._audit(AuditEventBuilder.investment_value_updated(
            investment_id=updated.id,
            scope=self._session.scope,
            old_value=str(previous.current_value) if previous else "",
            new_value=str(updated.current_value),
        ))
        return updated

    def delete_investment(self, investment_id: Union[UUID, str]) -> bool:
        deleted = self._store.delete(investment_id)
        if deleted:
            self._audit(AuditEventBuilder.investment_deleted(
                investment_id=UUID(str(investment_id)),
                scope=self._session.scope,
            ))
        return deleted

    def totals(self) -> tuple[Decimal, Decimal]:
        """(total invested, total current value)"""
        investments = self.investments()
        invested = sum((i.amount for i in investments), Decimal("0"))
        current = sum((i.current_value for i in investments), Decimal("0"))
        return invested, current


@dataclass
class SessionFlows:
    """All flows bound to one session."""

    session: Session
    ledger: LedgerFlow
    habits: HabitsFlow
    investments: InvestmentFlow


@dataclass
class AppComponents:
    """Process-wide components shared by every session."""

    backend: KeyValueBackend
    audit_logger: AuditLogger
    accounts: AccountService
    settings: Settings

    def open_session(self, session: Session) -> SessionFlows:
        """Bind the flows to `session`."""
        return SessionFlows(
            session=session,
            ledger=LedgerFlow(session, self.backend, self.audit_logger, settings=self.settings),
            habits=HabitsFlow(session, self.backend, self.audit_logger, settings=self.settings),
            investments=InvestmentFlow(session, self.backend, self.audit_logger),
        )


def create_app_components(
    use_storage: bool = True,
    data_dir: Optional[Path] = None,
    settings: Optional[Settings] = None,
) -> AppComponents:
    """
    Create all application components.

    Args:
        use_storage: If False, keep everything in memory (nothing persists)
        data_dir: Override the configured data directory

    Returns:
        AppComponents with backend, audit logger and account service
    """
    settings = settings or get_settings()

    if use_storage:
        storage_settings = settings.storage
        directory = Path(data_dir) if data_dir else storage_settings.data_dir
        backend: KeyValueBackend = JsonFileBackend(directory)
        audit_storage = JsonLinesAuditStorage(directory / storage_settings.audit_log_name)
    else:
        backend = InMemoryBackend()
        audit_storage = InMemoryAuditStorage()

    audit_logger = AuditLogger(storage=audit_storage)
    logger.info("components_created", persistent=use_storage)

    return AppComponents(
        backend=backend,
        audit_logger=audit_logger,
        accounts=AccountService(backend, audit_logger),
        settings=settings,
    )
