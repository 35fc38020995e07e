"""
Services Package

Contains storage, accounts, budget evaluation, CSV import,
report export and the finance helper.
"""

from pocketbook.services.accounts import (
    AccountError,
    AccountService,
    DuplicateAccountError,
    InvalidCredentialsError,
    InvalidPasswordError,
    PasswordMismatchError,
)
from pocketbook.services.budget import BudgetEvaluator
from pocketbook.services.importer import (
    CSVImporter,
    CSVImportError,
    ImportResult,
    NoValidTransactionsError,
)
from pocketbook.services.reports import (
    FinancialReport,
    PdfReportRenderer,
    build_report,
    export_pdf,
)

__all__ = [
    # Accounts
    "AccountError",
    "AccountService",
    "DuplicateAccountError",
    "InvalidCredentialsError",
    "InvalidPasswordError",
    "PasswordMismatchError",
    # Budget
    "BudgetEvaluator",
    # Import
    "CSVImporter",
    "CSVImportError",
    "ImportResult",
    "NoValidTransactionsError",
    # Reports
    "FinancialReport",
    "PdfReportRenderer",
    "build_report",
    "export_pdf",
]
