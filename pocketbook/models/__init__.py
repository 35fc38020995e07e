"""
Data Models Package

This package contains all Pydantic models used in Pocketbook.
All data flowing through the system must conform to these schemas.
"""

from pocketbook.models.finance import (
    CATEGORIES_BY_TYPE,
    Advice,
    AdviceType,
    Budget,
    BudgetProgress,
    Category,
    DataKind,
    ExpenseCategory,
    FinancialSummary,
    IncomeCategory,
    Investment,
    InvestmentType,
    Transaction,
    TransactionPage,
    TransactionQuery,
    TransactionType,
    categories_for,
    resolve_category,
)
from pocketbook.models.account import UserAccount
from pocketbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "CATEGORIES_BY_TYPE",
    "Advice",
    "AdviceType",
    "Budget",
    "BudgetProgress",
    "Category",
    "DataKind",
    "ExpenseCategory",
    "FinancialSummary",
    "IncomeCategory",
    "Investment",
    "InvestmentType",
    "Transaction",
    "TransactionPage",
    "TransactionQuery",
    "TransactionType",
    "categories_for",
    "resolve_category",
    # Account models
    "UserAccount",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
