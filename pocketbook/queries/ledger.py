"""
Ledger Queries

Read-only views over a transaction list: totals, and the searched,
sorted and paginated list shown in the finances view.

GUARANTEES:
- Never modifies the list it is given
- balance is always total income minus total expenses
"""

import math
from decimal import Decimal
from typing import Iterable

from pocketbook.models.finance import (
    FinancialSummary,
    Transaction,
    TransactionPage,
    TransactionQuery,
    TransactionType,
)


def summarize(transactions: Iterable[Transaction]) -> FinancialSummary:
    """Total income and total expenses (balance is derived)."""
    income = Decimal("0")
    expenses = Decimal("0")
    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            income += transaction.amount
        else:
            expenses += transaction.amount
    return FinancialSummary(total_income=income, total_expenses=expenses)


def _matches(transaction: Transaction, term: str) -> bool:
    return (
        term in transaction.description.lower()
        or term in transaction.category.value.lower()
    )


def query_transactions(
    transactions: Iterable[Transaction],
    query: TransactionQuery,
) -> TransactionPage:
    """
    Sort, filter and paginate transactions.

    The requested page is clamped to the available range, so asking for
    page 5 of a 2-page result returns page 2.
    """
    if query.sort_key == "amount":
        ordered = sorted(transactions, key=lambda t: t.amount, reverse=query.descending)
    else:
        ordered = sorted(transactions, key=lambda t: t.date, reverse=query.descending)

    term = query.search.strip().lower()
    if term:
        ordered = [t for t in ordered if _matches(t, term)]

    total_pages = math.ceil(len(ordered) / query.per_page)
    page = min(query.page, max(total_pages, 1))
    start = (page - 1) * query.per_page

    return TransactionPage(
        items=ordered[start:start + query.per_page],
        page=page,
        total_pages=total_pages,
        total_matches=len(ordered),
    )
