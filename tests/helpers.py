"""Builders shared by the test modules."""

from datetime import date
from decimal import Decimal

from pocketbook.models.finance import Transaction


TODAY = date(2024, 6, 30)


def make_transaction(
    amount="10",
    category="Other",
    type="expense",
    on=TODAY,
    description="",
) -> Transaction:
    return Transaction(
        type=type,
        amount=Decimal(amount),
        category=category,
        date=on,
        description=description,
    )
