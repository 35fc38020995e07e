"""
Core Data Models for Pocketbook

These models define the schemas for everything the tracker stores or shows:
transactions, budgets, investments, advice and ledger queries.
They are designed to:
1. Keep amounts non-negative (the sign lives in the transaction type)
2. Tie every category to the transaction type it belongs to
3. Serialize to JSON and back without losing information

DESIGN DECISION: Categories are closed enums, one per transaction type.
An expense can never carry "Salary" and an income can never carry
"Housing" - the mismatch is rejected when the record is built.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


DESCRIPTION_MAX_LENGTH = 500


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class _LenientEnum(str, Enum):
    """String enum that also accepts its values in any letter case."""

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            folded = value.strip().lower()
            for member in cls:
                if member.value.lower() == folded:
                    return member
        return None


class TransactionType(_LenientEnum):
    """Direction of money flow."""
    INCOME = "income"
    EXPENSE = "expense"


class ExpenseCategory(_LenientEnum):
    """Categories an expense can be filed under."""
    FOOD_AND_DINING = "Food & Dining"
    TRANSPORTATION = "Transportation"
    HOUSING = "Housing"
    UTILITIES = "Utilities"
    HEALTHCARE = "Healthcare"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    EDUCATION = "Education"
    TRAVEL = "Travel"
    INSURANCE = "Insurance"
    DEBT_PAYMENTS = "Debt Payments"
    OTHER = "Other"


class IncomeCategory(_LenientEnum):
    """Categories an income can be filed under."""
    SALARY = "Salary"
    FREELANCE = "Freelance"
    INVESTMENTS = "Investments"
    RENTAL_INCOME = "Rental Income"
    BUSINESS = "Business"
    GIFTS = "Gifts"
    OTHER = "Other"


Category = Union[ExpenseCategory, IncomeCategory]

CATEGORIES_BY_TYPE: dict[TransactionType, type[_LenientEnum]] = {
    TransactionType.EXPENSE: ExpenseCategory,
    TransactionType.INCOME: IncomeCategory,
}


def categories_for(transaction_type: TransactionType) -> list[Category]:
    """Categories valid for a transaction type, in display order."""
    return list(CATEGORIES_BY_TYPE[TransactionType(transaction_type)])


def resolve_category(transaction_type: TransactionType, value: str) -> Category:
    """
    Map a category name onto the enum for the given transaction type.

    Matching ignores case and surrounding whitespace.

    Raises:
        ValueError: If the name is not a category of that type
    """
    enum_cls = CATEGORIES_BY_TYPE[TransactionType(transaction_type)]
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(
            f"'{value}' is not a valid {TransactionType(transaction_type).value} category"
        ) from None


class InvestmentType(_LenientEnum):
    """Supported investment kinds."""
    STOCKS = "stocks"
    CRYPTO = "crypto"
    BONDS = "bonds"
    REAL_ESTATE = "realestate"
    COMMODITIES = "commodities"
    P2P = "p2p"
    ETF = "etf"
    MUTUAL = "mutual"

    @property
    def label(self) -> str:
        return _INVESTMENT_LABELS[self]


_INVESTMENT_LABELS = {
    InvestmentType.STOCKS: "Stocks",
    InvestmentType.CRYPTO: "Cryptocurrency",
    InvestmentType.BONDS: "Bonds",
    InvestmentType.REAL_ESTATE: "Real Estate",
    InvestmentType.COMMODITIES: "Commodities",
    InvestmentType.P2P: "P2P Lending",
    InvestmentType.ETF: "ETFs",
    InvestmentType.MUTUAL: "Mutual Funds",
}


class AdviceType(str, Enum):
    """Kinds of budget advice."""
    WARNING = "warning"          # Over the category limit
    OPPORTUNITY = "opportunity"  # Well under the category limit
    INSIGHT = "insight"          # Unusual compared to earlier months


class DataKind(str, Enum):
    """Kinds of per-user records kept in storage."""
    TRANSACTIONS = "transactions"
    BUDGET = "budget"
    INVESTMENTS = "investments"


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense event.

    The amount is always non-negative; whether it adds to or subtracts
    from the balance is decided by `type`.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    type: TransactionType
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount, always non-negative"
    )
    category: Category
    date: dt.date
    description: str = Field(
        default="",
        max_length=DESCRIPTION_MAX_LENGTH,
    )
    is_recurring: bool = False

    @model_validator(mode='before')
    @classmethod
    def resolve_category_for_type(cls, data: Any) -> Any:
        """Turn the raw category into the enum matching the type."""
        if not isinstance(data, dict):
            return data
        raw_type = data.get("type")
        raw_category = data.get("category")
        if raw_type is None or raw_category is None:
            return data
        try:
            transaction_type = TransactionType(raw_type)
        except ValueError:
            # Let field validation report the bad type
            return data
        return {**data, "category": resolve_category(transaction_type, raw_category)}

    @model_validator(mode='after')
    def validate_category_matches_type(self) -> 'Transaction':
        if not isinstance(self.category, CATEGORIES_BY_TYPE[self.type]):
            raise ValueError(
                f"Category '{self.category.value}' does not belong to {self.type.value} transactions"
            )
        return self

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign implied by the type."""
        return self.amount if self.is_income else -self.amount


# =============================================================================
# BUDGET
# =============================================================================

def _zero_category_limits() -> dict[ExpenseCategory, Decimal]:
    return {category: Decimal("0") for category in ExpenseCategory}


class Budget(BaseModel):
    """
    User-configured spending limits.

    A limit of zero means "no limit set" for that category.
    The budget is always replaced as a whole when edited.
    """

    monthly_limit: Decimal = Field(
        default=Decimal("1000"),
        ge=0,
        description="Overall monthly spending limit"
    )
    category_limits: dict[ExpenseCategory, Annotated[Decimal, Field(ge=0)]] = Field(
        default_factory=_zero_category_limits,
        description="Per-category monthly limits"
    )

    def limit_for(self, category: ExpenseCategory) -> Decimal:
        return self.category_limits.get(category, Decimal("0"))

    def with_limit(self, category: ExpenseCategory, limit: Decimal) -> 'Budget':
        """Return a new budget with one category limit replaced."""
        limits = dict(self.category_limits)
        limits[ExpenseCategory(category)] = limit
        return Budget(monthly_limit=self.monthly_limit, category_limits=limits)


class Advice(BaseModel):
    """A generated hint comparing actual spend to the budget."""

    type: AdviceType
    category: ExpenseCategory
    message: str


class BudgetProgress(BaseModel):
    """
    Spend against a limit for one category.

    `category` is None for the overall monthly total.
    """

    category: Optional[ExpenseCategory] = None
    spent: Decimal
    limit: Decimal
    percentage: float = Field(
        ...,
        ge=0.0,
        description="Spent as a percentage of limit (0 when no limit)"
    )

    @property
    def is_over(self) -> bool:
        return self.limit > 0 and self.spent > self.limit


# =============================================================================
# INVESTMENTS
# =============================================================================

class Investment(BaseModel):
    """An investment position and what it is worth now."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    type: InvestmentType = InvestmentType.STOCKS
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount originally invested"
    )
    current_value: Decimal = Field(..., ge=0)
    purchase_date: dt.date

    @property
    def return_value(self) -> Decimal:
        return self.current_value - self.amount

    @property
    def return_percentage(self) -> Decimal:
        """Gain or loss as a percentage of the amount invested."""
        if self.amount == 0:
            return Decimal("0")
        return (self.return_value / self.amount * 100).quantize(Decimal("0.01"))


# =============================================================================
# LEDGER QUERY MODELS
# =============================================================================

class FinancialSummary(BaseModel):
    """Totals over a list of transactions."""

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expenses


class TransactionQuery(BaseModel):
    """
    Search, sort and paging options for the transaction list.
    """

    search: str = Field(
        default="",
        description="Case-insensitive match on description or category"
    )
    sort_key: str = Field(
        default="date",
        pattern="^(date|amount)$",
    )
    descending: bool = True
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=10, ge=1, le=100)


class TransactionPage(BaseModel):
    """One page of a transaction query."""

    items: list[Transaction] = Field(default_factory=list)
    page: int = Field(ge=1)
    total_pages: int = Field(ge=0)
    total_matches: int = Field(ge=0)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1
