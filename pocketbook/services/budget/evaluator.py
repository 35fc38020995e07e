"""
Budget Evaluator

Compares recent spending with the user's budget and turns the result
into short advice messages:

- WARNING      spend in a category is over its limit
- OPPORTUNITY  spend is well under the limit (below `underspend_ratio`)
- INSIGHT      spend differs from the category's usual level by more
               than `insight_deviation`

"Recent" is the trailing window of `window_days` days. The usual level
(baseline) is the average spend per window over up to `baseline_windows`
windows immediately before the current one, counting only windows the
user's history actually covers. Without earlier history there is no
baseline and no insight.

Every pass is a single fold over the transaction list.
"""

import math
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from pocketbook.config import BudgetSettings, get_settings
from pocketbook.models.finance import (
    Advice,
    AdviceType,
    Budget,
    BudgetProgress,
    ExpenseCategory,
    Transaction,
    TransactionType,
)


ZERO = Decimal("0")


def _percentage(spent: Decimal, limit: Decimal) -> float:
    if limit <= 0:
        return 0.0
    return float(spent / limit * 100)


class BudgetEvaluator:
    """
    Computes category spending, budget progress, trends and advice.
    """

    def __init__(self, settings: Optional[BudgetSettings] = None):
        self._settings = settings or get_settings().budget

    @property
    def _window(self) -> timedelta:
        return timedelta(days=self._settings.window_days)

    def window_start(self, today: Optional[date] = None) -> date:
        """First day counted as "recent"."""
        return (today or date.today()) - self._window

    def category_spending(
        self,
        transactions: Iterable[Transaction],
        today: Optional[date] = None,
    ) -> dict[ExpenseCategory, Decimal]:
        """Expense totals per category within the trailing window."""
        start = self.window_start(today)
        spending: dict[ExpenseCategory, Decimal] = defaultdict(lambda: ZERO)
        for transaction in transactions:
            if transaction.type == TransactionType.EXPENSE and transaction.date >= start:
                spending[transaction.category] += transaction.amount
        return dict(spending)

    def baseline_spending(
        self,
        transactions: Iterable[Transaction],
        today: Optional[date] = None,
    ) -> dict[ExpenseCategory, Decimal]:
        """
        Average spend per window for each category before the current window.

        Returns an empty dict when the history does not reach back past
        the current window.
        """
        transactions = list(transactions)
        current_start = self.window_start(today)
        earlier = [t.date for t in transactions if t.date < current_start]
        if not earlier:
            return {}

        history_days = (current_start - min(earlier)).days
        windows = min(
            self._settings.baseline_windows,
            math.ceil(history_days / self._settings.window_days),
        )
        baseline_start = current_start - self._window * windows

        totals: dict[ExpenseCategory, Decimal] = defaultdict(lambda: ZERO)
        for transaction in transactions:
            if (
                transaction.type == TransactionType.EXPENSE
                and baseline_start <= transaction.date < current_start
            ):
                totals[transaction.category] += transaction.amount

        return {category: total / windows for category, total in totals.items()}

    def evaluate(
        self,
        transactions: Iterable[Transaction],
        budget: Budget,
        today: Optional[date] = None,
    ) -> list[Advice]:
        """
        Generate advice for every category with a limit above zero.

        Categories are visited in their display order. No transactions
        means no advice.
        """
        transactions = list(transactions)
        if not transactions:
            return []

        spending = self.category_spending(transactions, today)
        baselines = self.baseline_spending(transactions, today)
        underspend_ratio = Decimal(str(self._settings.underspend_ratio))
        deviation_limit = Decimal(str(self._settings.insight_deviation))

        advice: list[Advice] = []
        for category in ExpenseCategory:
            limit = budget.limit_for(category)
            if limit <= 0:
                continue

            spent = spending.get(category, ZERO)
            name = category.value.lower()

            if spent > limit:
                over = (spent / limit - 1) * 100
                advice.append(Advice(
                    type=AdviceType.WARNING,
                    category=category,
                    message=(
                        f"Your {name} spending ({spent:.2f}) is {over:.1f}% over budget. "
                        "Consider reducing expenses in this category."
                    ),
                ))
            elif spent < limit * underspend_ratio:
                advice.append(Advice(
                    type=AdviceType.OPPORTUNITY,
                    category=category,
                    message=(
                        f"You're significantly under budget in {name}. This might be a good "
                        "opportunity to invest in your wellbeing or save the difference."
                    ),
                ))

            baseline = baselines.get(category, ZERO)
            if baseline > 0 and abs(spent - baseline) / baseline > deviation_limit:
                if spent > baseline:
                    message = (
                        f"Your {name} spending is unusually high this month "
                        f"({(spent / baseline - 1) * 100:.1f}% above average)"
                    )
                else:
                    message = (
                        f"Your {name} spending is lower than usual "
                        f"({(1 - spent / baseline) * 100:.1f}% below average)"
                    )
                advice.append(Advice(
                    type=AdviceType.INSIGHT,
                    category=category,
                    message=message,
                ))

        return advice

    def budget_progress(
        self,
        transactions: Iterable[Transaction],
        budget: Budget,
        today: Optional[date] = None,
    ) -> list[BudgetProgress]:
        """
        Spend vs limit for the whole month and each expense category.

        The first entry (category None) is the overall monthly total.
        """
        spending = self.category_spending(transactions, today)
        total_spent = sum(spending.values(), ZERO)

        progress = [BudgetProgress(
            category=None,
            spent=total_spent,
            limit=budget.monthly_limit,
            percentage=_percentage(total_spent, budget.monthly_limit),
        )]
        for category in ExpenseCategory:
            spent = spending.get(category, ZERO)
            limit = budget.limit_for(category)
            progress.append(BudgetProgress(
                category=category,
                spent=spent,
                limit=limit,
                percentage=_percentage(spent, limit),
            ))
        return progress

    @staticmethod
    def spending_trend(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
        """Expense totals per calendar month ("YYYY-MM"), oldest first."""
        monthly: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for transaction in transactions:
            if transaction.type == TransactionType.EXPENSE:
                monthly[transaction.date.strftime("%Y-%m")] += transaction.amount
        return dict(sorted(monthly.items()))
