"""Budget evaluation package."""

from pocketbook.services.budget.evaluator import BudgetEvaluator

__all__ = ["BudgetEvaluator"]
