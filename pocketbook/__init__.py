"""
Pocketbook - Source Package

A personal finance tracker: log income and expenses, set category
budgets, follow investments and get plain-language spending advice.

DESIGN PRINCIPLES:
1. Everything is local - one serialized record per user and data kind
2. The current user is passed explicitly, never read from ambient state
3. Categories are closed sets, checked against the transaction type
4. Every mutation is auditable
5. Failures leave stored state untouched
"""

__version__ = "1.0.0"
__author__ = "Pocketbook Team"
