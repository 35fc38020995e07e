"""Ledger query package."""

from pocketbook.queries.ledger import query_transactions, summarize

__all__ = ["query_transactions", "summarize"]
