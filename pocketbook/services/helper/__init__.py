"""Finance helper (FAQ) package."""

from pocketbook.services.helper.faq import (
    FALLBACK_ANSWER,
    FAQ_DATABASE,
    FaqMatch,
    answer,
    find_best_match,
)

__all__ = [
    "FALLBACK_ANSWER",
    "FAQ_DATABASE",
    "FaqMatch",
    "answer",
    "find_best_match",
]
