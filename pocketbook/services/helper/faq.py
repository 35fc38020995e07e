"""
Finance Helper

Answers common questions from a fixed FAQ by word overlap.

A known question scores the fraction of its words that appear anywhere
in the user's (lower-cased) input. The best-scoring question wins if it
scores above the threshold; otherwise there is no answer.
"""

from typing import Optional

from pydantic import BaseModel


MATCH_THRESHOLD = 0.3

FALLBACK_ANSWER = (
    "I'm not sure about that. Try asking about budgeting, emergency funds, "
    "reducing spending, importing transactions or recurring transactions."
)

FAQ_DATABASE: dict[str, str] = {
    "how to start budgeting": (
        "Start by tracking all your expenses for a month. Then, categorize your spending "
        "and set realistic limits for each category. Use the Budget Settings in the My "
        "Habits section to set up your first budget."
    ),
    "what is an emergency fund": (
        "An emergency fund is money saved for unexpected expenses. Aim to save 3-6 months "
        "of living expenses. You can track this in the Investments section as a separate "
        "savings goal."
    ),
    "how to reduce spending": (
        "Review your transactions in My Finances to identify areas where you spend the "
        "most. Look for patterns in the Smart Advice section and consider areas where you "
        "can cut back."
    ),
    "how to import transactions": (
        "You can import transactions from your bank by downloading a CSV file and using "
        "the Import CSV feature. The file should include date, amount, description, and "
        "category columns."
    ),
    "what are recurring transactions": (
        "Recurring transactions are regular payments that happen on a schedule (like rent "
        "or subscriptions). Mark transactions as recurring when adding them to better "
        "track regular expenses."
    ),
}


class FaqMatch(BaseModel):
    question: str
    answer: str
    score: float


def find_best_match(
    user_input: str,
    faq: Optional[dict[str, str]] = None,
    threshold: float = MATCH_THRESHOLD,
) -> Optional[FaqMatch]:
    """
    Return the best-matching FAQ entry, or None below the threshold.

    Ties keep the entry listed first.
    """
    faq = FAQ_DATABASE if faq is None else faq
    text = user_input.lower()
    best: Optional[FaqMatch] = None

    for question, answer in faq.items():
        words = question.split()
        if not words:
            continue
        score = sum(1 for word in words if word in text) / len(words)
        if best is None or score > best.score:
            best = FaqMatch(question=question, answer=answer, score=score)

    if best is None or best.score <= threshold:
        return None
    return best


def answer(user_input: str) -> str:
    """The matched answer, or a fallback suggestion."""
    match = find_best_match(user_input)
    return match.answer if match else FALLBACK_ANSWER
