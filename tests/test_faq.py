"""
Tests for the finance helper
"""

from pocketbook.services.helper import (
    FALLBACK_ANSWER,
    FAQ_DATABASE,
    answer,
    find_best_match,
)


class TestFindBestMatch:
    """Tests for FAQ matching."""

    def test_exact_question(self):
        """Test a known question matches itself fully."""
        match = find_best_match("What is an emergency fund?")
        assert match.question == "what is an emergency fund"
        assert match.score == 1.0

    def test_partial_question(self):
        """Test a loosely worded question still finds its answer."""
        match = find_best_match("tips to reduce my spending")
        assert match.question == "how to reduce spending"

    def test_below_threshold(self):
        """Test unrelated input has no match."""
        assert find_best_match("xyz") is None

    def test_ties_keep_first_entry(self):
        """Test equal scores keep the entry listed first."""
        faq = {"alpha beta": "first", "beta alpha": "second"}
        match = find_best_match("alpha beta", faq=faq)
        assert match.answer == "first"

    def test_custom_threshold(self):
        """Test the threshold is exclusive."""
        faq = {"one two three four five six seven eight nine ten": "answer"}
        assert find_best_match("one two three", faq=faq, threshold=0.3) is None
        assert find_best_match("one two three four", faq=faq, threshold=0.3).score == 0.4


class TestAnswer:
    """Tests for answer."""

    def test_known_question(self):
        """Test a matched question returns its answer."""
        assert answer("how do I import transactions") == FAQ_DATABASE["how to import transactions"]

    def test_fallback(self):
        """Test unknown questions get the fallback suggestion."""
        assert answer("xyz") == FALLBACK_ANSWER
