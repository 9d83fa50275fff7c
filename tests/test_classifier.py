"""Unit tests for day classification."""
from datetime import datetime

from layout.classifier import CLASSIFICATION_RULES, ClassificationRule, classify
from layout.models import Classification, Event, StyleTag


def make_events(*summaries):
    start = datetime(2024, 3, 5, 8)
    end = datetime(2024, 3, 5, 16)
    return [Event(start=start, end=end, summary=summary) for summary in summaries]


class TestClassify:
    """Test cases for classify."""

    def test_no_events(self):
        """Test that a day without events has no classification."""
        assert classify([]) is None

    def test_regular_shift_outranks_personal_in_any_order(self):
        """Test that precedence does not depend on input order."""
        expected = Classification("Regular Shift", StyleTag.REGULAR_SHIFT)

        assert classify(make_events("Personal Day", "Regular Shift AM")) == expected
        assert classify(make_events("Regular Shift AM", "Personal Day")) == expected

    def test_each_keyword(self):
        """Test every rule on its own."""
        assert classify(make_events("On Vacation")) == Classification(
            "On Vacation", StyleTag.ON_VACATION
        )
        assert classify(make_events("Educational: BLS renewal")) == Classification(
            "Education", StyleTag.EDUCATIONAL_EVENT
        )
        assert classify(make_events("personal appointment")) == Classification(
            "Personal", StyleTag.PERSONAL_EVENT
        )
        assert classify(make_events("PAYDAY")) == Classification(
            "Payday", StyleTag.PAYDAY
        )

    def test_matching_is_case_insensitive(self):
        """Test that keyword matching ignores case."""
        result = classify(make_events("REGULAR SHIFT - Night"))

        assert result.label == "Regular Shift"
        assert result.style_tag is StyleTag.REGULAR_SHIFT

    def test_vacation_outranks_payday(self):
        """Test precedence between lower priority rules."""
        result = classify(make_events("Payday", "On vacation"))

        assert result.style_tag is StyleTag.ON_VACATION

    def test_keywords_do_not_match_across_summaries(self):
        """Test that summaries are kept apart when concatenated."""
        result = classify(make_events("Regular", "Shift swap"))

        assert result == Classification("Regular")

    def test_unmatched_uses_first_summary(self):
        """Test the fallback label for unknown events."""
        result = classify(make_events("Staff meeting", "Lunch"))

        assert result.label == "Staff meeting"
        assert result.style_tag is None

    def test_unmatched_empty_summary_uses_placeholder(self):
        """Test the placeholder label when the first summary is empty."""
        result = classify(make_events("", "Lunch"))

        assert result == Classification("Event")

    def test_custom_rule_table(self):
        """Test that an alternative rule table is honoured in order."""
        rules = (ClassificationRule("payday", "Paid", StyleTag.PAYDAY),) + CLASSIFICATION_RULES

        result = classify(make_events("Regular Shift", "Payday"), rules=rules)

        assert result == Classification("Paid", StyleTag.PAYDAY)

    def test_rule_table_order(self):
        """Test the fixed business priority of the default rules."""
        assert [rule.keyword for rule in CLASSIFICATION_RULES] == [
            "regular shift",
            "on vacation",
            "educational",
            "personal",
            "payday",
        ]
