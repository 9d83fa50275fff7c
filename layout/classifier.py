"""Keyword classification of a day's events."""
from dataclasses import dataclass
from typing import Optional, Sequence

from layout.models import Classification, Event, StyleTag

SUMMARY_SEPARATOR = "||"
FALLBACK_LABEL = "Event"


@dataclass(frozen=True)
class ClassificationRule:
    """Keyword to look for and the label/style it maps to."""
    keyword: str
    label: str
    style_tag: StyleTag


# Evaluated top to bottom, first match wins.
CLASSIFICATION_RULES = (
    ClassificationRule("regular shift", "Regular Shift", StyleTag.REGULAR_SHIFT),
    ClassificationRule("on vacation", "On Vacation", StyleTag.ON_VACATION),
    ClassificationRule("educational", "Education", StyleTag.EDUCATIONAL_EVENT),
    ClassificationRule("personal", "Personal", StyleTag.PERSONAL_EVENT),
    ClassificationRule("payday", "Payday", StyleTag.PAYDAY),
)


def classify(
    events: Sequence[Event],
    rules: Sequence[ClassificationRule] = CLASSIFICATION_RULES
) -> Optional[Classification]:
    """
    Collapse the events of one day into a single label.

    Args:
        events: Events already known to overlap the day
        rules: Ordered keyword rules, highest priority first

    Returns:
        Classification for the day, or None when there are no events
    """
    if not events:
        return None

    summaries = SUMMARY_SEPARATOR.join(
        (event.summary or "").lower() for event in events
    )

    for rule in rules:
        if rule.keyword in summaries:
            return Classification(label=rule.label, style_tag=rule.style_tag)

    return Classification(label=events[0].summary or FALLBACK_LABEL)
