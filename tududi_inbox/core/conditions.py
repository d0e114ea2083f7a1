# tududi_inbox/core/conditions.py

"""
Condition Library
Stateless predicates over (parameter, EvaluationContext) -> bool.

Every predicate:
  - is side-effect free (apart from recording warnings on the context)
  - returns False for malformed parameters instead of raising
  - treats a boolean parameter as "assert" (True) or "assert NOT" (False)

Also home to extract_due_date(), the heuristic date extractor shared by
the action resolvers. It is NOT a natural-language date parser: it knows
"today", "tomorrow", "by <weekday>" and "next <weekday>", nothing more.
"""

import logging
import re
from datetime import date, timedelta
from enum import Enum
from numbers import Number
from typing import Callable, Mapping, Optional

from tududi_inbox.core import text_analysis
from tududi_inbox.core.errors import ConfigurationError
from tududi_inbox.core.models import EvaluationContext


logger = logging.getLogger(__name__)


class ConditionKind(str, Enum):
    """Every condition a rule may reference, by its config name."""

    CONTAINS_KEYWORDS = "contains_keywords"
    CONTAINS_PRIORITY_KEYWORDS = "contains_priority_keywords"
    STARTS_WITH_VERB = "starts_with_verb"
    CONTAINS_CODE = "contains_code"
    CONTAINS_URL = "contains_url"
    HAS_PROJECT = "has_project"
    HAS_TAG = "has_tag"
    PROJECT_NAME_MATCHES = "project_name_matches"
    CONTAINS_TIME_REFERENCE = "contains_time_reference"
    IS_QUESTION = "is_question"
    IS_LONG_TEXT = "is_long_text"
    TEXT_LENGTH = "text_length"
    TAG_COUNT = "tag_count"

    @classmethod
    def parse(cls, name: str) -> "ConditionKind":
        try:
            return cls(name)
        except ValueError:
            known = ", ".join(k.value for k in cls)
            raise ConfigurationError(
                f"Unknown condition '{name}'. Must be one of: {known}"
            ) from None


Predicate = Callable[[object, EvaluationContext], bool]


def _flag(value, actual: bool) -> bool:
    """Apply a boolean parameter: True asserts, False negates."""
    return actual if bool(value) else not actual


# ──────────────────────────────────────────────
# PREDICATES
# ──────────────────────────────────────────────


def contains_keywords(value, context: EvaluationContext) -> bool:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return False
    content = context.content.lower()
    return any(
        isinstance(keyword, str) and keyword and keyword.lower() in content
        for keyword in value
    )


def contains_priority_keywords(value, context: EvaluationContext) -> bool:
    """Same match as contains_keywords; a list is required."""
    if not isinstance(value, (list, tuple)):
        return False
    return contains_keywords(value, context)


def starts_with_verb(value, context: EvaluationContext) -> bool:
    return _flag(value, text_analysis.starts_with_verb(context.cleaned_content))


def contains_code(value, context: EvaluationContext) -> bool:
    return _flag(value, text_analysis.contains_code(context.content))


def contains_url(value, context: EvaluationContext) -> bool:
    return _flag(value, text_analysis.contains_url(context.content))


def has_project(value, context: EvaluationContext) -> bool:
    """
    A +project reference in the content always counts. Otherwise the
    caller's has_associated_project flag decides; when that is missing
    the condition fails closed.
    """
    if context.parsed_projects:
        return _flag(value, True)

    if context.has_associated_project is None:
        warning = context.warn(
            ConditionKind.HAS_PROJECT.value,
            "auxiliary context has no has_associated_project flag",
        )
        logger.warning(f"Condition not satisfied: {warning}")
        return False

    return _flag(value, context.has_associated_project)


def has_tag(value, context: EvaluationContext) -> bool:
    if not isinstance(value, str):
        return False
    return any(tag.lower() == value.lower() for tag in context.parsed_tags)


def project_name_matches(value, context: EvaluationContext) -> bool:
    if not isinstance(value, str):
        return False
    return any(p.lower() == value.lower() for p in context.parsed_projects)


def contains_time_reference(value, context: EvaluationContext) -> bool:
    return _flag(value, text_analysis.contains_time_reference(context.content))


def is_question(value, context: EvaluationContext) -> bool:
    return _flag(value, text_analysis.is_question(context.content))


def is_long_text(value, context: EvaluationContext) -> bool:
    """`true` uses the configured threshold; an integer sets its own."""
    if isinstance(value, int) and not isinstance(value, bool):
        return text_analysis.is_long_text(context.content, value)
    return _flag(
        value, text_analysis.is_long_text(context.content, context.long_text_threshold)
    )


_COMPARISONS = {
    "gt": lambda a, b: a > b,
    "gte": lambda a, b: a >= b,
    "lt": lambda a, b: a < b,
    "lte": lambda a, b: a <= b,
    "eq": lambda a, b: a == b,
}


def compare_numbers(actual: int, spec) -> bool:
    """
    spec is either a number (equality) or a mapping of operator -> number,
    e.g. {"gte": 3, "lt": 10}. Every comparison must hold.
    """
    if isinstance(spec, Number) and not isinstance(spec, bool):
        return actual == spec
    if not isinstance(spec, Mapping) or not spec:
        return False

    for operator, expected in spec.items():
        compare = _COMPARISONS.get(operator)
        if compare is None or isinstance(expected, bool) or not isinstance(expected, Number):
            return False
        if not compare(actual, expected):
            return False
    return True


def text_length(value, context: EvaluationContext) -> bool:
    return compare_numbers(text_analysis.word_count(context.cleaned_content), value)


def tag_count(value, context: EvaluationContext) -> bool:
    return compare_numbers(len(context.parsed_tags), value)


CONDITION_LIBRARY = {
    ConditionKind.CONTAINS_KEYWORDS: contains_keywords,
    ConditionKind.CONTAINS_PRIORITY_KEYWORDS: contains_priority_keywords,
    ConditionKind.STARTS_WITH_VERB: starts_with_verb,
    ConditionKind.CONTAINS_CODE: contains_code,
    ConditionKind.CONTAINS_URL: contains_url,
    ConditionKind.HAS_PROJECT: has_project,
    ConditionKind.HAS_TAG: has_tag,
    ConditionKind.PROJECT_NAME_MATCHES: project_name_matches,
    ConditionKind.CONTAINS_TIME_REFERENCE: contains_time_reference,
    ConditionKind.IS_QUESTION: is_question,
    ConditionKind.IS_LONG_TEXT: is_long_text,
    ConditionKind.TEXT_LENGTH: text_length,
    ConditionKind.TAG_COUNT: tag_count,
}


def check_library():
    """Every ConditionKind must have a predicate. Called at registry build."""
    missing = [kind.value for kind in ConditionKind if kind not in CONDITION_LIBRARY]
    if missing:
        raise ConfigurationError(f"No predicate registered for: {missing}")


def get_predicate(name: str) -> Predicate:
    return CONDITION_LIBRARY[ConditionKind.parse(name)]


# ──────────────────────────────────────────────
# DUE DATES
# ──────────────────────────────────────────────


WEEKDAYS = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

_TODAY_PATTERN = re.compile(r"\btoday\b", re.IGNORECASE)
_TOMORROW_PATTERN = re.compile(r"\btomorrow\b", re.IGNORECASE)
_WEEKDAY_PATTERN = re.compile(
    r"\b(by|next)\s+(" + "|".join(WEEKDAYS) + r")\b", re.IGNORECASE
)


def next_weekday(day_name: str, today: date) -> date:
    """
    Next occurrence of day_name strictly after today.
    The same weekday as today rolls forward a full week.
    """
    target = WEEKDAYS.index(day_name.lower())
    days_ahead = (target - today.weekday()) % 7
    if days_ahead == 0:
        days_ahead = 7
    return today + timedelta(days=days_ahead)


def resolve_relative_due_date(value, today: date) -> Optional[str]:
    """'today' / 'tomorrow' / 'next_week' or an int offset -> ISO date."""
    if isinstance(value, int) and not isinstance(value, bool):
        return (today + timedelta(days=value)).isoformat()
    offsets = {"today": 0, "tomorrow": 1, "next_week": 7}
    if value not in offsets:
        return None
    return (today + timedelta(days=offsets[value])).isoformat()


def extract_due_date(context: EvaluationContext) -> Optional[str]:
    """
    Pull a due date out of the content, relative to context.today.

    Checked in order: "today", "tomorrow", "by <weekday>" / "next <weekday>".
    Returns an ISO date string, or None when nothing matches.
    """
    content = context.content or ""

    if _TODAY_PATTERN.search(content):
        return context.today.isoformat()

    if _TOMORROW_PATTERN.search(content):
        return (context.today + timedelta(days=1)).isoformat()

    match = _WEEKDAY_PATTERN.search(content)
    if match:
        return next_weekday(match.group(2), context.today).isoformat()

    return None
