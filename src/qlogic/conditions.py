"""
Condition Evaluator

Maps (ConditionalRule, response store) to a boolean.

Evaluation is total: every rule yields True or False for any answer
shape. Type mismatches resolve to False instead of raising.

The emptiness definition and the number/date coercions defined here
are shared by the progress tracker and the validation runner so that
"answered", "required" and "isEmpty" never disagree.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time, timezone
from typing import Any, Mapping

from qlogic.rules import ConditionalRule, Operator

logger = logging.getLogger(__name__)

_COLLECTIONS = (list, tuple, set, frozenset)


def is_empty(value: Any) -> bool:
    """
    True for a missing answer, None, "", or an empty collection.

    A response store entry that was cleared holds an empty value rather
    than being removed, so both cases must read as empty.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_number(value: Any) -> float | None:
    """Coerce a number or numeric string to float; None when not numeric."""
    if is_number(value):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_datetime(value: Any) -> datetime | None:
    """
    Coerce a date, datetime or ISO-8601 string to a naive datetime.

    Aware datetimes are converted to UTC first so any two results
    compare without raising.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _equals(answer: Any, expected: Any) -> bool:
    if isinstance(answer, _COLLECTIONS):
        # Multi-select answers compare as sets
        expected_items = expected if isinstance(expected, _COLLECTIONS) else [expected]
        try:
            return set(answer) == set(expected_items)
        except TypeError:
            return list(answer) == list(expected_items)
    if isinstance(expected, _COLLECTIONS):
        return False
    if is_number(answer) or is_number(expected):
        left, right = to_number(answer), to_number(expected)
        return left is not None and right is not None and left == right
    return answer == expected


def _contains(answer: Any, expected: Any) -> bool:
    if isinstance(answer, str):
        if isinstance(expected, str):
            return expected in answer
        if is_number(expected):
            return str(expected) in answer
        return False
    if isinstance(answer, _COLLECTIONS):
        try:
            return expected in answer
        except TypeError:
            return False
    return False


def _compare(answer: Any, expected: Any, greater: bool) -> bool:
    left, right = to_number(answer), to_number(expected)
    if left is None or right is None:
        left, right = to_datetime(answer), to_datetime(expected)
        if left is None or right is None:
            return False
    return left > right if greater else left < right


def evaluate(rule: ConditionalRule, responses: Mapping[str, Any]) -> bool:
    """
    Evaluate a rule's condition against the response store.

    Args:
        rule: ConditionalRule to evaluate
        responses: Flat mapping of field name to answer

    Returns:
        Whether the condition holds. Never raises for data-shape issues.
    """
    answer = responses.get(rule.field)
    operator = rule.operator
    try:
        if operator is Operator.EQUALS:
            return _equals(answer, rule.value)
        if operator is Operator.NOT_EQUALS:
            return not _equals(answer, rule.value)
        if operator is Operator.CONTAINS:
            return _contains(answer, rule.value)
        if operator is Operator.GREATER_THAN:
            return _compare(answer, rule.value, greater=True)
        if operator is Operator.LESS_THAN:
            return _compare(answer, rule.value, greater=False)
        if operator is Operator.IS_EMPTY:
            return is_empty(answer)
        if operator is Operator.IS_NOT_EMPTY:
            return not is_empty(answer)
    except (TypeError, ValueError) as e:
        logger.debug("Condition on %r resolved to False: %s", rule.field, e)
        return False

    logger.debug("Unknown operator %r on field %r", operator, rule.field)
    return False
