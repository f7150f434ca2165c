"""
Validation Runner

Applies each active question's validation rules to its current answer.

Rules on one question are independent: every failing rule is reported,
so a single question may contribute several errors. Hidden or disabled
questions are never validated, even when required.

min/max are dispatched on the question's DECLARED type, never on the
runtime shape of the answer:
    number   -> numeric bound (empty answers are left to `required`)
    date     -> date bound (empty answers are left to `required`)
    checkbox -> number of selected options
    others   -> string length (a missing answer has length 0)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from qlogic.conditions import is_empty, is_number, to_datetime, to_number
from qlogic.model import Question, QuestionType, Structure
from qlogic.rules import ValidationKind, ValidationRule
from qlogic.visibility import VisibilityMap

logger = logging.getLogger(__name__)

Validator = Callable[[Any], bool]

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class FieldError:
    field_name: str
    message: str


def _stringify(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if is_number(value):
        return str(value)
    return None


_SKIP = object()


def _measure(question: Question, value: Any, bound: Any) -> tuple:
    """
    Return (measured, limit) for a min/max rule.

    Either side is None when it cannot be measured; measured is _SKIP
    when the rule does not apply to this answer.
    """
    qtype = question.type

    if qtype is QuestionType.NUMBER:
        if is_empty(value):
            return _SKIP, None
        return to_number(value), to_number(bound)

    if qtype is QuestionType.DATE:
        if is_empty(value):
            return _SKIP, None
        return to_datetime(value), to_datetime(bound)

    if qtype is QuestionType.CHECKBOX:
        # A cleared selection may be stored as "" rather than []
        if is_empty(value):
            return 0, to_number(bound)
        if isinstance(value, (list, tuple, set, frozenset)):
            return len(value), to_number(bound)
        return None, to_number(bound)

    if value is None:
        return 0, to_number(bound)
    text = _stringify(value)
    return (len(text) if text is not None else None), to_number(bound)


def _check_bound(rule: ValidationRule, question: Question, value: Any) -> Optional[str]:
    is_min = rule.kind is ValidationKind.MIN
    default = f"{question.label} must be {'at least' if is_min else 'at most'} {rule.value}"

    measured, limit = _measure(question, value, rule.value)
    if measured is _SKIP:
        return None
    if measured is None or limit is None:
        return rule.message or default
    try:
        ok = measured >= limit if is_min else measured <= limit
    except TypeError:
        ok = False
    return None if ok else (rule.message or default)


def _check_pattern(rule: ValidationRule, question: Question, value: Any) -> Optional[str]:
    default = f"{question.label} format is invalid"
    if is_empty(value):
        return None
    text = _stringify(value)
    if text is None or rule.value is None:
        return rule.message or default
    try:
        matched = re.search(str(rule.value), text) is not None
    except re.error:
        matched = False
    return None if matched else (rule.message or default)


def _check_custom(
    rule: ValidationRule,
    question: Question,
    value: Any,
    validators: Mapping[str, Validator],
) -> Optional[str]:
    generic = f"{question.label} could not be validated"
    predicate = validators.get(rule.value) if rule.value is not None else None
    if predicate is None:
        logger.warning("No custom validator named %r for %s", rule.value, question.field_name)
        return generic
    try:
        passed = bool(predicate(value))
    except Exception:
        logger.warning(
            "Custom validator %r raised for %s", rule.value, question.field_name, exc_info=True
        )
        return generic
    return None if passed else (rule.message or f"{question.label} is invalid")


def check_rule(
    rule: ValidationRule,
    question: Question,
    value: Any,
    validators: Optional[Mapping[str, Validator]] = None,
) -> Optional[str]:
    """
    Apply one rule to one answer.

    Returns:
        The failure message, or None when the rule passes.
    """
    kind = rule.kind

    if kind is ValidationKind.REQUIRED:
        if is_empty(value):
            return rule.message or f"{question.label} is required"
        return None

    if kind in (ValidationKind.MIN, ValidationKind.MAX):
        return _check_bound(rule, question, value)

    if kind is ValidationKind.PATTERN:
        return _check_pattern(rule, question, value)

    if kind is ValidationKind.EMAIL:
        if is_empty(value):
            return None
        text = _stringify(value)
        if text is None or not EMAIL_RE.match(text):
            return rule.message or f"{question.label} must be a valid email address"
        return None

    if kind is ValidationKind.DATE:
        if is_empty(value):
            return None
        if to_datetime(value) is None:
            return rule.message or f"{question.label} must be a valid date"
        return None

    if kind is ValidationKind.CUSTOM:
        return _check_custom(rule, question, value, validators or {})

    return None


def validate_question(
    question: Question,
    value: Any,
    validators: Optional[Mapping[str, Validator]] = None,
) -> List[str]:
    """
    Validate a single answer against a question's rules.

    A required question without an explicit `required` rule still gets
    a required check, reported first.

    Returns:
        Failure messages in rule declaration order (empty when valid)
    """
    messages: List[str] = []

    has_required_rule = any(r.kind is ValidationKind.REQUIRED for r in question.validation)
    if question.required and not has_required_rule and is_empty(value):
        messages.append(f"{question.label} is required")

    for rule in question.validation:
        message = check_rule(rule, question, value, validators)
        if message is not None:
            messages.append(message)

    return messages


def validate(
    structure: Structure,
    responses: Mapping[str, Any],
    visibility: VisibilityMap,
    validators: Optional[Mapping[str, Validator]] = None,
) -> List[FieldError]:
    """
    Validate every visible and enabled question.

    Args:
        structure: Structure being answered
        responses: Response store snapshot
        visibility: VisibilityMap resolved for the same snapshot
        validators: Named predicates for `custom` rules

    Returns:
        FieldErrors in section, question, then rule order
    """
    errors: List[FieldError] = []

    for _, question in structure.iter_questions():
        if not visibility.is_active(question.field_name):
            continue
        value = responses.get(question.field_name)
        for message in validate_question(question, value, validators):
            errors.append(FieldError(field_name=question.field_name, message=message))

    return errors


def errors_by_field(errors: List[FieldError]) -> Dict[str, List[str]]:
    """Group error messages by field name, preserving order."""
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        grouped.setdefault(error.field_name, []).append(error.message)
    return grouped
