"""
Rule Records for the Questionnaire Logic Model

Conditional logic and validation are represented as plain tagged records
(an enum tag plus a typed payload), never as callbacks or code strings.

This ensures:
    - Structures stay serializable
    - Rules can be inspected at load time
    - Evaluation lives in exactly one place

ARCHITECTURAL RULE:
    These records hold structure only.
    Evaluation belongs in `qlogic.conditions` and `qlogic.validation`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Operator(Enum):
    """
    Comparison operators a conditional rule may apply to a response value.

    This set is closed. Every operator here must:
        - Resolve to a boolean for any answer shape
        - Never raise on a type mismatch
    """

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"


class Action(Enum):
    """
    What a conditional rule does when its condition holds.

    show/hide drive the `visible` flag, enable/disable drive `enabled`.
    set_value writes a derived answer and is handled apart from visibility.
    """

    SHOW = "show"
    HIDE = "hide"
    ENABLE = "enable"
    DISABLE = "disable"
    SET_VALUE = "setValue"


@dataclass(frozen=True)
class ConditionalRule:
    """
    A condition on one response field paired with an action.

    Example:
        Show the prenup date only when the user has a prenup.

        ConditionalRule(
            field="hasPrenup",
            operator=Operator.EQUALS,
            value="yes",
            action=Action.SHOW,
        )

    Properties:
        field: Field name read from the response store. It may belong to
            any question in the structure, not only the owning one.
        operator: Operator enum
        value: Comparison value (unused by isEmpty/isNotEmpty)
        action: Action enum
        target_value: Value written by a setValue action

    IMPORTANT:
        This object does NOT validate that `field` exists.
        Reference checks belong in the analyzer, at load time.
    """

    field: str
    operator: Operator
    action: Action
    value: Any = None
    target_value: Any = None


class ValidationKind(Enum):
    """Kinds of validation a question may declare."""

    REQUIRED = "required"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    EMAIL = "email"
    DATE = "date"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ValidationRule:
    """
    A constraint a question's answer must satisfy.

    Properties:
        kind: ValidationKind enum
        value: Bound for min/max, regex for pattern, validator name for custom
        message: User-facing message; a default is derived from the
            question label when omitted

    The custom kind never embeds a predicate. `value` names a validator
    that the caller injects at validation time, which keeps the
    structure serializable.
    """

    kind: ValidationKind
    value: Optional[Any] = None
    message: Optional[str] = None
