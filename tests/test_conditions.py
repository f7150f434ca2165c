"""
Tests for the Condition Evaluator.

These tests verify:
    - Each operator's semantics
    - Missing and empty answers
    - Type mismatches resolve to False without raising
"""

from datetime import date, datetime

import pytest
from qlogic.conditions import evaluate, is_empty, to_datetime, to_number
from qlogic.rules import Action, ConditionalRule, Operator


def rule(operator, value=None, field="f"):
    return ConditionalRule(field=field, operator=operator, value=value, action=Action.SHOW)


class TestIsEmpty:
    """Emptiness shared by isEmpty, required and progress."""

    @pytest.mark.parametrize("value", [None, "", [], (), set(), {}])
    def test_empty_values(self, value):
        assert is_empty(value)

    @pytest.mark.parametrize("value", [" ", "no", 0, 0.0, False, ["a"], {"street": "Main"}])
    def test_non_empty_values(self, value):
        """Zero and False are answers, not blanks."""
        assert not is_empty(value)


class TestEquals:
    """Test equals / notEquals."""

    def test_string_equality_is_case_sensitive(self):
        assert evaluate(rule(Operator.EQUALS, "yes"), {"f": "yes"})
        assert not evaluate(rule(Operator.EQUALS, "yes"), {"f": "Yes"})

    def test_numeric_equality(self):
        assert evaluate(rule(Operator.EQUALS, 3), {"f": 3.0})
        assert evaluate(rule(Operator.EQUALS, 3), {"f": "3"})
        assert not evaluate(rule(Operator.EQUALS, 3), {"f": 4})

    def test_multi_select_set_equality(self):
        """List answers compare as sets, ignoring order."""
        assert evaluate(rule(Operator.EQUALS, ["b", "a"]), {"f": ["a", "b"]})
        assert not evaluate(rule(Operator.EQUALS, ["a"]), {"f": ["a", "b"]})

    def test_missing_answer_is_not_equal(self):
        assert not evaluate(rule(Operator.EQUALS, "yes"), {})

    def test_bool_is_not_number(self):
        assert not evaluate(rule(Operator.EQUALS, 1), {"f": True})

    def test_not_equals_is_negation(self):
        assert evaluate(rule(Operator.NOT_EQUALS, "yes"), {"f": "no"})
        assert evaluate(rule(Operator.NOT_EQUALS, "yes"), {})
        assert not evaluate(rule(Operator.NOT_EQUALS, "yes"), {"f": "yes"})


class TestContains:
    """Test contains."""

    def test_substring(self):
        assert evaluate(rule(Operator.CONTAINS, "Cook"), {"f": "Cook County"})
        assert not evaluate(rule(Operator.CONTAINS, "cook"), {"f": "Cook County"})

    def test_list_membership(self):
        assert evaluate(rule(Operator.CONTAINS, "house"), {"f": ["car", "house"]})
        assert not evaluate(rule(Operator.CONTAINS, "boat"), {"f": ["car", "house"]})

    def test_other_shapes_are_false(self):
        assert not evaluate(rule(Operator.CONTAINS, "1"), {"f": 12})
        assert not evaluate(rule(Operator.CONTAINS, "x"), {})
        assert not evaluate(rule(Operator.CONTAINS, ["x"]), {"f": "x"})


class TestOrdering:
    """Test greaterThan / lessThan."""

    def test_numbers(self):
        assert evaluate(rule(Operator.GREATER_THAN, 2), {"f": 3})
        assert not evaluate(rule(Operator.GREATER_THAN, 3), {"f": 3})
        assert evaluate(rule(Operator.LESS_THAN, 3), {"f": "2.5"})

    def test_dates(self):
        assert evaluate(rule(Operator.GREATER_THAN, "2020-01-01"), {"f": "2021-06-30"})
        assert evaluate(rule(Operator.LESS_THAN, "2020-01-01"), {"f": date(2019, 12, 31)})
        assert evaluate(rule(Operator.GREATER_THAN, date(2020, 1, 1)), {"f": datetime(2020, 1, 1, 9, 30)})

    def test_non_comparable_operands_are_false(self):
        assert not evaluate(rule(Operator.GREATER_THAN, 2), {"f": "many"})
        assert not evaluate(rule(Operator.LESS_THAN, 2), {})
        assert not evaluate(rule(Operator.GREATER_THAN, "2020-01-01"), {"f": 5})
        assert not evaluate(rule(Operator.GREATER_THAN, 0), {"f": True})


class TestEmptiness:
    """Test isEmpty / isNotEmpty."""

    def test_missing_and_cleared_are_both_empty(self):
        assert evaluate(rule(Operator.IS_EMPTY), {})
        assert evaluate(rule(Operator.IS_EMPTY), {"f": ""})
        assert evaluate(rule(Operator.IS_EMPTY), {"f": []})

    def test_is_not_empty_is_exact_negation(self):
        for responses in ({}, {"f": ""}, {"f": "x"}, {"f": 0}, {"f": []}, {"f": ["a"]}):
            assert evaluate(rule(Operator.IS_NOT_EMPTY), responses) != evaluate(rule(Operator.IS_EMPTY), responses)


ODD_VALUES = [None, "", "text", 0, -1.5, True, [], ["a", {"nested": 1}], {"k": "v"}, date(2020, 1, 1), object()]


@pytest.mark.parametrize("operator", list(Operator))
def test_evaluate_never_raises(operator):
    """Every operator yields a bool for any answer/value combination."""
    for answer in ODD_VALUES:
        for value in ODD_VALUES:
            result = evaluate(rule(operator, value), {"f": answer})
            assert isinstance(result, bool)


class TestCoercion:
    """Test the number/date coercions."""

    def test_to_number(self):
        assert to_number(" 4 ") == 4.0
        assert to_number("nan") is None
        assert to_number("abc") is None
        assert to_number(False) is None

    def test_to_datetime(self):
        assert to_datetime("2024-02-29") == datetime(2024, 2, 29)
        assert to_datetime("2024-02-30") is None
        assert to_datetime(12) is None
