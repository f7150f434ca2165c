"""
Tests for setValue application and default seeding.
"""

from qlogic.actions import apply_defaults, apply_set_value_actions
from qlogic.model import Question, QuestionType, Section, Structure
from qlogic.rules import Action, ConditionalRule, Operator


def set_value(field, operator, value, target):
    return ConditionalRule(field=field, operator=operator, value=value,
                           action=Action.SET_VALUE, target_value=target)


def build(*questions, section_rules=None) -> Structure:
    return Structure(
        id="s",
        name="S",
        type="test",
        sections=[Section(id="main", title="Main", questions=list(questions),
                          conditional_logic=section_rules or [])],
    )


def q(field_name, rules=None, default=None):
    return Question(id=field_name, type=QuestionType.TEXT, label=field_name, field_name=field_name,
                    conditional_logic=rules or [], default_value=default)


def test_true_rule_writes_owning_field():
    structure = build(
        q("months"),
        q("eligible", rules=[set_value("months", Operator.GREATER_THAN, 2, "yes")]),
    )
    assert apply_set_value_actions(structure, {"months": 6})["eligible"] == "yes"


def test_false_rule_writes_nothing():
    structure = build(
        q("months"),
        q("eligible", rules=[set_value("months", Operator.GREATER_THAN, 2, "yes")]),
    )
    assert "eligible" not in apply_set_value_actions(structure, {"months": 1})


def test_input_mapping_is_not_mutated():
    structure = build(
        q("months"),
        q("eligible", rules=[set_value("months", Operator.GREATER_THAN, 2, "yes")]),
    )
    responses = {"months": 6}
    updated = apply_set_value_actions(structure, responses)
    assert responses == {"months": 6}
    assert updated is not responses


def test_later_rule_sees_earlier_write():
    """Forward chain: b is written first, then c reads it in the same pass."""
    structure = build(
        q("a"),
        q("b", rules=[set_value("a", Operator.EQUALS, "x", "from-a")]),
        q("c", rules=[set_value("b", Operator.EQUALS, "from-a", "from-b")]),
    )
    updated = apply_set_value_actions(structure, {"a": "x"})
    assert updated["b"] == "from-a"
    assert updated["c"] == "from-b"


def test_earlier_rule_never_sees_later_write():
    """Backward chain is not iterated: one pass only."""
    structure = build(
        q("a"),
        q("c", rules=[set_value("b", Operator.EQUALS, "from-a", "from-b")]),
        q("b", rules=[set_value("a", Operator.EQUALS, "x", "from-a")]),
    )
    updated = apply_set_value_actions(structure, {"a": "x"})
    assert updated["b"] == "from-a"
    assert "c" not in updated


def test_last_true_rule_on_a_field_wins():
    structure = build(
        q("n"),
        q("size", rules=[
            set_value("n", Operator.GREATER_THAN, 0, "small"),
            set_value("n", Operator.GREATER_THAN, 10, "large"),
        ]),
    )
    assert apply_set_value_actions(structure, {"n": 50})["size"] == "large"
    assert apply_set_value_actions(structure, {"n": 5})["size"] == "small"


def test_self_referencing_rule_terminates():
    structure = build(q("toggle", rules=[set_value("toggle", Operator.EQUALS, "on", "off")]))
    assert apply_set_value_actions(structure, {"toggle": "on"})["toggle"] == "off"


def test_section_level_set_value_is_skipped():
    structure = build(
        q("a"),
        section_rules=[set_value("a", Operator.IS_EMPTY, None, "ignored")],
    )
    assert apply_set_value_actions(structure, {}) == {}


def test_written_value_is_a_copy():
    """Editing a derived list answer leaves the rule's target untouched."""
    rule = set_value("hasKids", Operator.EQUALS, "no", ["none"])
    structure = build(q("hasKids"), q("kids", rules=[rule]))
    updated = apply_set_value_actions(structure, {"hasKids": "no"})
    updated["kids"].append("x")
    assert rule.target_value == ["none"]
    assert apply_set_value_actions(structure, {"hasKids": "no"})["kids"] == ["none"]


def test_visibility_rules_are_ignored():
    structure = build(q("a", rules=[ConditionalRule(field="x", operator=Operator.IS_EMPTY, action=Action.HIDE)]))
    assert apply_set_value_actions(structure, {}) == {}


class TestApplyDefaults:
    """Seeding declared default values."""

    def test_fills_missing_keys(self):
        structure = build(q("county", default="cook"), q("name"))
        assert apply_defaults(structure, {}) == {"county": "cook"}

    def test_keeps_cleared_answers(self):
        """An answer the user cleared is not re-seeded."""
        structure = build(q("county", default="cook"))
        assert apply_defaults(structure, {"county": ""}) == {"county": ""}

    def test_seeded_default_is_a_copy(self):
        structure = build(q("kids", default=["a"]))
        seeded = apply_defaults(structure, {})
        seeded["kids"].append("b")
        assert structure.get_question("kids").default_value == ["a"]

    def test_false_default_is_seeded(self):
        structure = build(q("agree", default=False))
        assert apply_defaults(structure, {}) == {"agree": False}
