"""
Visibility Resolver

Derives, for every section and question, whether it is shown and
whether it accepts input.

Resolution policy:
    - Every element starts visible and enabled, except that an element
      carrying a `show` rule starts hidden and one carrying an `enable`
      rule starts disabled (it is gated until a rule opens it).
    - An element's own rules are applied in declaration order. A rule
      whose condition holds overwrites its flag; a rule whose condition
      fails leaves the flag alone. The last true rule wins.
    - A hidden section hides all of its questions, a disabled section
      disables them, whatever their own rules say.
    - setValue rules are ignored here.

Resolution is a pure read of the response store and is safe to call on
every keystroke.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from qlogic.conditions import evaluate
from qlogic.model import Question, Section, Structure
from qlogic.rules import Action, ConditionalRule


@dataclass(frozen=True)
class ElementState:
    visible: bool = True
    enabled: bool = True

    @property
    def active(self) -> bool:
        """Visible and enabled: the element takes part in progress and validation."""
        return self.visible and self.enabled


@dataclass
class VisibilityMap:
    """
    Resolved flags for one response snapshot.

    Properties:
        sections: ElementState per section ID
        questions: ElementState per question field name
    """

    sections: Dict[str, ElementState] = field(default_factory=dict)
    questions: Dict[str, ElementState] = field(default_factory=dict)

    def section(self, section_id: str) -> ElementState:
        return self.sections.get(section_id, ElementState())

    def question(self, field_name: str) -> ElementState:
        return self.questions.get(field_name, ElementState())

    def is_visible(self, field_name: str) -> bool:
        return self.question(field_name).visible

    def is_active(self, field_name: str) -> bool:
        return self.question(field_name).active

    def visible_sections(self, structure: Structure) -> List[Section]:
        """Visible sections of `structure`, in declaration order."""
        return [s for s in structure.sections if self.section(s.id).visible]

    def visible_questions(self, section: Section) -> List[Question]:
        """Visible questions of `section`, in declaration order."""
        return [q for q in section.questions if self.question(q.field_name).visible]


def _resolve_rules(rules: List[ConditionalRule], responses: Mapping[str, Any]) -> ElementState:
    visible = not any(rule.action is Action.SHOW for rule in rules)
    enabled = not any(rule.action is Action.ENABLE for rule in rules)

    for rule in rules:
        if rule.action is Action.SET_VALUE:
            continue
        if not evaluate(rule, responses):
            continue
        if rule.action is Action.SHOW:
            visible = True
        elif rule.action is Action.HIDE:
            visible = False
        elif rule.action is Action.ENABLE:
            enabled = True
        elif rule.action is Action.DISABLE:
            enabled = False

    return ElementState(visible=visible, enabled=enabled)


def resolve_visibility(structure: Structure, responses: Mapping[str, Any]) -> VisibilityMap:
    """
    Resolve visible/enabled flags for every section and question.

    Args:
        structure: Structure to resolve
        responses: Response store snapshot (not modified)

    Returns:
        VisibilityMap for this snapshot
    """
    result = VisibilityMap()

    for section in structure.sections:
        section_state = _resolve_rules(section.conditional_logic, responses)
        result.sections[section.id] = section_state

        for question in section.questions:
            own = _resolve_rules(question.conditional_logic, responses)
            result.questions[question.field_name] = ElementState(
                visible=own.visible and section_state.visible,
                enabled=own.enabled and section_state.enabled,
            )

    return result
