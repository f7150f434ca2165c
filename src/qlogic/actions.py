"""
Derived-value writes: setValue application and default seeding.

Both functions return a NEW mapping. The caller's response store is
never mutated, so a superseded evaluation pass can simply be dropped.
Written values are copies of the structure's target and default values;
editing an answer in the result never reaches the structure.

SINGLE-PASS RULE:
    setValue rules are applied in one forward sweep, sections then
    questions, each question's rules in declaration order. A rule sees
    the writes of every rule before it in that order, and never the
    writes of a rule after it. Chains of dependent setValue rules are
    NOT iterated to a fixed point; the sweep always terminates after
    visiting each rule once. The analyzer reports setValue cycles at
    load time.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any, Dict, Mapping

from qlogic.conditions import evaluate
from qlogic.model import Structure
from qlogic.rules import Action

logger = logging.getLogger(__name__)


def apply_set_value_actions(structure: Structure, responses: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Apply every setValue rule whose condition holds.

    A true rule writes its target_value to the owning question's field.
    Section-level setValue rules have no owning field and are skipped.

    Args:
        structure: Structure whose rules are applied
        responses: Response store snapshot (not modified)

    Returns:
        Updated copy of the response store
    """
    updated = dict(responses)

    for _, question in structure.iter_questions():
        for rule in question.conditional_logic:
            if rule.action is not Action.SET_VALUE:
                continue
            if evaluate(rule, updated):
                logger.debug(
                    "setValue %s = %r (condition on %s)",
                    question.field_name, rule.target_value, rule.field,
                )
                updated[question.field_name] = deepcopy(rule.target_value)

    return updated


def apply_defaults(structure: Structure, responses: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Fill missing answers with the questions' declared default values.

    Only absent keys are filled; an answer the user cleared stays cleared.
    """
    updated = dict(responses)
    for _, question in structure.iter_questions():
        if question.default_value is not None and question.field_name not in updated:
            updated[question.field_name] = deepcopy(question.default_value)
    return updated
