"""
Structure Analyzer — load-time diagnostics for questionnaire structures.

This module checks a Structure once, when it is loaded, so that
evaluation passes never have to:
    - Duplicate identifiers and field names
    - Rules referencing fields that do not exist
    - setValue rules with no owning field
    - Unusable validation rules (bad regex, non-numeric bounds, unnamed
      or unknown custom validators)
    - Cycles in the setValue dependency graph

IMPORTANT: This module does NOT modify the structure.
It only produces read-only reports.

Errors are configuration mistakes the structure's maintainer must fix.
Warnings flag things that still evaluate, but probably not as intended.
"""

from __future__ import annotations

import logging
import re
import warnings
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Set

from qlogic.conditions import to_datetime, to_number
from qlogic.model import Question, QuestionType, Structure
from qlogic.rules import Action, ConditionalRule, ValidationKind

logger = logging.getLogger(__name__)

_CHOICE_TYPES = (QuestionType.SELECT, QuestionType.RADIO)


class StructureConfigError(Exception):
    """Raised when a structure fails its load-time checks."""

    def __init__(self, structure_id: str, errors: List[str]):
        self.structure_id = structure_id
        self.errors = list(errors)
        details = "; ".join(self.errors)
        super().__init__(f"Structure '{structure_id}' is misconfigured: {details}")


@dataclass
class StructureReport:
    """Analysis report for a structure."""

    structure_id: str
    total_sections: int = 0
    total_questions: int = 0
    total_conditional_rules: int = 0
    total_validation_rules: int = 0
    required_questions: int = 0

    # Field name -> number of rules reading it
    field_usage: Dict[str, int] = field(default_factory=dict)
    undefined_fields: Set[str] = field(default_factory=set)

    has_set_value_cycle: bool = False
    cycle_example: Optional[List[str]] = None

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        if msg not in self.errors:
            self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def _find_cycles_dfs(graph: Dict[str, List[str]], start: str, visited: Set[str],
                     rec_stack: Set[str], path: List[str]) -> Optional[List[str]]:
    """DFS to find a cycle starting from a node."""
    visited.add(start)
    rec_stack.add(start)
    path.append(start)

    for neighbor in graph.get(start, []):
        if neighbor not in visited:
            cycle = _find_cycles_dfs(graph, neighbor, visited, rec_stack, path[:])
            if cycle:
                return cycle
        elif neighbor in rec_stack:
            cycle_start_idx = path.index(neighbor)
            return path[cycle_start_idx:] + [neighbor]

    rec_stack.remove(start)
    return None


def _check_rules(report: StructureReport, owner: str, rules: List[ConditionalRule],
                 known_fields: Set[str]) -> None:
    for rule in rules:
        report.total_conditional_rules += 1
        report.field_usage[rule.field] = report.field_usage.get(rule.field, 0) + 1
        if rule.field not in known_fields:
            report.undefined_fields.add(rule.field)
            report.add_error(f"Rule on {owner} references unknown field '{rule.field}'")
        if rule.action is Action.SET_VALUE and rule.target_value is None:
            report.add_warning(f"setValue rule on {owner} has no target value")


def _check_validation(report: StructureReport, question: Question,
                      validators: Optional[Mapping[str, Callable]]) -> None:
    owner = f"question '{question.field_name}'"
    for rule in question.validation:
        report.total_validation_rules += 1
        kind = rule.kind

        if kind is ValidationKind.PATTERN:
            if rule.value is None:
                report.add_error(f"Pattern rule on {owner} has no pattern")
                continue
            try:
                re.compile(str(rule.value))
            except re.error as e:
                report.add_error(f"Pattern rule on {owner} is not a valid regex: {e}")

        elif kind in (ValidationKind.MIN, ValidationKind.MAX):
            if question.type is QuestionType.DATE:
                usable = to_datetime(rule.value) is not None
            else:
                usable = to_number(rule.value) is not None
            if not usable:
                report.add_error(f"{kind.value} rule on {owner} has an unusable bound {rule.value!r}")

        elif kind is ValidationKind.CUSTOM:
            if not rule.value:
                report.add_error(f"Custom rule on {owner} does not name a validator")
            elif validators is not None and rule.value not in validators:
                report.add_error(f"Custom rule on {owner} names unknown validator '{rule.value}'")


def analyze_structure(structure: Structure,
                      validators: Optional[Mapping[str, Callable]] = None) -> StructureReport:
    """
    Perform load-time analysis of a Structure.

    Args:
        structure: Structure to check
        validators: Custom validator registry; when given, custom rules
            naming a validator missing from it are errors

    Returns:
        StructureReport with metrics, errors and warnings
    """
    report = StructureReport(structure_id=structure.id)
    report.total_sections = len(structure.sections)

    # =========================================================================
    # 1. IDENTIFIERS
    # =========================================================================

    seen_sections: Set[str] = set()
    field_counts: Dict[str, int] = defaultdict(int)

    for section in structure.sections:
        if section.id in seen_sections:
            report.add_error(f"Duplicate section id '{section.id}'")
        seen_sections.add(section.id)

        seen_questions: Set[str] = set()
        for question in section.questions:
            report.total_questions += 1
            if question.required:
                report.required_questions += 1
            if question.id in seen_questions:
                report.add_error(f"Duplicate question id '{question.id}' in section '{section.id}'")
            seen_questions.add(question.id)
            field_counts[question.field_name] += 1

    for name, count in field_counts.items():
        if count > 1:
            report.add_error(f"Duplicate field name '{name}' ({count} questions)")

    known_fields = set(field_counts)

    # =========================================================================
    # 2. RULES
    # =========================================================================

    for section in structure.sections:
        owner = f"section '{section.id}'"
        _check_rules(report, owner, section.conditional_logic, known_fields)
        for rule in section.conditional_logic:
            if rule.action is Action.SET_VALUE:
                report.add_error(f"setValue rule on {owner} has no owning field")

        for question in section.questions:
            _check_rules(report, f"question '{question.field_name}'",
                         question.conditional_logic, known_fields)
            _check_validation(report, question, validators)
            if question.type in _CHOICE_TYPES and not question.options:
                report.add_warning(f"Question '{question.field_name}' has no options")

    # =========================================================================
    # 3. SETVALUE DEPENDENCY GRAPH
    # =========================================================================

    # Edge: field read by a setValue condition -> field it writes
    writes: Dict[str, List[str]] = defaultdict(list)
    for _, question in structure.iter_questions():
        for rule in question.conditional_logic:
            if rule.action is Action.SET_VALUE:
                writes[rule.field].append(question.field_name)

    visited: Set[str] = set()
    for node in list(writes.keys()):
        if node not in visited:
            cycle = _find_cycles_dfs(writes, node, visited, set(), [])
            if cycle:
                report.has_set_value_cycle = True
                report.cycle_example = cycle
                report.add_warning(
                    f"setValue cycle detected: {' -> '.join(cycle)} (applied in a single pass)"
                )
                break

    return report


def check_structure(structure: Structure, strict: bool = True,
                    validators: Optional[Mapping[str, Callable]] = None) -> StructureReport:
    """
    Run the load-time checks and surface the result.

    Errors raise StructureConfigError when `strict`, and are emitted as
    UserWarning otherwise. Warnings are always emitted as UserWarning.

    Raises:
        StructureConfigError: If strict and the structure has errors
    """
    report = analyze_structure(structure, validators=validators)

    for msg in report.warnings:
        warnings.warn(f"{structure.id}: {msg}", UserWarning)

    if report.errors:
        if strict:
            raise StructureConfigError(structure.id, report.errors)
        for msg in report.errors:
            warnings.warn(f"{structure.id}: {msg}", UserWarning)

    logger.debug(
        "Checked structure %s: %d errors, %d warnings",
        structure.id, len(report.errors), len(report.warnings),
    )
    return report
