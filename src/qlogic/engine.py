"""
Questionnaire Engine — one object per loaded structure.

Runs evaluation passes over response snapshots:

    responses ──► setValue sweep ──► visibility ──► progress
                                                └─► validation

Every output of a pass describes the same snapshot: visibility,
progress and validation are all computed on the responses AFTER the
setValue sweep. The engine keeps no response state between passes;
callers own the response store and replace it with `result.responses`.

Structural checks run once, when the engine is built, never per pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from qlogic.actions import apply_defaults, apply_set_value_actions
from qlogic.analyzer import StructureReport, check_structure
from qlogic.model import Question, Section, Structure
from qlogic.progress import Progress, compute_progress, estimate_minutes_remaining
from qlogic.validation import FieldError, Validator, errors_by_field, validate, validate_question
from qlogic.visibility import VisibilityMap, resolve_visibility

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    """
    Output of one evaluation pass.

    Properties:
        responses: Response store after the setValue sweep
        visibility: Flags resolved for `responses`
        progress: Progress over the visible sections
        errors: Validation errors of active questions
    """

    responses: Dict[str, Any]
    visibility: VisibilityMap
    progress: Progress
    errors: List[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def errors_by_field(self) -> Dict[str, List[str]]:
        return errors_by_field(self.errors)


class QuestionnaireEngine:
    """
    Evaluation pipeline bound to one structure.

    Args:
        structure: Structure to evaluate
        validators: Named predicates for `custom` validation rules
        strict: Raise StructureConfigError on structural errors instead
            of emitting warnings
        default_minutes_per_section: Time estimate used when the
            structure declares none
    """

    def __init__(
        self,
        structure: Structure,
        validators: Optional[Mapping[str, Validator]] = None,
        strict: bool = True,
        default_minutes_per_section: int = 5,
    ):
        self.structure = structure
        self.validators: Dict[str, Validator] = dict(validators or {})
        self.default_minutes_per_section = default_minutes_per_section
        self.report: StructureReport = check_structure(
            structure, strict=strict, validators=self.validators
        )

    def run(self, responses: Mapping[str, Any]) -> EvaluationResult:
        """Run one full evaluation pass over a response snapshot."""
        updated = apply_set_value_actions(self.structure, responses)
        visibility = resolve_visibility(self.structure, updated)
        progress = compute_progress(self.structure, updated, visibility)
        errors = validate(self.structure, updated, visibility, self.validators)

        logger.debug(
            "Pass on %s: %d/%d sections complete, %d errors",
            self.structure.id, len(progress.completed_sections),
            progress.total_sections, len(errors),
        )
        return EvaluationResult(responses=updated, visibility=visibility, progress=progress, errors=errors)

    def initial_responses(self, responses: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Response store with declared default values filled in."""
        return apply_defaults(self.structure, responses or {})

    def resolve_visibility(self, responses: Mapping[str, Any]) -> VisibilityMap:
        return resolve_visibility(self.structure, responses)

    def visible_sections(self, responses: Mapping[str, Any]) -> List[Section]:
        return self.resolve_visibility(responses).visible_sections(self.structure)

    def visible_questions(self, section_id: str, responses: Mapping[str, Any]) -> List[Question]:
        """Visible questions of a section; empty when the section is unknown or hidden."""
        section = self.structure.get_section(section_id)
        if section is None:
            return []
        return self.resolve_visibility(responses).visible_questions(section)

    def progress(self, responses: Mapping[str, Any]) -> Progress:
        return compute_progress(self.structure, responses, self.resolve_visibility(responses))

    def minutes_remaining(self, responses: Mapping[str, Any], current_section: Optional[int] = None) -> int:
        return estimate_minutes_remaining(
            self.structure,
            self.progress(responses),
            current_section=current_section,
            default_minutes_per_section=self.default_minutes_per_section,
        )

    def validate(self, responses: Mapping[str, Any]) -> List[FieldError]:
        return validate(self.structure, responses, self.resolve_visibility(responses), self.validators)

    def validate_question(self, question: Question, value: Any) -> List[str]:
        return validate_question(question, value, self.validators)
