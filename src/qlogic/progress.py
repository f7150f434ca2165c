"""
Progress Tracker

Derives completion state from a structure, a response snapshot and the
visibility resolved for that snapshot. Progress is never stored; it is
recomputed in full on every evaluation pass.

Hidden sections and hidden questions contribute nothing: a hidden
required question never blocks completion.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from qlogic.conditions import is_empty
from qlogic.model import Section, Structure
from qlogic.visibility import VisibilityMap


@dataclass
class Progress:
    """
    Completion snapshot.

    Properties:
        current_section: Index, within the visible sections, of the first
            incomplete one (last index when all are complete)
        total_sections: Number of visible sections
        completed_sections: Indices, within the visible sections, of
            completed ones
        answered_questions: Field names of visible questions holding a
            non-empty answer
    """

    current_section: int = 0
    total_sections: int = 0
    completed_sections: List[int] = field(default_factory=list)
    answered_questions: List[str] = field(default_factory=list)

    @property
    def progress_percentage(self) -> int:
        """Completed share of visible sections, rounded half-up."""
        if self.total_sections == 0:
            return 0
        return math.floor(len(self.completed_sections) / self.total_sections * 100 + 0.5)

    @property
    def is_complete(self) -> bool:
        return self.total_sections > 0 and len(self.completed_sections) == self.total_sections


def is_section_complete(section: Section, responses: Mapping[str, Any], visibility: VisibilityMap) -> bool:
    """Every visible, enabled, required question of the section is answered."""
    for question in section.questions:
        if not question.required:
            continue
        if not visibility.is_active(question.field_name):
            continue
        if is_empty(responses.get(question.field_name)):
            return False
    return True


def compute_progress(
    structure: Structure,
    responses: Mapping[str, Any],
    visibility: VisibilityMap,
) -> Progress:
    """
    Compute progress over the visible sections.

    Args:
        structure: Structure being answered
        responses: Response store snapshot
        visibility: VisibilityMap resolved for the same snapshot

    Returns:
        Progress snapshot
    """
    visible_sections = visibility.visible_sections(structure)
    progress = Progress(total_sections=len(visible_sections))

    for index, section in enumerate(visible_sections):
        for question in visibility.visible_questions(section):
            if not is_empty(responses.get(question.field_name)):
                progress.answered_questions.append(question.field_name)

        if is_section_complete(section, responses, visibility):
            progress.completed_sections.append(index)

    incomplete = [i for i in range(len(visible_sections)) if i not in progress.completed_sections]
    if incomplete:
        progress.current_section = incomplete[0]
    elif visible_sections:
        progress.current_section = len(visible_sections) - 1

    return progress


def estimate_minutes_remaining(
    structure: Structure,
    progress: Progress,
    current_section: Optional[int] = None,
    default_minutes_per_section: int = 5,
) -> int:
    """
    Rough time left, in minutes, from the current section to the end.

    The structure's estimated_time is spread evenly over the visible
    sections; without an estimate each section counts
    `default_minutes_per_section`.

    Args:
        structure: Structure being answered
        progress: Progress computed for the current snapshot
        current_section: Section the user is on, when the caller tracks
            navigation itself; defaults to progress.current_section
        default_minutes_per_section: Fallback per-section estimate
    """
    if progress.total_sections == 0:
        return 0

    estimated_time = structure.metadata.estimated_time if structure.metadata else None
    if estimated_time:
        per_section = math.ceil(estimated_time / progress.total_sections)
    else:
        per_section = default_minutes_per_section

    position = progress.current_section if current_section is None else current_section
    remaining = max(progress.total_sections - position, 0)
    return remaining * per_section
