"""
Core Questionnaire Model Objects

Defines the fundamental data structures of the Questionnaire Logic Model.

These are pure data classes representing:
    - Questions (one answer slot each)
    - Sections (ordered groups of questions)
    - Structures (root container for one document workflow)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about rendering or persistence
        - Are not mutated during an evaluation pass
        - Are fully serializable
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .rules import ConditionalRule, ValidationRule


class QuestionType(Enum):
    """
    Widget/answer type of a question.

    Values match the stored document representation.

    Answer shapes:
        text, textarea, email, phone, address, yesno -> string
        select, radio -> single string or number
        checkbox -> list of option values (multi-select), or a bool
            when the question has no options
        number -> number (or numeric string from the form layer)
        date -> ISO-8601 date string
    """

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    EMAIL = "email"
    PHONE = "phone"
    ADDRESS = "address"
    YESNO = "yesno"


@dataclass
class Option:
    """A selectable label/value pair."""

    label: str
    value: Union[str, int, float]


@dataclass
class Question:
    """
    A single question in a section.

    Properties:
        id:
            Identifier, unique within its section
            Example: "prenup-date"

        type:
            QuestionType enum

        label:
            Human-readable question text

        field_name:
            Key into the response store. Unique across the whole
            structure because the response store is flat.
            Example: "prenupDate"

        required:
            Whether an answer is needed for the section to be complete

        default_value:
            Initial answer offered to the user (typed per question type)

        options:
            Ordered choices for select/radio/checkbox questions

        validation:
            Ordered ValidationRule list, all evaluated independently

        conditional_logic:
            Ordered ConditionalRule list, applied in declaration order

    ARCHITECTURAL RULE:
        - conditional_logic is about reaching the question
        - validation is about accepting the answer
        - These are separate concerns
    """

    id: str
    type: QuestionType
    label: str
    field_name: str
    description: Optional[str] = None
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    required: bool = False
    default_value: Any = None
    options: List[Option] = field(default_factory=list)
    validation: List[ValidationRule] = field(default_factory=list)
    conditional_logic: List[ConditionalRule] = field(default_factory=list)


@dataclass
class Section:
    """
    An ordered group of questions.

    Question order is both display order and the order in which
    conditional rules are applied.

    Section-level conditional_logic controls the whole section: a hidden
    section hides every question it contains.
    """

    id: str
    title: str
    description: Optional[str] = None
    questions: List[Question] = field(default_factory=list)
    conditional_logic: List[ConditionalRule] = field(default_factory=list)

    def get_question(self, question_id: str) -> Optional[Question]:
        """Retrieve a question of this section by ID."""
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


@dataclass
class HelpResource:
    title: str
    url: str


@dataclass
class StructureMetadata:
    """
    Optional presentation hints for a structure.

    Properties:
        estimated_time: Expected completion time in minutes
        required_documents: Documents the user should gather first
        help_resources: Links to guidance pages
    """

    estimated_time: Optional[int] = None
    required_documents: List[str] = field(default_factory=list)
    help_resources: List[HelpResource] = field(default_factory=list)


@dataclass
class Structure:
    """
    Root container for one questionnaire workflow.

    This is THE primary artifact. Visibility, progress and validation
    are all derived from a Structure plus a response store.

    Properties:
        id:
            Structure identifier

        name:
            Display name
            Example: "Petition for Dissolution of Marriage"

        type:
            Workflow/document tag the structure serves
            Example: "petition", "marital_settlement"

        sections:
            Ordered sections

        metadata:
            Optional StructureMetadata

    INVARIANTS:
        - field_name is unique across all questions
        - Section IDs are unique
        - Question IDs are unique within their section
        - Every rule's field refers to an existing field_name
        - Exactly one structure per type is active in a store

    The invariants are checked once, at load time, by
    `qlogic.analyzer`; they are not re-checked during evaluation.
    """

    id: str
    name: str
    type: str
    description: Optional[str] = None
    sections: List[Section] = field(default_factory=list)
    metadata: Optional[StructureMetadata] = None

    def get_section(self, section_id: str) -> Optional[Section]:
        """
        Retrieve a section by ID.

        Args:
            section_id: Section identifier

        Returns:
            Section object or None if not found
        """
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def get_question(self, field_name: str) -> Optional[Question]:
        """
        Retrieve a question by its field name.

        Args:
            field_name: Response store key

        Returns:
            Question object or None if not found
        """
        for _, question in self.iter_questions():
            if question.field_name == field_name:
                return question
        return None

    def iter_questions(self) -> Iterator[Tuple[Section, Question]]:
        """Yield (section, question) pairs in declaration order."""
        for section in self.sections:
            for question in section.questions:
                yield section, question

    def field_names(self) -> List[str]:
        return [question.field_name for _, question in self.iter_questions()]

    def field_types(self) -> Dict[str, QuestionType]:
        return {question.field_name: question.type for _, question in self.iter_questions()}
