"""
Test the example Illinois petition questionnaire end to end.

Validates that the example builder's rules combine as expected: the
prenup gate, the derived residency answer and the children section.
"""

from qlogic.engine import QuestionnaireEngine
from qlogic.examples import build_example_petition

COMPLETE = {
    "petitionerFirstName": "Ada",
    "petitionerLastName": "Lovelace",
    "petitionerEmail": "ada@example.com",
    "marriageDate": "2010-06-12",
    "petitionerCounty": "cook",
    "residencyDurationMonths": 6,
    "hasPrenup": "no",
    "hasChildren": "no",
}


def engine() -> QuestionnaireEngine:
    return QuestionnaireEngine(build_example_petition())


def test_example_petition_structure():
    structure = build_example_petition()
    assert [s.id for s in structure.sections] == [
        "personal-info", "residency", "prenup", "children", "children-details",
    ]
    assert structure.get_question("prenupDate").required
    assert structure.metadata.estimated_time == 25


def test_empty_responses():
    result = engine().run({})
    assert result.progress.total_sections == 4
    assert result.progress.current_section == 0
    assert result.progress.progress_percentage == 0
    assert not result.visibility.is_visible("prenupDate")
    assert result.errors_by_field() == {
        "petitionerFirstName": ["First name is required"],
        "petitionerLastName": ["Last name is required"],
        "marriageDate": ["Date of Marriage is required"],
        "petitionerCounty": ["Your County of Residence is required"],
        "residencyDurationMonths": ["How many months have you lived in Illinois? is required"],
        "hasPrenup": ["Do you and your spouse have a prenuptial agreement? is required"],
        "hasChildren": ["Do you have minor children together? is required"],
    }


def test_complete_petition():
    result = engine().run(COMPLETE)
    assert result.is_valid
    assert result.progress.is_complete
    assert result.progress.progress_percentage == 100
    assert result.progress.current_section == 3


def test_residency_requirement_derived_and_locked():
    result = engine().run(COMPLETE)
    assert result.responses["residencyRequirementMet"] == "yes"
    state = result.visibility.question("residencyRequirementMet")
    assert state.visible and not state.enabled


def test_short_residency():
    result = engine().run({**COMPLETE, "residencyDurationMonths": 2})
    assert result.responses["residencyRequirementMet"] == "no"
    assert result.errors_by_field() == {
        "residencyDurationMonths": ["You must have lived in Illinois for at least 3 months (about 90 days)"],
    }


def test_prenup_gate():
    result = engine().run({**COMPLETE, "hasPrenup": "yes"})
    assert result.visibility.is_visible("prenupDate")
    assert result.visibility.is_visible("prenupFollowStatus")
    assert result.errors_by_field() == {
        "prenupDate": ["Date the prenuptial agreement was signed is required"],
    }
    assert result.progress.completed_sections == [0, 1, 3]
    assert result.progress.current_section == 2


def test_children_section_revealed():
    result = engine().run({**COMPLETE, "hasChildren": "yes"})
    assert result.progress.total_sections == 5
    assert result.progress.progress_percentage == 80
    assert result.errors_by_field() == {"numberOfChildren": ["Number of minor children is required"]}

    result = engine().run({**COMPLETE, "hasChildren": "yes", "numberOfChildren": 25})
    assert result.errors_by_field() == {"numberOfChildren": ["Number of minor children must be at most 20"]}


def test_invalid_email_and_date():
    result = engine().run({**COMPLETE, "petitionerEmail": "ada", "marriageDate": "June 2010"})
    assert result.errors_by_field() == {
        "petitionerEmail": ["Your Email must be a valid email address"],
        "marriageDate": ["Date of Marriage must be a valid date"],
    }
