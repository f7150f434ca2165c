"""
Example structure: a condensed Illinois Petition for Dissolution of Marriage.

Exercises the features of the model in one place: required questions,
show-gated questions and sections (including a cross-section reference),
a derived setValue field, and numeric, email and date validation.
"""
from qlogic.model import (
    HelpResource,
    Option,
    Question,
    QuestionType,
    Section,
    Structure,
    StructureMetadata,
)
from qlogic.rules import Action, ConditionalRule, Operator, ValidationKind, ValidationRule

YES_NO = [Option(label="Yes", value="yes"), Option(label="No", value="no")]


def _shown_if_yes(field_name: str) -> ConditionalRule:
    return ConditionalRule(field=field_name, operator=Operator.EQUALS, value="yes", action=Action.SHOW)


def build_example_petition() -> Structure:
    personal = Section(
        id="personal-info",
        title="Personal Information",
        description="Information about you and your spouse",
        questions=[
            Question(
                id="petitioner-first-name",
                type=QuestionType.TEXT,
                label="Your First Name",
                field_name="petitionerFirstName",
                required=True,
                placeholder="Enter your first name",
                validation=[ValidationRule(ValidationKind.REQUIRED, message="First name is required")],
            ),
            Question(
                id="petitioner-last-name",
                type=QuestionType.TEXT,
                label="Your Last Name",
                field_name="petitionerLastName",
                required=True,
                validation=[ValidationRule(ValidationKind.REQUIRED, message="Last name is required")],
            ),
            Question(
                id="petitioner-email",
                type=QuestionType.EMAIL,
                label="Your Email",
                field_name="petitionerEmail",
                validation=[ValidationRule(ValidationKind.EMAIL)],
            ),
            Question(
                id="marriage-date",
                type=QuestionType.DATE,
                label="Date of Marriage",
                field_name="marriageDate",
                required=True,
                help_text="The date you were legally married",
                validation=[ValidationRule(ValidationKind.DATE)],
            ),
        ],
    )

    residency = Section(
        id="residency",
        title="Residency Information",
        questions=[
            Question(
                id="petitioner-county",
                type=QuestionType.SELECT,
                label="Your County of Residence",
                field_name="petitionerCounty",
                required=True,
                options=[
                    Option(label="Cook County", value="cook"),
                    Option(label="DuPage County", value="dupage"),
                    Option(label="Lake County", value="lake"),
                    Option(label="Will County", value="will"),
                    Option(label="Other", value="other"),
                ],
            ),
            Question(
                id="residency-duration-months",
                type=QuestionType.NUMBER,
                label="How many months have you lived in Illinois?",
                field_name="residencyDurationMonths",
                required=True,
                validation=[
                    ValidationRule(
                        ValidationKind.MIN,
                        value=3,
                        message="You must have lived in Illinois for at least 3 months (about 90 days)",
                    ),
                ],
            ),
            Question(
                id="residency-requirement-met",
                type=QuestionType.YESNO,
                label="Residency requirement met",
                field_name="residencyRequirementMet",
                options=YES_NO,
                conditional_logic=[
                    ConditionalRule(
                        field="residencyDurationMonths",
                        operator=Operator.GREATER_THAN,
                        value=2,
                        action=Action.SET_VALUE,
                        target_value="yes",
                    ),
                    ConditionalRule(
                        field="residencyDurationMonths",
                        operator=Operator.LESS_THAN,
                        value=3,
                        action=Action.SET_VALUE,
                        target_value="no",
                    ),
                    ConditionalRule(
                        field="residencyDurationMonths",
                        operator=Operator.IS_NOT_EMPTY,
                        action=Action.DISABLE,
                    ),
                ],
            ),
        ],
    )

    prenup = Section(
        id="prenup",
        title="Prenuptial Agreement",
        questions=[
            Question(
                id="has-prenup",
                type=QuestionType.YESNO,
                label="Do you and your spouse have a prenuptial agreement?",
                field_name="hasPrenup",
                required=True,
                options=YES_NO,
            ),
            Question(
                id="prenup-date",
                type=QuestionType.DATE,
                label="Date the prenuptial agreement was signed",
                field_name="prenupDate",
                required=True,
                conditional_logic=[_shown_if_yes("hasPrenup")],
            ),
            Question(
                id="prenup-follow-status",
                type=QuestionType.RADIO,
                label="Do both spouses want to follow the agreement?",
                field_name="prenupFollowStatus",
                options=[
                    Option(label="Both want to follow it", value="both_follow"),
                    Option(label="One or both do not", value="one_or_both_not_follow"),
                    Option(label="Unsure", value="unsure"),
                ],
                conditional_logic=[_shown_if_yes("hasPrenup")],
            ),
        ],
    )

    children = Section(
        id="children",
        title="Children",
        questions=[
            Question(
                id="has-children",
                type=QuestionType.YESNO,
                label="Do you have minor children together?",
                field_name="hasChildren",
                required=True,
                options=YES_NO,
            ),
        ],
    )

    children_details = Section(
        id="children-details",
        title="Children Details",
        description="Shown only when there are minor children",
        conditional_logic=[_shown_if_yes("hasChildren")],
        questions=[
            Question(
                id="number-of-children",
                type=QuestionType.NUMBER,
                label="Number of minor children",
                field_name="numberOfChildren",
                required=True,
                validation=[
                    ValidationRule(ValidationKind.MIN, value=1),
                    ValidationRule(ValidationKind.MAX, value=20),
                ],
            ),
            Question(
                id="children-names",
                type=QuestionType.TEXTAREA,
                label="Children's full names",
                field_name="childrenNames",
            ),
        ],
    )

    return Structure(
        id="petition",
        name="Petition for Dissolution of Marriage",
        type="petition",
        description="Basic information needed to file for divorce in Illinois",
        sections=[personal, residency, prenup, children, children_details],
        metadata=StructureMetadata(
            estimated_time=25,
            required_documents=["Marriage certificate", "Prenuptial agreement (if any)"],
            help_resources=[
                HelpResource(
                    title="Illinois Courts",
                    url="https://www.illinoiscourts.gov/",
                ),
            ],
        ),
    )
