"""Session and step models — the contract between the engine and API callers.

These models define what the engine returns at each point of the
questionnaire.  They are decoupled from the in-memory session rows kept by
the repository so API consumers never see engine internals.

Step types:
  - SectionStep: present one section's questions to the respondent
  - EmergencyStep: immediate danger reported; questionnaire stopped
  - ResultsStep: route finished; carries the assembled report

The ``StepResult`` union covers all cases so callers can dispatch on ``type``.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from screening_rulesets.models.report import ScreeningReport
from screening_rulesets.models.section import SectionId


class QuestionPayload(BaseModel):
    """Flattened question for API consumers, with the current answer."""

    qid: str
    question: str
    question_type: str
    sub_text: str | None = None
    # Option labels for yes_no / single_select / multi_select
    options: list[str] | None = None
    # {min, max} for scale
    constraints: dict | None = None
    # JSON-Schema-like description of the expected answer value
    answer_schema: dict | None = None
    required: bool = True
    value: Any = None


class SectionStep(BaseModel):
    """Engine step: show a section and wait for answers."""

    type: Literal["section"] = "section"
    section: SectionId
    title: str
    description: str | None = None
    # INTRO is section 0; the count excludes INTRO
    section_index: int
    section_count: int
    questions: list[QuestionPayload]
    # "Section 3 of 6"
    progress: str
    notices: list[str] = []
    can_proceed: bool
    is_last_before_results: bool = False


class EmergencyStep(BaseModel):
    """Engine step: respondent reported immediate danger."""

    type: Literal["emergency"] = "emergency"
    section: SectionId = SectionId.EMERGENCY
    title: str
    message: str


class ResultsStep(BaseModel):
    """Engine step: route complete, findings available."""

    type: Literal["results"] = "results"
    section: SectionId = SectionId.RESULTS
    report: ScreeningReport


# Callers can match on step.type to dispatch rendering logic.
StepResult = Annotated[
    Union[SectionStep, EmergencyStep, ResultsStep],
    Field(discriminator="type"),
]


class SessionInfo(BaseModel):
    """Public view of session state for API consumers."""

    user_id: str
    session_id: str
    status: str
    current_section: SectionId
    section_index: int
    route: list[SectionId]
    route_final: bool
    created_at: datetime
    updated_at: datetime
