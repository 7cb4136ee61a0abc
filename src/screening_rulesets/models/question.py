"""Question type models for the screening questionnaire catalog.

Each question type maps to a specific UI component and answer shape:

    - yes_no: pick one of Yes / No / Not sure          -> str
    - single_select: pick one option                   -> str
    - multi_select: pick zero or more options          -> list[str]
    - scale: integer slider between min and max        -> int
    - text: free-text input                            -> str
    - date: ISO date input                             -> str

The discriminated ``Question`` union uses ``question_type`` as its
discriminator.  The ``question_mapper`` dict maps type strings to their
Pydantic classes for deserialisation from YAML.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from screening_rulesets.constants import NO, NOT_SURE, YES
from screening_rulesets.models.section import SectionId


# --- Base question type ---

class BaseQuestion(BaseModel):
    """Fields shared by all question types."""

    qid: str
    question: str
    sub_text: Optional[str] = None

    @property
    def required(self) -> bool:
        """True if the section cannot be left until this is answered.

        Multi-select, text and date questions may legitimately be left empty.
        """
        return self.question_type not in ("multi_select", "text", "date")


# --- User-facing question types ---

class YesNoQuestion(BaseQuestion):
    """Three-way Yes / No / Not sure question."""

    question_type: Literal["yes_no"] = "yes_no"
    options: List[str] = Field(default_factory=lambda: [YES, NO, NOT_SURE])


class SingleSelectQuestion(BaseQuestion):
    """Pick exactly one option label."""

    question_type: Literal["single_select"] = "single_select"
    options: List[str]


class MultiSelectQuestion(BaseQuestion):
    """Pick any number of option labels; order of selection is kept."""

    question_type: Literal["multi_select"] = "multi_select"
    options: List[str]


class ScaleQuestion(BaseQuestion):
    """Integer rating between ``min_value`` and ``max_value`` inclusive."""

    question_type: Literal["scale"] = "scale"
    min_value: int = 0
    max_value: int = 10

    @model_validator(mode="after")
    def _chk(self):
        if self.min_value >= self.max_value:
            raise ValueError("min_value must be < max_value")
        return self


class TextQuestion(BaseQuestion):
    """Open-ended text input."""

    question_type: Literal["text"] = "text"
    placeholder: Optional[str] = None


class DateQuestion(BaseQuestion):
    """Calendar date input (ISO ``YYYY-MM-DD``)."""

    question_type: Literal["date"] = "date"


# --- Discriminated union of all question types ---

Question = Annotated[
    Union[
        YesNoQuestion,
        SingleSelectQuestion,
        MultiSelectQuestion,
        ScaleQuestion,
        TextQuestion,
        DateQuestion,
    ],
    Field(discriminator="question_type"),
]

# Maps question_type string -> Pydantic class for deserialisation from YAML.
question_mapper = {
    "yes_no": YesNoQuestion,
    "single_select": SingleSelectQuestion,
    "multi_select": MultiSelectQuestion,
    "scale": ScaleQuestion,
    "text": TextQuestion,
    "date": DateQuestion,
}


class Section(BaseModel):
    """A questionnaire section: a titled, ordered list of questions."""

    id: SectionId
    title: str
    description: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)

    @property
    def qids(self) -> list[str]:
        return [q.qid for q in self.questions]
