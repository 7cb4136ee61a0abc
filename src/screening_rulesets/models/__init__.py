"""Public model re-exports for screening_rulesets.

Consumers should import from ``screening_rulesets.models`` rather than
reaching into sub-modules directly.
"""

# --- Answers ---
from screening_rulesets.models.answer import AnswerStore, Answers, AnswerValue

# --- Sections / status ---
from screening_rulesets.models.section import SectionId, SessionStatus

# --- Findings ---
from screening_rulesets.models.pattern import PatternResult

# --- Questions ---
from screening_rulesets.models.question import (
    BaseQuestion,
    DateQuestion,
    MultiSelectQuestion,
    Question,
    ScaleQuestion,
    Section,
    SingleSelectQuestion,
    TextQuestion,
    YesNoQuestion,
    question_mapper,
)

# --- Report ---
from screening_rulesets.models.report import (
    EmailDraft,
    HistoryField,
    ScreeningReport,
    TranscriptEntry,
    TranscriptSection,
)

# --- Session / step ---
from screening_rulesets.models.session import (
    EmergencyStep,
    QuestionPayload,
    ResultsStep,
    SectionStep,
    SessionInfo,
    StepResult,
)

__all__ = [
    # Answers
    "AnswerStore",
    "Answers",
    "AnswerValue",
    # Sections
    "SectionId",
    "SessionStatus",
    # Findings
    "PatternResult",
    # Questions
    "BaseQuestion",
    "DateQuestion",
    "MultiSelectQuestion",
    "Question",
    "ScaleQuestion",
    "Section",
    "SingleSelectQuestion",
    "TextQuestion",
    "YesNoQuestion",
    "question_mapper",
    # Report
    "EmailDraft",
    "HistoryField",
    "ScreeningReport",
    "TranscriptEntry",
    "TranscriptSection",
    # Session
    "EmergencyStep",
    "QuestionPayload",
    "ResultsStep",
    "SectionStep",
    "SessionInfo",
    "StepResult",
]
