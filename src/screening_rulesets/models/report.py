"""Report models — the structured findings document for one session.

``ScreeningReport`` is assembled by :func:`screening_rulesets.report.build_report`
and rendered to text by the ``PromptManager`` (summary, email, AI prompt).
"""

from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, computed_field

from screening_rulesets.models.pattern import PatternResult
from screening_rulesets.models.section import SectionId


class HistoryField(BaseModel):
    """One personal-history line, e.g. ``Gender: Female``."""

    qid: str
    label: str
    # "Not ascertained" when the respondent skipped it
    value: str
    answered: bool


class TranscriptEntry(BaseModel):
    qid: str
    question: str
    answer: str


class TranscriptSection(BaseModel):
    """Answers for one traversed section, in catalog question order."""

    section: SectionId
    title: str
    entries: list[TranscriptEntry]


class ScreeningReport(BaseModel):
    """Everything a report, summary or AI prompt needs about one session."""

    report_date: date
    history_answered: bool
    history: list[HistoryField]
    impairment_score: Union[int, float]
    severity_label: str
    time_course: str
    domains: list[str]
    findings: list[PatternResult]
    transcript: list[TranscriptSection]
    # Set only when no pattern was detected
    no_findings_message: Optional[str] = None
    analysis: Optional[str] = None

    @property
    def positive(self) -> list[PatternResult]:
        return [p for p in self.findings if p.detected]

    @computed_field
    @property
    def ruled_out(self) -> list[str]:
        return [p.name for p in self.findings if not p.detected]

    @computed_field
    @property
    def urgent(self) -> bool:
        return any(p.urgent for p in self.positive)

    def history_value(self, qid: str) -> str:
        for item in self.history:
            if item.qid == qid:
                return item.value
        raise KeyError(qid)


class EmailDraft(BaseModel):
    """A ready-to-open ``mailto:`` draft carrying the text summary."""

    recipient: str
    subject: str
    body: str
    mailto_url: str
