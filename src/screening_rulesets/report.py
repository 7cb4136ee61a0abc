"""Report assembly — turns a finished session into a ``ScreeningReport``.

The report is a pure function of the answers, the traversed route and the
catalog; rendering it to text is the job of the ``PromptManager``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from screening_rulesets.catalog import QuestionnaireCatalog
from screening_rulesets.constants import (
    DOMAINS_QID,
    HISTORY_FIELDS,
    NOT_ANSWERED,
    NOT_ASCERTAINED,
    NOT_SPECIFIED,
    NO_PATTERNS_MESSAGE,
    SEVERITY_BANDS,
    TIME_COURSE_QID,
)
from screening_rulesets.models.answer import Answers
from screening_rulesets.models.report import (
    HistoryField,
    ScreeningReport,
    TranscriptEntry,
    TranscriptSection,
)
from screening_rulesets.models.section import SectionId
from screening_rulesets.patterns import analyze_patterns
from screening_rulesets.predicates import impairment_score, selected, text_answer

logger = logging.getLogger(__name__)

# Sections that never appear in the transcript
_NON_QUESTION_SECTIONS = frozenset(
    {SectionId.INTRO, SectionId.RESULTS, SectionId.EMERGENCY}
)


def severity_label(score: float) -> str:
    """Map a 0-10 impairment score to Mild / Moderate / Severe."""
    for floor, label in SEVERITY_BANDS:
        if score >= floor:
            return label
    return SEVERITY_BANDS[-1][1]


def format_answer(value: Any) -> str:
    """Render a stored answer for the transcript."""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if value is None or value == "":
        return NOT_ANSWERED
    return str(value)


def _history_field(qid: str, label: str, value: Any) -> HistoryField:
    if isinstance(value, (list, tuple)):
        answered = len(value) > 0
        text = ", ".join(str(v) for v in value)
    else:
        answered = value is not None and value != ""
        text = str(value) if answered else ""
    return HistoryField(
        qid=qid,
        label=label,
        value=text if answered else NOT_ASCERTAINED,
        answered=answered,
    )


def build_transcript(
    answers: Answers,
    route: list[SectionId],
    catalog: QuestionnaireCatalog,
) -> list[TranscriptSection]:
    """Every traversed question section with each question's formatted answer."""
    transcript = []
    for section_id in route:
        if section_id in _NON_QUESTION_SECTIONS:
            continue
        section = catalog.get_section(section_id)
        entries = [
            TranscriptEntry(
                qid=q.qid,
                question=q.question,
                answer=format_answer(answers.get(q.qid)),
            )
            for q in section.questions
        ]
        transcript.append(
            TranscriptSection(section=section_id, title=section.title, entries=entries)
        )
    return transcript


def build_report(
    answers: Answers,
    route: list[SectionId],
    catalog: QuestionnaireCatalog,
    analysis: str | None = None,
    *,
    today: date | None = None,
) -> ScreeningReport:
    """Assemble the findings report for one session.

    Args:
        answers: a snapshot of the session's answers.
        route: the traversed route (prefix only if CORE was never finished).
        catalog: the loaded questionnaire catalog, for titles and wording.
        analysis: AI analysis text, if one was generated.
        today: report date; defaults to the current local date.
    """
    score = impairment_score(answers)
    findings = analyze_patterns(answers)
    report = ScreeningReport(
        report_date=today or date.today(),
        history_answered=bool(answers.get("ph_1")),
        history=[
            _history_field(qid, label, answers.get(qid))
            for qid, label in HISTORY_FIELDS.items()
        ],
        impairment_score=score,
        severity_label=severity_label(score),
        time_course=text_answer(answers.get(TIME_COURSE_QID)) or NOT_SPECIFIED,
        domains=selected(answers.get(DOMAINS_QID)),
        findings=findings,
        transcript=build_transcript(answers, route, catalog),
        no_findings_message=(
            None if any(f.detected for f in findings) else NO_PATTERNS_MESSAGE
        ),
        analysis=analysis,
    )
    logger.debug(
        "Report built: score=%s (%s), %d finding(s), %d positive",
        score,
        report.severity_label,
        len(findings),
        len(report.positive),
    )
    return report
