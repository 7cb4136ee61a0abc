"""ScreeningEngine — drives one respondent through the questionnaire.

Sessions are kept by an in-memory :class:`SessionRepository`; every public
call loads the session row, computes or applies one step, and returns a
public model.  The engine never hands the mutable answer store to the rule
engines, only a snapshot.

Flow overview:
    INTRO -> PERSONAL_HISTORY -> SAFETY -> CORE
        -> <optional sections chosen by compute_route> -> RESULTS

    - Leaving CORE computes the route once; it is fixed from then on.
    - Answering "Yes" to the immediate-danger question switches the
      session to the EMERGENCY override, which ends the questionnaire.
    - Reaching RESULTS marks the session completed.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping

from screening_rulesets.catalog import QuestionnaireCatalog
from screening_rulesets.constants import (
    IMMEDIATE_DANGER_QID,
    LIFE_WORTH_NOTICE,
    MOOD_LIFE_WORTH_QID,
    NO,
    REALITY_REVIEW_NOTICE,
    REALITY_SAFETY_QID,
    TRAUMA_ENTRY_QID,
    TRAUMA_SKIP_NOTICE,
    YES,
)
from screening_rulesets.models.answer import AnswerValue
from screening_rulesets.models.pattern import PatternResult
from screening_rulesets.models.question import (
    DateQuestion,
    MultiSelectQuestion,
    Question,
    ScaleQuestion,
    Section,
    SingleSelectQuestion,
    TextQuestion,
    YesNoQuestion,
)
from screening_rulesets.models.report import ScreeningReport
from screening_rulesets.models.section import SectionId, SessionStatus
from screening_rulesets.models.session import (
    EmergencyStep,
    QuestionPayload,
    ResultsStep,
    SectionStep,
    SessionInfo,
    StepResult,
)
from screening_rulesets.patterns import analyze_patterns
from screening_rulesets.predicates import is_answered
from screening_rulesets.report import build_report
from screening_rulesets.repository import SessionRepository, SessionRow
from screening_rulesets.routing import compute_route, index_after_core

logger = logging.getLogger(__name__)

# Sections that never block navigation
_ALWAYS_PASSABLE = frozenset({SectionId.INTRO, SectionId.RESULTS})


class ScreeningEngine:
    """Orchestrates section-by-section navigation for screening sessions.

    Args:
        catalog: a loaded :class:`QuestionnaireCatalog` instance
    """

    def __init__(self, catalog: QuestionnaireCatalog) -> None:
        self._catalog = catalog
        self._repo = SessionRepository()

    @property
    def catalog(self) -> QuestionnaireCatalog:
        return self._catalog

    # ==================================================================
    # Session lifecycle
    # ==================================================================

    async def create_session(self, *, user_id: str, session_id: str) -> SessionInfo:
        """Create a new session positioned at INTRO.

        Raises:
            ValueError: if the session already exists.
        """
        row = await self._repo.create_session(user_id=user_id, session_id=session_id)
        logger.info("Session created: user_id=%s session_id=%s", user_id, session_id)
        return self._to_session_info(row)

    async def get_session(self, *, user_id: str, session_id: str) -> SessionInfo | None:
        """Fetch session info by (user_id, session_id).  Returns None if not found."""
        row = await self._repo.get_by_user_and_session(user_id, session_id)
        if row is None:
            return None
        return self._to_session_info(row)

    async def list_sessions(
        self, *, user_id: str, limit: int = 20, offset: int = 0
    ) -> list[SessionInfo]:
        """List sessions for a user, most recent first."""
        rows = await self._repo.list_by_user(user_id, limit=limit, offset=offset)
        return [self._to_session_info(r) for r in rows]

    async def delete_session(self, *, user_id: str, session_id: str) -> None:
        """Delete a session and its answers.

        Raises:
            ValueError: if the session is not found.
        """
        deleted = await self._repo.delete_session(user_id, session_id)
        if not deleted:
            raise ValueError(
                f"Session not found: user_id={user_id}, session_id={session_id}"
            )
        logger.info("Session deleted: user_id=%s session_id=%s", user_id, session_id)

    # ==================================================================
    # Step API
    # ==================================================================

    async def get_current_step(self, *, user_id: str, session_id: str) -> StepResult:
        """Return the current step.  Read-only."""
        row = await self._load_session(user_id, session_id)
        return self._compute_step(row)

    async def submit_answers(
        self,
        *,
        user_id: str,
        session_id: str,
        values: Mapping[str, Any],
    ) -> StepResult:
        """Record answers for questions of the current section.

        Answers are validated against the catalog before any of them is
        stored, so a rejected batch leaves the session untouched.  The
        session stays on the same section; call :meth:`advance` to move on.

        Raises:
            ValueError: if the session is not active, a qid is unknown or
                belongs to another section, or a value does not fit its
                question.
        """
        row = await self._load_session(user_id, session_id)
        self._require_active(row, "submit answers")

        section = row.current_section
        section_qids = set(self._catalog.get_section(section).qids)
        for qid, value in values.items():
            if qid not in self._catalog.questions:
                raise ValueError(f"Unknown question id: '{qid}'")
            if qid not in section_qids:
                raise ValueError(
                    f"Question '{qid}' does not belong to the current section "
                    f"{section.value}"
                )
            _validate_answer(self._catalog.get_question(qid), value)

        row.answers.update(values)
        row.touch()

        if row.answers.get(IMMEDIATE_DANGER_QID) == YES:
            row.status = SessionStatus.EMERGENCY
            logger.warning(
                "Emergency override: session_id=%s reported immediate danger",
                session_id,
            )
        return self._compute_step(row)

    async def advance(self, *, user_id: str, session_id: str) -> StepResult:
        """Move to the next section of the route.

        Leaving CORE for the first time computes the route from the answers
        given so far; every later pass through CORE keeps that route.

        Raises:
            ValueError: if the session is not active, the current section
                still has unanswered required questions, or the session is
                already at RESULTS.
        """
        row = await self._load_session(user_id, session_id)
        self._require_active(row, "advance")

        section = row.current_section
        if section == SectionId.RESULTS:
            raise ValueError("Cannot advance: already at RESULTS")
        if not self.can_proceed(section, row.answers.snapshot()):
            raise ValueError(
                f"Cannot advance: section {section.value} has unanswered "
                f"required questions"
            )

        if section == SectionId.CORE:
            if not row.route_final:
                row.route = compute_route(row.answers.snapshot())
                row.route_final = True
                logger.info(
                    "Route fixed for session_id=%s: %s",
                    session_id,
                    [s.value for s in row.route],
                )
            row.section_index = index_after_core(row.route)
        else:
            row.section_index += 1

        if row.current_section == SectionId.RESULTS:
            row.status = SessionStatus.COMPLETED
            logger.info("Session completed: session_id=%s", session_id)
        row.touch()
        return self._compute_step(row)

    async def step_back(self, *, user_id: str, session_id: str) -> StepResult:
        """Go back one section.  Answers are kept.

        Stepping back from RESULTS reopens a completed session.

        Raises:
            ValueError: if the session is in the emergency state or already
                at the first section.
        """
        row = await self._load_session(user_id, session_id)
        if row.status == SessionStatus.EMERGENCY:
            raise ValueError("Cannot step back: session is in emergency state")
        if row.section_index == 0:
            raise ValueError("Cannot step back: already at the first section")

        row.section_index -= 1
        if row.status == SessionStatus.COMPLETED:
            row.status = SessionStatus.IN_PROGRESS
        row.touch()
        return self._compute_step(row)

    # ==================================================================
    # Findings
    # ==================================================================

    async def get_answers(self, *, user_id: str, session_id: str) -> Mapping[str, AnswerValue]:
        """Read-only snapshot of the session's answers."""
        row = await self._load_session(user_id, session_id)
        return row.answers.snapshot()

    async def get_findings(self, *, user_id: str, session_id: str) -> list[PatternResult]:
        """Evaluate the pattern rules against the session's current answers."""
        row = await self._load_session(user_id, session_id)
        return analyze_patterns(row.answers.snapshot())

    async def get_report(
        self, *, user_id: str, session_id: str, today: date | None = None
    ) -> ScreeningReport:
        """Assemble the report for the session as it stands now."""
        row = await self._load_session(user_id, session_id)
        return self._build_report(row, today=today)

    async def set_analysis(self, *, user_id: str, session_id: str, text: str) -> None:
        """Attach AI analysis text to the session's report."""
        row = await self._load_session(user_id, session_id)
        row.analysis = text
        row.touch()

    # ==================================================================
    # Section rules
    # ==================================================================

    def can_proceed(self, section: SectionId, answers: Mapping[str, Any]) -> bool:
        """True if the respondent may leave ``section``.

        INTRO and RESULTS always pass.  TRAUMA passes as soon as the entry
        question is answered "No".  Otherwise every required question (not
        multi-select, text or date) needs a non-empty answer.
        """
        if section in _ALWAYS_PASSABLE:
            return True
        if section == SectionId.TRAUMA and answers.get(TRAUMA_ENTRY_QID) == NO:
            return True
        return all(
            is_answered(answers.get(q.qid))
            for q in self._catalog.get_section(section).questions
            if q.required
        )

    @staticmethod
    def section_notices(section: SectionId, answers: Mapping[str, Any]) -> list[str]:
        """Inline notices shown above a section's questions."""
        notices = []
        if section == SectionId.SAFETY and answers.get(REALITY_SAFETY_QID) == YES:
            notices.append(REALITY_REVIEW_NOTICE)
        if section == SectionId.MOOD and answers.get(MOOD_LIFE_WORTH_QID) == YES:
            notices.append(LIFE_WORTH_NOTICE)
        if section == SectionId.TRAUMA and answers.get(TRAUMA_ENTRY_QID) == NO:
            notices.append(TRAUMA_SKIP_NOTICE)
        return notices

    @staticmethod
    def progress_label(section_index: int, route: list[SectionId]) -> str:
        return f"Section {section_index} of {len(route) - 1}"

    # ==================================================================
    # Internal helpers
    # ==================================================================

    async def _load_session(self, user_id: str, session_id: str) -> SessionRow:
        """Load a session row or raise ValueError if not found."""
        row = await self._repo.get_by_user_and_session(user_id, session_id)
        if row is None:
            raise ValueError(
                f"Session not found: user_id={user_id}, session_id={session_id}"
            )
        return row

    @staticmethod
    def _require_active(row: SessionRow, action: str) -> None:
        if row.status == SessionStatus.EMERGENCY:
            raise ValueError(f"Cannot {action}: session is in emergency state")

    def _build_report(self, row: SessionRow, today: date | None = None) -> ScreeningReport:
        return build_report(
            row.answers.snapshot(),
            row.route,
            self._catalog,
            analysis=row.analysis,
            today=today,
        )

    def _compute_step(self, row: SessionRow) -> StepResult:
        """Build the step for the session's current position."""
        if row.status == SessionStatus.EMERGENCY:
            emergency = self._catalog.get_section(SectionId.EMERGENCY)
            return EmergencyStep(
                title=emergency.title,
                message=emergency.description or "",
            )
        if row.current_section == SectionId.RESULTS:
            return ResultsStep(report=self._build_report(row))
        return self._section_step(row)

    def _section_step(self, row: SessionRow) -> SectionStep:
        section_id = row.current_section
        section: Section = self._catalog.get_section(section_id)
        answers = row.answers.snapshot()

        questions = section.questions
        if section_id == SectionId.TRAUMA and answers.get(TRAUMA_ENTRY_QID) == NO:
            # Only the entry question stays visible so it can be changed
            questions = [q for q in questions if q.qid == TRAUMA_ENTRY_QID]

        next_index = row.section_index + 1
        return SectionStep(
            section=section_id,
            title=section.title,
            description=section.description,
            section_index=row.section_index,
            section_count=len(row.route) - 1,
            questions=[self._question_to_payload(q, answers.get(q.qid)) for q in questions],
            progress=self.progress_label(row.section_index, row.route),
            notices=self.section_notices(section_id, answers),
            can_proceed=self.can_proceed(section_id, answers),
            is_last_before_results=(
                next_index < len(row.route) and row.route[next_index] == SectionId.RESULTS
            ),
        )

    @staticmethod
    def _question_to_payload(question: Question, value: Any) -> QuestionPayload:
        """Convert a typed Question model to a flat QuestionPayload for the API."""
        payload = QuestionPayload(
            qid=question.qid,
            question=question.question,
            question_type=question.question_type,
            sub_text=question.sub_text,
            required=question.required,
            value=value,
        )

        if isinstance(question, (YesNoQuestion, SingleSelectQuestion)):
            payload.options = list(question.options)
            payload.answer_schema = {"type": "string", "enum": list(question.options)}

        elif isinstance(question, MultiSelectQuestion):
            payload.options = list(question.options)
            payload.answer_schema = {
                "type": "array",
                "items": {"type": "string", "enum": list(question.options)},
            }

        elif isinstance(question, ScaleQuestion):
            payload.constraints = {"min": question.min_value, "max": question.max_value}
            payload.answer_schema = {
                "type": "integer",
                "minimum": question.min_value,
                "maximum": question.max_value,
            }

        elif isinstance(question, DateQuestion):
            payload.answer_schema = {"type": "string", "format": "date"}

        elif isinstance(question, TextQuestion):
            payload.answer_schema = {"type": "string"}

        return payload

    @staticmethod
    def _to_session_info(row: SessionRow) -> SessionInfo:
        """Convert an in-memory row to a public SessionInfo."""
        return SessionInfo(
            user_id=row.user_id,
            session_id=row.session_id,
            status=row.status.value,
            current_section=row.current_section,
            section_index=row.section_index,
            route=list(row.route),
            route_final=row.route_final,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


def _validate_answer(question: Question, value: Any) -> None:
    """Check that ``value`` has the shape ``question`` expects.

    Raises:
        ValueError: describing the first problem found.
    """
    qid = question.qid
    if isinstance(question, (YesNoQuestion, SingleSelectQuestion)):
        if not isinstance(value, str) or value not in question.options:
            raise ValueError(
                f"Invalid answer for '{qid}': expected one of {question.options}, "
                f"got {value!r}"
            )

    elif isinstance(question, MultiSelectQuestion):
        if not isinstance(value, list):
            raise ValueError(f"Invalid answer for '{qid}': expected a list, got {value!r}")
        unknown = [v for v in value if v not in question.options]
        if unknown:
            raise ValueError(f"Invalid answer for '{qid}': unknown option(s) {unknown}")
        if len(set(value)) != len(value):
            raise ValueError(f"Invalid answer for '{qid}': duplicate selections")

    elif isinstance(question, ScaleQuestion):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Invalid answer for '{qid}': expected an integer, got {value!r}")
        if not question.min_value <= value <= question.max_value:
            raise ValueError(
                f"Invalid answer for '{qid}': {value} is outside "
                f"{question.min_value}-{question.max_value}"
            )

    elif isinstance(question, DateQuestion):
        if not isinstance(value, str):
            raise ValueError(f"Invalid answer for '{qid}': expected an ISO date string")
        if value:
            try:
                date.fromisoformat(value)
            except ValueError:
                raise ValueError(
                    f"Invalid answer for '{qid}': '{value}' is not an ISO date (YYYY-MM-DD)"
                ) from None

    elif isinstance(question, TextQuestion):
        if not isinstance(value, str):
            raise ValueError(f"Invalid answer for '{qid}': expected a string")
