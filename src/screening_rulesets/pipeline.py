"""ScreeningPipeline — the questionnaire engine plus the AI analysis stage.

Wraps :class:`ScreeningEngine` and adds the optional AI clinical companion:

    questionnaire ──► RESULTS ──► (optional) AI analysis

The pipeline is non-invasive to the engine: session and step calls are
proxied unchanged, and the analysis text is stored on the session so it
shows up in later reports and summaries.

Usage::

    catalog = QuestionnaireCatalog()
    catalog.load()
    engine = ScreeningEngine(catalog)
    pipeline = ScreeningPipeline(engine, PromptManager(), generator=MyGenerator())

    await pipeline.create_session(user_id="u1", session_id="s1")
    # ... submit_answers / advance until RESULTS ...
    text = await pipeline.generate_analysis(user_id="u1", session_id="s1")
    summary = await pipeline.render_summary(user_id="u1", session_id="s1")
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from screening_rulesets.engine import ScreeningEngine
from screening_rulesets.interfaces import AnalysisGenerator
from screening_rulesets.models.pattern import PatternResult
from screening_rulesets.models.report import EmailDraft, ScreeningReport
from screening_rulesets.models.session import SessionInfo, StepResult
from screening_rulesets.prompt import PromptManager

logger = logging.getLogger(__name__)

# Stored when the generator returns nothing
_EMPTY_ANALYSIS = "No analysis generated."


class ScreeningPipeline:
    """Orchestrates the questionnaire and the AI analysis stage.

    Args:
        engine: a configured :class:`ScreeningEngine` instance
        prompts: the :class:`PromptManager` used for summaries and prompts
        generator: optional AI analysis generator; if ``None``,
            :meth:`generate_analysis` reports the analysis as unavailable
    """

    def __init__(
        self,
        engine: ScreeningEngine,
        prompts: PromptManager,
        generator: AnalysisGenerator | None = None,
    ) -> None:
        self._engine = engine
        self._prompts = prompts
        self._generator = generator

    @property
    def engine(self) -> ScreeningEngine:
        return self._engine

    @property
    def has_generator(self) -> bool:
        return self._generator is not None

    # ==================================================================
    # Session lifecycle: proxy to engine
    # ==================================================================

    async def create_session(self, *, user_id: str, session_id: str) -> SessionInfo:
        return await self._engine.create_session(user_id=user_id, session_id=session_id)

    async def get_session(self, *, user_id: str, session_id: str) -> SessionInfo | None:
        return await self._engine.get_session(user_id=user_id, session_id=session_id)

    async def list_sessions(
        self, *, user_id: str, limit: int = 20, offset: int = 0
    ) -> list[SessionInfo]:
        return await self._engine.list_sessions(user_id=user_id, limit=limit, offset=offset)

    async def delete_session(self, *, user_id: str, session_id: str) -> None:
        await self._engine.delete_session(user_id=user_id, session_id=session_id)

    # ==================================================================
    # Step API: proxy to engine
    # ==================================================================

    async def get_current_step(self, *, user_id: str, session_id: str) -> StepResult:
        return await self._engine.get_current_step(user_id=user_id, session_id=session_id)

    async def submit_answers(
        self, *, user_id: str, session_id: str, values: Mapping[str, Any]
    ) -> StepResult:
        return await self._engine.submit_answers(
            user_id=user_id, session_id=session_id, values=values,
        )

    async def advance(self, *, user_id: str, session_id: str) -> StepResult:
        return await self._engine.advance(user_id=user_id, session_id=session_id)

    async def step_back(self, *, user_id: str, session_id: str) -> StepResult:
        return await self._engine.step_back(user_id=user_id, session_id=session_id)

    # ==================================================================
    # Findings and rendering
    # ==================================================================

    async def get_findings(self, *, user_id: str, session_id: str) -> list[PatternResult]:
        return await self._engine.get_findings(user_id=user_id, session_id=session_id)

    async def get_report(self, *, user_id: str, session_id: str) -> ScreeningReport:
        return await self._engine.get_report(user_id=user_id, session_id=session_id)

    async def render_summary(self, *, user_id: str, session_id: str) -> str:
        report = await self.get_report(user_id=user_id, session_id=session_id)
        return self._prompts.render_summary(report)

    async def render_email(self, *, user_id: str, session_id: str) -> EmailDraft:
        report = await self.get_report(user_id=user_id, session_id=session_id)
        return self._prompts.render_email(report)

    async def render_analysis_prompt(self, *, user_id: str, session_id: str) -> str:
        report = await self.get_report(user_id=user_id, session_id=session_id)
        return self._prompts.render_analysis_prompt(report)

    # ==================================================================
    # AI analysis stage
    # ==================================================================

    async def generate_analysis(self, *, user_id: str, session_id: str) -> str:
        """Ask the AI companion for an analysis and store it on the session.

        Raises:
            ValueError: if the session is not found, or the analysis is
                unavailable (no generator configured, or the generator failed).
        """
        prompt = await self.render_analysis_prompt(user_id=user_id, session_id=session_id)

        if self._generator is None:
            raise ValueError("Analysis unavailable: no analysis generator configured")

        try:
            text = await self._generator.generate(prompt)
        except Exception as exc:
            logger.exception("Analysis generation failed for session_id=%s", session_id)
            raise ValueError("Analysis unavailable: generator failed") from exc

        text = text or _EMPTY_ANALYSIS
        await self._engine.set_analysis(user_id=user_id, session_id=session_id, text=text)
        logger.info("Analysis stored for session_id=%s (%d chars)", session_id, len(text))
        return text
