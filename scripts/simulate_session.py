#!/usr/bin/env python3
"""Simulate a screening session end-to-end with the in-process SDK.

Walks a respondent through every section of the route, printing an audit
log of each question asked, the mock answer chosen, and the available
choices.  At RESULTS it prints the text summary, optionally after running
a mock AI analysis.

By default answers are **randomised** (``--random``, on by default) so each
run explores a different route.  Use ``--no-random`` for a deterministic
run that answers "Yes" to most entry questions.

Usage::

    # Default run (random answers)
    python scripts/simulate_session.py

    # Deterministic run
    python scripts/simulate_session.py --no-random

    # Reproducible random run, with the mock AI analysis
    python scripts/simulate_session.py --seed 7 --analysis

    # Allow the immediate-danger answer (may end in EMERGENCY)
    python scripts/simulate_session.py --allow-emergency
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any

_SCRIPT_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _SCRIPT_DIR.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from screening_rulesets.catalog import QuestionnaireCatalog  # noqa: E402
from screening_rulesets.constants import IMMEDIATE_DANGER_QID, NO  # noqa: E402
from screening_rulesets.engine import ScreeningEngine  # noqa: E402
from screening_rulesets.interfaces import AnalysisGenerator  # noqa: E402
from screening_rulesets.models.session import (  # noqa: E402
    EmergencyStep,
    QuestionPayload,
    ResultsStep,
    SectionStep,
)
from screening_rulesets.pipeline import ScreeningPipeline  # noqa: E402
from screening_rulesets.prompt import PromptManager  # noqa: E402

USER_ID = "sim_user"
SESSION_ID = "sim_session"

_RANDOM_TEXT_POOL = [
    "",
    "Depression (2019)",
    "Asthma",
    "Generalised anxiety, treated 2021",
]

_RANDOM_DATE_POOL = ["1958-02-11", "1975-08-10", "1990-01-30", "2003-11-01", ""]

MOCK_ANALYSIS = (
    "This is AI-generated and not a medical diagnosis.\n"
    "**Professional Insights**: The answers suggest a pattern worth reviewing.\n"
    "**Coping Tips**: Keep a regular sleep schedule.\n"
    "**Recommendations**: Share this summary with your doctor."
)


class SimAnalysisGenerator(AnalysisGenerator):
    """Returns a canned analysis without calling any model."""

    async def generate(self, prompt: str) -> str:
        return MOCK_ANALYSIS


# ---------------------------------------------------------------------------
# Mock answer generation
# ---------------------------------------------------------------------------

_random_mode = True
_allow_emergency = False


def answer_for(q: QuestionPayload) -> Any:
    """Pick a valid answer for one question payload."""
    if q.qid == IMMEDIATE_DANGER_QID and not _allow_emergency:
        return NO

    qtype = q.question_type
    if qtype in ("yes_no", "single_select"):
        if _random_mode:
            return random.choice(q.options)
        return q.options[0]

    if qtype == "multi_select":
        if _random_mode:
            k = random.randint(0, len(q.options))
            return random.sample(q.options, k)
        return q.options[:3]

    if qtype == "scale":
        lo, hi = q.constraints["min"], q.constraints["max"]
        if _random_mode:
            return random.randint(lo, hi)
        return hi - 2

    if qtype == "date":
        return random.choice(_RANDOM_DATE_POOL) if _random_mode else "1990-01-30"

    return random.choice(_RANDOM_TEXT_POOL) if _random_mode else ""


# ---------------------------------------------------------------------------
# Logging helpers
# ---------------------------------------------------------------------------

_DOUBLE_LINE = "═" * 62
_SINGLE_LINE = "─" * 62

_quiet = False


def _print(*args, **kwargs) -> None:
    """Print wrapper that respects the --quiet flag."""
    if not _quiet:
        print(*args, **kwargs)


def log_section_header(step: SectionStep) -> None:
    _print(f"\n{_DOUBLE_LINE}")
    _print(f" {step.section.value}: {step.title} ({step.progress})")
    _print(_DOUBLE_LINE)
    for notice in step.notices:
        _print(f" ! {notice}")


def log_question_and_answer(q: QuestionPayload, answer: Any, *, verbose: bool) -> None:
    _print(f"\n [Q] {q.question} ({q.qid}) -- type: {q.question_type}")
    if q.options:
        _print(f"     Options: {', '.join(q.options)}")
    if q.constraints:
        _print(f"     Range: {q.constraints['min']} - {q.constraints['max']}")
    _print(f" [A] {answer!r}")
    if verbose and q.answer_schema:
        _print(f"     answer_schema: {json.dumps(q.answer_schema, ensure_ascii=False)}")


# ---------------------------------------------------------------------------
# Main simulation
# ---------------------------------------------------------------------------


async def run_simulation(verbose: bool, analysis: bool) -> int:
    """Drive one session to RESULTS (or EMERGENCY).  Returns an exit code."""
    catalog = QuestionnaireCatalog()
    catalog.load()
    pipeline = ScreeningPipeline(
        ScreeningEngine(catalog),
        PromptManager(),
        generator=SimAnalysisGenerator() if analysis else None,
    )

    _print(_DOUBLE_LINE)
    _print(" SCREENING SESSION SIMULATION")
    _print(f" Random: {'ON' if _random_mode else 'OFF'}")
    _print(_DOUBLE_LINE)

    await pipeline.create_session(user_id=USER_ID, session_id=SESSION_ID)
    step = await pipeline.get_current_step(user_id=USER_ID, session_id=SESSION_ID)

    route_shown = False
    while isinstance(step, SectionStep):
        log_section_header(step)
        answers = {q.qid: answer_for(q) for q in step.questions}
        for q in step.questions:
            log_question_and_answer(q, answers[q.qid], verbose=verbose)

        if answers:
            step = await pipeline.submit_answers(
                user_id=USER_ID, session_id=SESSION_ID, values=answers,
            )
            if isinstance(step, EmergencyStep):
                break
            for notice in step.notices:
                _print(f" ! {notice}")
        step = await pipeline.advance(user_id=USER_ID, session_id=SESSION_ID)

        if not route_shown:
            info = await pipeline.get_session(user_id=USER_ID, session_id=SESSION_ID)
            if info.route_final:
                route_shown = True
                _print(f"\n{_SINGLE_LINE}")
                _print(f" Route: {' -> '.join(s.value for s in info.route)}")
                _print(_SINGLE_LINE)

    if isinstance(step, EmergencyStep):
        _print(f"\n{_DOUBLE_LINE}")
        _print(f" {step.title}")
        _print(_DOUBLE_LINE)
        _print(step.message)
        return 2

    assert isinstance(step, ResultsStep)
    if analysis:
        await pipeline.generate_analysis(user_id=USER_ID, session_id=SESSION_ID)

    summary = await pipeline.render_summary(user_id=USER_ID, session_id=SESSION_ID)
    _print(f"\n{_DOUBLE_LINE}")
    _print(" RESULTS")
    _print(_DOUBLE_LINE)
    print(summary)

    if verbose:
        findings = await pipeline.get_findings(user_id=USER_ID, session_id=SESSION_ID)
        _print(f"\n{_SINGLE_LINE}")
        _print(json.dumps(
            [f.model_dump(exclude_none=True) for f in findings],
            indent=2, ensure_ascii=False,
        ))
    return 0


def main() -> None:
    global _quiet, _random_mode, _allow_emergency

    parser = argparse.ArgumentParser(description="Simulate a screening session")
    parser.add_argument(
        "--random", dest="random", action="store_true", default=True,
        help="Randomise answers (default)",
    )
    parser.add_argument(
        "--no-random", dest="random", action="store_false",
        help="Deterministic answers",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--allow-emergency", action="store_true",
        help="Let the random answer for the immediate-danger question be 'Yes'",
    )
    parser.add_argument(
        "--analysis", action="store_true",
        help="Run the mock AI analysis before printing the summary",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show schemas and route")
    parser.add_argument("-q", "--quiet", action="store_true", help="Print only the summary")
    args = parser.parse_args()

    _random_mode = args.random
    _allow_emergency = args.allow_emergency
    _quiet = args.quiet
    if args.seed is not None:
        random.seed(args.seed)

    logging.basicConfig(
        level=logging.CRITICAL if args.quiet else logging.INFO,
        format="%(levelname)s [%(name)s] %(message)s",
    )
    sys.exit(asyncio.run(run_simulation(args.verbose, args.analysis)))


if __name__ == "__main__":
    main()
