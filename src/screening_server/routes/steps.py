"""Step endpoints — read the current step, submit answers, navigate.

The response of every endpoint here is a ``StepResult``, dispatchable on
``type``:
  - ``section``: a section's questions with progress and notices
  - ``emergency``: immediate danger reported, questionnaire stopped
  - ``results``: route finished, report attached
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from screening_rulesets.models.session import StepResult
from screening_rulesets.pipeline import ScreeningPipeline

from screening_server.dependencies import get_pipeline, get_user_id

router = APIRouter(tags=["steps"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class SubmitAnswersRequest(BaseModel):
    """Body for POST /sessions/{session_id}/answers.

    ``answers`` maps question ids of the current section to values.
    """
    answers: dict[str, Any]


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/sessions/{session_id}/step")
async def get_current_step(
    session_id: str,
    user_id: str = Depends(get_user_id),
    pipeline: ScreeningPipeline = Depends(get_pipeline),
) -> StepResult:
    """Return the current step for the session."""
    return await pipeline.get_current_step(user_id=user_id, session_id=session_id)


@router.post("/sessions/{session_id}/answers")
async def submit_answers(
    session_id: str,
    body: SubmitAnswersRequest,
    user_id: str = Depends(get_user_id),
    pipeline: ScreeningPipeline = Depends(get_pipeline),
) -> StepResult:
    """Record answers for the current section.

    The session stays on the same section (unless an emergency answer
    switches it to the ``emergency`` step).  Raises 400 for unknown
    question ids or values that don't fit their question.
    """
    return await pipeline.submit_answers(
        user_id=user_id, session_id=session_id, values=body.answers,
    )


@router.post("/sessions/{session_id}/next")
async def advance(
    session_id: str,
    user_id: str = Depends(get_user_id),
    pipeline: ScreeningPipeline = Depends(get_pipeline),
) -> StepResult:
    """Move to the next section.

    Raises 400 if the current section still has unanswered required
    questions, or the session is already at RESULTS.
    """
    return await pipeline.advance(user_id=user_id, session_id=session_id)


@router.post("/sessions/{session_id}/back")
async def step_back(
    session_id: str,
    user_id: str = Depends(get_user_id),
    pipeline: ScreeningPipeline = Depends(get_pipeline),
) -> StepResult:
    """Go back one section.  Raises 400 at the first section."""
    return await pipeline.step_back(user_id=user_id, session_id=session_id)
