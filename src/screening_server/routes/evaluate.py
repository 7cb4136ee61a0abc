"""Stateless evaluation endpoints — run the rule engines on a posted answer map.

No session is created or read.  The rule engines never raise on missing
or malformed answers, so any JSON object is accepted.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from screening_rulesets.models.section import SectionId
from screening_rulesets.patterns import analyze_patterns
from screening_rulesets.routing import compute_route

from screening_server.dependencies import get_user_id

router = APIRouter(prefix="/evaluate", tags=["evaluate"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class EvaluateRequest(BaseModel):
    """Body for POST /evaluate/*: question id -> answer value."""
    answers: dict[str, Any]


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/route")
async def evaluate_route(
    body: EvaluateRequest,
    user_id: str = Depends(get_user_id),
) -> dict:
    """Compute the section route.  Returns ``{route: [...]}``."""
    route: list[SectionId] = compute_route(body.answers)
    return {"route": [s.value for s in route]}


@router.post("/patterns")
async def evaluate_patterns(
    body: EvaluateRequest,
    user_id: str = Depends(get_user_id),
) -> list[dict]:
    """Evaluate the pattern rules; unset optional fields are omitted."""
    return [p.model_dump(exclude_none=True) for p in analyze_patterns(body.answers)]
