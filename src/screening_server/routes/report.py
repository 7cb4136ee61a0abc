"""Report endpoints — findings, report, text summary, email draft, AI analysis.

These can be called at any point of a session; before RESULTS they
reflect the answers given so far.
"""

from fastapi import APIRouter, Depends

from screening_rulesets.models.report import EmailDraft, ScreeningReport
from screening_rulesets.pipeline import ScreeningPipeline

from screening_server.dependencies import get_pipeline, get_user_id

router = APIRouter(tags=["report"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/sessions/{session_id}/findings")
async def get_findings(
    session_id: str,
    user_id: str = Depends(get_user_id),
    pipeline: ScreeningPipeline = Depends(get_pipeline),
) -> list[dict]:
    """Evaluated pattern rules; unset optional fields are omitted."""
    findings = await pipeline.get_findings(user_id=user_id, session_id=session_id)
    return [f.model_dump(exclude_none=True) for f in findings]


@router.get("/sessions/{session_id}/report")
async def get_report(
    session_id: str,
    user_id: str = Depends(get_user_id),
    pipeline: ScreeningPipeline = Depends(get_pipeline),
) -> ScreeningReport:
    """Structured report: history, impairment, findings and transcript."""
    return await pipeline.get_report(user_id=user_id, session_id=session_id)


@router.get("/sessions/{session_id}/summary")
async def get_summary(
    session_id: str,
    user_id: str = Depends(get_user_id),
    pipeline: ScreeningPipeline = Depends(get_pipeline),
) -> dict:
    """Plain-text results summary.  Returns ``{summary: "..."}``."""
    summary = await pipeline.render_summary(user_id=user_id, session_id=session_id)
    return {"summary": summary}


@router.get("/sessions/{session_id}/email")
async def get_email_draft(
    session_id: str,
    user_id: str = Depends(get_user_id),
    pipeline: ScreeningPipeline = Depends(get_pipeline),
) -> EmailDraft:
    """Email draft to the treating clinician, with a ``mailto:`` link."""
    return await pipeline.render_email(user_id=user_id, session_id=session_id)


@router.get("/sessions/{session_id}/analysis-prompt")
async def get_analysis_prompt(
    session_id: str,
    user_id: str = Depends(get_user_id),
    pipeline: ScreeningPipeline = Depends(get_pipeline),
) -> dict:
    """The prompt that would be sent to the AI companion.

    Returns ``{prompt: "..."}``.
    """
    prompt = await pipeline.render_analysis_prompt(user_id=user_id, session_id=session_id)
    return {"prompt": prompt}


@router.post("/sessions/{session_id}/analysis")
async def generate_analysis(
    session_id: str,
    user_id: str = Depends(get_user_id),
    pipeline: ScreeningPipeline = Depends(get_pipeline),
) -> dict:
    """Run the AI companion and attach its analysis to the session.

    Returns ``{analysis: "..."}``, or 503 when no generator is configured
    or the generator fails.
    """
    text = await pipeline.generate_analysis(user_id=user_id, session_id=session_id)
    return {"analysis": text}
