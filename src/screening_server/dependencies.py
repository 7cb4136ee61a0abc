"""FastAPI dependency injection — provides the pipeline, catalog and user identity."""

import hmac

from fastapi import Header, HTTPException, Request

from screening_rulesets.catalog import QuestionnaireCatalog
from screening_rulesets.pipeline import ScreeningPipeline


# ------------------------------------------------------------------
# Pipeline & catalog: stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_pipeline(request: Request) -> ScreeningPipeline:
    """Return the pipeline singleton from ``app.state``."""
    return request.app.state.pipeline


def get_catalog(request: Request) -> QuestionnaireCatalog:
    """Return the QuestionnaireCatalog singleton from ``app.state``."""
    return request.app.state.catalog


# ------------------------------------------------------------------
# User identity: extracted from the X-User-ID header
# ------------------------------------------------------------------

async def get_user_id(
    request: Request,
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    x_proxy_secret: str | None = Header(None, alias="X-Proxy-Secret"),
) -> str:
    """Extract user identity from the ``X-User-ID`` header.

    Returns 401 if the header is missing.  When ``TRUSTED_PROXY_SECRET``
    is configured, the request must also carry a matching
    ``X-Proxy-Secret`` header, otherwise 403.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-ID header is required")

    expected_secret: str | None = request.app.state.settings.trusted_proxy_secret
    if expected_secret:
        if not x_proxy_secret:
            raise HTTPException(
                status_code=403,
                detail="X-Proxy-Secret header is required",
            )
        # Constant-time comparison
        if not hmac.compare_digest(x_proxy_secret, expected_secret):
            raise HTTPException(status_code=403, detail="Invalid proxy secret")

    return x_user_id
