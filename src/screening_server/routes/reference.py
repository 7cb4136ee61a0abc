"""Reference data endpoints — the questionnaire catalog.

Read-only and unauthenticated: the catalog is public content.
"""

from fastapi import APIRouter, Depends

from screening_rulesets.catalog import QuestionnaireCatalog
from screening_rulesets.models.question import Section

from screening_server.dependencies import get_catalog

router = APIRouter(prefix="/reference", tags=["reference"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/sections")
def list_sections(
    catalog: QuestionnaireCatalog = Depends(get_catalog),
) -> list[Section]:
    """Return every catalog section with its questions, in catalog order."""
    return list(catalog.sections.values())
