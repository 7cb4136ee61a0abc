"""PatternResult — one evaluated symptom-cluster rule."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, SerializerFunctionWrapHandler, model_serializer


class PatternResult(BaseModel):
    """Outcome of a single pattern rule.

    ``message`` and ``dsm_differential`` are only set when ``detected`` is
    True; ``urgent`` is only set by rules that escalate (reality testing).
    Unset fields are dropped on serialisation, so a result has the same
    shape whether it is dumped alone or nested in a report.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    detected: bool
    message: Optional[str] = None
    urgent: Optional[bool] = None
    dsm_differential: Optional[str] = None

    @model_serializer(mode="wrap")
    def _drop_unset(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return {k: v for k, v in handler(self).items() if v is not None}
