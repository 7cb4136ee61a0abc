"""Global exception handlers — map SDK exceptions to HTTP status codes.

The SDK raises ``ValueError`` for session misuse (not found, duplicate,
section not complete, emergency state, analysis unavailable).  Rather than
catching these in every route, global handlers inspect the message and
pick the HTTP status code from its leading words.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# --- Message prefixes of SDK ValueErrors and their HTTP status codes ---
# Matched against the start of the message only; the rest may echo client input.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    # Session already exists (unique user_id + session_id)
    ("session already exists", 409),
    # Session not found
    ("session not found", 404),
    # No analysis generator configured, or the generator failed
    ("analysis unavailable", 503),
]


# --- Client-safe messages keyed by HTTP status code ---
# Internal details (user_id, session_id, answer values) stay in the
# server log; the client receives only a generic description.
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Resource already exists",
    503: "Analysis service unavailable",
    400: "Invalid request",
}


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map SDK ``ValueError`` to a contextual HTTP error response.

    The raw exception message is logged server-side but never sent to the
    client.  Unrecognised messages map to 400.
    """
    msg = str(exc)
    status = 400
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if msg.lower().startswith(pattern):
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. unknown section or question id) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
