"""In-memory session repository.

Sessions live for the lifetime of the process only.  The repository keeps
rows keyed by ``(user_id, session_id)`` and does no business-logic
validation; that belongs in :class:`~screening_rulesets.engine.ScreeningEngine`.

All public methods are ``async`` and take one ``asyncio.Lock`` while they
touch the table.  The lock does not cover callers: the engine mutates a
returned row after the lock is released.  Row updates stay consistent
because the engine never awaits between loading a row and mutating it,
so one request's read-modify-write cannot interleave with another's on
the event loop.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone

from screening_rulesets.models.answer import AnswerStore
from screening_rulesets.models.section import SectionId, SessionStatus
from screening_rulesets.routing import ROUTE_PREFIX


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionRow:
    """Mutable state of one screening session."""

    user_id: str
    session_id: str
    status: SessionStatus = SessionStatus.IN_PROGRESS
    # Prefix only until CORE is finished, then the full computed route
    route: list[SectionId] = field(default_factory=lambda: list(ROUTE_PREFIX))
    route_final: bool = False
    section_index: int = 0
    answers: AnswerStore = field(default_factory=AnswerStore)
    analysis: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def current_section(self) -> SectionId:
        if self.status == SessionStatus.EMERGENCY:
            return SectionId.EMERGENCY
        return self.route[self.section_index]

    def touch(self) -> None:
        self.updated_at = _utcnow()


class SessionRepository:
    """Async read/write operations on the in-memory session table."""

    def __init__(self) -> None:
        self._rows: dict[tuple[str, str], SessionRow] = {}
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_session(self, *, user_id: str, session_id: str) -> SessionRow:
        """Insert a new session row and return it.

        Raises:
            ValueError: if the ``(user_id, session_id)`` pair already exists.
        """
        key = (user_id, session_id)
        async with self._lock:
            if key in self._rows:
                raise ValueError(
                    f"Session already exists: user_id={user_id}, session_id={session_id}"
                )
            row = SessionRow(user_id=user_id, session_id=session_id)
            self._rows[key] = row
            return row

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_user_and_session(
        self, user_id: str, session_id: str
    ) -> SessionRow | None:
        """Fetch a session by the unique (user_id, session_id) pair."""
        async with self._lock:
            return self._rows.get((user_id, session_id))

    async def list_by_user(
        self, user_id: str, *, limit: int = 20, offset: int = 0
    ) -> list[SessionRow]:
        """List sessions for a user, most recent first."""
        async with self._lock:
            rows = [r for (uid, _), r in self._rows.items() if uid == user_id]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows[offset:offset + limit]

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete_session(self, user_id: str, session_id: str) -> bool:
        """Remove a session.  Returns False if it did not exist."""
        async with self._lock:
            return self._rows.pop((user_id, session_id), None) is not None
