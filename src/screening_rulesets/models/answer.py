"""Answer store — the respondent's answers for one session.

The store is the only mutable structure shared between the session engine
and the rule engines.  Engines never receive the store itself: they get a
:meth:`AnswerStore.snapshot`, a read-only view over a shallow copy taken at
call time, so answers written while an evaluation runs are not observed.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Union

# single_select / yes_no / text / date -> str, multi_select -> list[str],
# scale -> int | float
AnswerValue = Union[str, list[str], int, float]

# What the routing and pattern engines accept.
Answers = Mapping[str, object]


class AnswerStore:
    """Append/overwrite mapping from question id to answer value.

    A key is present only if the respondent reached and answered that
    question.  Entries are never deleted.
    """

    def __init__(self, initial: Mapping[str, AnswerValue] | None = None) -> None:
        self._values: dict[str, AnswerValue] = dict(initial or {})

    def set(self, qid: str, value: AnswerValue) -> None:
        """Record (or overwrite) the answer for ``qid``."""
        if isinstance(value, list):
            # Lists are copied so later edits by the caller don't leak in
            value = list(value)
        self._values[qid] = value

    def update(self, values: Mapping[str, AnswerValue]) -> None:
        for qid, value in values.items():
            self.set(qid, value)

    def get(self, qid: str, default: AnswerValue | None = None) -> AnswerValue | None:
        return self._values.get(qid, default)

    def snapshot(self) -> Mapping[str, AnswerValue]:
        """Return a stable read-only view for one engine evaluation."""
        return MappingProxyType(dict(self._values))

    def __contains__(self, qid: object) -> bool:
        return qid in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)
