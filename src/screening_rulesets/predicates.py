"""Answer predicates — permissive value coercion shared by both engines.

Every helper accepts whatever is stored under a question id (or ``None``
when the key is absent) and degrades to the neutral case instead of
raising:

  - missing / non-string single answers are never affirmative
  - missing / non-list multi-select answers count as zero selections
  - missing / non-numeric scale answers read as 0
"""

from __future__ import annotations

from typing import Any

from screening_rulesets.constants import AFFIRMATIVE_ANSWERS, IMPAIRMENT_QID, YES
from screening_rulesets.models.answer import Answers


def is_affirmative(value: Any) -> bool:
    """True for "Yes" or "Not sure"."""
    return isinstance(value, str) and value in AFFIRMATIVE_ANSWERS


def is_strictly_yes(value: Any) -> bool:
    """True only for an exact "Yes"."""
    return isinstance(value, str) and value == YES


def is_answered(value: Any) -> bool:
    """True if a value counts as "the respondent answered this".

    ``None`` and the empty string are unanswered; anything else, including
    an empty multi-select list or a 0 on a scale, is an answer.
    """
    return value is not None and value != ""


def text_answer(value: Any) -> str | None:
    """Return ``value`` if it is a string, otherwise ``None``."""
    return value if isinstance(value, str) else None


def selected(value: Any) -> list[str]:
    """Return the string items of a multi-select answer (empty if absent)."""
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, str)]


def count_selected(value: Any) -> int:
    """Number of items in a multi-select answer; 0 if absent or malformed."""
    if not isinstance(value, (list, tuple)):
        return 0
    return len(value)


def includes_domain(value: Any, keyword: str) -> bool:
    """True if any selected label contains ``keyword`` as a substring."""
    return any(keyword in label for label in selected(value))


def as_number(value: Any) -> float:
    """Read a scale answer as a number; 0 when absent or not numeric.

    Only real numbers count.  Numeric strings and booleans (``bool``
    subclasses ``int``) read as 0 like any other malformed value.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def impairment_score(answers: Answers) -> float:
    """The shared c3 impairment value (0-10), 0 if absent."""
    return as_number(answers.get(IMPAIRMENT_QID))


def normalise_apostrophes(text: str) -> str:
    """Replace typographic apostrophes with ASCII ones for matching."""
    return text.replace("’", "'").replace("‘", "'")
