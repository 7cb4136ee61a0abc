"""Section and session-status enumerations."""

import enum


class SectionId(str, enum.Enum):
    """Questionnaire sections.

    ``INTRO``, ``PERSONAL_HISTORY``, ``SAFETY`` and ``CORE`` always open a
    route and ``RESULTS`` always closes it.  ``EMERGENCY`` is a terminal
    override state and never appears inside a route.
    """

    INTRO = "INTRO"
    PERSONAL_HISTORY = "PERSONAL_HISTORY"
    SAFETY = "SAFETY"
    CORE = "CORE"
    PANIC = "PANIC"
    INTRUSIONS = "INTRUSIONS"
    TRAUMA = "TRAUMA"
    WORRY = "WORRY"
    EXECUTIVE = "EXECUTIVE"
    MOOD = "MOOD"
    ACTIVATION = "ACTIVATION"
    REALITY = "REALITY"
    SUBSTANCE = "SUBSTANCE"
    RESULTS = "RESULTS"
    EMERGENCY = "EMERGENCY"


class SessionStatus(str, enum.Enum):
    """Lifecycle states for a screening session.

    Transitions:
        in_progress -> completed  (respondent reached RESULTS)
        in_progress -> emergency  (immediate danger reported)
        completed   -> in_progress (respondent stepped back from RESULTS)
    """

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    EMERGENCY = "emergency"
