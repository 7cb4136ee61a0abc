"""Screening constants shared across the SDK.

These values are referenced by the routing engine, the pattern engine and
the session engine.  Option labels must match the catalog in ``v1/``
character for character (including typographic dashes and apostrophes)
because single-choice answers are compared by equality.

Only delivery settings can be overridden via environment variables; rule
thresholds are fixed so that identical answers always yield identical
findings.
"""

import os

# --- Answer vocabulary ---

YES = "Yes"
NO = "No"
NOT_SURE = "Not sure"

# "Not sure" is treated as licence to keep investigating.
AFFIRMATIVE_ANSWERS: frozenset[str] = frozenset({YES, NOT_SURE})

# --- Core section (c1: time course) options that trigger routing ---

C1_SUDDEN_SPIKES = "It comes in sudden spikes that peak within minutes–hours"
C1_CUE_TRIGGERED = (
    "It’s mostly triggered by specific cues (places/people/memories/sensations)"
)
C1_DISTINCT_EPISODES = "It comes in distinct episodes lasting days–weeks"

# --- Core section (c2: affected domains) keywords ---
# Matched by substring; labels carry extra qualifying text.

DOMAIN_PANIC = "Panic"
DOMAIN_INTRUSIONS = "Intrusive thoughts"
DOMAIN_TRAUMA = "Trauma reminders"
DOMAIN_WORRY = "Worry"
DOMAIN_ATTENTION = "Attention"
DOMAIN_MOOD = "Mood"
DOMAIN_ALCOHOL = "Alcohol"
DOMAIN_UNUSUAL = "Unusual experiences"

# --- Question ids the engines read directly ---

TIME_COURSE_QID = "c1"
DOMAINS_QID = "c2"
IMPAIRMENT_QID = "c3"
IMMEDIATE_DANGER_QID = "s0_1"
REALITY_SAFETY_QID = "s0_2"
TRAUMA_ENTRY_QID = "t1"
MOOD_LIFE_WORTH_QID = "m6"

# --- Pattern thresholds ---

# Minimum c3 impairment (0-10) for impairment-gated rules.
IMPAIRMENT_THRESHOLD = 5
O9_INTERFERENCE = frozenset({"Moderately", "Severely"})
T5_TOO_RECENT = "<1 month"
M3_TOO_SHORT = "<1 week"
# Matched by substring after apostrophe normalisation.
W2_UNCONTROLLABLE: tuple[str, ...] = ("hard to stop", "can't stop once it starts")
WORRY_SOMATIC_MIN = 3
MOOD_SYMPTOM_MIN = 5
ACTIVATION_SYMPTOM_MIN = 3
EXECUTIVE_SYMPTOM_MIN = 4
EXECUTIVE_SYMPTOM_QIDS: tuple[str, ...] = ("e1", "e2", "e3", "e4", "e5", "e_hyper")

# --- Report ---

# Impairment score bands, checked from most to least severe.
SEVERITY_BANDS: list[tuple[int, str]] = [
    (7, "Severe"),
    (4, "Moderate"),
    (0, "Mild"),
]

# Personal-history fields shown at the top of the report, in display order.
HISTORY_FIELDS: dict[str, str] = {
    "ph_1": "Gender",
    "ph_2": "Date of Birth",
    "ph_3": "Accommodation",
    "ph_4": "Living Arrangements",
    "ph_5": "Education",
    "ph_6": "Employment",
    "ph_7": "Exam Setting",
    "ph_8": "Referral",
    "ph_9": "Course of Illness",
    "ph_10": "Family History",
    "ph_11": "Severity (CGI Self-Rate)",
    "ph_12": "Diagnoses",
}

NO_PATTERNS_MESSAGE = (
    "No specific patterns met the threshold for clinical flagging based on "
    "this screener."
)

# Recipient of the "email to doctor" draft.
# Overridable via REPORT_RECIPIENT_EMAIL env var.
REPORT_RECIPIENT_EMAIL = os.getenv("REPORT_RECIPIENT_EMAIL", "clinician@example.org")

# --- Section notices ---

REALITY_REVIEW_NOTICE = (
    "Note: A clinician review is recommended urgently based on your answer, "
    "but please continue the questionnaire."
)
LIFE_WORTH_NOTICE = (
    "Important: You indicated thoughts that life isn't worth living. Please "
    "consider seeking urgent support or speaking to a professional immediately."
)
TRAUMA_SKIP_NOTICE = (
    'Since you answered "No" to the first question, you can proceed to the '
    "next section."
)

# --- Report placeholders ---

NOT_ANSWERED = "Not answered"
NOT_ASCERTAINED = "Not ascertained"
NOT_SPECIFIED = "Not specified"

# Salutation used in the "email to doctor" draft.
# Overridable via REPORT_RECIPIENT_NAME env var.
REPORT_RECIPIENT_NAME = os.getenv("REPORT_RECIPIENT_NAME", "Doctor")
