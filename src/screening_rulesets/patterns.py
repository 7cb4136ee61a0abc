"""Pattern engine — evaluates the symptom-cluster rule battery.

Each rule belongs to one optional section and is gated on that section's
entry question: if none of the rule's gate questions has been answered the
respondent never traversed the section, and the rule is left out of the
output entirely (it is *not* reported as ruled out).  Reality testing has
two gates (``r1`` and the safety answer ``s0_2``) because its questions can
be reached from two places.

Rules are independent of each other.  Several share the c3 impairment
score, which reads as 0 when absent.

Output order is ``PATTERN_RULES`` order, minus the gated-out rules, so
callers must not assume a fixed length.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from screening_rulesets.constants import (
    ACTIVATION_SYMPTOM_MIN,
    EXECUTIVE_SYMPTOM_MIN,
    EXECUTIVE_SYMPTOM_QIDS,
    IMPAIRMENT_THRESHOLD,
    M3_TOO_SHORT,
    MOOD_SYMPTOM_MIN,
    O9_INTERFERENCE,
    REALITY_SAFETY_QID,
    T5_TOO_RECENT,
    W2_UNCONTROLLABLE,
    WORRY_SOMATIC_MIN,
)
from screening_rulesets.models.answer import Answers
from screening_rulesets.models.pattern import PatternResult
from screening_rulesets.predicates import (
    count_selected,
    impairment_score,
    is_affirmative,
    is_answered,
    is_strictly_yes,
    normalise_apostrophes,
    text_answer,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternRule:
    """One row of the rule battery.

    ``gates`` are entry-question ids; the rule is evaluated when any of
    them is answered.  ``message`` and ``differential`` are attached only
    to detected results, and ``escalates`` marks detected results urgent.
    """

    name: str
    gates: tuple[str, ...]
    detect: Callable[[Answers], bool]
    message: str
    differential: str
    escalates: bool = False

    def is_gated_in(self, answers: Answers) -> bool:
        return any(is_answered(answers.get(qid)) for qid in self.gates)

    def evaluate(self, answers: Answers) -> PatternResult:
        detected = bool(self.detect(answers))
        if not detected:
            return PatternResult(name=self.name, detected=False)
        return PatternResult(
            name=self.name,
            detected=True,
            message=self.message,
            urgent=True if self.escalates else None,
            dsm_differential=self.differential,
        )


# ----------------------------------------------------------------------
# Rule formulas
# ----------------------------------------------------------------------

def _impaired(answers: Answers) -> bool:
    return impairment_score(answers) >= IMPAIRMENT_THRESHOLD


def _affirmative(answers: Answers, qid: str) -> bool:
    return is_affirmative(answers.get(qid))


def _yes(answers: Answers, qid: str) -> bool:
    return is_strictly_yes(answers.get(qid))


def _panic(a: Answers) -> bool:
    # P1, P2 Yes/NS and (P5 or P6 strictly Yes), impairment >= 5
    return (
        _affirmative(a, "p1")
        and _affirmative(a, "p2")
        and (_yes(a, "p5") or _yes(a, "p6"))
        and _impaired(a)
    )


def _intrusions(a: Answers) -> bool:
    return (
        _affirmative(a, "o1")
        and _affirmative(a, "o2")
        and text_answer(a.get("o9")) in O9_INTERFERENCE
    )


def _trauma(a: Answers) -> bool:
    # An unanswered t5 is not "<1 month"
    return (
        _affirmative(a, "t1")
        and _affirmative(a, "t2")
        and _affirmative(a, "t3")
        and a.get("t5") != T5_TOO_RECENT
        and _impaired(a)
    )


def _worry_uncontrollable(value: object) -> bool:
    text = text_answer(value)
    if text is None:
        return False
    text = normalise_apostrophes(text)
    return any(phrase in text for phrase in W2_UNCONTROLLABLE)


def _worry(a: Answers) -> bool:
    return (
        _affirmative(a, "w1")
        and _worry_uncontrollable(a.get("w2"))
        and count_selected(a.get("w3")) >= WORRY_SOMATIC_MIN
        and _impaired(a)
    )


def mood_symptom_count(a: Answers) -> int:
    """Core mood items answered Yes/NS plus the number of listed symptoms."""
    core = sum(_affirmative(a, qid) for qid in ("m1", "m2", "m6"))
    return core + count_selected(a.get("m_symptoms"))


def _mood(a: Answers) -> bool:
    return (
        (_affirmative(a, "m1") or _affirmative(a, "m2"))
        and a.get("m3") != M3_TOO_SHORT
        and mood_symptom_count(a) >= MOOD_SYMPTOM_MIN
    )


def _activation(a: Answers) -> bool:
    return (
        _affirmative(a, "a1")
        and count_selected(a.get("a2")) >= ACTIVATION_SYMPTOM_MIN
        and _affirmative(a, "a5")
    )


def executive_symptom_count(a: Answers) -> int:
    return sum(_affirmative(a, qid) for qid in EXECUTIVE_SYMPTOM_QIDS)


def _executive(a: Answers) -> bool:
    return (
        _affirmative(a, "e6")
        and executive_symptom_count(a) >= EXECUTIVE_SYMPTOM_MIN
        and _impaired(a)
    )


def _substance(a: Answers) -> bool:
    return _affirmative(a, "s2") and _affirmative(a, "s4")


def _reality(a: Answers) -> bool:
    return any(_yes(a, qid) for qid in ("r1", "r2", "r3", REALITY_SAFETY_QID))


# Output order.  Gates are presence checks, not "Yes" checks: r1 = "No"
# still surfaces the reality rule (as ruled out).
PATTERN_RULES: list[PatternRule] = [
    PatternRule(
        name="Panic/body alarm surges",
        gates=("p1",),
        detect=_panic,
        message="Panic/alarm pattern likely",
        differential="Panic Disorder, Agoraphobia",
    ),
    PatternRule(
        name="Intrusion/compulsion loop",
        gates=("o1",),
        detect=_intrusions,
        message="Intrusion/compulsion loop likely",
        differential="Obsessive-Compulsive Disorder (OCD)",
    ),
    PatternRule(
        name="Trauma/cue reactivity",
        gates=("t1",),
        detect=_trauma,
        message="Trauma/cue reactivity pattern likely",
        differential="PTSD, Acute Stress Disorder",
    ),
    PatternRule(
        name="Worry/tension loop",
        gates=("w1",),
        detect=_worry,
        message="Worry/tension pattern likely (GAD-like)",
        differential="Generalized Anxiety Disorder (GAD)",
    ),
    PatternRule(
        name="Mood shutdown/low reward",
        gates=("m1",),
        detect=_mood,
        message="Mood shutdown pattern likely (MDD-like)",
        differential="Major Depressive Disorder (MDD)",
    ),
    PatternRule(
        name="Activation/drive shift",
        gates=("a1",),
        detect=_activation,
        message="Activation/drive shift pattern likely",
        differential="Bipolar Spectrum Disorder",
    ),
    PatternRule(
        name="Executive control pattern",
        gates=("e1",),
        detect=_executive,
        message="Chronic executive control pattern likely",
        differential="ADHD (Attention-Deficit/Hyperactivity Disorder)",
    ),
    PatternRule(
        name="Substance-related pattern",
        gates=("s1",),
        detect=_substance,
        message="Substance-related pattern likely",
        differential="Substance Use Disorder",
    ),
    PatternRule(
        name="Reality-testing concerns",
        gates=("r1", REALITY_SAFETY_QID),
        detect=_reality,
        message="Urgent clinician review recommended",
        differential="Psychotic Disorder, Schizophrenia Spectrum",
        escalates=True,
    ),
]


def analyze_patterns(answers: Answers) -> list[PatternResult]:
    """Evaluate every gated-in rule against ``answers``.

    Pure and deterministic; missing or malformed answers never raise.
    Returns an empty list when no optional section was entered.
    """
    results = [
        rule.evaluate(answers)
        for rule in PATTERN_RULES
        if rule.is_gated_in(answers)
    ]
    logger.debug(
        "Patterns evaluated: %d rule(s) gated in, %d detected",
        len(results),
        sum(r.detected for r in results),
    )
    return results
