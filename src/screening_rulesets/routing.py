"""Routing engine — decides which optional sections a respondent traverses.

The route is computed once, when the respondent finishes ``CORE``.  It is
the fixed prefix, then every optional section whose trigger fires, then
``RESULTS``::

    INTRO, PERSONAL_HISTORY, SAFETY, CORE, <triggered...>, RESULTS

Triggered sections always appear in ``ROUTE_TRIGGERS`` order, no matter
how many triggers fire or in which order the respondent picked domains.
Triggers only read ``c1`` (time course), ``c2`` (domains) and ``s0_2``
(reality-testing safety follow-up); a missing key never fires a trigger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from screening_rulesets.constants import (
    C1_CUE_TRIGGERED,
    C1_DISTINCT_EPISODES,
    C1_SUDDEN_SPIKES,
    DOMAIN_ALCOHOL,
    DOMAIN_ATTENTION,
    DOMAIN_INTRUSIONS,
    DOMAIN_MOOD,
    DOMAIN_PANIC,
    DOMAIN_TRAUMA,
    DOMAIN_UNUSUAL,
    DOMAIN_WORRY,
    DOMAINS_QID,
    REALITY_SAFETY_QID,
    TIME_COURSE_QID,
)
from screening_rulesets.models.answer import Answers
from screening_rulesets.models.section import SectionId
from screening_rulesets.predicates import includes_domain, is_affirmative

logger = logging.getLogger(__name__)

ROUTE_PREFIX: tuple[SectionId, ...] = (
    SectionId.INTRO,
    SectionId.PERSONAL_HISTORY,
    SectionId.SAFETY,
    SectionId.CORE,
)


@dataclass(frozen=True)
class RouteTrigger:
    """Adds ``section`` to the route when ``fires(answers)`` is true."""

    section: SectionId
    fires: Callable[[Answers], bool]
    description: str


def _time_course_is(option: str) -> Callable[[Answers], bool]:
    return lambda answers: answers.get(TIME_COURSE_QID) == option


def _domain(keyword: str) -> Callable[[Answers], bool]:
    return lambda answers: includes_domain(answers.get(DOMAINS_QID), keyword)


def _any(*checks: Callable[[Answers], bool]) -> Callable[[Answers], bool]:
    return lambda answers: any(check(answers) for check in checks)


# Priority order.  This list IS the section order of every route.
ROUTE_TRIGGERS: list[RouteTrigger] = [
    RouteTrigger(
        SectionId.PANIC,
        _any(_domain(DOMAIN_PANIC), _time_course_is(C1_SUDDEN_SPIKES)),
        "panic domain or sudden-spike time course",
    ),
    RouteTrigger(
        SectionId.INTRUSIONS,
        _domain(DOMAIN_INTRUSIONS),
        "intrusive-thoughts domain",
    ),
    RouteTrigger(
        SectionId.TRAUMA,
        _any(_domain(DOMAIN_TRAUMA), _time_course_is(C1_CUE_TRIGGERED)),
        "trauma-reminders domain or cue-triggered time course",
    ),
    RouteTrigger(SectionId.WORRY, _domain(DOMAIN_WORRY), "worry domain"),
    RouteTrigger(SectionId.EXECUTIVE, _domain(DOMAIN_ATTENTION), "attention domain"),
    RouteTrigger(SectionId.MOOD, _domain(DOMAIN_MOOD), "mood domain"),
    RouteTrigger(SectionId.SUBSTANCE, _domain(DOMAIN_ALCOHOL), "alcohol domain"),
    RouteTrigger(
        SectionId.REALITY,
        _any(
            lambda answers: is_affirmative(answers.get(REALITY_SAFETY_QID)),
            _domain(DOMAIN_UNUSUAL),
        ),
        "reality-testing safety answer or unusual-experiences domain",
    ),
    RouteTrigger(
        SectionId.ACTIVATION,
        _time_course_is(C1_DISTINCT_EPISODES),
        "distinct-episodes time course",
    ),
]


def triggered_sections(answers: Answers) -> list[SectionId]:
    """Return the optional sections whose trigger fires, in priority order."""
    return [t.section for t in ROUTE_TRIGGERS if t.fires(answers)]


def compute_route(answers: Answers) -> list[SectionId]:
    """Compute the full ordered route for a respondent who finished CORE.

    Pure: reads ``answers`` once and never mutates it; equal answers always
    give an equal route.
    """
    optional = triggered_sections(answers)
    route = [*ROUTE_PREFIX, *optional, SectionId.RESULTS]
    logger.debug(
        "Route computed: %d optional section(s) %s",
        len(optional),
        [s.value for s in optional],
    )
    return route


def index_after_core(route: list[SectionId]) -> int:
    """Index of the section immediately following CORE in ``route``.

    Raises:
        ValueError: if ``route`` does not contain CORE.
    """
    return route.index(SectionId.CORE) + 1
