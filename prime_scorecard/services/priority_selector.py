"""Priority domain selection for a coaching cycle.

Selects a primary, optional secondary and optional tertiary domain from a
finished Scorecard based on:
- Confidence-aware scoring (lowest score among trustworthy domains first)
- Synergy between domains (fixed partner table)
- The person's weekly time budget
- Actionability (is there evidence to coach from?)

Single pass, no side effects: the same scorecard and arguments always give
the same DomainSelection.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..constants import (
    ABSENT_SCORE_SORT_VALUE,
    MIN_CONFIDENCE_FOR_PRIMARY,
    MIN_CONFIDENCE_FOR_SECONDARY,
    MIN_RECOVERY_SCORE_FOR_TERTIARY,
    MIN_TIME_BUDGET_FOR_TERTIARY,
)
from ..schemas.common import DOMAINS, Domain, SelectionPriority
from ..schemas.scorecard import DomainSelection, Scorecard, SelectionReasoning, SelectionSummaryItem

logger = logging.getLogger(__name__)

# =============================================================================
# Domain Synergy
# =============================================================================

# Best secondary partner for each primary, with the physiological rationale
DOMAIN_SYNERGY: dict[Domain, tuple[Domain, str]] = {
    Domain.HEART: (Domain.RECOVERY, "Better sleep improves cardio adaptation and HRV"),
    Domain.FRAME: (Domain.HEART, "Strength + cardio creates complete fitness foundation"),
    Domain.METABOLISM: (Domain.RECOVERY, "Sleep regulates glucose, appetite hormones, and metabolic rate"),
    Domain.RECOVERY: (Domain.MIND, "Sleep and stress management compound each other"),
    Domain.MIND: (Domain.RECOVERY, "Cognitive function depends on sleep quality"),
}

# Coachable from quick checks alone
SELF_REPORT_COACHABLE = frozenset({Domain.RECOVERY, Domain.MIND})

FALLBACK_PRIMARY = Domain.RECOVERY

DOMAIN_PREVIEWS: dict[Domain, str] = {
    Domain.HEART: "Zone 2 cardio progression for VO2max",
    Domain.FRAME: "Progressive strength and mobility",
    Domain.METABOLISM: "Blood sugar stability and metabolic flexibility",
    Domain.RECOVERY: "Sleep optimization and HRV improvement",
    Domain.MIND: "Focus training and cognitive load management",
}


@dataclass(frozen=True)
class DomainCandidate:
    domain: Domain
    score: Optional[int]
    confidence: int
    is_actionable: bool
    is_preferred: bool

    @property
    def sort_score(self) -> int:
        return self.score if self.score is not None else ABSENT_SCORE_SORT_VALUE


def is_domain_actionable(domain: Domain, scorecard: Scorecard) -> bool:
    """A domain is coachable if it has evidence or needs none to start."""
    if any(e.domain == domain for e in scorecard.evidence):
        return True
    return domain in SELF_REPORT_COACHABLE


def _candidates(
    scorecard: Scorecard,
    preferences: Iterable[Domain],
    exclusions: Iterable[Domain],
) -> list[DomainCandidate]:
    preferred = {Domain(d) for d in preferences}
    excluded = {Domain(d) for d in exclusions}
    return [
        DomainCandidate(
            domain=domain,
            score=scorecard.domain_scores.get(domain),
            confidence=scorecard.domain_confidence.get(domain, 0),
            is_actionable=is_domain_actionable(domain, scorecard),
            is_preferred=domain in preferred,
        )
        for domain in DOMAINS
        if domain not in excluded
    ]


def _primary_key(c: DomainCandidate) -> tuple:
    # Lowest score, then user preference, then higher confidence
    return (c.sort_score, not c.is_preferred, -c.confidence)


def _choose_primary(candidates: list[DomainCandidate]) -> Domain:
    actionable = [c for c in candidates if c.is_actionable]
    confident = [c for c in actionable if c.confidence >= MIN_CONFIDENCE_FOR_PRIMARY]
    if confident:
        return min(confident, key=_primary_key).domain
    if actionable:
        return min(actionable, key=_primary_key).domain
    return FALLBACK_PRIMARY


def _choose_secondary(candidates: list[DomainCandidate], primary: Domain) -> Optional[Domain]:
    partner, _ = DOMAIN_SYNERGY[primary]
    pool = [
        c
        for c in candidates
        if c.domain != primary and c.confidence >= MIN_CONFIDENCE_FOR_SECONDARY and c.is_actionable
    ]
    if not pool:
        return None
    return min(pool, key=lambda c: (c.domain != partner, not c.is_preferred, c.sort_score)).domain


def _choose_tertiary(candidates: list[DomainCandidate], taken: set) -> Optional[Domain]:
    pool = [c for c in candidates if c.domain not in taken and c.is_actionable]
    if not pool:
        return None
    return min(pool, key=lambda c: (not c.is_preferred, c.sort_score)).domain


# =============================================================================
# Reasoning
# =============================================================================


def _primary_reasoning(primary: Domain, candidates: list[DomainCandidate]) -> str:
    info = next((c for c in candidates if c.domain == primary), None)
    name = primary.display_name
    if info is None or info.score is None:
        return f"{name} selected as primary focus - we'll establish your baseline."
    if info.confidence >= MIN_CONFIDENCE_FOR_PRIMARY:
        return (
            f"{name} is your lowest high-confidence domain (score: {info.score}, "
            f"confidence: {info.confidence}%) - most room for improvement with reliable data."
        )
    return f"{name} selected as primary focus (score: {info.score}) - this is where you'll see the biggest gains."


def _secondary_reasoning(secondary: Domain, primary: Domain, candidates: list[DomainCandidate]) -> str:
    partner, rationale = DOMAIN_SYNERGY[primary]
    name = secondary.display_name
    if secondary == partner:
        return f"{name} pairs well with {primary.value}: {rationale.lower()}"
    info = next(c for c in candidates if c.domain == secondary)
    if info.score is not None:
        return f"{name} as secondary focus (score: {info.score}) - will compound your {primary.value} progress."
    return f"{name} as secondary focus to support your {primary.value} work."


def _format_hours(hours: float) -> str:
    return str(int(hours)) if float(hours).is_integer() else f"{hours:g}"


# =============================================================================
# Main Selection Function
# =============================================================================


def select_priority_domains(
    scorecard: Scorecard,
    time_budget_hours_per_week: float,
    preferences: Optional[Iterable[Domain]] = None,
    exclusions: Optional[Iterable[Domain]] = None,
) -> DomainSelection:
    """Pick primary/secondary/tertiary coaching domains.

    Args:
        scorecard: Finished scorecard
        time_budget_hours_per_week: Hours the person can commit each week
        preferences: Domains the person is interested in (tie-breaker)
        exclusions: Domains the person declined

    Returns:
        DomainSelection. Primary is always set; when nothing qualifies it
        falls back to recovery.
    """
    if time_budget_hours_per_week is None or time_budget_hours_per_week < 0:
        raise ValueError(f"time_budget_hours_per_week must be non-negative, got {time_budget_hours_per_week}")

    candidates = _candidates(scorecard, preferences or [], exclusions or [])

    primary = _choose_primary(candidates)
    secondary = _choose_secondary(candidates, primary)

    tertiary = None
    tertiary_reasoning = None
    recovery_score = scorecard.domain_scores.get(Domain.RECOVERY)
    recovery_score = recovery_score if recovery_score is not None else 0
    can_handle_tertiary = (
        time_budget_hours_per_week >= MIN_TIME_BUDGET_FOR_TERTIARY
        and recovery_score >= MIN_RECOVERY_SCORE_FOR_TERTIARY
    )
    if can_handle_tertiary:
        tertiary = _choose_tertiary(candidates, {primary, secondary})
        if tertiary is not None:
            tertiary_reasoning = (
                f"With {_format_hours(time_budget_hours_per_week)}+ hours/week and good recovery "
                f"({recovery_score}), you can handle a third focus on {tertiary.value}."
            )

    selection = DomainSelection(
        primary=primary,
        secondary=secondary,
        tertiary=tertiary,
        reasoning=SelectionReasoning(
            primary=_primary_reasoning(primary, candidates),
            secondary=_secondary_reasoning(secondary, primary, candidates) if secondary else None,
            tertiary=tertiary_reasoning,
        ),
    )
    logger.debug(
        f"Selected domains: primary={primary.value} "
        f"secondary={secondary.value if secondary else None} "
        f"tertiary={tertiary.value if tertiary else None} hours={time_budget_hours_per_week}"
    )
    return selection


# =============================================================================
# Preview Helpers
# =============================================================================


def domain_preview(domain: Domain) -> str:
    """One-line preview of what a domain protocol focuses on."""
    return DOMAIN_PREVIEWS[Domain(domain)]


def selection_summary(selection: DomainSelection) -> list[SelectionSummaryItem]:
    """Chosen domains in priority order with previews and reasoning."""
    slots = [
        (selection.primary, SelectionPriority.PRIMARY, selection.reasoning.primary),
        (selection.secondary, SelectionPriority.SECONDARY, selection.reasoning.secondary),
        (selection.tertiary, SelectionPriority.TERTIARY, selection.reasoning.tertiary),
    ]
    return [
        SelectionSummaryItem(domain=domain, priority=priority, preview=domain_preview(domain), reasoning=reasoning)
        for domain, priority, reasoning in slots
        if domain is not None
    ]
