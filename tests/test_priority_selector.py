"""Tests for priority domain selection.

Scorecards are built directly so each test controls scores and confidences
exactly.
"""

import pytest

from conftest import NOW, make_item
from prime_scorecard.engine import empty_scorecard
from prime_scorecard.schemas.common import DOMAINS, Domain, SelectionPriority
from prime_scorecard.schemas.evidence import ScoredEvidence
from prime_scorecard.schemas.scorecard import Scorecard
from prime_scorecard.services.priority_selector import (
    DOMAIN_SYNERGY,
    domain_preview,
    is_domain_actionable,
    select_priority_domains,
    selection_summary,
)

# ─── Helpers ──────────────────────────────────────────────────────────────────

_METRIC_FOR = {
    "heart": "resting_hr",
    "frame": "pushups",
    "metabolism": "hba1c",
    "recovery": "hrv",
    "mind": "focus_stability",
}


def _scorecard(domains: dict) -> Scorecard:
    """Build a scorecard from {domain: (score, confidence, has_evidence)}."""
    scores, confidence, evidence = {}, {}, []
    for domain in DOMAINS:
        score, conf, has_evidence = domains.get(domain.value, (None, 0, False))
        scores[domain] = score
        confidence[domain] = conf
        if has_evidence:
            item = make_item(domain.value, _METRIC_FOR[domain.value], 1)
            evidence.append(ScoredEvidence.from_item(item, score if score is not None else 0))
    return Scorecard(
        generated_at=NOW,
        scoring_revision="test",
        domain_scores=scores,
        domain_confidence=confidence,
        prime_score=None,
        prime_confidence=0,
        evidence=evidence,
        how_calculated={},
    )


def _typical() -> Scorecard:
    return _scorecard(
        {
            "heart": (50, 80, True),
            "frame": (40, 30, True),
            "metabolism": (70, 70, True),
            "recovery": (80, 65, True),
            "mind": (60, 50, True),
        }
    )


# ─── Primary ────────────────────────────────────────────────────────────────


class TestPrimary:
    """Lowest score among confident, actionable domains."""

    def test_lowest_high_confidence_domain(self):
        selection = select_priority_domains(_typical(), 3)
        assert selection.primary is Domain.HEART
        assert selection.reasoning.primary == (
            "Heart is your lowest high-confidence domain (score: 50, confidence: 80%) - "
            "most room for improvement with reliable data."
        )

    def test_low_confidence_domain_skipped(self):
        """Frame scores lowest but lacks confidence for primary."""
        assert select_priority_domains(_typical(), 3).primary is not Domain.FRAME

    def test_preference_breaks_score_tie(self):
        card = _scorecard({"heart": (50, 80, True), "metabolism": (50, 70, True)})
        assert select_priority_domains(card, 3).primary is Domain.HEART
        assert select_priority_domains(card, 3, preferences=[Domain.METABOLISM]).primary is Domain.METABOLISM

    def test_confidence_breaks_remaining_tie(self):
        card = _scorecard({"heart": (50, 65, True), "metabolism": (50, 90, True)})
        assert select_priority_domains(card, 3).primary is Domain.METABOLISM

    def test_excluded_domain_never_chosen(self):
        selection = select_priority_domains(_typical(), 10, exclusions=[Domain.HEART])
        assert Domain.HEART not in (selection.primary, selection.secondary, selection.tertiary)
        assert selection.primary is Domain.METABOLISM

    def test_fallback_to_lowest_actionable(self):
        card = _scorecard({"heart": (30, 50, True), "frame": (20, 10, False)})
        selection = select_priority_domains(card, 3)
        assert selection.primary is Domain.HEART
        assert selection.reasoning.primary == (
            "Heart selected as primary focus (score: 30) - this is where you'll see the biggest gains."
        )

    def test_non_actionable_domain_skipped(self):
        """High confidence without any evidence isn't coachable."""
        card = _scorecard({"metabolism": (20, 90, False), "heart": (60, 70, True)})
        assert select_priority_domains(card, 3).primary is Domain.HEART

    def test_all_absent_falls_back_to_recovery(self):
        selection = select_priority_domains(empty_scorecard(now=NOW), 3)
        assert selection.primary is Domain.RECOVERY
        assert selection.secondary is None
        assert selection.tertiary is None
        assert selection.reasoning.primary == "Recovery selected as primary focus - we'll establish your baseline."

    def test_primary_defined_when_everything_excluded(self):
        selection = select_priority_domains(_typical(), 10, exclusions=list(DOMAINS))
        assert selection.primary is Domain.RECOVERY
        assert selection.secondary is None


# ─── Secondary ──────────────────────────────────────────────────────────────


class TestSecondary:
    def test_synergy_partner_chosen(self):
        selection = select_priority_domains(_typical(), 3)
        assert selection.secondary is Domain.RECOVERY
        assert selection.reasoning.secondary == (
            "Recovery pairs well with heart: better sleep improves cardio adaptation and hrv"
        )

    def test_synergy_partner_for_every_primary(self):
        """Whenever the partner is eligible it wins secondary."""
        for primary, (partner, _) in DOMAIN_SYNERGY.items():
            domains = {d.value: (70, 60, True) for d in DOMAINS}
            domains[primary.value] = (10, 90, True)
            selection = select_priority_domains(_scorecard(domains), 3)
            assert selection.primary is primary
            assert selection.secondary is partner

    def test_excluded_partner_falls_back_to_lowest_score(self):
        selection = select_priority_domains(_typical(), 3, exclusions=[Domain.RECOVERY])
        assert selection.secondary is Domain.MIND
        assert selection.reasoning.secondary == (
            "Mind as secondary focus (score: 60) - will compound your heart progress."
        )

    def test_preference_beats_lower_score(self):
        selection = select_priority_domains(
            _typical(), 3, preferences=[Domain.METABOLISM], exclusions=[Domain.RECOVERY]
        )
        assert selection.secondary is Domain.METABOLISM

    def test_secondary_requires_confidence(self):
        card = _scorecard({"heart": (50, 80, True), "recovery": (70, 30, True), "mind": (70, 39, True)})
        assert select_priority_domains(card, 3).secondary is None


# ─── Tertiary ───────────────────────────────────────────────────────────────


class TestTertiary:
    def test_offered_with_time_and_recovery(self):
        selection = select_priority_domains(_typical(), 6)
        assert selection.tertiary is Domain.FRAME
        assert selection.reasoning.tertiary == (
            "With 6+ hours/week and good recovery (80), you can handle a third focus on frame."
        )

    def test_not_offered_below_time_budget(self):
        for hours in (0, 2, 4.9):
            assert select_priority_domains(_typical(), hours).tertiary is None

    def test_not_offered_with_poor_recovery(self):
        card = _scorecard(
            {
                "heart": (50, 80, True),
                "frame": (40, 30, True),
                "recovery": (50, 65, True),
                "mind": (60, 50, True),
            }
        )
        assert select_priority_domains(card, 20).tertiary is None

    def test_not_offered_with_absent_recovery_score(self):
        card = _scorecard({"heart": (50, 80, True), "mind": (60, 50, True), "frame": (40, 45, True)})
        assert select_priority_domains(card, 20).tertiary is None

    def test_offered_without_secondary(self):
        """Tertiary depends on time and recovery only, not on a secondary."""
        card = _scorecard({"heart": (40, 80, True), "recovery": (70, 30, True)})
        selection = select_priority_domains(card, 10)
        assert selection.primary is Domain.HEART
        assert selection.secondary is None
        assert selection.tertiary is Domain.RECOVERY
        assert selection.reasoning.secondary is None
        assert selection.reasoning.tertiary == (
            "With 10+ hours/week and good recovery (70), you can handle a third focus on recovery."
        )
        summary = selection_summary(selection)
        assert [item.priority for item in summary] == [SelectionPriority.PRIMARY, SelectionPriority.TERTIARY]

    def test_preference_wins_tertiary(self):
        selection = select_priority_domains(_typical(), 6, preferences=[Domain.METABOLISM])
        assert selection.tertiary is Domain.METABOLISM

    def test_fractional_hours_in_reasoning(self):
        selection = select_priority_domains(_typical(), 5.5)
        assert selection.reasoning.tertiary.startswith("With 5.5+ hours/week")


# ─── Misc ───────────────────────────────────────────────────────────────────


class TestSelectionMisc:
    def test_negative_budget_rejected(self):
        with pytest.raises(ValueError):
            select_priority_domains(_typical(), -1)

    def test_deterministic(self):
        assert select_priority_domains(_typical(), 6) == select_priority_domains(_typical(), 6)

    def test_chosen_domains_distinct(self):
        selection = select_priority_domains(_typical(), 10)
        chosen = [selection.primary, selection.secondary, selection.tertiary]
        assert len(set(chosen)) == 3

    def test_actionability(self):
        card = empty_scorecard(now=NOW)
        assert is_domain_actionable(Domain.RECOVERY, card)
        assert is_domain_actionable(Domain.MIND, card)
        assert not is_domain_actionable(Domain.HEART, card)

    def test_domain_preview(self):
        assert domain_preview(Domain.HEART) == "Zone 2 cardio progression for VO2max"
        assert all(domain_preview(d) for d in DOMAINS)

    def test_selection_summary(self):
        summary = selection_summary(select_priority_domains(_typical(), 6))
        assert [item.priority for item in summary] == [
            SelectionPriority.PRIMARY,
            SelectionPriority.SECONDARY,
            SelectionPriority.TERTIARY,
        ]
        assert summary[0].domain is Domain.HEART
        assert summary[1].preview == "Sleep optimization and HRV improvement"

    def test_summary_skips_empty_slots(self):
        summary = selection_summary(select_priority_domains(empty_scorecard(now=NOW), 10))
        assert len(summary) == 1
