"""Tests for scorecard generation and the scorecard contract helpers."""

import pytest
from pydantic import ValidationError

from conftest import NOW, make_item
from prime_scorecard.engine import (
    coerce_evidence,
    count_evidence_by_domain,
    domains_with_evidence,
    empty_scorecard,
    generate_scorecard,
    has_any_scores,
    has_evidence_for_domain,
    score_evidence,
)
from prime_scorecard.schemas.common import DOMAINS, Domain
from prime_scorecard.schemas.scorecard import DomainScoreSet, Scorecard
from prime_scorecard.scorers.transfer_table import SCORING_REVISION, get_driver
from prime_scorecard.utils.scoring_audit import AuditEvent, ScoringAuditLog


class TestGenerateScorecard:
    """End-to-end generation."""

    def test_resting_hr_example(self):
        evidence = [
            make_item("heart", "resting_hr", 52, days_ago=0),
            make_item("heart", "resting_hr", 78, days_ago=1),
        ]
        card = generate_scorecard(evidence, now=NOW)
        assert card.domain_scores[Domain.HEART] == 95
        assert [e.value_raw for e in card.evidence] == [52]
        assert card.evidence[0].subscore == 95

    def test_stamps_time_and_revision(self):
        card = generate_scorecard([], now=NOW)
        assert card.generated_at == NOW
        assert card.scoring_revision == SCORING_REVISION
        assert generate_scorecard([], now=NOW, scoring_revision="9.9.9").scoring_revision == "9.9.9"

    def test_empty_evidence(self):
        card = generate_scorecard([], now=NOW)
        assert card.prime_score is None
        assert card.prime_confidence == 0
        assert all(card.domain_scores[d] is None for d in DOMAINS)
        assert all(card.domain_confidence[d] == 0 for d in DOMAINS)
        assert all(card.how_calculated[d] == ["No usable evidence yet."] for d in DOMAINS)
        assert card.evidence == []

    def test_prime_score_present_when_any_domain_scored(self):
        card = generate_scorecard([make_item("mind", "brain_fog", 2, source="self_report")], now=NOW)
        assert card.prime_score is not None
        assert card.prime_confidence > 0

    def test_evidence_only_contains_contributors(self, full_evidence):
        card = generate_scorecard(full_evidence, now=NOW)
        assert len(card.evidence) == len(full_evidence) - 1
        assert 78 not in [e.value_raw for e in card.evidence if e.metric_code == "resting_hr"]

    def test_how_calculated_matches_evidence(self, full_evidence):
        """One line per contributing item, naming that item's driver and subscore."""
        card = generate_scorecard(full_evidence, now=NOW)
        for domain in DOMAINS:
            used = card.evidence_for(domain)
            lines = card.how_calculated[domain]
            if not used:
                assert lines == ["No usable evidence yet."]
                continue
            assert len(lines) == len(used)
            for item, line in zip(used, lines):
                spec = get_driver(item.domain, item.metric_code)
                assert line.startswith(f"{spec.label}: {spec.format_value(item.value_raw)}")
                assert f"subscore {item.subscore}" in line

    def test_ranges(self, full_evidence):
        card = generate_scorecard(full_evidence, now=NOW)
        for domain in DOMAINS:
            score = card.domain_scores[domain]
            assert score is None or 0 <= score <= 100
            assert 0 <= card.domain_confidence[domain] <= 100
        assert 0 <= card.prime_score <= 100
        assert 0 <= card.prime_confidence <= 100

    def test_idempotent(self, full_evidence):
        first = generate_scorecard(full_evidence, now=NOW).model_dump_json()
        second = generate_scorecard(list(full_evidence), now=NOW).model_dump_json()
        assert first == second

    def test_json_round_trip(self, full_evidence):
        card = generate_scorecard(full_evidence, now=NOW)
        assert Scorecard.model_validate_json(card.model_dump_json()) == card

    def test_serialized_keys_are_domain_names(self, full_evidence):
        data = generate_scorecard(full_evidence, now=NOW).model_dump(mode="json")
        assert set(data["domain_scores"]) == {d.value for d in DOMAINS}
        assert data["evidence"][0]["domain"] == "heart"

    def test_accepts_dicts(self):
        raw = {
            "domain": "heart",
            "metric_code": "resting_hr",
            "value_raw": 52,
            "measured_at": "2025-01-15T08:00:00Z",
            "source": "wearable",
        }
        assert generate_scorecard([raw], now=NOW).domain_scores[Domain.HEART] == 95

    def test_audit_log(self):
        audit_log = ScoringAuditLog()
        evidence = [
            make_item("heart", "resting_hr", 78, days_ago=1),
            make_item("heart", "resting_hr", 52, days_ago=0),
            make_item("mind", "focus_stability", 4, source="self_report"),
            make_item("mind", "brain_fog", 0, source="self_report"),
        ]
        generate_scorecard(evidence, now=NOW, audit_log=audit_log)
        assert audit_log.entries_for("heart", AuditEvent.SUPERSEDED)
        assert audit_log.entries_for("mind", AuditEvent.CONFIDENCE_CAPPED)


class TestCoerceEvidence:
    def test_rejects_unknown_types(self):
        with pytest.raises(ValueError, match="Evidence entry 0"):
            coerce_evidence(["resting_hr=52"])

    def test_rejects_malformed_dict(self):
        with pytest.raises(ValidationError):
            coerce_evidence([{"domain": "heart", "metric_code": "steps", "value_raw": 1,
                              "measured_at": "2025-01-01T00:00:00Z", "source": "wearable"}])

    def test_none_is_empty(self):
        assert coerce_evidence(None) == []


class TestScoreEvidence:
    def test_returns_domain_score_set(self, full_evidence):
        result = score_evidence(full_evidence, now=NOW)
        assert isinstance(result, DomainScoreSet)
        assert result.scores[Domain.HEART] is not None
        assert set(result.confidence) == set(DOMAINS)

    def test_matches_scorecard(self, full_evidence):
        result = score_evidence(full_evidence, now=NOW)
        card = generate_scorecard(full_evidence, now=NOW)
        assert result.scores == card.domain_scores
        assert result.confidence == card.domain_confidence


class TestContractHelpers:
    def test_empty_scorecard(self):
        card = empty_scorecard(now=NOW)
        assert not has_any_scores(card)
        assert domains_with_evidence(card) == []
        assert count_evidence_by_domain(card) == {d: 0 for d in DOMAINS}

    def test_helpers_on_partial_scorecard(self):
        card = generate_scorecard(
            [
                make_item("heart", "resting_hr", 60),
                make_item("heart", "vo2max", 40),
                make_item("recovery", "hrv", 60),
            ],
            now=NOW,
        )
        assert has_any_scores(card)
        assert has_evidence_for_domain(card, Domain.HEART)
        assert not has_evidence_for_domain(card, "frame")
        assert domains_with_evidence(card) == [Domain.HEART, Domain.RECOVERY]
        assert count_evidence_by_domain(card)[Domain.HEART] == 2
