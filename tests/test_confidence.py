"""Tests for the Confidence Model and its YAML policy registry."""

import pytest

from conftest import NOW, make_item
from prime_scorecard.schemas.common import ConfidenceLabel, Domain, SourceClass
from prime_scorecard.scorers import policy_registry
from prime_scorecard.scorers.confidence import confidence, confidence_label, freshness_factor
from prime_scorecard.scorers.policy_registry import (
    clear_cache,
    get_confidence_policy,
    load_policy,
)
from prime_scorecard.utils.scoring_audit import AuditEvent, ScoringAuditLog


def _conf(domain, evidence):
    return confidence(Domain(domain), evidence, NOW)


# ─── Freshness ──────────────────────────────────────────────────────────────


class TestFreshness:
    def test_brand_new(self):
        assert freshness_factor(NOW, NOW, 30) == pytest.approx(1.0)

    def test_one_half_life(self):
        measured = make_item("heart", "resting_hr", 60, days_ago=30).measured_at
        assert freshness_factor(measured, NOW, 30) == pytest.approx(0.5)

    def test_future_reading_counts_as_new(self):
        measured = make_item("heart", "resting_hr", 60, days_ago=-2).measured_at
        assert freshness_factor(measured, NOW, 30) == pytest.approx(1.0)


# ─── Confidence ─────────────────────────────────────────────────────────────


class TestConfidence:
    """confidence(domain, evidence, now) → 0-100."""

    def setup_method(self):
        clear_cache()

    def test_no_evidence_is_zero(self):
        assert _conf("heart", []) == 0
        assert _conf("heart", [make_item("recovery", "hrv", 60)]) == 0

    def test_single_fresh_wearable_reading(self):
        # 100 × (0.40·1/3 + 0.35·0.8/3 + 0.25·1.0) = 47.67
        assert _conf("heart", [make_item("heart", "resting_hr", 60)]) == 48

    def test_decays_with_age(self):
        # freshness 0.5 → 100 × (0.1333 + 0.0933 + 0.125) = 35.17
        assert _conf("heart", [make_item("heart", "resting_hr", 60, days_ago=30)]) == 35

    def test_fresher_equally_reliable_reading_never_lowers(self):
        old = [make_item("heart", "resting_hr", 60, days_ago=30)]
        newer = old + [make_item("heart", "resting_hr", 64, days_ago=1)]
        assert _conf("heart", newer) >= _conf("heart", old)

    def test_more_reliable_replacement_never_lowers(self):
        old = [make_item("heart", "resting_hr", 60, days_ago=5, source="self_report")]
        newer = old + [make_item("heart", "resting_hr", 60, days_ago=1, source="wearable")]
        assert _conf("heart", newer) > _conf("heart", old)

    def test_older_reading_has_no_effect(self):
        current = [make_item("heart", "resting_hr", 60, days_ago=1)]
        with_old = current + [make_item("heart", "resting_hr", 90, days_ago=60, source="lab")]
        assert _conf("heart", with_old) == _conf("heart", current)

    def test_more_drivers_raise_confidence(self):
        one = [make_item("heart", "resting_hr", 60)]
        two = one + [make_item("heart", "vo2max", 42)]
        three = two + [make_item("heart", "bp_systolic", 115)]
        assert _conf("heart", one) < _conf("heart", two) < _conf("heart", three)

    def test_reliability_order(self):
        values = {
            source: _conf("heart", [make_item("heart", "resting_hr", 60, source=source)])
            for source in ("lab", "wearable", "photo", "self_report")
        }
        assert values["lab"] > values["wearable"] > values["photo"] > values["self_report"]

    def test_full_coverage_fresh_labs_reach_100(self):
        evidence = [
            make_item("metabolism", "hba1c", 5.2, source="lab"),
            make_item("metabolism", "apob", 80, source="lab"),
            make_item("metabolism", "hscrp", 0.6, source="lab"),
        ]
        assert _conf("metabolism", evidence) == 100

    def test_always_in_range(self, full_evidence):
        for domain in Domain:
            assert 0 <= _conf(domain, full_evidence) <= 100


class TestConfidenceCaps:
    """Domains that need lab or test data for high confidence."""

    def setup_method(self):
        clear_cache()

    def test_metabolism_capped_without_labs(self):
        evidence = [
            make_item("metabolism", "fasting_glucose", 88),
            make_item("metabolism", "hba1c", 5.3, source="wearable"),
            make_item("metabolism", "metabolic_risk", 1, source="self_report"),
        ]
        assert _conf("metabolism", evidence) == 40

    def test_metabolism_cap_lifted_by_lab(self):
        evidence = [make_item("metabolism", "hba1c", 5.3, source="lab")]
        # 100 × (0.1333 + 0.35·1/3 + 0.25) = 50
        assert _conf("metabolism", evidence) == 50

    def test_mind_capped_without_focus_test(self):
        evidence = [
            make_item("mind", "focus_stability", 4, source="self_report"),
            make_item("mind", "brain_fog", 1, source="self_report"),
        ]
        assert _conf("mind", evidence) == 35

    def test_mind_cap_lifted_by_cognitive_test(self):
        evidence = [
            make_item("mind", "focus_stability", 4, source="self_report"),
            make_item("mind", "brain_fog", 1, source="self_report"),
            make_item("mind", "cognition_score", 70, source="test"),
        ]
        assert _conf("mind", evidence) == 85

    def test_cap_below_threshold_untouched(self):
        evidence = [make_item("mind", "brain_fog", 1, source="self_report", days_ago=120)]
        assert _conf("mind", evidence) < 35

    def test_cap_recorded_in_audit_log(self):
        audit_log = ScoringAuditLog()
        evidence = [
            make_item("mind", "focus_stability", 4, source="self_report"),
            make_item("mind", "brain_fog", 1, source="self_report"),
        ]
        confidence(Domain.MIND, evidence, NOW, audit_log=audit_log)
        entries = audit_log.entries_for("mind", AuditEvent.CONFIDENCE_CAPPED)
        assert len(entries) == 1
        assert entries[0].after == 35


# ─── Labels ─────────────────────────────────────────────────────────────────


class TestConfidenceLabel:
    def test_cut_points(self):
        assert confidence_label(0) is ConfidenceLabel.LOW
        assert confidence_label(39) is ConfidenceLabel.LOW
        assert confidence_label(40) is ConfidenceLabel.MEDIUM
        assert confidence_label(69) is ConfidenceLabel.MEDIUM
        assert confidence_label(70) is ConfidenceLabel.HIGH
        assert confidence_label(100) is ConfidenceLabel.HIGH

    def test_copy(self):
        assert ConfidenceLabel.LOW.copy == "Estimated from quick checks."
        assert ConfidenceLabel.HIGH.copy == "Based on device, lab, or test data."


# ─── Policy registry ────────────────────────────────────────────────────────


class TestPolicyRegistry:
    """YAML-backed confidence policy."""

    def setup_method(self):
        clear_cache()

    def teardown_method(self):
        clear_cache()

    def test_packaged_policy_loads(self):
        policy = get_confidence_policy()
        assert policy.reliability(SourceClass.LAB) == pytest.approx(1.0)
        assert policy.reliability(SourceClass.SELF_REPORT) < policy.reliability(SourceClass.WEARABLE)
        assert sum(policy.weights.values()) == pytest.approx(1.0)
        assert policy.caps[Domain.METABOLISM].max_confidence == 40
        assert policy.caps[Domain.MIND].lifted_by_metrics == ("cognition_score",)

    def test_cached(self):
        assert get_confidence_policy() is get_confidence_policy()

    def test_missing_file_falls_back_to_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setattr(policy_registry, "_get_config_path", lambda: tmp_path / "absent.yaml")
        policy = get_confidence_policy()
        assert policy.caps == {}
        assert policy.target_drivers_per_domain == 3

    def test_weights_must_sum_to_one(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text(
            "source_reliability: {lab: 1.0, test: 0.9, wearable: 0.8, photo: 0.5, self_report: 0.4}\n"
            "weights: {coverage: 0.5, quality: 0.5, freshness: 0.5}\n"
        )
        with pytest.raises(ValueError, match="sum to 1.0"):
            load_policy(path)

    def test_missing_source_rejected(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text(
            "source_reliability: {lab: 1.0}\n"
            "weights: {coverage: 0.4, quality: 0.35, freshness: 0.25}\n"
        )
        with pytest.raises(ValueError, match="missing reliability"):
            load_policy(path)

    def test_custom_policy_changes_confidence(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text(
            "source_reliability: {lab: 1.0, test: 1.0, wearable: 1.0, photo: 1.0, self_report: 1.0}\n"
            "weights: {coverage: 0.0, quality: 0.0, freshness: 1.0}\n"
            "target_drivers_per_domain: 1\n"
        )
        policy = load_policy(path)
        evidence = [make_item("heart", "resting_hr", 60, days_ago=30)]
        assert confidence(Domain.HEART, evidence, NOW, policy=policy) == 50
