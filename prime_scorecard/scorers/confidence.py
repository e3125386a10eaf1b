"""Confidence Model - how much to trust each domain score.

Confidence is computed from the authoritative reading of each driver in the
domain (the same readings the Domain Scorer used):

    coverage  = min(1, drivers / target)
    quality   = min(1, Σ reliability(source) / target)
    freshness = max over readings of 0.5 ** (age_days / half_life_days)

    confidence = round(100 × (w_cov·coverage + w_qual·quality + w_fresh·freshness))

then reduced to the domain cap when the cap's lifting evidence is absent.

Each term is non-decreasing in driver count, source reliability and recency,
so adding a fresher, equally-or-more-reliable reading never lowers the value.
A domain with no evidence has confidence 0.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..constants import CONFIDENCE_HIGH_THRESHOLD, CONFIDENCE_LOW_THRESHOLD, SECONDS_PER_DAY
from ..schemas.common import ConfidenceLabel, Domain
from ..schemas.evidence import EvidenceItem, ensure_aware
from ..utils.scoring_audit import AuditEvent, ScoringAuditLog
from .domain_scorer import DriverReading, select_authoritative
from .policy_registry import ConfidencePolicy, get_confidence_policy
from .transfer_table import get_driver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfidenceBreakdown:
    """Components behind a confidence value (0.0-1.0 each)."""

    coverage: float = 0.0
    quality: float = 0.0
    freshness: float = 0.0
    uncapped: int = 0
    value: int = 0
    cap_applied: Optional[int] = None


def freshness_factor(measured_at: datetime, now: datetime, half_life_days: float) -> float:
    """Exponential decay; readings dated after `now` count as brand new."""
    age_days = (ensure_aware(now) - ensure_aware(measured_at)).total_seconds() / SECONDS_PER_DAY
    if age_days <= 0:
        return 1.0
    return 0.5 ** (age_days / half_life_days)


def confidence_breakdown(
    domain: Domain,
    readings: list[DriverReading],
    now: datetime,
    policy: Optional[ConfidencePolicy] = None,
) -> ConfidenceBreakdown:
    """Confidence components for one domain's authoritative readings."""
    if not readings:
        return ConfidenceBreakdown()

    policy = policy or get_confidence_policy()
    target = policy.target_drivers_per_domain

    coverage = min(1.0, len(readings) / target)
    quality = min(1.0, sum(policy.reliability(r.item.source) for r in readings) / target)
    freshness = max(freshness_factor(r.item.measured_at, now, r.spec.half_life_days) for r in readings)

    weights = policy.weights
    raw = 100 * (
        weights["coverage"] * coverage
        + weights["quality"] * quality
        + weights["freshness"] * freshness
    )
    uncapped = int(round(max(0.0, min(100.0, raw))))

    value = uncapped
    cap_applied = None
    cap = policy.caps.get(Domain(domain))
    if cap is not None and uncapped > cap.max_confidence:
        sources = {r.item.source for r in readings}
        metric_codes = {r.item.metric_code for r in readings}
        if not cap.is_lifted(sources, metric_codes):
            value = cap.max_confidence
            cap_applied = cap.max_confidence

    return ConfidenceBreakdown(
        coverage=coverage,
        quality=quality,
        freshness=freshness,
        uncapped=uncapped,
        value=value,
        cap_applied=cap_applied,
    )


def readings_for(domain: Domain, evidence: list[EvidenceItem]) -> list[DriverReading]:
    """Authoritative readings of one domain (subscores not needed here)."""
    domain = Domain(domain)
    readings = []
    for (item_domain, metric_code), (item, superseded) in select_authoritative(evidence).items():
        if item_domain != domain:
            continue
        spec = get_driver(item_domain, metric_code)
        readings.append(DriverReading(spec=spec, item=item, subscore=0, superseded=superseded))
    return readings


def confidence(
    domain: Domain,
    evidence: list[EvidenceItem],
    now: datetime,
    policy: Optional[ConfidencePolicy] = None,
    audit_log: Optional[ScoringAuditLog] = None,
) -> int:
    """Confidence (0-100) for one domain from a flat evidence list."""
    breakdown = confidence_breakdown(domain, readings_for(domain, evidence), now, policy)
    if audit_log is not None and breakdown.cap_applied is not None:
        audit_log.record(
            Domain(domain).value,
            AuditEvent.CONFIDENCE_CAPPED,
            before=breakdown.uncapped,
            after=breakdown.value,
            message=f"confidence {breakdown.uncapped} capped at {breakdown.cap_applied}",
        )
    return breakdown.value


def confidence_label(value: int) -> ConfidenceLabel:
    """Bucket a 0-100 confidence into Low / Medium / High."""
    if value >= CONFIDENCE_HIGH_THRESHOLD:
        return ConfidenceLabel.HIGH
    if value >= CONFIDENCE_LOW_THRESHOLD:
        return ConfidenceLabel.MEDIUM
    return ConfidenceLabel.LOW
