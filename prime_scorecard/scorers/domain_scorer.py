"""Domain Scorer - evidence → per-driver subscores → per-domain scores.

For each domain the registered drivers are visited in transfer-table order.
A driver with several readings uses only the most recent one; ties on
measured_at go to the item that appears later in the input list. The domain
score is the rounded mean of the contributing subscores, clamped to
[domain floor, 100]. A domain with no contributing driver has no score (None),
which is distinct from a low score.

All functions are pure; the optional audit log is owned by the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..constants import CONFLICT_THRESHOLD
from ..schemas.common import DOMAINS, Domain
from ..schemas.evidence import EvidenceItem, ScoredEvidence
from ..utils.scoring_audit import AuditEvent, ScoringAuditLog
from .transfer_table import DOMAIN_SCORE_FLOORS, DriverSpec, drivers_for, interpolate_score, score_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriverReading:
    """The authoritative reading for one driver and what it produced."""

    spec: DriverSpec
    item: EvidenceItem
    subscore: int
    superseded: int = 0  # older readings ignored for this driver
    conflict: bool = False

    def to_scored_evidence(self) -> ScoredEvidence:
        return ScoredEvidence.from_item(self.item, self.subscore, conflict_flag=self.conflict)


@dataclass
class DomainResult:
    """Score and contributing readings for one domain."""

    domain: Domain
    score: Optional[int]
    readings: list[DriverReading] = field(default_factory=list)

    @property
    def has_evidence(self) -> bool:
        return bool(self.readings)


def select_authoritative(evidence: list[EvidenceItem]) -> dict[tuple[Domain, str], tuple[EvidenceItem, int]]:
    """Most recent item per (domain, metric_code) plus the count it superseded.

    Iterating in input order with `>=` lets a later-listed item win a tie on
    measured_at.
    """
    latest: dict[tuple[Domain, str], EvidenceItem] = {}
    counts: dict[tuple[Domain, str], int] = {}
    for item in evidence:
        key = (item.domain, item.metric_code)
        counts[key] = counts.get(key, 0) + 1
        current = latest.get(key)
        if current is None or item.measured_at >= current.measured_at:
            latest[key] = item
    return {key: (item, counts[key] - 1) for key, item in latest.items()}


def group_by_driver(evidence: list[EvidenceItem]) -> dict[tuple[Domain, str], list[EvidenceItem]]:
    """All readings per (domain, metric_code), in input order."""
    groups: dict[tuple[Domain, str], list[EvidenceItem]] = {}
    for item in evidence:
        groups.setdefault((item.domain, item.metric_code), []).append(item)
    return groups


def detect_conflict(
    best: EvidenceItem,
    readings: list[EvidenceItem],
    threshold: float = CONFLICT_THRESHOLD,
) -> bool:
    """True when any other reading differs from `best` by more than `threshold`.

    The difference is relative to the authoritative value. When that value is
    zero, any non-zero reading counts as a conflict.
    """
    for other in readings:
        if other is best:
            continue
        if best.value_raw == 0:
            if other.value_raw != 0:
                return True
            continue
        if abs(other.value_raw - best.value_raw) / abs(best.value_raw) > threshold:
            return True
    return False


def domain_score_from_subscores(domain: Domain, subscores: list[int]) -> Optional[int]:
    """Rounded mean clamped to [domain floor, 100]; None when empty."""
    if not subscores:
        return None
    mean = sum(subscores) / len(subscores)
    return int(round(max(DOMAIN_SCORE_FLOORS[domain], min(100, mean))))


class DomainScorer:
    """Scores every domain from a flat evidence list.

    Usage:
        results = DomainScorer().evaluate(evidence)
        results[Domain.HEART].score  # e.g. 88, or None
    """

    def evaluate(
        self,
        evidence: list[EvidenceItem],
        audit_log: Optional[ScoringAuditLog] = None,
    ) -> dict[Domain, DomainResult]:
        authoritative = select_authoritative(evidence)
        groups = group_by_driver(evidence)
        return {domain: self._evaluate_domain(domain, authoritative, groups, audit_log) for domain in DOMAINS}

    def _evaluate_domain(
        self,
        domain: Domain,
        authoritative: dict[tuple[Domain, str], tuple[EvidenceItem, int]],
        groups: dict[tuple[Domain, str], list[EvidenceItem]],
        audit_log: Optional[ScoringAuditLog],
    ) -> DomainResult:
        readings: list[DriverReading] = []
        for spec in drivers_for(domain):
            found = authoritative.get(spec.key)
            if found is None:
                continue
            item, superseded = found
            subscore = score_value(spec, item.value_raw)
            conflict = detect_conflict(item, groups[spec.key])
            readings.append(
                DriverReading(spec=spec, item=item, subscore=subscore, superseded=superseded, conflict=conflict)
            )

            if audit_log is not None:
                self._audit_reading(audit_log, spec, item, subscore, superseded, conflict)

        score = domain_score_from_subscores(domain, [r.subscore for r in readings])

        if audit_log is not None and readings:
            mean = sum(r.subscore for r in readings) / len(readings)
            if round(mean) < DOMAIN_SCORE_FLOORS[domain]:
                audit_log.record(
                    domain.value,
                    AuditEvent.DOMAIN_CLAMPED,
                    before=mean,
                    after=score,
                    message=f"mean subscore {mean:.1f} raised to domain floor {DOMAIN_SCORE_FLOORS[domain]}",
                )

        logger.debug(f"Scored {domain.value}: score={score} drivers={len(readings)}")
        return DomainResult(domain=domain, score=score, readings=readings)

    def _audit_reading(
        self,
        audit_log: ScoringAuditLog,
        spec: DriverSpec,
        item: EvidenceItem,
        subscore: int,
        superseded: int,
        conflict: bool,
    ) -> None:
        if superseded:
            audit_log.record(
                spec.domain.value,
                AuditEvent.SUPERSEDED,
                metric_code=spec.metric_code,
                value=item.value_raw,
                message=f"{superseded} older reading(s) ignored; using {item.measured_at.date().isoformat()}",
            )
        if conflict:
            audit_log.record(
                spec.domain.value,
                AuditEvent.CONFLICTING_READINGS,
                metric_code=spec.metric_code,
                value=item.value_raw,
                message=f"older readings differ from {item.value_raw:g} by more than {CONFLICT_THRESHOLD:.0%}",
            )
        raw = interpolate_score(item.value_raw, list(spec.knots))
        if raw < spec.floor or raw > spec.ceiling:
            audit_log.record(
                spec.domain.value,
                AuditEvent.SUBSCORE_CLAMPED,
                metric_code=spec.metric_code,
                value=item.value_raw,
                before=raw,
                after=subscore,
                message=f"curve output {raw:.1f} clamped to [{spec.floor}, {spec.ceiling}]",
            )


def score(evidence: list[EvidenceItem], audit_log: Optional[ScoringAuditLog] = None) -> dict[Domain, Optional[int]]:
    """Domain scores only; absent domains map to None."""
    results = DomainScorer().evaluate(evidence, audit_log=audit_log)
    return {domain: result.score for domain, result in results.items()}
