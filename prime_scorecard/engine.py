"""Scorecard generation: evidence in, immutable Scorecard out.

Pipeline (strictly forward):
    evidence → DomainScorer → confidence → composite → explanations + risk flags → Scorecard

The clock is an explicit argument. With the same evidence, `now` and
SCORING_REVISION the output is identical, which is what makes stored
scorecards reproducible and diffable.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from .schemas.common import DOMAINS, Domain
from .schemas.evidence import EvidenceItem, ensure_aware
from .schemas.scorecard import DomainScoreSet, Scorecard
from .scorers.composite import aggregate
from .scorers.confidence import confidence_breakdown
from .scorers.domain_scorer import DomainResult, DomainScorer
from .scorers.explanations import explain, fastest_upgrade_action
from .scorers.policy_registry import ConfidencePolicy, get_confidence_policy
from .scorers.risk_flags import extract_risk_flags
from .scorers.transfer_table import SCORING_REVISION
from .utils.scoring_audit import AuditEvent, ScoringAuditLog

logger = logging.getLogger(__name__)

EvidenceLike = Union[EvidenceItem, dict]


def coerce_evidence(evidence: Iterable[EvidenceLike]) -> list[EvidenceItem]:
    """Validate raw dicts into EvidenceItems; pass items through.

    Raises:
        ValueError: for entries that are neither an EvidenceItem nor a dict
        pydantic.ValidationError: for dicts that fail the evidence model
    """
    if evidence is None:
        return []
    items: list[EvidenceItem] = []
    for index, entry in enumerate(evidence):
        if isinstance(entry, EvidenceItem):
            items.append(entry)
        elif isinstance(entry, dict):
            items.append(EvidenceItem.model_validate(entry))
        else:
            raise ValueError(f"Evidence entry {index} must be an EvidenceItem or dict, got {type(entry).__name__}")
    return items


def _score_all(
    evidence: list[EvidenceItem],
    now: datetime,
    policy: ConfidencePolicy,
    audit_log: Optional[ScoringAuditLog],
) -> tuple[dict[Domain, DomainResult], dict[Domain, int]]:
    results = DomainScorer().evaluate(evidence, audit_log=audit_log)
    confidences: dict[Domain, int] = {}
    for domain in DOMAINS:
        breakdown = confidence_breakdown(domain, results[domain].readings, now, policy)
        confidences[domain] = breakdown.value
        if audit_log is not None and breakdown.cap_applied is not None:
            audit_log.record(
                domain.value,
                AuditEvent.CONFIDENCE_CAPPED,
                before=breakdown.uncapped,
                after=breakdown.value,
                message=f"confidence {breakdown.uncapped} capped at {breakdown.cap_applied}",
            )
    return results, confidences


def score_evidence(
    evidence: Iterable[EvidenceLike],
    now: datetime,
    policy: Optional[ConfidencePolicy] = None,
) -> DomainScoreSet:
    """Per-domain scores and confidences without building a full Scorecard."""
    items = coerce_evidence(evidence)
    results, confidences = _score_all(items, ensure_aware(now), policy or get_confidence_policy(), None)
    return DomainScoreSet(
        scores={d: results[d].score for d in DOMAINS},
        confidence=confidences,
    )


def generate_scorecard(
    evidence: Iterable[EvidenceLike],
    now: Optional[datetime] = None,
    scoring_revision: str = SCORING_REVISION,
    policy: Optional[ConfidencePolicy] = None,
    audit_log: Optional[ScoringAuditLog] = None,
) -> Scorecard:
    """Build a Scorecard from one person's evidence.

    Args:
        evidence: EvidenceItems or dicts in the EvidenceItem shape
        now: Reference time for freshness and `generated_at` (defaults to UTC now)
        scoring_revision: Stamped on the output
        policy: Confidence policy override (defaults to the packaged YAML)
        audit_log: Optional caller-owned log of scoring decisions

    Returns:
        Immutable Scorecard. Domains without evidence have score None and
        confidence 0; prime_score is None only if every domain is absent.
    """
    now = ensure_aware(now or datetime.now(timezone.utc))
    items = coerce_evidence(evidence)
    results, confidences = _score_all(items, now, policy or get_confidence_policy(), audit_log)

    domain_scores = {d: results[d].score for d in DOMAINS}
    prime, prime_conf = aggregate(domain_scores, confidences)

    scored = [reading.to_scored_evidence() for d in DOMAINS for reading in results[d].readings]
    how_calculated = {d: explain(d, results[d].readings) for d in DOMAINS}
    upgrade_actions = {d: fastest_upgrade_action(d, items) for d in DOMAINS}
    risk_flags = extract_risk_flags(items, audit_log=audit_log)

    logger.info(
        f"Generated scorecard: prime_score={prime} prime_confidence={prime_conf} "
        f"evidence_used={len(scored)}/{len(items)} revision={scoring_revision}"
    )

    return Scorecard(
        generated_at=now,
        scoring_revision=scoring_revision,
        domain_scores=domain_scores,
        domain_confidence=confidences,
        prime_score=prime,
        prime_confidence=prime_conf,
        evidence=scored,
        how_calculated=how_calculated,
        risk_flags=risk_flags,
        fastest_upgrade_action=upgrade_actions,
    )


# =============================================================================
# Scorecard contract helpers
# =============================================================================


def empty_scorecard(now: Optional[datetime] = None, scoring_revision: str = SCORING_REVISION) -> Scorecard:
    """Scorecard for a person with no evidence at all."""
    return generate_scorecard([], now=now, scoring_revision=scoring_revision)


def has_any_scores(scorecard: Scorecard) -> bool:
    return any(score is not None for score in scorecard.domain_scores.values())


def has_evidence_for_domain(scorecard: Scorecard, domain: Domain) -> bool:
    return any(e.domain == Domain(domain) for e in scorecard.evidence)


def domains_with_evidence(scorecard: Scorecard) -> list[Domain]:
    """Domains with at least one contributing item, in canonical order."""
    return [d for d in DOMAINS if has_evidence_for_domain(scorecard, d)]


def count_evidence_by_domain(scorecard: Scorecard) -> dict[Domain, int]:
    counts = {d: 0 for d in DOMAINS}
    for item in scorecard.evidence:
        counts[item.domain] += 1
    return counts
