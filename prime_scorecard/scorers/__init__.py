"""Scorers: transfer curves, domain scores, confidence, composite, explanations."""

# Transfer table
from .transfer_table import (
    DOMAIN_SCORE_FLOORS,
    SCORING_REVISION,
    TRANSFER_TABLE,
    DriverSpec,
    drivers_for,
    get_driver,
    interpolate_score,
    is_registered_driver,
    score_value,
)

# Domain scoring
from .domain_scorer import (
    DomainResult,
    DomainScorer,
    DriverReading,
    detect_conflict,
    domain_score_from_subscores,
    group_by_driver,
    score,
    select_authoritative,
)

# Confidence
from .confidence import (
    ConfidenceBreakdown,
    confidence,
    confidence_breakdown,
    confidence_label,
    freshness_factor,
)
from .policy_registry import ConfidencePolicy, DomainCap, clear_cache, get_confidence_policy

# Composite + explanations
from .composite import aggregate, prime_confidence, prime_score
from .explanations import NO_EVIDENCE_LINE, explain, explain_evidence, fastest_upgrade_action, missing_drivers

# Risk flags
from .risk_flags import RISK_FLAG_COPY, extract_risk_flags, is_bp_crisis

__all__ = [
    # Transfer table
    "DOMAIN_SCORE_FLOORS",
    "SCORING_REVISION",
    "TRANSFER_TABLE",
    "DriverSpec",
    "drivers_for",
    "get_driver",
    "interpolate_score",
    "is_registered_driver",
    "score_value",
    # Domain scoring
    "DomainResult",
    "DomainScorer",
    "DriverReading",
    "detect_conflict",
    "domain_score_from_subscores",
    "group_by_driver",
    "score",
    "select_authoritative",
    # Confidence
    "ConfidenceBreakdown",
    "ConfidencePolicy",
    "DomainCap",
    "clear_cache",
    "confidence",
    "confidence_breakdown",
    "confidence_label",
    "freshness_factor",
    "get_confidence_policy",
    # Composite + explanations
    "NO_EVIDENCE_LINE",
    "aggregate",
    "explain",
    "explain_evidence",
    "fastest_upgrade_action",
    "missing_drivers",
    "prime_confidence",
    "prime_score",
    # Risk flags
    "RISK_FLAG_COPY",
    "extract_risk_flags",
    "is_bp_crisis",
]
