"""Prime Scorecard: explainable health-domain scores, confidence, and coaching focus.

Usage:
    from prime_scorecard import generate_scorecard, select_priority_domains

    scorecard = generate_scorecard(evidence, now=now)
    selection = select_priority_domains(scorecard, time_budget_hours_per_week=4)
"""

from .engine import (
    coerce_evidence,
    count_evidence_by_domain,
    domains_with_evidence,
    empty_scorecard,
    generate_scorecard,
    has_any_scores,
    has_evidence_for_domain,
    score_evidence,
)
from .parsers.scorecard_inputs import ScorecardInputs, inputs_to_evidence
from .schemas import (
    DOMAINS,
    ConfidenceLabel,
    Domain,
    DomainScoreSet,
    DomainSelection,
    EvidenceItem,
    Scorecard,
    ScoredEvidence,
    SourceClass,
)
from .scorers.transfer_table import SCORING_REVISION
from .services.priority_selector import domain_preview, select_priority_domains, selection_summary
from .validators.scorecard_validator import validate_scorecard

__version__ = "0.3.0"

__all__ = [
    "DOMAINS",
    "SCORING_REVISION",
    "ConfidenceLabel",
    "Domain",
    "DomainScoreSet",
    "DomainSelection",
    "EvidenceItem",
    "ScoredEvidence",
    "Scorecard",
    "ScorecardInputs",
    "SourceClass",
    "coerce_evidence",
    "count_evidence_by_domain",
    "domain_preview",
    "domains_with_evidence",
    "empty_scorecard",
    "generate_scorecard",
    "has_any_scores",
    "has_evidence_for_domain",
    "inputs_to_evidence",
    "score_evidence",
    "select_priority_domains",
    "selection_summary",
    "validate_scorecard",
]
