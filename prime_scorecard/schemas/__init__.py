"""Pydantic models and enums shared across the scoring engine."""

from .common import DOMAINS, ConfidenceLabel, Domain, SelectionPriority, SourceClass
from .evidence import EvidenceItem, ScoredEvidence
from .scorecard import (
    DomainScoreSet,
    DomainSelection,
    RiskFlags,
    Scorecard,
    SelectionReasoning,
    SelectionSummaryItem,
)

__all__ = [
    "DOMAINS",
    "ConfidenceLabel",
    "Domain",
    "DomainScoreSet",
    "DomainSelection",
    "EvidenceItem",
    "RiskFlags",
    "Scorecard",
    "ScoredEvidence",
    "SelectionPriority",
    "SelectionReasoning",
    "SelectionSummaryItem",
    "SourceClass",
]
