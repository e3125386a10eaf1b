"""Scorecard and domain-selection output models.

Both serialize with `model_dump(mode="json")`. Per-domain maps are keyed by
the domain value ("heart", "frame", ...) so serialized output is stable.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import DOMAINS, Domain, SelectionPriority
from .evidence import ScoredEvidence


class DomainScoreSet(BaseModel):
    """Optional score and always-defined confidence per domain."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    scores: dict[Domain, Optional[int]] = Field(..., description="0-100 or None when no usable evidence")
    confidence: dict[Domain, int] = Field(..., description="0-100, 0 when no evidence")

    @model_validator(mode="after")
    def _all_domains(self) -> "DomainScoreSet":
        for domain in DOMAINS:
            if domain not in self.scores or domain not in self.confidence:
                raise ValueError(f"DomainScoreSet missing domain '{domain.value}'")
            score = self.scores[domain]
            if score is not None and not 0 <= score <= 100:
                raise ValueError(f"Score for {domain.value} out of range: {score}")
            if not 0 <= self.confidence[domain] <= 100:
                raise ValueError(f"Confidence for {domain.value} out of range: {self.confidence[domain]}")
        return self


class RiskFlags(BaseModel):
    """Safety flags for the coach. None means the driver had no evidence."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    bp_crisis_flag: Optional[bool] = None
    severe_pain_flag: Optional[bool] = None
    diabetes_flag: Optional[bool] = None

    @property
    def raised(self) -> list[str]:
        """Names of the flags that are set, in declaration order."""
        return [name for name, value in self if value]


class Scorecard(BaseModel):
    """Immutable result of one scoring invocation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    generated_at: datetime
    scoring_revision: str
    domain_scores: dict[Domain, Optional[int]]
    domain_confidence: dict[Domain, int]
    prime_score: Optional[int] = None
    prime_confidence: int = 0
    evidence: list[ScoredEvidence] = Field(default_factory=list)
    how_calculated: dict[Domain, list[str]] = Field(default_factory=dict)
    risk_flags: RiskFlags = Field(default_factory=RiskFlags)
    fastest_upgrade_action: dict[Domain, Optional[str]] = Field(
        default_factory=dict, description="Most useful missing driver's prompt per domain"
    )

    def evidence_for(self, domain: Domain) -> list[ScoredEvidence]:
        return [e for e in self.evidence if e.domain == Domain(domain)]


# =============================================================================
# Domain Selection
# =============================================================================


class SelectionReasoning(BaseModel):
    """One reasoning string per filled selection slot."""

    primary: str
    secondary: Optional[str] = None
    tertiary: Optional[str] = None


class DomainSelection(BaseModel):
    """Which domains to coach this cycle, and why."""

    model_config = ConfigDict(frozen=True)

    primary: Domain
    secondary: Optional[Domain] = None
    tertiary: Optional[Domain] = None
    reasoning: SelectionReasoning

    @model_validator(mode="after")
    def _distinct(self) -> "DomainSelection":
        chosen = [d for d in (self.primary, self.secondary, self.tertiary) if d is not None]
        if len(set(chosen)) != len(chosen):
            raise ValueError("Selected domains must be distinct")
        return self


class SelectionSummaryItem(BaseModel):
    domain: Domain
    priority: SelectionPriority
    preview: str
    reasoning: str
