"""Evidence models: one timestamped, source-tagged observation per item.

Evidence arrives already unit-normalized from the import pipelines. The model
only guards the domain/metric enumeration and basic numeric sanity; anything
that fails here is a programmer error upstream, not a "no data" condition.
"""

import math
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .common import Domain, SourceClass


def ensure_aware(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so comparisons never mix naive/aware."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class EvidenceItem(BaseModel):
    """A single piece of evidence feeding one driver."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    domain: Domain = Field(..., description="Domain this evidence belongs to")
    metric_code: str = Field(..., description="Driver identifier, e.g. 'resting_hr'")
    value_raw: float = Field(..., description="Unit-normalized raw value")
    measured_at: datetime = Field(..., description="When the value was measured")
    source: SourceClass = Field(..., description="Source reliability class")
    unit: Optional[str] = Field(None, description="Unit as reported upstream (informational)")

    @field_validator("value_raw")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("value_raw must be a finite number")
        return v

    @field_validator("measured_at")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @model_validator(mode="after")
    def _registered_driver(self) -> "EvidenceItem":
        # Local import: the transfer table package imports this module
        from ..scorers.transfer_table import is_registered_driver

        if not is_registered_driver(self.domain, self.metric_code):
            raise ValueError(f"metric_code '{self.metric_code}' is not a registered driver of domain '{self.domain.value}'")
        return self


class ScoredEvidence(EvidenceItem):
    """An evidence item annotated with the subscore it produced."""

    subscore: int = Field(..., ge=0, le=100, description="Subscore from the driver's transfer curve")
    conflict_flag: bool = Field(False, description="Superseded readings of this driver disagree with it")

    @classmethod
    def from_item(cls, item: EvidenceItem, subscore: int, conflict_flag: bool = False) -> "ScoredEvidence":
        return cls(**item.model_dump(), subscore=subscore, conflict_flag=conflict_flag)
