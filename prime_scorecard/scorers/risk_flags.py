"""Risk flags - safety signals the coach must see before planning.

Flags are read from the authoritative (most recent) reading of a driver, so
an old crisis-range blood pressure superseded by a normal one does not raise
the flag. A flag stays None when its driver has no evidence at all; False
means the driver was measured and is out of the danger zone.

    bp_crisis_flag    systolic ≥ 180 or diastolic ≥ 120 mmHg
    severe_pain_flag  pain limitation answered "severe"
    diabetes_flag     metabolic risk category is a diabetes diagnosis
"""

import logging
from typing import Optional

from ..constants import BP_CRISIS_DIASTOLIC, BP_CRISIS_SYSTOLIC, DIABETES_RISK_VALUE, SEVERE_PAIN_VALUE
from ..schemas.common import Domain
from ..schemas.evidence import EvidenceItem
from ..schemas.scorecard import RiskFlags
from ..utils.scoring_audit import AuditEvent, ScoringAuditLog
from .domain_scorer import select_authoritative

logger = logging.getLogger(__name__)

RISK_FLAG_COPY = {
    "bp_crisis_flag": "Blood pressure is in the crisis range. Check with a clinician before training hard.",
    "severe_pain_flag": "Severe pain limits your movement. Get it assessed before loading that area.",
    "diabetes_flag": "Diabetes diagnosis reported. Coordinate nutrition changes with your care team.",
}


def is_bp_crisis(systolic: Optional[float], diastolic: Optional[float] = None) -> bool:
    if systolic is not None and systolic >= BP_CRISIS_SYSTOLIC:
        return True
    return diastolic is not None and diastolic >= BP_CRISIS_DIASTOLIC


def extract_risk_flags(
    evidence: list[EvidenceItem],
    audit_log: Optional[ScoringAuditLog] = None,
) -> RiskFlags:
    """Risk flags from a flat evidence list."""
    latest = {key: item.value_raw for key, (item, _) in select_authoritative(evidence).items()}

    systolic = latest.get((Domain.HEART, "bp_systolic"))
    diastolic = latest.get((Domain.HEART, "bp_diastolic"))
    pain = latest.get((Domain.FRAME, "pain_limitation"))
    metabolic_risk = latest.get((Domain.METABOLISM, "metabolic_risk"))

    flags = RiskFlags(
        bp_crisis_flag=None if systolic is None and diastolic is None else is_bp_crisis(systolic, diastolic),
        severe_pain_flag=None if pain is None else pain >= SEVERE_PAIN_VALUE,
        diabetes_flag=None if metabolic_risk is None else metabolic_risk >= DIABETES_RISK_VALUE,
    )

    domains = {
        "bp_crisis_flag": Domain.HEART,
        "severe_pain_flag": Domain.FRAME,
        "diabetes_flag": Domain.METABOLISM,
    }
    for name in flags.raised:
        logger.warning(f"Risk flag raised: {name}")
        if audit_log is not None:
            audit_log.record(domains[name].value, AuditEvent.RISK_FLAG, message=name)
    return flags
