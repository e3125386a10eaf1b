"""Scorecard inputs: the per-person bundle handed over by the import pipelines.

ScorecardInputs combines:
- metrics: already-normalized readings (wearable exports, lab uploads)
- identity: height, weight, age, sex
- quick_checks: onboarding answers per domain (categorical)
- photo_estimates: vision-derived body composition

inputs_to_evidence() turns the bundle into EvidenceItems. Categorical answers
become small ordinal numbers on the scale the transfer table expects; BMI and
waist-to-height are derived from identity. The converter never fetches or
writes anything.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..schemas.common import Domain, SourceClass
from ..schemas.evidence import EvidenceItem, ensure_aware

logger = logging.getLogger(__name__)

# =============================================================================
# Categorical → numeric maps (scales match transfer_table knots)
# =============================================================================

# 1 well below … 5 well above; "not_sure" emits nothing
CARDIO_SELF_RATING_VALUES = {
    "below_avg": 1,
    "slightly_below": 2,
    "average": 3,
    "slightly_above": 4,
    "above_avg": 5,
}

# Bucket midpoints (reps)
PUSHUP_VALUES = {"not_possible": 0, "0-5": 3, "6-15": 10, "16-30": 23, "31+": 35}

PAIN_LIMITATION_VALUES = {"none": 0, "mild": 1, "moderate": 2, "severe": 3}

# Bucket midpoints (hours/night)
SLEEP_DURATION_VALUES = {"<6h": 5.5, "6-7h": 6.5, "7-8h": 7.5, "8h+": 8.5}

# Bucket midpoints (nights/week)
INSOMNIA_VALUES = {"<1": 0.5, "1-2": 1.5, "3-4": 3.5, "5+": 5.5}

# 1 very unstable … 5 very stable (four answers spread over the scale)
FOCUS_STABILITY_VALUES = {"very_unstable": 1, "somewhat_unstable": 2, "mostly_stable": 4, "very_stable": 5}

BRAIN_FOG_VALUES = {"rarely": 0, "sometimes": 1, "often": 2}

# Resting HR range midpoints (bpm)
RHR_RANGE_MIDPOINTS = {"<55": 52, "55-64": 60, "65-74": 70, "75-84": 80, "85+": 90}

# Ordinal used by the metabolic_risk driver
METABOLIC_RISK_VALUES = {
    "no_risk": 0,
    "family_history_only": 1,
    "prediabetes": 2,
    "one_condition": 3,
    "multiple_conditions": 4,
    "diabetes": 5,
}

_NON_ANSWERS = {"none", "unsure"}

_YEAR_MONTH = re.compile(r"^\d{4}-\d{2}$")
_YEAR_MONTH_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# =============================================================================
# Input models
# =============================================================================


class MetricInput(BaseModel):
    """One normalized reading from an import pipeline."""

    model_config = ConfigDict(extra="forbid")

    domain: Domain
    metric_code: str
    value_raw: float
    measured_at: datetime
    source: SourceClass = SourceClass.WEARABLE
    unit: Optional[str] = None


class IdentityInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    height_cm: Optional[float] = Field(None, gt=0, description="Height in centimeters")
    weight_kg: Optional[float] = Field(None, gt=0, description="Weight in kilograms")
    age: Optional[int] = Field(None, ge=0, le=130)
    sex: Optional[Literal["male", "female", "other"]] = None


class BloodPressureEntry(BaseModel):
    systolic: float = Field(..., gt=0)
    diastolic: float = Field(..., gt=0)
    measured_date: Optional[str] = Field(None, description="YYYY-MM, YYYY-MM-DD or ISO timestamp")

    @model_validator(mode="after")
    def _systolic_above_diastolic(self) -> "BloodPressureEntry":
        if self.systolic <= self.diastolic:
            raise ValueError(f"systolic ({self.systolic}) must exceed diastolic ({self.diastolic})")
        return self


class RestingHeartRateEntry(BaseModel):
    bpm: Optional[float] = Field(None, gt=0)
    range: Optional[Literal["<55", "55-64", "65-74", "75-84", "85+"]] = None
    measured_date: Optional[str] = None
    source: Optional[Literal["wearable", "doctor", "other"]] = None


class HeartCheck(BaseModel):
    cardio_self_rating: Optional[
        Literal["below_avg", "slightly_below", "average", "slightly_above", "above_avg", "not_sure"]
    ] = None
    blood_pressure: Optional[BloodPressureEntry] = None
    resting_heart_rate: Optional[RestingHeartRateEntry] = None


class FrameCheck(BaseModel):
    pushup_capability: Optional[Literal["0-5", "6-15", "16-30", "31+", "not_possible"]] = None
    pain_limitation: Optional[Literal["none", "mild", "moderate", "severe"]] = None
    waist_cm: Optional[float] = Field(None, gt=0)


class LabPanel(BaseModel):
    hba1c_percent: Optional[float] = Field(None, gt=0)
    apob_mg_dl: Optional[float] = Field(None, gt=0)
    hscrp_mg_l: Optional[float] = Field(None, ge=0)
    fasting_glucose_mg_dl: Optional[float] = Field(None, gt=0)
    test_date: Optional[str] = None


class MetabolismCheck(BaseModel):
    diagnoses: Optional[list[str]] = None
    family_history: Optional[list[str]] = None
    labs: Optional[LabPanel] = None


class RecoveryCheck(BaseModel):
    sleep_duration: Optional[Literal["<6h", "6-7h", "7-8h", "8h+"]] = None
    sleep_regularity: Optional[bool] = None
    insomnia_frequency: Optional[Literal["<1", "1-2", "3-4", "5+"]] = None


class MindCheck(BaseModel):
    focus_stability: Optional[Literal["very_unstable", "somewhat_unstable", "mostly_stable", "very_stable"]] = None
    brain_fog: Optional[Literal["rarely", "sometimes", "often"]] = None
    focus_test_score: Optional[float] = Field(None, ge=0, le=100, description="Composite from the focus test")


class QuickChecks(BaseModel):
    heart: Optional[HeartCheck] = None
    frame: Optional[FrameCheck] = None
    metabolism: Optional[MetabolismCheck] = None
    recovery: Optional[RecoveryCheck] = None
    mind: Optional[MindCheck] = None
    completed_at: Optional[datetime] = None


class PhotoEstimate(BaseModel):
    body_fat_pct: float = Field(..., gt=0, lt=75)
    measured_at: datetime


class ScorecardInputs(BaseModel):
    """Everything needed to generate one person's scorecard."""

    model_config = ConfigDict(extra="forbid")

    metrics: list[MetricInput] = Field(default_factory=list)
    identity: IdentityInput = Field(default_factory=IdentityInput)
    quick_checks: QuickChecks = Field(default_factory=QuickChecks)
    photo_estimates: list[PhotoEstimate] = Field(default_factory=list)


# =============================================================================
# Derived values
# =============================================================================


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    if height_cm <= 0:
        return 0.0
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def calculate_waist_to_height(waist_cm: float, height_cm: float) -> float:
    if height_cm <= 0:
        return 0.0
    return waist_cm / height_cm


def derive_metabolic_risk_category(diagnoses: list[str], family_history: list[str]) -> str:
    """Collapse diagnoses + family history into one risk category.

    Any single diagnosis, prediabetes included, counts as one_condition.
    """
    conditions = [d for d in diagnoses if d not in _NON_ANSWERS]
    has_family_history = any(f not in _NON_ANSWERS for f in family_history)

    if "diabetes" in conditions:
        return "diabetes"
    if len(conditions) > 1:
        return "multiple_conditions"
    if len(conditions) == 1:
        return "one_condition"
    if has_family_history:
        return "family_history_only"
    return "no_risk"


def parse_entry_date(value: Optional[str], default: datetime) -> datetime:
    """Form dates: YYYY-MM → 15th at noon UTC, YYYY-MM-DD → noon UTC."""
    if not value:
        return default
    if _YEAR_MONTH.match(value):
        return datetime.fromisoformat(f"{value}-15T12:00:00+00:00")
    if _YEAR_MONTH_DAY.match(value):
        return datetime.fromisoformat(f"{value}T12:00:00+00:00")
    try:
        return ensure_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        logger.warning(f"Unparseable entry date '{value}', using {default.isoformat()}")
        return default


# =============================================================================
# Conversion
# =============================================================================


def _item(domain: Domain, code: str, value: float, at: datetime, source: SourceClass, unit: str = None) -> EvidenceItem:
    return EvidenceItem(domain=domain, metric_code=code, value_raw=value, measured_at=at, source=source, unit=unit)


def _heart_evidence(heart: HeartCheck, answered_at: datetime) -> list[EvidenceItem]:
    items = []
    if heart.cardio_self_rating in CARDIO_SELF_RATING_VALUES:
        items.append(
            _item(Domain.HEART, "cardio_self_rating", CARDIO_SELF_RATING_VALUES[heart.cardio_self_rating],
                  answered_at, SourceClass.SELF_REPORT)
        )

    if heart.blood_pressure:
        bp = heart.blood_pressure
        at = parse_entry_date(bp.measured_date, answered_at)
        items.append(_item(Domain.HEART, "bp_systolic", bp.systolic, at, SourceClass.SELF_REPORT, "mmHg"))
        items.append(_item(Domain.HEART, "bp_diastolic", bp.diastolic, at, SourceClass.SELF_REPORT, "mmHg"))

    rhr = heart.resting_heart_rate
    if rhr and (rhr.bpm or rhr.range):
        bpm = rhr.bpm if rhr.bpm else RHR_RANGE_MIDPOINTS[rhr.range]
        source = SourceClass.WEARABLE if rhr.source == "wearable" else SourceClass.SELF_REPORT
        items.append(
            _item(Domain.HEART, "resting_hr", bpm, parse_entry_date(rhr.measured_date, answered_at), source, "bpm")
        )
    return items


def _frame_evidence(frame: Optional[FrameCheck], identity: IdentityInput, answered_at: datetime) -> list[EvidenceItem]:
    items = []
    if frame and frame.pushup_capability:
        items.append(
            _item(Domain.FRAME, "pushups", PUSHUP_VALUES[frame.pushup_capability], answered_at, SourceClass.SELF_REPORT)
        )
    if frame and frame.pain_limitation:
        items.append(
            _item(Domain.FRAME, "pain_limitation", PAIN_LIMITATION_VALUES[frame.pain_limitation], answered_at,
                  SourceClass.SELF_REPORT)
        )
    if frame and frame.waist_cm and identity.height_cm:
        ratio = calculate_waist_to_height(frame.waist_cm, identity.height_cm)
        items.append(_item(Domain.FRAME, "waist_to_height", ratio, answered_at, SourceClass.SELF_REPORT))
    if identity.height_cm and identity.weight_kg:
        bmi = calculate_bmi(identity.weight_kg, identity.height_cm)
        items.append(_item(Domain.FRAME, "bmi", bmi, answered_at, SourceClass.SELF_REPORT, "kg/m²"))
    return items


def _metabolism_evidence(metabolism: MetabolismCheck, answered_at: datetime) -> list[EvidenceItem]:
    items = []
    labs = metabolism.labs
    if labs:
        at = parse_entry_date(labs.test_date, answered_at)
        for code, value, unit in (
            ("hba1c", labs.hba1c_percent, "%"),
            ("fasting_glucose", labs.fasting_glucose_mg_dl, "mg/dL"),
            ("apob", labs.apob_mg_dl, "mg/dL"),
            ("hscrp", labs.hscrp_mg_l, "mg/L"),
        ):
            if value is not None:
                items.append(_item(Domain.METABOLISM, code, value, at, SourceClass.LAB, unit))

    if metabolism.diagnoses is not None or metabolism.family_history is not None:
        category = derive_metabolic_risk_category(metabolism.diagnoses or [], metabolism.family_history or [])
        items.append(
            _item(Domain.METABOLISM, "metabolic_risk", METABOLIC_RISK_VALUES[category], answered_at,
                  SourceClass.SELF_REPORT)
        )
    return items


def _recovery_evidence(recovery: RecoveryCheck, answered_at: datetime) -> list[EvidenceItem]:
    items = []
    if recovery.sleep_duration:
        items.append(
            _item(Domain.RECOVERY, "sleep_hours", SLEEP_DURATION_VALUES[recovery.sleep_duration], answered_at,
                  SourceClass.SELF_REPORT, "h")
        )
    if recovery.sleep_regularity is not None:
        items.append(
            _item(Domain.RECOVERY, "sleep_regularity", 1 if recovery.sleep_regularity else 0, answered_at,
                  SourceClass.SELF_REPORT)
        )
    if recovery.insomnia_frequency:
        items.append(
            _item(Domain.RECOVERY, "insomnia_nights", INSOMNIA_VALUES[recovery.insomnia_frequency], answered_at,
                  SourceClass.SELF_REPORT)
        )
    return items


def _mind_evidence(mind: MindCheck, answered_at: datetime) -> list[EvidenceItem]:
    items = []
    if mind.focus_test_score is not None:
        items.append(_item(Domain.MIND, "cognition_score", mind.focus_test_score, answered_at, SourceClass.TEST))
    if mind.focus_stability:
        items.append(
            _item(Domain.MIND, "focus_stability", FOCUS_STABILITY_VALUES[mind.focus_stability], answered_at,
                  SourceClass.SELF_REPORT)
        )
    if mind.brain_fog:
        items.append(
            _item(Domain.MIND, "brain_fog", BRAIN_FOG_VALUES[mind.brain_fog], answered_at, SourceClass.SELF_REPORT)
        )
    return items


def inputs_to_evidence(inputs: ScorecardInputs, now: Optional[datetime] = None) -> list[EvidenceItem]:
    """Convert a ScorecardInputs bundle into evidence, in a stable order.

    Order: metrics as given, photo estimates, then quick checks by domain.
    Quick-check answers without their own date use `completed_at`, falling
    back to `now`.
    """
    now = ensure_aware(now or datetime.now(timezone.utc))
    checks = inputs.quick_checks
    answered_at = ensure_aware(checks.completed_at) if checks.completed_at else now

    evidence = [
        _item(m.domain, m.metric_code, m.value_raw, m.measured_at, m.source, m.unit) for m in inputs.metrics
    ]
    evidence.extend(
        _item(Domain.FRAME, "body_fat_pct", p.body_fat_pct, p.measured_at, SourceClass.PHOTO, "%")
        for p in inputs.photo_estimates
    )

    if checks.heart:
        evidence.extend(_heart_evidence(checks.heart, answered_at))
    evidence.extend(_frame_evidence(checks.frame, inputs.identity, answered_at))
    if checks.metabolism:
        evidence.extend(_metabolism_evidence(checks.metabolism, answered_at))
    if checks.recovery:
        evidence.extend(_recovery_evidence(checks.recovery, answered_at))
    if checks.mind:
        evidence.extend(_mind_evidence(checks.mind, answered_at))

    logger.debug(f"Converted inputs to {len(evidence)} evidence items")
    return evidence
