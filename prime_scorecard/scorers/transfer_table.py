"""Transfer table: every driver's raw-value → subscore curve in one place.

Each driver (domain + metric code) maps a unit-normalized raw value to a
0-100 subscore through piecewise-linear interpolation between expert-defined
knots, then clamps to the driver's floor/ceiling. Categorical quick-check
answers are encoded upstream as small ordinal numbers and scored through the
same mechanism.

Any change to a knot, floor, ceiling, half-life or to the selection thresholds
must bump SCORING_REVISION.

Usage:
    from prime_scorecard.scorers.transfer_table import get_driver, score_value

    spec = get_driver(Domain.HEART, "resting_hr")
    score_value(spec, 52)  # 95
"""

from dataclasses import dataclass
from typing import Optional

from ..schemas.common import DOMAINS, Domain

# =============================================================================
# Scoring Revision (semver)
# =============================================================================
# Major: domain set or driver set changes (scores not comparable)
# Minor: knot / threshold / synergy changes (scores shift)
# Patch: copy or plumbing fixes (scores shouldn't change)
#
# History:
#   1.0.0 - band tables per metric, mean-of-subscores domains
#   2.0.0 - piecewise-linear knots, per-driver half-life, confidence caps
SCORING_REVISION = "2.0.0"


def interpolate_score(value: float, knots: list) -> float:
    """Piecewise-linear interpolation between (value, score) knots.

    Knots must be sorted by the first element (value). Values outside the
    knot range take the nearest end knot's score.

    Example:
        knots = [(40, 100), (50, 100), (60, 75), (70, 50)]
        interpolate_score(55, knots) → 87.5
    """
    if value <= knots[0][0]:
        return knots[0][1]
    if value >= knots[-1][0]:
        return knots[-1][1]
    for i in range(len(knots) - 1):
        x0, y0 = knots[i]
        x1, y1 = knots[i + 1]
        if x0 <= value <= x1:
            t = (value - x0) / (x1 - x0)
            return y0 + t * (y1 - y0)
    return knots[-1][1]


@dataclass(frozen=True)
class DriverSpec:
    """One driver's transfer curve and metadata."""

    domain: Domain
    metric_code: str
    label: str
    unit: str
    knots: tuple
    floor: int = 0
    ceiling: int = 100
    half_life_days: float = 90.0
    decimals: int = 0
    missing_prompt: str = ""

    @property
    def key(self) -> tuple[Domain, str]:
        return (self.domain, self.metric_code)

    def format_value(self, value: float) -> str:
        """Render a raw value with this driver's precision and unit."""
        if self.decimals == 0:
            text = str(int(round(value)))
        else:
            text = f"{value:.{self.decimals}f}"
        return f"{text} {self.unit}".rstrip()


# =============================================================================
# Heart
# =============================================================================

# VO2max (ml/kg/min): ≥50 elite, 40 good, 30 average, 20 poor
VO2MAX_KNOTS = ((15, 5), (20, 25), (30, 50), (40, 75), (50, 100))

# Resting HR (bpm): lower is better, floored at 10
RESTING_HR_KNOTS = ((40, 100), (50, 100), (60, 75), (70, 50), (80, 25), (90, 10))

# Systolic BP (mmHg): 100-120 ideal; steeper penalty above the band than below
BP_SYSTOLIC_KNOTS = ((70, 40), (90, 80), (100, 100), (120, 100), (130, 70), (140, 45), (160, 10))

# Diastolic BP (mmHg): 60-80 ideal, same asymmetry
BP_DIASTOLIC_KNOTS = ((40, 40), (50, 70), (60, 100), (80, 100), (85, 75), (90, 50), (100, 10))

# Cardio self-rating: 1 well below average … 5 well above average
CARDIO_SELF_RATING_KNOTS = ((1, 20), (3, 50), (5, 80))

# =============================================================================
# Frame
# =============================================================================

# Body fat (%): sex-neutral band; athletic/fit scores highest
BODY_FAT_KNOTS = ((5, 60), (10, 100), (20, 100), (25, 75), (32, 40), (40, 10))

# Waist-to-height ratio: 0.40-0.50 healthy, ≥0.60 high central adiposity
WAIST_TO_HEIGHT_KNOTS = ((0.35, 70), (0.40, 100), (0.50, 100), (0.55, 70), (0.60, 40), (0.70, 10))

# BMI (kg/m²): only used when no better composition data arrives
BMI_KNOTS = ((16, 30), (18.5, 90), (20, 100), (25, 100), (30, 55), (35, 25), (40, 10))

# Push-ups to failure (count)
PUSHUPS_KNOTS = ((0, 10), (5, 30), (15, 55), (30, 80), (45, 100))

# Pain limitation: 0 none, 1 mild, 2 moderate, 3 severe
PAIN_LIMITATION_KNOTS = ((0, 100), (1, 75), (2, 45), (3, 20))

# =============================================================================
# Metabolism
# =============================================================================

# HbA1c (%): <5.7 normal, 5.7-6.4 prediabetes, ≥6.5 diabetes
HBA1C_KNOTS = ((4.5, 95), (5.0, 100), (5.4, 100), (5.7, 70), (6.4, 35), (8.0, 10))

# Fasting glucose (mg/dL): 75-90 ideal, 100-125 impaired, ≥126 diabetic
FASTING_GLUCOSE_KNOTS = ((60, 40), (70, 90), (75, 100), (90, 100), (100, 70), (126, 30), (160, 10))

# ApoB (mg/dL)
APOB_KNOTS = ((50, 100), (80, 85), (100, 65), (130, 35), (160, 10))

# hs-CRP (mg/L): <1 low risk, 1-3 average, >3 high
HSCRP_KNOTS = ((0.5, 100), (1.0, 85), (3.0, 50), (10.0, 15))

# Metabolic risk category: 0 no risk, 1 family history only, 2 prediabetes,
# 3 one condition, 4 multiple conditions, 5 diabetes
METABOLIC_RISK_KNOTS = ((0, 90), (1, 75), (2, 50), (3, 45), (4, 30), (5, 20))

# =============================================================================
# Recovery
# =============================================================================

# Sleep duration (hours/night): 7-9 optimal
SLEEP_HOURS_KNOTS = ((4, 0), (5, 25), (6, 50), (7, 100), (9, 100), (10, 75), (12, 0))

# HRV RMSSD (ms)
HRV_KNOTS = ((10, 10), (20, 25), (40, 50), (70, 75), (100, 100))

# Consistent bed/wake times: 0 no, 1 yes
SLEEP_REGULARITY_KNOTS = ((0, 40), (1, 85))

# Nights per week with trouble sleeping
INSOMNIA_NIGHTS_KNOTS = ((0, 100), (1.5, 75), (3.5, 45), (6, 15))

# =============================================================================
# Mind
# =============================================================================

# Cognitive test composite (0-100), passed through
COGNITION_KNOTS = ((0, 0), (100, 100))

# Focus stability: 1 very unstable … 5 very stable
FOCUS_STABILITY_KNOTS = ((1, 20), (3, 55), (5, 90))

# Brain fog frequency: 0 rarely, 1 sometimes, 2 often
BRAIN_FOG_KNOTS = ((0, 85), (1, 55), (2, 25))


# =============================================================================
# The Table
# =============================================================================

# Within a domain, drivers are listed most informative first. Explanation
# lines and the fastest upgrade action both follow this order.
TRANSFER_TABLE: tuple[DriverSpec, ...] = (
    # --- Heart ---
    DriverSpec(
        Domain.HEART, "vo2max", "VO2max", "ml/kg/min", VO2MAX_KNOTS,
        floor=5, half_life_days=180, decimals=1,
        missing_prompt="Add a VO2max estimate from your watch or a fitness test.",
    ),
    DriverSpec(
        Domain.HEART, "resting_hr", "Resting heart rate", "bpm", RESTING_HR_KNOTS,
        floor=10, half_life_days=30,
        missing_prompt="Connect a wearable or enter your resting heart rate.",
    ),
    DriverSpec(
        Domain.HEART, "bp_systolic", "Systolic blood pressure", "mmHg", BP_SYSTOLIC_KNOTS,
        floor=10, half_life_days=90,
        missing_prompt="Enter a recent blood pressure reading.",
    ),
    DriverSpec(
        Domain.HEART, "bp_diastolic", "Diastolic blood pressure", "mmHg", BP_DIASTOLIC_KNOTS,
        floor=10, half_life_days=90,
        missing_prompt="Enter a recent blood pressure reading.",
    ),
    DriverSpec(
        Domain.HEART, "cardio_self_rating", "Cardio self-rating", "/5", CARDIO_SELF_RATING_KNOTS,
        floor=20, ceiling=80, half_life_days=120,
        missing_prompt="Rate your cardio fitness in quick checks.",
    ),
    # --- Frame ---
    DriverSpec(
        Domain.FRAME, "body_fat_pct", "Body fat", "%", BODY_FAT_KNOTS,
        floor=10, half_life_days=90, decimals=1,
        missing_prompt="Upload a body photo or enter a body fat measurement.",
    ),
    DriverSpec(
        Domain.FRAME, "waist_to_height", "Waist-to-height ratio", "", WAIST_TO_HEIGHT_KNOTS,
        floor=10, half_life_days=90, decimals=2,
        missing_prompt="Add your waist circumference and height.",
    ),
    DriverSpec(
        Domain.FRAME, "bmi", "BMI", "kg/m²", BMI_KNOTS,
        floor=10, half_life_days=90, decimals=1,
        missing_prompt="Add your height and weight.",
    ),
    DriverSpec(
        Domain.FRAME, "pushups", "Push-ups", "reps", PUSHUPS_KNOTS,
        floor=10, half_life_days=90,
        missing_prompt="Tell us how many push-ups you can do.",
    ),
    DriverSpec(
        Domain.FRAME, "pain_limitation", "Pain limitation", "/3", PAIN_LIMITATION_KNOTS,
        floor=20, half_life_days=60,
        missing_prompt="Tell us whether pain limits your movement.",
    ),
    # --- Metabolism ---
    DriverSpec(
        Domain.METABOLISM, "hba1c", "HbA1c", "%", HBA1C_KNOTS,
        floor=10, half_life_days=120, decimals=1,
        missing_prompt="Upload labs with HbA1c.",
    ),
    DriverSpec(
        Domain.METABOLISM, "fasting_glucose", "Fasting glucose", "mg/dL", FASTING_GLUCOSE_KNOTS,
        floor=10, half_life_days=90,
        missing_prompt="Upload labs with fasting glucose.",
    ),
    DriverSpec(
        Domain.METABOLISM, "apob", "ApoB", "mg/dL", APOB_KNOTS,
        floor=10, half_life_days=180,
        missing_prompt="Upload labs with ApoB.",
    ),
    DriverSpec(
        Domain.METABOLISM, "hscrp", "hs-CRP", "mg/L", HSCRP_KNOTS,
        floor=10, half_life_days=120, decimals=1,
        missing_prompt="Upload labs with hs-CRP.",
    ),
    DriverSpec(
        Domain.METABOLISM, "metabolic_risk", "Metabolic risk history", "/5", METABOLIC_RISK_KNOTS,
        floor=20, ceiling=90, half_life_days=365,
        missing_prompt="Answer the metabolic history quick check.",
    ),
    # --- Recovery ---
    DriverSpec(
        Domain.RECOVERY, "sleep_hours", "Sleep duration", "h", SLEEP_HOURS_KNOTS,
        floor=5, half_life_days=14, decimals=1,
        missing_prompt="Connect a sleep tracker or tell us how long you sleep.",
    ),
    DriverSpec(
        Domain.RECOVERY, "hrv", "HRV (RMSSD)", "ms", HRV_KNOTS,
        floor=10, half_life_days=14,
        missing_prompt="Connect a wearable that records HRV.",
    ),
    DriverSpec(
        Domain.RECOVERY, "sleep_regularity", "Regular sleep schedule", "", SLEEP_REGULARITY_KNOTS,
        floor=40, half_life_days=60,
        missing_prompt="Tell us whether you keep a regular sleep schedule.",
    ),
    DriverSpec(
        Domain.RECOVERY, "insomnia_nights", "Nights with poor sleep", "/week", INSOMNIA_NIGHTS_KNOTS,
        floor=15, half_life_days=60, decimals=1,
        missing_prompt="Tell us how often you have trouble sleeping.",
    ),
    # --- Mind ---
    DriverSpec(
        Domain.MIND, "cognition_score", "Cognitive test", "/100", COGNITION_KNOTS,
        floor=0, half_life_days=90,
        missing_prompt="Take the focus test.",
    ),
    DriverSpec(
        Domain.MIND, "focus_stability", "Focus stability", "/5", FOCUS_STABILITY_KNOTS,
        floor=20, half_life_days=60,
        missing_prompt="Rate your focus stability in quick checks.",
    ),
    DriverSpec(
        Domain.MIND, "brain_fog", "Brain fog frequency", "/2", BRAIN_FOG_KNOTS,
        floor=25, half_life_days=60,
        missing_prompt="Tell us how often you experience brain fog.",
    ),
)

# Per-domain floor applied to the averaged domain score
DOMAIN_SCORE_FLOORS: dict[Domain, int] = {
    Domain.HEART: 10,
    Domain.FRAME: 10,
    Domain.METABOLISM: 10,
    Domain.RECOVERY: 10,
    Domain.MIND: 0,
}

_BY_KEY: dict[tuple[Domain, str], DriverSpec] = {spec.key: spec for spec in TRANSFER_TABLE}


def get_driver(domain: Domain, metric_code: str) -> Optional[DriverSpec]:
    """Look up a driver; None if the metric isn't registered for the domain."""
    return _BY_KEY.get((Domain(domain), metric_code))


def is_registered_driver(domain: Domain, metric_code: str) -> bool:
    return (Domain(domain), metric_code) in _BY_KEY


def drivers_for(domain: Domain) -> list[DriverSpec]:
    """Drivers of a domain in table order."""
    domain = Domain(domain)
    return [spec for spec in TRANSFER_TABLE if spec.domain == domain]


def score_value(spec: DriverSpec, value: float) -> int:
    """Apply a driver's transfer curve, clamp to its floor/ceiling, round."""
    raw = interpolate_score(value, list(spec.knots))
    return int(round(max(spec.floor, min(spec.ceiling, raw))))


def _check_table() -> None:
    """Fail fast on malformed knots at import time."""
    seen = set()
    for spec in TRANSFER_TABLE:
        if spec.key in seen:
            raise ValueError(f"Duplicate driver in transfer table: {spec.domain.value}/{spec.metric_code}")
        seen.add(spec.key)
        xs = [x for x, _ in spec.knots]
        if xs != sorted(xs) or len(set(xs)) != len(xs):
            raise ValueError(f"Knots for {spec.metric_code} must be strictly increasing")
        if not 0 <= spec.floor <= spec.ceiling <= 100:
            raise ValueError(f"Invalid floor/ceiling for {spec.metric_code}")
        if spec.half_life_days <= 0:
            raise ValueError(f"Half-life for {spec.metric_code} must be positive")
    for domain in DOMAINS:
        if not any(spec.domain == domain for spec in TRANSFER_TABLE):
            raise ValueError(f"Domain {domain.value} has no drivers")


_check_table()
