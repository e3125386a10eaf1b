from .scorecard_inputs import (
    IdentityInput,
    MetricInput,
    PhotoEstimate,
    QuickChecks,
    ScorecardInputs,
    calculate_bmi,
    calculate_waist_to_height,
    derive_metabolic_risk_category,
    inputs_to_evidence,
)

__all__ = [
    "IdentityInput",
    "MetricInput",
    "PhotoEstimate",
    "QuickChecks",
    "ScorecardInputs",
    "calculate_bmi",
    "calculate_waist_to_height",
    "derive_metabolic_risk_category",
    "inputs_to_evidence",
]
