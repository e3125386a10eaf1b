"""Shared thresholds for the Prime Scorecard engine.

Curve-level numbers (knots, floors, half-lives) live in
scorers/transfer_table.py; confidence weights and caps live in
policies/confidence_policy.yaml. Changing anything here also requires a
SCORING_REVISION bump.
"""

# Confidence label cut points (0-100 scale)
CONFIDENCE_LOW_THRESHOLD = 40  # below → "Low"
CONFIDENCE_HIGH_THRESHOLD = 70  # at or above → "High"

# Domain selection
MIN_CONFIDENCE_FOR_PRIMARY = 60  # Must have decent data to be primary
MIN_CONFIDENCE_FOR_SECONDARY = 40  # Can be secondary with less data
MIN_RECOVERY_SCORE_FOR_TERTIARY = 60  # Need good recovery to handle 3 domains
MIN_TIME_BUDGET_FOR_TERTIARY = 5  # Hours per week

# Absent scores sort as if fully healthy so measured weak domains come first
ABSENT_SCORE_SORT_VALUE = 100

# Seconds in a day, for evidence age
SECONDS_PER_DAY = 86_400

# Two readings of one driver disagree when they differ by more than this
# fraction of the authoritative value
CONFLICT_THRESHOLD = 0.10

# Risk flags (raised from the authoritative reading of each driver)
BP_CRISIS_SYSTOLIC = 180  # mmHg, hypertensive crisis
BP_CRISIS_DIASTOLIC = 120  # mmHg
SEVERE_PAIN_VALUE = 3  # pain_limitation ordinal for "severe"
DIABETES_RISK_VALUE = 5  # metabolic_risk ordinal for a diabetes diagnosis
