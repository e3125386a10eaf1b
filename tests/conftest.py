"""Shared fixtures for prime_scorecard tests.

All tests pin the clock with NOW so freshness and generated_at are
reproducible.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add the project root to path so tests run without an editable install
sys.path.insert(0, str(Path(__file__).parent.parent))

NOW = datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)


def make_item(domain, metric_code, value, days_ago=0.0, source="wearable", **kwargs):
    """Build an EvidenceItem measured `days_ago` days before NOW."""
    from prime_scorecard.schemas.evidence import EvidenceItem

    return EvidenceItem(
        domain=domain,
        metric_code=metric_code,
        value_raw=value,
        measured_at=NOW - timedelta(days=days_ago),
        source=source,
        **kwargs,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def full_evidence():
    """Evidence touching every domain, with one superseded resting HR."""
    return [
        make_item("heart", "resting_hr", 78, days_ago=1),
        make_item("heart", "resting_hr", 52, days_ago=0),
        make_item("heart", "vo2max", 44.5, days_ago=10),
        make_item("frame", "body_fat_pct", 18.0, days_ago=20, source="photo"),
        make_item("frame", "pushups", 23, days_ago=2, source="self_report"),
        make_item("metabolism", "hba1c", 5.3, days_ago=30, source="lab"),
        make_item("metabolism", "apob", 95, days_ago=30, source="lab"),
        make_item("recovery", "sleep_hours", 7.4, days_ago=0),
        make_item("recovery", "hrv", 55, days_ago=0),
        make_item("mind", "focus_stability", 4, days_ago=3, source="self_report"),
    ]


@pytest.fixture
def sample_inputs_dict():
    """A ScorecardInputs bundle as it would arrive from onboarding + imports."""
    return {
        "metrics": [
            {
                "domain": "heart",
                "metric_code": "resting_hr",
                "value_raw": 58,
                "measured_at": "2025-01-14T07:00:00Z",
                "source": "wearable",
                "unit": "bpm",
            },
            {
                "domain": "recovery",
                "metric_code": "hrv",
                "value_raw": 62,
                "measured_at": "2025-01-14T07:00:00Z",
            },
        ],
        "identity": {"height_cm": 180, "weight_kg": 81, "age": 38, "sex": "male"},
        "quick_checks": {
            "completed_at": "2025-01-10T12:00:00Z",
            "heart": {
                "cardio_self_rating": "slightly_above",
                "blood_pressure": {"systolic": 118, "diastolic": 76, "measured_date": "2024-12"},
            },
            "frame": {"pushup_capability": "16-30", "pain_limitation": "mild", "waist_cm": 86},
            "metabolism": {
                "diagnoses": ["none"],
                "family_history": ["type2_diabetes"],
                "labs": {"hba1c_percent": 5.2, "apob_mg_dl": 88, "test_date": "2024-11-20"},
            },
            "recovery": {"sleep_duration": "7-8h", "sleep_regularity": True, "insomnia_frequency": "<1"},
            "mind": {"focus_stability": "mostly_stable", "brain_fog": "sometimes"},
        },
        "photo_estimates": [{"body_fat_pct": 17.5, "measured_at": "2025-01-05T09:00:00Z"}],
    }
