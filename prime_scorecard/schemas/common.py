"""Shared enums for evidence, scoring and domain selection.

The domain set is fixed at five. Adding a domain changes every downstream
aggregate, so it always requires a scoring revision bump.
"""

from enum import Enum

# =============================================================================
# Domains
# =============================================================================


class Domain(str, Enum):
    """The five health domains scored independently."""

    HEART = "heart"  # Cardiorespiratory fitness, resting HR, blood pressure
    FRAME = "frame"  # Body composition, strength, pain
    METABOLISM = "metabolism"  # Glycemic control, lipids, inflammation
    RECOVERY = "recovery"  # Sleep, HRV
    MIND = "mind"  # Focus, cognition

    @property
    def display_name(self) -> str:
        """Capitalized name used in user-facing copy."""
        return self.value.capitalize()


# Canonical iteration order for every per-domain structure
DOMAINS: tuple[Domain, ...] = (
    Domain.HEART,
    Domain.FRAME,
    Domain.METABOLISM,
    Domain.RECOVERY,
    Domain.MIND,
)


# =============================================================================
# Source Reliability
# =============================================================================


class SourceClass(str, Enum):
    """Where a piece of evidence came from.

    Reliability weights feed the confidence model (see
    policies/confidence_policy.yaml). Lab and device data outrank anything the
    person reports about themselves.
    """

    LAB = "lab"  # Blood panel, clinical measurement
    TEST = "test"  # Structured performance test (push-ups, cognitive test)
    WEARABLE = "wearable"  # Watch, ring, chest strap, BP cuff export
    PHOTO = "photo"  # Vision estimate from a body photo
    SELF_REPORT = "self_report"  # Quick-check answers

    @property
    def label(self) -> str:
        return {
            "lab": "lab",
            "test": "test",
            "wearable": "wearable",
            "photo": "photo estimate",
            "self_report": "self-report",
        }[self.value]


# =============================================================================
# Confidence Labels
# =============================================================================


class ConfidenceLabel(str, Enum):
    """Bucketed confidence shown next to a score."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def copy(self) -> str:
        """One-line explanation of what the label means."""
        return {
            "Low": "Estimated from quick checks.",
            "Medium": "Based on measurements you provided (and quick checks).",
            "High": "Based on device, lab, or test data.",
        }[self.value]


class SelectionPriority(str, Enum):
    """Slot a domain occupies in a coaching selection."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
