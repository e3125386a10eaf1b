"""Confidence Policy Registry: source reliabilities, weights and domain caps.

Loads policies/confidence_policy.yaml once per process and caches it. The
cache is read-only after load; tests call clear_cache() to force a reload.

Usage:
    from prime_scorecard.scorers.policy_registry import get_confidence_policy

    policy = get_confidence_policy()
    policy.reliability(SourceClass.LAB)  # 1.0
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from ..schemas.common import Domain, SourceClass

logger = logging.getLogger(__name__)

WEIGHT_KEYS = ("coverage", "quality", "freshness")

# Fallbacks used only when the packaged YAML is missing
DEFAULT_SOURCE_RELIABILITY = {
    SourceClass.LAB: 1.0,
    SourceClass.TEST: 0.9,
    SourceClass.WEARABLE: 0.8,
    SourceClass.PHOTO: 0.55,
    SourceClass.SELF_REPORT: 0.4,
}
DEFAULT_WEIGHTS = {"coverage": 0.40, "quality": 0.35, "freshness": 0.25}
DEFAULT_TARGET_DRIVERS = 3


@dataclass(frozen=True)
class DomainCap:
    """Upper bound on a domain's confidence until qualifying evidence exists."""

    max_confidence: int
    lifted_by_sources: tuple[SourceClass, ...] = ()
    lifted_by_metrics: tuple[str, ...] = ()

    def is_lifted(self, sources: set, metric_codes: set) -> bool:
        return bool(sources & set(self.lifted_by_sources)) or bool(metric_codes & set(self.lifted_by_metrics))


@dataclass
class ConfidencePolicy:
    source_reliability: dict[SourceClass, float]
    weights: dict[str, float]
    target_drivers_per_domain: int = DEFAULT_TARGET_DRIVERS
    caps: dict[Domain, DomainCap] = field(default_factory=dict)

    def reliability(self, source: SourceClass) -> float:
        return self.source_reliability[SourceClass(source)]


# Module-level cache
_policy_cache: Optional[ConfidencePolicy] = None


def _get_config_path() -> Path:
    return Path(__file__).parent.parent / "policies" / "confidence_policy.yaml"


def _validate_policy(policy: ConfidencePolicy) -> None:
    """Raise ValueError if the policy can't produce confidences in [0, 100]."""
    missing = [s.value for s in SourceClass if s not in policy.source_reliability]
    if missing:
        raise ValueError(f"Confidence policy missing reliability for: {', '.join(missing)}")
    for source, value in policy.source_reliability.items():
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Reliability for {source.value} must be within [0, 1], got {value}")

    if set(policy.weights) != set(WEIGHT_KEYS):
        raise ValueError(f"Confidence weights must be exactly {WEIGHT_KEYS}, got {sorted(policy.weights)}")
    total = sum(policy.weights.values())
    if abs(total - 1.0) > 1e-6:
        raise ValueError(f"Confidence weights must sum to 1.0, got {total}")

    if policy.target_drivers_per_domain < 1:
        raise ValueError("target_drivers_per_domain must be at least 1")
    for domain, cap in policy.caps.items():
        if not 0 <= cap.max_confidence <= 100:
            raise ValueError(f"Cap for {domain.value} must be within [0, 100]")


def _parse_policy(raw: dict) -> ConfidencePolicy:
    reliability = {SourceClass(k): float(v) for k, v in raw.get("source_reliability", {}).items()}
    weights = {k: float(v) for k, v in raw.get("weights", {}).items()}
    caps: dict[Domain, DomainCap] = {}
    for name, data in (raw.get("caps") or {}).items():
        caps[Domain(name)] = DomainCap(
            max_confidence=int(data["max_confidence"]),
            lifted_by_sources=tuple(SourceClass(s) for s in data.get("lifted_by_sources", [])),
            lifted_by_metrics=tuple(data.get("lifted_by_metrics", [])),
        )
    return ConfidencePolicy(
        source_reliability=reliability,
        weights=weights,
        target_drivers_per_domain=int(raw.get("target_drivers_per_domain", DEFAULT_TARGET_DRIVERS)),
        caps=caps,
    )


def _build_default_policy() -> ConfidencePolicy:
    """Fallback: uncapped policy with the default weights."""
    return ConfidencePolicy(
        source_reliability=dict(DEFAULT_SOURCE_RELIABILITY),
        weights=dict(DEFAULT_WEIGHTS),
        target_drivers_per_domain=DEFAULT_TARGET_DRIVERS,
    )


def load_policy(path: Path) -> ConfidencePolicy:
    """Load and validate a policy file without touching the cache."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    policy = _parse_policy(raw)
    _validate_policy(policy)
    return policy


def get_confidence_policy() -> ConfidencePolicy:
    """Return the cached confidence policy, loading it on first use."""
    global _policy_cache
    if _policy_cache is not None:
        return _policy_cache

    config_path = _get_config_path()
    if not config_path.exists():
        logger.warning(f"Confidence policy not found at {config_path}, using defaults")
        _policy_cache = _build_default_policy()
        return _policy_cache

    _policy_cache = load_policy(config_path)
    logger.debug(f"Loaded confidence policy with {len(_policy_cache.caps)} domain caps")
    return _policy_cache


def clear_cache() -> None:
    """Clear the cached policy (for testing)."""
    global _policy_cache
    _policy_cache = None
