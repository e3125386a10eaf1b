"""
Structural validation for serialized scorecards.

Scorecards come back from storage as plain JSON. Before handing one to the
priority selector or the UI, check that it still obeys the output contract.

Usage:
    from prime_scorecard.validators.scorecard_validator import validate_scorecard

    result = validate_scorecard(json.loads(raw))
    if not result.is_valid:
        ...

Design:
    - Never raises on bad data; every problem becomes a ValidationError entry
    - Each error is logged as a warning
    - Unknown metric codes are errors only when the domain itself is valid
    - risk_flags is optional (older scorecards lack it) but checked when present
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..schemas.common import DOMAINS, Domain, SourceClass
from ..schemas.scorecard import RiskFlags
from ..scorers.transfer_table import is_registered_driver

logger = logging.getLogger(__name__)

_DOMAIN_VALUES = tuple(d.value for d in DOMAINS)
_SOURCE_VALUES = tuple(s.value for s in SourceClass)
_RISK_FLAG_NAMES = tuple(RiskFlags.model_fields)

REQUIRED_FIELDS = (
    "generated_at",
    "scoring_revision",
    "domain_scores",
    "domain_confidence",
    "prime_score",
    "prime_confidence",
    "evidence",
    "how_calculated",
)


@dataclass
class ValidationError:
    """One contract violation."""

    field: str
    message: str


@dataclass
class ValidationResult:
    """Result of scorecard validation."""

    is_valid: bool = True
    errors: list[ValidationError] = field(default_factory=list)

    def add_error(self, field_name: str, message: str) -> None:
        self.errors.append(ValidationError(field=field_name, message=message))
        self.is_valid = False
        logger.warning(f"Scorecard validation: {field_name}: {message}")


def _is_iso_timestamp(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def _in_range(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 100


def _validate_domain_maps(data: dict, result: ValidationResult) -> None:
    scores = data.get("domain_scores")
    confidence = data.get("domain_confidence")
    if not isinstance(scores, dict) or not isinstance(confidence, dict):
        result.add_error("domain_scores", "domain_scores and domain_confidence must be objects")
        return
    for domain in _DOMAIN_VALUES:
        if domain not in scores:
            result.add_error(f"domain_scores.{domain}", "missing")
        elif scores[domain] is not None and not _in_range(scores[domain]):
            result.add_error(f"domain_scores.{domain}", f"must be null or 0-100, got {scores[domain]!r}")
        if domain not in confidence:
            result.add_error(f"domain_confidence.{domain}", "missing")
        elif not _in_range(confidence[domain]):
            result.add_error(f"domain_confidence.{domain}", f"must be 0-100, got {confidence[domain]!r}")


def _validate_evidence(evidence: Any, result: ValidationResult) -> None:
    if not isinstance(evidence, list):
        result.add_error("evidence", "must be a list")
        return
    for index, item in enumerate(evidence):
        prefix = f"evidence[{index}]"
        if not isinstance(item, dict):
            result.add_error(prefix, "must be an object")
            continue
        domain = item.get("domain")
        metric_code = item.get("metric_code")
        if domain not in _DOMAIN_VALUES:
            result.add_error(f"{prefix}.domain", f"invalid domain {domain!r}")
        elif not isinstance(metric_code, str):
            result.add_error(f"{prefix}.metric_code", f"must be a string, got {metric_code!r}")
        elif not is_registered_driver(Domain(domain), metric_code):
            result.add_error(f"{prefix}.metric_code", f"{metric_code!r} is not a driver of {domain}")
        if item.get("source") not in _SOURCE_VALUES:
            result.add_error(f"{prefix}.source", f"invalid source {item.get('source')!r}")
        if not _is_iso_timestamp(item.get("measured_at")):
            result.add_error(f"{prefix}.measured_at", f"not an ISO timestamp: {item.get('measured_at')!r}")
        if not _in_range(item.get("subscore")):
            result.add_error(f"{prefix}.subscore", f"must be 0-100, got {item.get('subscore')!r}")


def _validate_risk_flags(flags: Any, result: ValidationResult) -> None:
    if not isinstance(flags, dict):
        result.add_error("risk_flags", "must be an object")
        return
    for name, value in flags.items():
        if name not in _RISK_FLAG_NAMES:
            result.add_error(f"risk_flags.{name}", "unknown flag")
        elif value is not None and not isinstance(value, bool):
            result.add_error(f"risk_flags.{name}", f"must be true, false or null, got {value!r}")


def validate_scorecard(data: Any) -> ValidationResult:
    """Validate a serialized scorecard dict against the output contract."""
    result = ValidationResult()
    if not isinstance(data, dict):
        result.add_error("scorecard", f"must be an object, got {type(data).__name__}")
        return result

    for name in REQUIRED_FIELDS:
        if name not in data:
            result.add_error(name, "missing")
    if not result.is_valid:
        return result

    if not _is_iso_timestamp(data["generated_at"]):
        result.add_error("generated_at", f"not an ISO timestamp: {data['generated_at']!r}")
    if not isinstance(data["scoring_revision"], str) or not data["scoring_revision"]:
        result.add_error("scoring_revision", "must be a non-empty string")

    _validate_domain_maps(data, result)

    if data["prime_score"] is not None and not _in_range(data["prime_score"]):
        result.add_error("prime_score", f"must be null or 0-100, got {data['prime_score']!r}")
    if not _in_range(data["prime_confidence"]):
        result.add_error("prime_confidence", f"must be 0-100, got {data['prime_confidence']!r}")

    _validate_evidence(data["evidence"], result)

    how = data["how_calculated"]
    if not isinstance(how, dict):
        result.add_error("how_calculated", "must be an object")
    else:
        for domain, lines in how.items():
            if domain not in _DOMAIN_VALUES:
                result.add_error(f"how_calculated.{domain}", "unknown domain")
            elif not isinstance(lines, list) or not all(isinstance(line, str) for line in lines):
                result.add_error(f"how_calculated.{domain}", "must be a list of strings")

    if "risk_flags" in data:
        _validate_risk_flags(data["risk_flags"], result)

    return result
