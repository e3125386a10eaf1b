"""Explanation Builder - deterministic "how calculated" lines per domain.

Output is a pure rendering of the readings: no clock, no randomness, no
locale-dependent formatting, so it is safe to diff in tests and in the UI.

Example line:
    Resting heart rate: 52 bpm (wearable, 2024-12-14) → subscore 95; superseded 1 older reading
"""

from typing import Optional

from ..schemas.common import Domain
from ..schemas.evidence import EvidenceItem
from .domain_scorer import DomainScorer, DriverReading
from .transfer_table import DriverSpec, drivers_for

NO_EVIDENCE_LINE = "No usable evidence yet."


def explain_reading(reading: DriverReading) -> str:
    item = reading.item
    line = (
        f"{reading.spec.label}: {reading.spec.format_value(item.value_raw)} "
        f"({item.source.label}, {item.measured_at.date().isoformat()}) → subscore {reading.subscore}"
    )
    if reading.superseded:
        noun = "reading" if reading.superseded == 1 else "readings"
        line += f"; superseded {reading.superseded} older {noun}"
    return line


def explain(domain: Domain, readings: list[DriverReading]) -> list[str]:
    """One line per contributing driver, in transfer-table order."""
    domain = Domain(domain)
    order = {spec.metric_code: i for i, spec in enumerate(drivers_for(domain))}
    ordered = sorted(
        (r for r in readings if r.spec.domain == domain),
        key=lambda r: order[r.spec.metric_code],
    )
    if not ordered:
        return [NO_EVIDENCE_LINE]
    return [explain_reading(r) for r in ordered]


def explain_evidence(domain: Domain, evidence: list[EvidenceItem]) -> list[str]:
    """Score a flat evidence list and explain one domain."""
    result = DomainScorer().evaluate(evidence)[Domain(domain)]
    return explain(domain, result.readings)


def missing_drivers(domain: Domain, evidence: list[EvidenceItem]) -> list[DriverSpec]:
    """Drivers of a domain with no evidence, in table order.

    Each spec carries a `missing_prompt` telling the user what to add.
    """
    domain = Domain(domain)
    present = {item.metric_code for item in evidence if item.domain == domain}
    return [spec for spec in drivers_for(domain) if spec.metric_code not in present]


def fastest_upgrade_action(domain: Domain, evidence: list[EvidenceItem]) -> Optional[str]:
    """Prompt for the most informative missing driver; None when nothing is missing.

    Drivers are declared most informative first in the transfer table, so the
    first missing one is the quickest way to raise both score quality and
    confidence.
    """
    missing = missing_drivers(domain, evidence)
    if not missing:
        return None
    return missing[0].missing_prompt
