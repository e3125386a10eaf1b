"""Scoring Audit Trail - Captures scoring decisions for debugging and transparency.

Records the decisions the engine makes that are not visible in the final
numbers alone:
- Readings superseded by a more recent reading for the same driver
- Subscores clamped to a driver floor or ceiling
- Domain scores clamped to the domain floor
- Confidence values reduced by a domain cap
- Drivers whose older readings disagree with the authoritative one
- Safety flags raised for the coach

The log is owned by the caller and passed into a single scoring invocation;
the engine keeps no process-wide audit state.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class AuditEvent(Enum):
    """Kind of scoring decision recorded."""

    SUPERSEDED = "superseded"  # Older reading ignored for its driver
    SUBSCORE_CLAMPED = "subscore_clamped"  # Curve output hit floor/ceiling
    DOMAIN_CLAMPED = "domain_clamped"  # Mean subscore raised to domain floor
    CONFIDENCE_CAPPED = "confidence_capped"  # Domain cap applied
    CONFLICTING_READINGS = "conflicting_readings"  # Superseded readings disagree
    RISK_FLAG = "risk_flag"  # Safety flag raised


@dataclass
class ScoringAuditEntry:
    """A single audit entry for one scoring decision."""

    domain: str
    event: AuditEvent
    metric_code: str = ""
    value_used: Any = None
    before: Optional[float] = None
    after: Optional[float] = None
    message: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "domain": self.domain,
            "event": self.event.value,
            "metric_code": self.metric_code,
            "value_used": self._serialize_value(self.value_used),
            "before": self.before,
            "after": self.after,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }

    def _serialize_value(self, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (str, int, float, bool)):
            return value
        if isinstance(value, (list, tuple)):
            return [self._serialize_value(v) for v in value]
        if isinstance(value, dict):
            return {k: self._serialize_value(v) for k, v in value.items()}
        return str(value)


class ScoringAuditLog:
    """Collects audit entries during one scorecard generation.

    Usage:
        audit_log = ScoringAuditLog()
        scorecard = generate_scorecard(evidence, now=now, audit_log=audit_log)

        for entry in audit_log.entries_for("heart"):
            print(entry.message)

        audit_log.export_to_json("/tmp/scoring_audit.json")
    """

    def __init__(self):
        self._entries: list[ScoringAuditEntry] = []

    def record(
        self,
        domain: str,
        event: AuditEvent,
        metric_code: str = "",
        value: Any = None,
        before: Optional[float] = None,
        after: Optional[float] = None,
        message: str = "",
    ) -> ScoringAuditEntry:
        """Record one scoring decision.

        Args:
            domain: Domain value (e.g. "heart")
            event: What kind of decision was made
            metric_code: Driver affected, if any
            value: Raw value involved
            before: Number before the decision (e.g. unclamped subscore)
            after: Number after the decision
            message: Human-readable summary

        Returns:
            The created audit entry
        """
        entry = ScoringAuditEntry(
            domain=domain,
            event=event,
            metric_code=metric_code,
            value_used=value,
            before=before,
            after=after,
            message=message,
        )
        self._entries.append(entry)
        logger.debug(f"AUDIT {event.value}: {domain}/{metric_code} {message}")
        return entry

    @property
    def entries(self) -> list[ScoringAuditEntry]:
        return list(self._entries)

    def entries_for(self, domain: str, event: Optional[AuditEvent] = None) -> list[ScoringAuditEntry]:
        """Entries for one domain, optionally filtered by event kind."""
        return [e for e in self._entries if e.domain == domain and (event is None or e.event == event)]

    def get_summary(self) -> dict:
        """Counts by event and by domain."""
        by_event: dict[str, int] = {}
        by_domain: dict[str, int] = {}
        for entry in self._entries:
            by_event[entry.event.value] = by_event.get(entry.event.value, 0) + 1
            by_domain[entry.domain] = by_domain.get(entry.domain, 0) + 1
        return {
            "total_entries": len(self._entries),
            "by_event": by_event,
            "by_domain": by_domain,
        }

    def export_to_json(self, filepath: str) -> None:
        """Export audit log to JSON file.

        Args:
            filepath: Path to output JSON file
        """
        data = {
            "summary": self.get_summary(),
            "entries": [e.to_dict() for e in self._entries],
            "exported_at": datetime.now().isoformat(),
        }

        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(data, f, indent=2)

        logger.info(f"Exported {len(self._entries)} audit entries to {filepath}")

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
