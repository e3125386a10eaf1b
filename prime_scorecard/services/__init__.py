"""Decision services built on top of a finished scorecard."""

from .priority_selector import (
    DOMAIN_SYNERGY,
    domain_preview,
    is_domain_actionable,
    select_priority_domains,
    selection_summary,
)

__all__ = [
    "DOMAIN_SYNERGY",
    "domain_preview",
    "is_domain_actionable",
    "select_priority_domains",
    "selection_summary",
]
