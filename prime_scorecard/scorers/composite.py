"""Composite Aggregator - prime score and prime confidence.

Score and confidence are aggregated asymmetrically:
- prime_score ignores absent domains (confidence-weighted mean of the present ones)
- prime_confidence averages all five domains, absent ones counting as 0, so
  unmeasured domains visibly pull overall confidence down
"""

from typing import Optional

from ..schemas.common import DOMAINS, Domain


def prime_score(
    domain_scores: dict[Domain, Optional[int]],
    domain_confidence: dict[Domain, int],
) -> Optional[int]:
    """Confidence-weighted mean of present domain scores; None if none present."""
    present = [(domain_scores[d], domain_confidence.get(d, 0)) for d in DOMAINS if domain_scores.get(d) is not None]
    if not present:
        return None

    total_weight = sum(conf for _, conf in present)
    if total_weight <= 0:
        # Every present domain has zero confidence: plain mean
        return int(round(sum(s for s, _ in present) / len(present)))
    return int(round(sum(s * conf for s, conf in present) / total_weight))


def prime_confidence(domain_confidence: dict[Domain, int]) -> int:
    """Equal-weight mean over all five domains."""
    return int(round(sum(domain_confidence.get(d, 0) for d in DOMAINS) / len(DOMAINS)))


def aggregate(
    domain_scores: dict[Domain, Optional[int]],
    domain_confidence: dict[Domain, int],
) -> tuple[Optional[int], int]:
    """Return (prime_score, prime_confidence)."""
    return prime_score(domain_scores, domain_confidence), prime_confidence(domain_confidence)
