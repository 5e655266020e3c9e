from __future__ import annotations

from typing import Literal

SeverityBucket = Literal["none", "low", "medium", "high", "critical"]

SEVERITY_BUCKETS: tuple[SeverityBucket, ...] = ("critical", "high", "medium", "low", "none")

_CIA_WEIGHTS = {
    "COMPLETE": 1.0,
    "PARTIAL": 0.5,
    "HIGH": 1.0,
    "LOW": 0.5,
}


def bucket(score: float | None) -> SeverityBucket:
    """Classify a numeric severity.

    ``None`` and ``0`` are ``none``; the upper bound of each band is exclusive.
    """
    if score is None or score == 0:
        return "none"
    if score < 4:
        return "low"
    if score < 7:
        return "medium"
    if score < 9:
        return "high"
    return "critical"


def map_cia(label: str | None) -> float:
    """Map a discrete CIA impact label to a weight in [0, 1]."""
    if not label:
        return 0.0
    return _CIA_WEIGHTS.get(label, 0.0)
