"""Centralized constants for PhishScan.

Enums and fixed values shared by the analyzer, storage and API layers.
"""

from enum import Enum
from typing import Optional


class RuleKind(str, Enum):
    """Category of a detection rule. Only keyword and behavior rules score."""

    KEYWORD = "keyword"
    BEHAVIOR = "behavior"
    OTHER = "other"

    @classmethod
    def from_string(cls, value: str | None) -> "RuleKind":
        """Convert a stored kind to the enum, defaulting to OTHER."""
        if not value:
            return cls.OTHER
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER

    @property
    def is_scoring(self) -> bool:
        return self in (RuleKind.KEYWORD, RuleKind.BEHAVIOR)


class Severity(str, Enum):
    """Categorical weight of a detection rule."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_string(cls, value: str | None) -> Optional["Severity"]:
        """Convert a stored severity to the enum, or None when unrecognized."""
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


SEVERITY_POINTS: dict[Severity, int] = {
    Severity.CRITICAL: 30,
    Severity.HIGH: 20,
    Severity.MEDIUM: 10,
    Severity.LOW: 5,
}
DEFAULT_SEVERITY_POINTS = 5


def severity_points(severity: Severity | None) -> int:
    """Points contributed by a matching rule of the given severity."""
    if severity is None:
        return DEFAULT_SEVERITY_POINTS
    return SEVERITY_POINTS.get(severity, DEFAULT_SEVERITY_POINTS)


# Message verdict
PHISHING_THRESHOLD = 50
MAX_RISK_SCORE = 100

# Heuristic weights
SENDER_POINTS = 15
URGENCY_POINTS = 10
FORMATTING_POINTS = 8
MISSPELLING_POINTS = 5

# Sender reputation bookkeeping
NEW_SENDER_TRUST_PHISHING = 20
NEW_SENDER_TRUST_BENIGN = 50
TRUST_PENALTY_PHISHING = 10
TRUST_REWARD_BENIGN = 2
HIGH_PHISHING_RATE = 0.5
LOW_TRUST_THRESHOLD = 30
HIGH_TRUST_THRESHOLD = 70
