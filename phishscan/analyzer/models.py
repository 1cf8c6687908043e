"""Detector data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Optional

from ..constants import RuleKind, Severity
from ..utils.values import coerce_bool


@dataclass(frozen=True)
class DetectionRule:
    """A caller-owned pattern rule matched against the message corpus."""

    name: str
    kind: RuleKind
    pattern: str
    severity: Optional[Severity]
    active: bool = True
    id: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DetectionRule":
        """Build a rule from a loosely-typed record (database row, YAML, JSON).

        Accepts both ``name``/``kind``/``active`` and the stored column names
        ``rule_name``/``rule_type``/``is_active``.
        """
        name = data.get("name", data.get("rule_name")) or ""
        kind = data.get("kind", data.get("rule_type"))
        active = data.get("active", data.get("is_active"))
        rule_id = data.get("id")
        return cls(
            name=str(name),
            kind=RuleKind.from_string(kind),
            pattern=str(data.get("pattern") or ""),
            severity=Severity.from_string(data.get("severity")),
            active=coerce_bool(active, default=True),
            id=int(rule_id) if rule_id is not None else None,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "pattern": self.pattern,
            "severity": self.severity.value if self.severity else None,
            "active": self.active,
        }


@dataclass
class DetectionResult:
    """Result of scoring a single message."""

    risk_score: int
    is_phishing: bool
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class LinkFinding:
    """Per-link analysis, independent of the overall message verdict."""

    url: str
    display_text: str
    is_suspicious: bool = False
    risk_factors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SenderStats:
    """Externally persisted reputation counters for one sender."""

    total_messages: int = 0
    phishing_count: int = 0
    trust_score: float = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ReputationVerdict:
    """Interpretation of a sender's accumulated statistics."""

    is_risky: bool
    warning: str

    def to_dict(self) -> dict:
        return asdict(self)
