"""Rule snapshots and the building blocks of the message scorer."""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Iterable, Iterator, Mapping, Optional, Protocol, Union

from .models import DetectionRule

logger = logging.getLogger(__name__)

RuleRecord = Union[DetectionRule, Mapping[str, Any]]


@dataclass(frozen=True)
class CompiledRule:
    """A scoring rule with its pattern compiled case-insensitively."""

    rule: DetectionRule
    regex: re.Pattern


def compile_pattern(pattern: str) -> re.Pattern:
    """Compile a rule pattern the way the scorer matches it."""
    return re.compile(pattern, re.IGNORECASE)


def validate_pattern(pattern: str) -> Optional[str]:
    """Return an error message when the pattern does not compile, else None."""
    try:
        compile_pattern(pattern)
    except re.error as exc:
        return str(exc)
    return None


class RuleSet:
    """Immutable snapshot of the active detection rules.

    Inactive rules are dropped. Rules of a non-scoring kind are retained but
    never matched. Patterns that fail to compile are logged once, listed in
    ``invalid_rules`` and skipped.
    """

    def __init__(self, rules: Iterable[DetectionRule] = ()):
        self._rules: tuple[DetectionRule, ...] = tuple(r for r in rules if r.active)

        scoring: list[CompiledRule] = []
        invalid: list[DetectionRule] = []
        for rule in self._rules:
            if not rule.kind.is_scoring:
                continue
            try:
                regex = compile_pattern(rule.pattern)
            except re.error as exc:
                logger.warning("Skipping rule %r: invalid pattern %r (%s)", rule.name, rule.pattern, exc)
                invalid.append(rule)
                continue
            scoring.append(CompiledRule(rule=rule, regex=regex))

        self._scoring: tuple[CompiledRule, ...] = tuple(scoring)
        self.invalid_rules: tuple[DetectionRule, ...] = tuple(invalid)

    @classmethod
    def from_records(cls, records: Iterable[RuleRecord]) -> "RuleSet":
        """Build a snapshot from rules or loosely-typed rule records."""
        rules = [
            record if isinstance(record, DetectionRule) else DetectionRule.from_mapping(record)
            for record in records
        ]
        return cls(rules)

    @property
    def rules(self) -> tuple[DetectionRule, ...]:
        return self._rules

    @property
    def scoring_rules(self) -> tuple[CompiledRule, ...]:
        return self._scoring

    def __iter__(self) -> Iterator[DetectionRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self._rules == other._rules


class RuleStore:
    """Holds the current rule snapshot; replacement is atomic, last write wins."""

    def __init__(self, rules: Iterable[RuleRecord] = ()):
        self._lock = threading.Lock()
        self._snapshot = RuleSet.from_records(rules)

    def set_rules(self, rules: Iterable[RuleRecord]) -> RuleSet:
        """Replace the active rule set wholesale and return the new snapshot."""
        snapshot = RuleSet.from_records(rules)
        with self._lock:
            self._snapshot = snapshot
        logger.debug(
            "Loaded %s active rules (%s scoring, %s invalid)",
            len(snapshot),
            len(snapshot.scoring_rules),
            len(snapshot.invalid_rules),
        )
        return snapshot

    @property
    def snapshot(self) -> RuleSet:
        with self._lock:
            return self._snapshot


@dataclass
class MessageContext:
    """Shared context passed to each message rule."""

    subject: str
    sender_email: str
    sender_name: str
    content: str
    rules: RuleSet

    @cached_property
    def corpus(self) -> str:
        """Lowercased subject + body used for every text-pattern check."""
        return f"{self.subject} {self.content}".lower()


@dataclass
class RuleResult:
    """Outcome of a single message rule."""

    name: str
    score: int = 0
    reasons: list[str] = field(default_factory=list)


class MessageRule(Protocol):
    """Interface for message scoring rules."""

    name: str

    def apply(self, context: MessageContext) -> RuleResult:  # pragma: no cover - interface
        ...
