"""Phishing detector engine."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..constants import MAX_RISK_SCORE, PHISHING_THRESHOLD
from .detector_rules import FormattingRule, MisspellingRule, PatternRule, SenderRule, UrgencyRule
from .links import analyze_links
from .models import DetectionResult, LinkFinding, ReputationVerdict
from .reputation import analyze_sender_reputation
from .rules import MessageContext, MessageRule, RuleRecord, RuleSet, RuleStore

logger = logging.getLogger(__name__)


class PhishingDetector:
    """Scores messages against the loaded rule set and fixed heuristics.

    The detector is deterministic: identical inputs and an identical rule set
    always produce an identical result. It performs no I/O; the only state it
    holds is the current rule snapshot, replaced wholesale by ``set_rules``.
    """

    def __init__(self, rules: Iterable[RuleRecord] = ()):
        self._store = RuleStore(rules)
        self._rules: list[MessageRule] = [
            PatternRule(),
            SenderRule(),
            UrgencyRule(),
            FormattingRule(),
            MisspellingRule(),
        ]

    @property
    def rules(self) -> RuleSet:
        """Current rule snapshot."""
        return self._store.snapshot

    def set_rules(self, rules: Iterable[RuleRecord]) -> RuleSet:
        """Replace the active rule set (last write wins)."""
        return self._store.set_rules(rules)

    def analyze_message(
        self,
        subject: str,
        sender_email: str,
        sender_name: str,
        content: str,
        rules: Optional[RuleSet] = None,
    ) -> DetectionResult:
        """Score a message. ``rules`` overrides the stored snapshot for this call."""
        context = MessageContext(
            subject=subject or "",
            sender_email=sender_email or "",
            sender_name=sender_name or "",
            content=content or "",
            rules=rules if rules is not None else self._store.snapshot,
        )

        total_score = 0
        reasons: list[str] = []
        for rule in self._rules:
            rule_result = rule.apply(context)
            total_score += rule_result.score
            reasons.extend(rule_result.reasons)

        risk_score = max(0, min(total_score, MAX_RISK_SCORE))
        return DetectionResult(
            risk_score=risk_score,
            is_phishing=risk_score >= PHISHING_THRESHOLD,
            reasons=reasons,
        )

    def analyze_links(self, content: str) -> list[LinkFinding]:
        return analyze_links(content)

    def analyze_sender_reputation(
        self,
        total_messages: int,
        phishing_count: int,
        trust_score: float,
    ) -> ReputationVerdict:
        return analyze_sender_reputation(total_messages, phishing_count, trust_score)
