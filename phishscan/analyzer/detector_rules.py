"""Message scoring rule implementations.

Rules run in a fixed order; that order is the order of ``reasons`` in the
final result.
"""

from __future__ import annotations

from ..constants import (
    FORMATTING_POINTS,
    MISSPELLING_POINTS,
    SENDER_POINTS,
    URGENCY_POINTS,
    severity_points,
)
from .heuristics import (
    has_spelling_errors,
    has_suspicious_formatting,
    has_urgent_language,
    is_suspicious_sender,
)
from .rules import MessageContext, RuleResult


class PatternRule:
    """Caller-supplied keyword/behavior patterns matched against the corpus."""

    name = "patterns"

    def apply(self, context: MessageContext) -> RuleResult:
        score = 0
        reasons: list[str] = []
        corpus = context.corpus

        for compiled in context.rules.scoring_rules:
            if compiled.regex.search(corpus):
                score += severity_points(compiled.rule.severity)
                reasons.append(f"{compiled.rule.name} detected")

        return RuleResult(self.name, score=score, reasons=reasons)


class SenderRule:
    name = "sender"

    def apply(self, context: MessageContext) -> RuleResult:
        if is_suspicious_sender(context.sender_email, context.sender_name):
            return RuleResult(self.name, score=SENDER_POINTS, reasons=["Suspicious sender information"])
        return RuleResult(self.name)


class UrgencyRule:
    name = "urgency"

    def apply(self, context: MessageContext) -> RuleResult:
        if has_urgent_language(context.corpus):
            return RuleResult(self.name, score=URGENCY_POINTS, reasons=["Contains urgent language"])
        return RuleResult(self.name)


class FormattingRule:
    """Checks the raw (not lowercased) content for hidden text markers."""

    name = "formatting"

    def apply(self, context: MessageContext) -> RuleResult:
        if has_suspicious_formatting(context.content):
            return RuleResult(self.name, score=FORMATTING_POINTS, reasons=["Suspicious formatting detected"])
        return RuleResult(self.name)


class MisspellingRule:
    name = "misspelling"

    def apply(self, context: MessageContext) -> RuleResult:
        if has_spelling_errors(context.corpus):
            return RuleResult(self.name, score=MISSPELLING_POINTS, reasons=["Multiple spelling errors detected"])
        return RuleResult(self.name)
