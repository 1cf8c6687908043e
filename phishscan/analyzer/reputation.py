"""Sender reputation interpretation and bookkeeping.

``analyze_sender_reputation`` reads counters; ``apply_scan_outcome`` computes
the next counters after a scan. Neither touches storage.
"""

from __future__ import annotations

from typing import Optional

from ..constants import (
    HIGH_PHISHING_RATE,
    HIGH_TRUST_THRESHOLD,
    LOW_TRUST_THRESHOLD,
    NEW_SENDER_TRUST_BENIGN,
    NEW_SENDER_TRUST_PHISHING,
    TRUST_PENALTY_PHISHING,
    TRUST_REWARD_BENIGN,
)
from .models import ReputationVerdict, SenderStats


def analyze_sender_reputation(
    total_messages: int,
    phishing_count: int,
    trust_score: float,
) -> ReputationVerdict:
    """Map accumulated sender statistics to a verdict (first match wins)."""
    if total_messages == 0:
        return ReputationVerdict(is_risky=True, warning="New sender - no history available")

    if phishing_count / total_messages > HIGH_PHISHING_RATE:
        return ReputationVerdict(is_risky=True, warning="High phishing rate from this sender")

    if trust_score < LOW_TRUST_THRESHOLD:
        return ReputationVerdict(is_risky=True, warning="Low trust score")

    if trust_score > HIGH_TRUST_THRESHOLD:
        return ReputationVerdict(is_risky=False, warning="Trusted sender")

    return ReputationVerdict(is_risky=False, warning="Moderate trust level")


def interpret_stats(stats: Optional[SenderStats]) -> ReputationVerdict:
    """Verdict for stored counters; an unknown sender counts as a new one."""
    stats = stats or SenderStats()
    return analyze_sender_reputation(stats.total_messages, stats.phishing_count, stats.trust_score)


def apply_scan_outcome(stats: Optional[SenderStats], is_phishing: bool) -> SenderStats:
    """Counters after one more scanned message from the sender."""
    if stats is None:
        return SenderStats(
            total_messages=1,
            phishing_count=1 if is_phishing else 0,
            trust_score=NEW_SENDER_TRUST_PHISHING if is_phishing else NEW_SENDER_TRUST_BENIGN,
        )

    if is_phishing:
        trust = max(0, stats.trust_score - TRUST_PENALTY_PHISHING)
    else:
        trust = stats.trust_score + TRUST_REWARD_BENIGN

    return SenderStats(
        total_messages=stats.total_messages + 1,
        phishing_count=stats.phishing_count + (1 if is_phishing else 0),
        trust_score=trust,
    )
