"""Detection metrics tracking.

Counts which rules fire and how scans are classified, so rule weights and
patterns can be tuned from real traffic. Recorded by the scan service; the
detector itself never touches these counters.
"""

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class ReasonMetrics:
    """Metrics for a single detection reason."""

    hits: int = 0
    last_hit: Optional[datetime] = None

    def record_hit(self) -> None:
        self.hits += 1
        self.last_hit = datetime.now()


class DetectionMetrics:
    """Thread-safe metrics collector for scan results.

    Tracks reason hits, verdicts and link findings.
    """

    _instance: Optional["DetectionMetrics"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "DetectionMetrics":
        """Singleton pattern for global metrics access."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        self._lock = threading.Lock()
        self._reasons: dict[str, ReasonMetrics] = defaultdict(ReasonMetrics)
        self._verdicts: dict[str, int] = defaultdict(int)
        self._links_total: int = 0
        self._links_suspicious: int = 0
        self._total_scans: int = 0
        self._started: datetime = datetime.now()

    def record_reason(self, reason: str) -> None:
        """Record a reason emitted for a scanned message."""
        with self._lock:
            self._reasons[reason].record_hit()

    def record_verdict(self, is_phishing: bool) -> None:
        with self._lock:
            self._verdicts["phishing" if is_phishing else "benign"] += 1
            self._total_scans += 1

    def record_links(self, total: int, suspicious: int) -> None:
        with self._lock:
            self._links_total += total
            self._links_suspicious += suspicious

    def get_summary(self) -> dict:
        """Get a summary of all metrics."""
        with self._lock:
            uptime = datetime.now() - self._started
            return {
                "uptime_seconds": int(uptime.total_seconds()),
                "total_scans": self._total_scans,
                "verdicts": dict(self._verdicts),
                "links_total": self._links_total,
                "links_suspicious": self._links_suspicious,
                "top_reasons": self._get_top_reasons(10),
            }

    def _get_top_reasons(self, n: int) -> list[dict]:
        """Get top N reasons by hit count."""
        sorted_reasons = sorted(
            self._reasons.items(),
            key=lambda x: x[1].hits,
            reverse=True,
        )[:n]
        return [
            {"reason": r[:80], "hits": m.hits}
            for r, m in sorted_reasons
        ]

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._reasons.clear()
            self._verdicts.clear()
            self._links_total = 0
            self._links_suspicious = 0
            self._total_scans = 0
            self._started = datetime.now()


# Global instance
metrics = DetectionMetrics()
