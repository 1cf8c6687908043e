"""Scan service: the end-to-end "scan a message" flow."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..analyzer.detector import PhishingDetector
from ..analyzer.metrics import metrics
from ..analyzer.models import DetectionResult, LinkFinding, ReputationVerdict, SenderStats
from ..analyzer.reputation import apply_scan_outcome, interpret_stats
from ..storage.database import Database
from ..utils.domains import normalize_email

logger = logging.getLogger(__name__)


class ScanInputError(ValueError):
    """Raised when a submitted message cannot be scanned."""


class ContentTooLargeError(ScanInputError):
    """Raised when message content exceeds the configured limit."""


@dataclass
class ScanReport:
    """Everything produced for one scanned message."""

    sender: str
    result: DetectionResult
    links: list[LinkFinding] = field(default_factory=list)
    reputation: Optional[ReputationVerdict] = None
    sender_stats: Optional[SenderStats] = None
    scan_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "scan_id": self.scan_id,
            "sender": self.sender,
            "risk_score": self.result.risk_score,
            "is_phishing": self.result.is_phishing,
            "reasons": list(self.result.reasons),
            "links": [link.to_dict() for link in self.links],
            "reputation": self.reputation.to_dict() if self.reputation else None,
            "sender_stats": self.sender_stats.to_dict() if self.sender_stats else None,
        }


class ScanService:
    """Loads rules, scores messages, and keeps scan records and reputation current."""

    def __init__(
        self,
        *,
        database: Database,
        detector: PhishingDetector | None = None,
        max_content_chars: int | None = None,
    ):
        self.database = database
        self.detector = detector or PhishingDetector()
        self.max_content_chars = max_content_chars
        self._scan_lock = asyncio.Lock()

    def _check_input(self, sender_email: str, content: str) -> None:
        if not normalize_email(sender_email):
            raise ScanInputError("sender_email is required")
        if self.max_content_chars and len(content or "") > self.max_content_chars:
            raise ContentTooLargeError(
                f"content exceeds {self.max_content_chars} characters"
            )

    async def reload_rules(self) -> int:
        """Load the active rules from storage into the detector. Returns rule count."""
        snapshot = self.detector.set_rules(await self.database.load_active_rules())
        for rule in snapshot.invalid_rules:
            logger.warning("Stored rule %s (%r) has an invalid pattern and is skipped", rule.id, rule.name)
        return len(snapshot)

    async def preview(
        self,
        subject: str,
        sender_email: str,
        sender_name: str,
        content: str,
    ) -> ScanReport:
        """Analyze a message against stored rules and reputation without persisting anything."""
        self._check_input(sender_email, content)
        await self.reload_rules()

        stats = await self.database.get_sender_stats(sender_email)
        return ScanReport(
            sender=normalize_email(sender_email),
            result=self.detector.analyze_message(subject, sender_email, sender_name, content),
            links=self.detector.analyze_links(content),
            reputation=interpret_stats(stats),
            sender_stats=stats,
        )

    async def scan(
        self,
        subject: str,
        sender_email: str,
        sender_name: str,
        content: str,
    ) -> ScanReport:
        """Score, persist, and update the sender's reputation counters.

        Scans run one at a time so each one reads the counters the previous
        scan wrote.
        """
        async with self._scan_lock:
            report = await self.preview(subject, sender_email, sender_name, content)

            report.scan_id = await self.database.add_scan(
                subject, sender_email, sender_name, content, report.result
            )
            await self.database.add_link_findings(report.scan_id, report.links)

            updated = apply_scan_outcome(report.sender_stats, report.result.is_phishing)
            await self.database.save_sender_reputation(sender_email, updated)
            report.sender_stats = updated

        self._record_metrics(report)
        logger.info(
            "Scanned message %s from %s: score=%s phishing=%s links=%s",
            report.scan_id,
            report.sender,
            report.result.risk_score,
            report.result.is_phishing,
            len(report.links),
        )
        return report

    @staticmethod
    def _record_metrics(report: ScanReport) -> None:
        metrics.record_verdict(report.result.is_phishing)
        for reason in report.result.reasons:
            metrics.record_reason(reason)
        metrics.record_links(
            total=len(report.links),
            suspicious=sum(1 for link in report.links if link.is_suspicious),
        )
