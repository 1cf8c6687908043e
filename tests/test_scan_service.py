"""Tests for the end-to-end scan flow."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import pytest

from phishscan.analyzer.links import INSECURE_HTTP, IP_ADDRESS_HOST, URL_MISMATCH
from phishscan.analyzer.metrics import metrics
from phishscan.analyzer.models import DetectionRule, SenderStats
from phishscan.constants import RuleKind, Severity
from phishscan.pipeline.scan import ContentTooLargeError, ScanInputError, ScanService
from phishscan.storage import Database

RULES = [
    DetectionRule(
        name="Credential request",
        kind=RuleKind.KEYWORD,
        pattern=r"verify\s+your\s+account",
        severity=Severity.HIGH,
    ),
    DetectionRule(
        name="Wire transfer request",
        kind=RuleKind.BEHAVIOR,
        pattern=r"wire\s+transfer",
        severity=Severity.CRITICAL,
    ),
]

PHISHING_MESSAGE = (
    "Action required",
    "Alerts@Gmail.com",
    "PayPal Service",
    "Please verify your account within 24 hours or it will be suspended. "
    "Complete the wire transfer today. "
    '<a href="http://192.168.0.10/login">https://www.paypal.com</a>',
)

BENIGN_MESSAGE = ("Lunch", "alerts@gmail.com", "Alex", "See you at noon")


@asynccontextmanager
async def open_service(tmp_path, **kwargs):
    db = Database(tmp_path / "test.db")
    await db.connect()
    await db.seed_rules(RULES)
    try:
        yield ScanService(database=db, **kwargs)
    finally:
        await db.close()


class TestScan:
    @pytest.mark.asyncio
    async def test_phishing_scan_is_persisted(self, tmp_path):
        async with open_service(tmp_path) as service:
            report = await service.scan(*PHISHING_MESSAGE)

            assert report.sender == "alerts@gmail.com"
            assert report.result.risk_score == 75
            assert report.result.is_phishing is True
            assert report.result.reasons == [
                "Credential request detected",
                "Wire transfer request detected",
                "Suspicious sender information",
                "Contains urgent language",
            ]
            assert len(report.links) == 1
            assert report.links[0].risk_factors == [URL_MISMATCH, IP_ADDRESS_HOST, INSECURE_HTTP]
            assert report.reputation.warning == "New sender - no history available"
            assert report.sender_stats == SenderStats(1, 1, 20)

            stored = await service.database.get_scan(report.scan_id)
            assert stored["risk_score"] == 75
            assert stored["detection_reasons"] == report.result.reasons
            assert stored["links"][0]["url"] == "http://192.168.0.10/login"

            stats = await service.database.get_sender_stats("alerts@gmail.com")
            assert stats == SenderStats(1, 1, 20)

    @pytest.mark.asyncio
    async def test_reputation_uses_history_before_the_scan(self, tmp_path):
        async with open_service(tmp_path) as service:
            await service.scan(*PHISHING_MESSAGE)
            report = await service.scan(*BENIGN_MESSAGE)

            assert report.result.risk_score == 0
            assert report.reputation.is_risky is True
            assert report.reputation.warning == "High phishing rate from this sender"
            assert report.sender_stats == SenderStats(2, 1, 22)

    @pytest.mark.asyncio
    async def test_concurrent_scans_keep_every_update(self, tmp_path):
        async with open_service(tmp_path) as service:
            reports = await asyncio.gather(
                *(service.scan("hi", "bob@example.com", "Bob", f"hello {i}") for i in range(5))
            )

            assert sorted(report.sender_stats.total_messages for report in reports) == [1, 2, 3, 4, 5]
            assert len(await service.database.get_recent_scans(sender_email="bob@example.com")) == 5
            assert await service.database.get_sender_stats("bob@example.com") == SenderStats(5, 0, 58)

    @pytest.mark.asyncio
    async def test_report_serializes(self, tmp_path):
        async with open_service(tmp_path) as service:
            data = (await service.scan(*BENIGN_MESSAGE)).to_dict()
            assert set(data) == {
                "scan_id",
                "sender",
                "risk_score",
                "is_phishing",
                "reasons",
                "links",
                "reputation",
                "sender_stats",
            }
            assert data["reputation"] == {
                "is_risky": True,
                "warning": "New sender - no history available",
            }
            assert data["sender_stats"] == {"total_messages": 1, "phishing_count": 0, "trust_score": 50}

    @pytest.mark.asyncio
    async def test_scan_records_metrics(self, tmp_path):
        async with open_service(tmp_path) as service:
            await service.scan(*PHISHING_MESSAGE)
            await service.scan(*BENIGN_MESSAGE)

            summary = metrics.get_summary()
            assert summary["total_scans"] == 2
            assert summary["verdicts"] == {"phishing": 1, "benign": 1}
            assert summary["links_total"] == 1
            assert summary["links_suspicious"] == 1
            reasons = {entry["reason"]: entry["hits"] for entry in summary["top_reasons"]}
            assert reasons["Wire transfer request detected"] == 1


class TestPreview:
    @pytest.mark.asyncio
    async def test_preview_does_not_persist(self, tmp_path):
        async with open_service(tmp_path) as service:
            report = await service.preview(*PHISHING_MESSAGE)
            assert report.scan_id is None
            assert report.result.risk_score == 75
            assert report.sender_stats is None

            assert await service.database.get_recent_scans() == []
            assert await service.database.get_sender_stats("alerts@gmail.com") is None
            assert metrics.get_summary()["total_scans"] == 0

    @pytest.mark.asyncio
    async def test_rule_changes_apply_to_next_scan(self, tmp_path):
        async with open_service(tmp_path) as service:
            rules = await service.database.get_detection_rules()
            wire_rule = next(rule for rule in rules if rule["rule_name"] == "Wire transfer request")
            await service.database.update_detection_rule(wire_rule["id"], active=False)

            report = await service.preview(*PHISHING_MESSAGE)
            assert report.result.risk_score == 45
            assert report.result.is_phishing is False

    @pytest.mark.asyncio
    async def test_invalid_stored_pattern_is_skipped(self, tmp_path):
        async with open_service(tmp_path) as service:
            await service.database.add_detection_rule("Broken", "keyword", "(unclosed", "critical")
            assert await service.reload_rules() == 3

            report = await service.preview(*PHISHING_MESSAGE)
            assert report.result.risk_score == 75


class TestInputChecks:
    @pytest.mark.asyncio
    async def test_sender_required(self, tmp_path):
        async with open_service(tmp_path) as service:
            with pytest.raises(ScanInputError):
                await service.scan("Hi", "  ", "Alex", "hello")

    @pytest.mark.asyncio
    async def test_content_limit(self, tmp_path):
        async with open_service(tmp_path, max_content_chars=10) as service:
            with pytest.raises(ContentTooLargeError):
                await service.scan("Hi", "a@example.com", "Alex", "x" * 11)
            report = await service.scan("Hi", "a@example.com", "Alex", "x" * 10)
            assert report.scan_id is not None
