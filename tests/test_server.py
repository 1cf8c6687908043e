"""Tests for the JSON API server."""

from __future__ import annotations

from contextlib import asynccontextmanager

import pytest
from aiohttp import test_utils

from phishscan.analyzer.models import DetectionRule
from phishscan.constants import RuleKind, Severity
from phishscan.server.server import ApiConfig, ApiServer
from phishscan.server.server_helpers import _coerce_bool, _coerce_int, _message_fields
from phishscan.storage import Database

RULES = [
    DetectionRule(
        name="Credential request",
        kind=RuleKind.KEYWORD,
        pattern=r"verify\s+your\s+account",
        severity=Severity.HIGH,
    ),
]

MESSAGE = {
    "subject": "Security notice",
    "senderEmail": "billing@yahoo.com",
    "senderName": "Amazon Billing",
    "content": 'Verify your account now: <a href="https://bit.ly/abc">amazon.com</a>',
}


@asynccontextmanager
async def api_client(tmp_path, **config_kwargs):
    db = Database(tmp_path / "test.db")
    await db.connect()
    await db.seed_rules(RULES)
    server = ApiServer(config=ApiConfig(**config_kwargs), database=db)
    await server.scan_service.reload_rules()
    try:
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            yield client
    finally:
        await db.close()


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthz(self, tmp_path):
        async with api_client(tmp_path) as client:
            resp = await client.get("/healthz")
            assert resp.status == 200
            assert await resp.json() == {"ok": True, "rules_loaded": 1}

    @pytest.mark.asyncio
    async def test_metrics_text(self, tmp_path):
        async with api_client(tmp_path) as client:
            await client.post("/api/scan", json=MESSAGE)
            resp = await client.get("/metrics")
            assert resp.status == 200
            body = await resp.text()
            assert "phishscan_scans_total 1" in body
            assert 'phishscan_verdicts_total{verdict="benign"} 1' in body
            assert 'phishscan_reason_hits_total{reason="Credential request detected"} 1' in body


class TestScanEndpoints:
    @pytest.mark.asyncio
    async def test_analyze_does_not_store(self, tmp_path):
        async with api_client(tmp_path) as client:
            resp = await client.post("/api/analyze", json=MESSAGE)
            assert resp.status == 200
            data = await resp.json()
            assert data["scan_id"] is None
            assert data["risk_score"] == 35
            assert data["is_phishing"] is False
            assert data["reasons"] == [
                "Credential request detected",
                "Suspicious sender information",
            ]
            assert data["links"][0]["risk_factors"] == ["Shortened URL detected"]

            resp = await client.get("/api/scans")
            assert (await resp.json())["count"] == 0

    @pytest.mark.asyncio
    async def test_scan_and_fetch(self, tmp_path):
        async with api_client(tmp_path) as client:
            resp = await client.post("/api/scan", json=MESSAGE)
            assert resp.status == 201
            data = await resp.json()
            assert data["sender"] == "billing@yahoo.com"
            assert data["sender_stats"]["total_messages"] == 1

            resp = await client.get(f"/api/scans/{data['scan_id']}")
            assert resp.status == 200
            scan = await resp.json()
            assert scan["links"][0]["url"] == "https://bit.ly/abc"
            assert scan["detection_reasons"] == data["reasons"]

            resp = await client.get("/api/scans", params={"sender": "Billing@Yahoo.com"})
            listing = await resp.json()
            assert listing["count"] == 1
            assert listing["scans"][0]["link_count"] == 1

    @pytest.mark.asyncio
    async def test_invalid_payloads(self, tmp_path):
        async with api_client(tmp_path) as client:
            resp = await client.post("/api/scan", data="not json")
            assert resp.status == 400

            resp = await client.post("/api/scan", json=["a", "list"])
            assert resp.status == 400

            resp = await client.post("/api/scan", json={"subject": "Hi", "content": "x"})
            assert resp.status == 400
            assert "sender_email" in (await resp.json())["error"]

            resp = await client.post("/api/scan", json={"senderEmail": "a@example.com"})
            assert resp.status == 400
            assert (await resp.json())["error"] == "content is required"

    @pytest.mark.asyncio
    async def test_content_too_large(self, tmp_path):
        async with api_client(tmp_path, max_content_chars=20) as client:
            payload = dict(MESSAGE, content="x" * 21)
            resp = await client.post("/api/scan", json=payload)
            assert resp.status == 413

    @pytest.mark.asyncio
    async def test_scan_not_found(self, tmp_path):
        async with api_client(tmp_path) as client:
            assert (await client.get("/api/scans/999")).status == 404
            assert (await client.get("/api/scans/abc")).status == 400

    @pytest.mark.asyncio
    async def test_sender_lookup(self, tmp_path):
        async with api_client(tmp_path) as client:
            resp = await client.get("/api/senders/nobody@example.com")
            data = await resp.json()
            assert data["known"] is False
            assert data["reputation"]["warning"] == "New sender - no history available"

            await client.post("/api/scan", json=MESSAGE)
            resp = await client.get("/api/senders/BILLING@yahoo.com")
            data = await resp.json()
            assert data["known"] is True
            assert data["total_messages"] == 1
            assert data["trust_score"] == 50
            assert data["reputation"]["warning"] == "Moderate trust level"

    @pytest.mark.asyncio
    async def test_stats(self, tmp_path):
        async with api_client(tmp_path) as client:
            await client.post("/api/scan", json=MESSAGE)
            resp = await client.get("/api/stats")
            data = await resp.json()
            assert data["total_scans"] == 1
            assert data["suspicious_links"] == 1
            assert data["risky_senders"] == []


class TestRuleEndpoints:
    @pytest.mark.asyncio
    async def test_rule_lifecycle(self, tmp_path):
        async with api_client(tmp_path) as client:
            resp = await client.post(
                "/api/rules",
                json={"name": "Gift cards", "kind": "behavior", "pattern": r"gift\s*cards?", "severity": "critical"},
            )
            assert resp.status == 201
            rule = await resp.json()
            assert rule["rule_name"] == "Gift cards"
            assert rule["is_active"] is True

            resp = await client.get("/api/rules")
            assert (await resp.json())["count"] == 2

            resp = await client.patch(f"/api/rules/{rule['id']}", json={"active": False, "severity": "low"})
            assert resp.status == 200
            updated = await resp.json()
            assert updated["is_active"] is False
            assert updated["severity"] == "low"

            resp = await client.get("/api/rules", params={"active": "1"})
            assert (await resp.json())["count"] == 1

            resp = await client.delete(f"/api/rules/{rule['id']}")
            assert await resp.json() == {"deleted": rule["id"]}
            assert (await client.delete(f"/api/rules/{rule['id']}")).status == 404

    @pytest.mark.asyncio
    async def test_new_rule_affects_next_scan(self, tmp_path):
        async with api_client(tmp_path) as client:
            await client.post(
                "/api/rules",
                json={"name": "Short link", "kind": "keyword", "pattern": r"bit\.ly", "severity": "high"},
            )
            data = await (await client.post("/api/analyze", json=MESSAGE)).json()
            assert data["risk_score"] == 55
            assert data["is_phishing"] is True

    @pytest.mark.asyncio
    async def test_rule_validation(self, tmp_path):
        async with api_client(tmp_path) as client:
            resp = await client.post("/api/rules", json={"name": "Bad", "pattern": "(unclosed"})
            assert resp.status == 400
            assert "Invalid pattern" in (await resp.json())["error"]

            resp = await client.post("/api/rules", json={"name": "Bad", "pattern": "x", "severity": "extreme"})
            assert resp.status == 400

            resp = await client.post("/api/rules", json={"pattern": "x"})
            assert resp.status == 400

            resp = await client.patch("/api/rules/999", json={"active": False})
            assert resp.status == 404

            resp = await client.patch("/api/rules/1", json={"pattern": ""})
            assert resp.status == 400


class TestTokenAuth:
    @pytest.mark.asyncio
    async def test_mutations_require_token(self, tmp_path):
        async with api_client(tmp_path, api_token="s3cret") as client:
            resp = await client.post("/api/scan", json=MESSAGE)
            assert resp.status == 401

            resp = await client.post("/api/scan", json=MESSAGE, headers={"Authorization": "Bearer wrong"})
            assert resp.status == 401

            resp = await client.post("/api/scan", json=MESSAGE, headers={"Authorization": "Bearer s3cret"})
            assert resp.status == 201

    @pytest.mark.asyncio
    async def test_reads_are_open(self, tmp_path):
        async with api_client(tmp_path, api_token="s3cret") as client:
            assert (await client.get("/api/rules")).status == 200
            assert (await client.get("/healthz")).status == 200


class TestHelpers:
    def test_coerce_int(self):
        assert _coerce_int("7", default=1) == 7
        assert _coerce_int("x", default=3) == 3
        assert _coerce_int("9000", default=1, max_value=500) == 500
        assert _coerce_int("-4", default=1, min_value=1) == 1

    def test_coerce_bool(self):
        assert _coerce_bool(True)
        assert _coerce_bool("yes")
        assert not _coerce_bool(None)
        assert not _coerce_bool("0")

    def test_message_fields_accept_both_spellings(self):
        assert _message_fields({"sender_email": "a@b.c", "senderName": "A", "content": "x"}) == (
            "",
            "a@b.c",
            "A",
            "x",
        )
