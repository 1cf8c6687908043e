"""Scan API handlers."""

from __future__ import annotations

from aiohttp import web

from ..analyzer.reputation import interpret_stats
from ..pipeline.scan import ContentTooLargeError, ScanInputError
from ..utils.domains import normalize_email
from .server_helpers import (
    CONTENT_KEYS,
    MAX_LIST_LIMIT,
    _coerce_bool,
    _coerce_int,
    _error,
    _json_object,
    _message_fields,
    _path_id,
)


class ApiServerScansMixin:
    """Message scanning and scan history handlers."""

    async def _run_scan(self, request: web.Request, *, persist: bool) -> web.Response:
        data = await _json_object(request)
        if data is None:
            return _error("Invalid JSON payload")
        if not any(data.get(key) is not None for key in CONTENT_KEYS):
            return _error("content is required")

        subject, sender_email, sender_name, content = _message_fields(data)
        try:
            if persist:
                report = await self.scan_service.scan(subject, sender_email, sender_name, content)
            else:
                report = await self.scan_service.preview(subject, sender_email, sender_name, content)
        except ContentTooLargeError as exc:
            return _error(str(exc), status=413)
        except ScanInputError as exc:
            return _error(str(exc))

        return web.json_response(report.to_dict(), status=201 if persist else 200)

    async def _api_analyze(self, request: web.Request) -> web.Response:
        """Score a message without storing it."""
        return await self._run_scan(request, persist=False)

    async def _api_scan(self, request: web.Request) -> web.Response:
        """Score, store, and update the sender's reputation."""
        return await self._run_scan(request, persist=True)

    async def _api_scans(self, request: web.Request) -> web.Response:
        limit = _coerce_int(request.query.get("limit"), default=50, min_value=1, max_value=MAX_LIST_LIMIT)
        scans = await self.database.get_recent_scans(
            limit=limit,
            phishing_only=_coerce_bool(request.query.get("phishing")),
            sender_email=request.query.get("sender") or None,
        )
        return web.json_response({"scans": scans, "count": len(scans)})

    async def _api_scan_detail(self, request: web.Request) -> web.Response:
        scan_id = _path_id(request, "scan_id")
        if scan_id is None:
            return _error("Invalid scan id")
        scan = await self.database.get_scan(scan_id)
        if not scan:
            return _error("Scan not found", status=404)
        return web.json_response(scan)

    async def _api_sender(self, request: web.Request) -> web.Response:
        """Stored counters for a sender with their current interpretation."""
        address = normalize_email(request.match_info.get("email", ""))
        if not address:
            return _error("Invalid sender address")
        row = await self.database.get_sender_reputation(address)
        stats = await self.database.get_sender_stats(address)
        return web.json_response(
            {
                "email_address": address,
                "known": row is not None,
                "total_messages": stats.total_messages if stats else 0,
                "phishing_count": stats.phishing_count if stats else 0,
                "trust_score": stats.trust_score if stats else None,
                "last_seen": row.get("last_seen") if row else None,
                "reputation": interpret_stats(stats).to_dict(),
            }
        )

    async def _api_stats(self, request: web.Request) -> web.Response:
        stats = await self.database.get_stats()
        stats["risky_senders"] = await self.database.get_risky_senders(limit=10)
        return web.json_response(stats)
