"""Scanned message and link finding storage."""

from __future__ import annotations

import json
from typing import Iterable, Optional

from ...analyzer.models import DetectionResult, LinkFinding
from ...utils.domains import normalize_email
from .helpers import coerce_bools, decode_json_list


def _scan_row(row: Optional[dict]) -> Optional[dict]:
    if row is None:
        return None
    row["detection_reasons"] = decode_json_list(row.get("detection_reasons"))
    return coerce_bools(row, "is_phishing")


def _link_row(row: dict) -> dict:
    row["risk_factors"] = decode_json_list(row.get("risk_factors"))
    return coerce_bools(row, "is_suspicious")


class ScansMixin:
    """Scan record writes and reads."""

    async def add_scan(
        self,
        subject: str,
        sender_email: str,
        sender_name: str,
        content: str,
        result: DetectionResult,
    ) -> int:
        """Persist a scored message. Returns the scan ID."""
        async with self._lock:
            cursor = await self._connection.execute(
                """
                INSERT INTO scanned_messages (
                    subject, sender_email, sender_name, message_content,
                    risk_score, is_phishing, detection_reasons
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    subject or "",
                    normalize_email(sender_email),
                    sender_name or "",
                    content or "",
                    result.risk_score,
                    result.is_phishing,
                    json.dumps(result.reasons),
                ),
            )
            await self._connection.commit()
            return cursor.lastrowid

    async def add_link_findings(self, message_id: int, findings: Iterable[LinkFinding]) -> int:
        """Persist link findings for a scan. Returns rows inserted."""
        rows = [
            (
                message_id,
                finding.url,
                finding.display_text,
                finding.is_suspicious,
                json.dumps(finding.risk_factors),
            )
            for finding in findings
        ]
        if not rows:
            return 0
        async with self._lock:
            await self._connection.executemany(
                """
                INSERT INTO analyzed_links (message_id, url, display_text, is_suspicious, risk_factors)
                VALUES (?, ?, ?, ?, ?)
                """,
                rows,
            )
            await self._connection.commit()
        return len(rows)

    async def get_scan(self, scan_id: int) -> Optional[dict]:
        """Get a scan with its link findings under ``links``."""
        async with self._lock:
            cursor = await self._connection.execute(
                "SELECT * FROM scanned_messages WHERE id = ?",
                (scan_id,),
            )
            scan = await self._fetchone_dict(cursor)
            if scan is None:
                return None
            cursor = await self._connection.execute(
                "SELECT * FROM analyzed_links WHERE message_id = ? ORDER BY id ASC",
                (scan_id,),
            )
            links = await self._fetchall_dicts(cursor)

        scan = _scan_row(scan)
        scan["links"] = [_link_row(link) for link in links]
        return scan

    async def get_recent_scans(
        self,
        limit: int | None = 50,
        phishing_only: bool = False,
        sender_email: str | None = None,
    ) -> list[dict]:
        """Most recent scans first, without message bodies."""
        query = """
            SELECT m.id, m.subject, m.sender_email, m.sender_name, m.risk_score,
                   m.is_phishing, m.detection_reasons, m.created_at,
                   (SELECT COUNT(*) FROM analyzed_links l WHERE l.message_id = m.id) AS link_count
            FROM scanned_messages m
        """
        clauses: list[str] = []
        params: list = []
        if phishing_only:
            clauses.append("m.is_phishing = 1")
        if sender_email:
            clauses.append("m.sender_email = ?")
            params.append(normalize_email(sender_email))
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY m.id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))

        async with self._lock:
            cursor = await self._connection.execute(query, params)
            rows = await self._fetchall_dicts(cursor)
        return [_scan_row(row) for row in rows]
