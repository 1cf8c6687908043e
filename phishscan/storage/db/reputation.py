"""Sender reputation storage."""

from __future__ import annotations

from typing import Optional

from ...analyzer.models import SenderStats
from ...utils.domains import normalize_email


class ReputationMixin:
    """Per-sender counter reads and upserts."""

    async def get_sender_reputation(self, email: str) -> Optional[dict]:
        """Get the stored reputation row for a sender (address normalized)."""
        address = normalize_email(email)
        if not address:
            return None
        async with self._lock:
            cursor = await self._connection.execute(
                "SELECT * FROM sender_reputation WHERE email_address = ?",
                (address,),
            )
            return await self._fetchone_dict(cursor)

    async def get_sender_stats(self, email: str) -> Optional[SenderStats]:
        """Stored counters, or None for a sender never seen before."""
        row = await self.get_sender_reputation(email)
        if row is None:
            return None
        return SenderStats(
            total_messages=int(row.get("total_messages") or 0),
            phishing_count=int(row.get("phishing_count") or 0),
            trust_score=float(row.get("trust_score") or 0),
        )

    async def save_sender_reputation(self, email: str, stats: SenderStats) -> None:
        """Insert or replace a sender's counters and bump ``last_seen``."""
        address = normalize_email(email)
        if not address:
            return
        async with self._lock:
            await self._connection.execute(
                """
                INSERT INTO sender_reputation (email_address, total_messages, phishing_count, trust_score)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(email_address) DO UPDATE SET
                    total_messages = excluded.total_messages,
                    phishing_count = excluded.phishing_count,
                    trust_score = excluded.trust_score,
                    last_seen = CURRENT_TIMESTAMP
                """,
                (address, stats.total_messages, stats.phishing_count, stats.trust_score),
            )
            await self._connection.commit()

    async def get_risky_senders(self, limit: int = 10) -> list[dict]:
        """Senders with the most phishing verdicts, lowest trust first on ties."""
        async with self._lock:
            cursor = await self._connection.execute(
                """
                SELECT * FROM sender_reputation
                WHERE phishing_count > 0
                ORDER BY phishing_count DESC, trust_score ASC
                LIMIT ?
                """,
                (limit,),
            )
            return await self._fetchall_dicts(cursor)
