"""Statistics/summary queries."""

from __future__ import annotations

from collections import Counter

from ...utils.domains import registered_domain


class StatsMixin:
    """Aggregate statistics helpers."""

    async def get_stats(self) -> dict:
        """Return totals for the dashboard."""
        stats: dict = {}

        async with self._lock:
            cursor = await self._connection.execute(
                """
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(CASE WHEN is_phishing THEN 1 ELSE 0 END), 0) AS phishing,
                       COALESCE(AVG(risk_score), 0) AS avg_risk
                FROM scanned_messages
                """
            )
            row = await cursor.fetchone()
            stats["total_scans"] = row["total"]
            stats["phishing_scans"] = row["phishing"]
            stats["benign_scans"] = row["total"] - row["phishing"]
            stats["average_risk_score"] = round(float(row["avg_risk"]), 1)

            # Scans in last 24h
            cursor = await self._connection.execute(
                """
                SELECT COUNT(*) AS count FROM scanned_messages
                WHERE created_at >= datetime('now', '-1 day')
                """
            )
            stats["last_24h"] = (await cursor.fetchone())["count"]

            cursor = await self._connection.execute(
                """
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(CASE WHEN is_suspicious THEN 1 ELSE 0 END), 0) AS suspicious
                FROM analyzed_links
                """
            )
            row = await cursor.fetchone()
            stats["total_links"] = row["total"]
            stats["suspicious_links"] = row["suspicious"]

            cursor = await self._connection.execute("SELECT COUNT(*) AS count FROM sender_reputation")
            stats["tracked_senders"] = (await cursor.fetchone())["count"]

            cursor = await self._connection.execute(
                "SELECT sender_email FROM scanned_messages WHERE is_phishing = 1"
            )
            phishing_senders = [r["sender_email"] for r in await cursor.fetchall()]

        domains = Counter(d for d in (registered_domain(s) for s in phishing_senders) if d)
        stats["top_phishing_domains"] = [
            {"domain": domain, "count": count} for domain, count in domains.most_common(5)
        ]
        return stats
