"""Detection rule storage."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ...analyzer.models import DetectionRule
from ...constants import RuleKind, Severity
from .helpers import coerce_bools

logger = logging.getLogger(__name__)


def _rule_row(row: Optional[dict]) -> Optional[dict]:
    return coerce_bools(row, "is_active")


class RulesMixin:
    """Detection rule CRUD."""

    async def get_detection_rules(self, active_only: bool = False) -> list[dict]:
        """Return stored rules in creation order."""
        query = "SELECT * FROM detection_rules"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY id ASC"
        async with self._lock:
            cursor = await self._connection.execute(query)
            rows = await self._fetchall_dicts(cursor)
        return [_rule_row(row) for row in rows]

    async def get_detection_rule(self, rule_id: int) -> Optional[dict]:
        async with self._lock:
            cursor = await self._connection.execute(
                "SELECT * FROM detection_rules WHERE id = ?",
                (rule_id,),
            )
            return _rule_row(await self._fetchone_dict(cursor))

    async def load_active_rules(self) -> list[DetectionRule]:
        """Active rules as typed records, ready for ``PhishingDetector.set_rules``."""
        return [DetectionRule.from_mapping(row) for row in await self.get_detection_rules(active_only=True)]

    async def add_detection_rule(
        self,
        name: str,
        kind: RuleKind | str,
        pattern: str,
        severity: Severity | str | None = Severity.MEDIUM,
        active: bool = True,
    ) -> int:
        """Insert a rule and return its ID."""
        kind_value = kind.value if isinstance(kind, RuleKind) else str(kind)
        severity_value = severity.value if isinstance(severity, Severity) else severity
        async with self._lock:
            cursor = await self._connection.execute(
                """
                INSERT INTO detection_rules (rule_name, rule_type, pattern, severity, is_active)
                VALUES (?, ?, ?, ?, ?)
                """,
                (name, kind_value, pattern, severity_value, bool(active)),
            )
            await self._connection.commit()
            return cursor.lastrowid

    async def update_detection_rule(
        self,
        rule_id: int,
        *,
        name: str | None = None,
        pattern: str | None = None,
        severity: Severity | str | None = None,
        active: bool | None = None,
    ) -> bool:
        """Update the given fields of a rule. Returns False if the rule is missing."""
        updates: list[str] = []
        params: list = []
        if name is not None:
            updates.append("rule_name = ?")
            params.append(name)
        if pattern is not None:
            updates.append("pattern = ?")
            params.append(pattern)
        if severity is not None:
            updates.append("severity = ?")
            params.append(severity.value if isinstance(severity, Severity) else severity)
        if active is not None:
            updates.append("is_active = ?")
            params.append(bool(active))

        if not updates:
            return await self.get_detection_rule(rule_id) is not None

        params.append(rule_id)
        async with self._lock:
            cursor = await self._connection.execute(
                f"UPDATE detection_rules SET {', '.join(updates)} WHERE id = ?",
                params,
            )
            await self._connection.commit()
            return cursor.rowcount > 0

    async def delete_detection_rule(self, rule_id: int) -> bool:
        async with self._lock:
            cursor = await self._connection.execute(
                "DELETE FROM detection_rules WHERE id = ?",
                (rule_id,),
            )
            await self._connection.commit()
            return cursor.rowcount > 0

    async def seed_rules(self, rules: Iterable[DetectionRule]) -> int:
        """Insert default rules when the table is empty. Returns rows inserted."""
        rules = list(rules)
        async with self._lock:
            cursor = await self._connection.execute("SELECT COUNT(*) AS count FROM detection_rules")
            existing = (await cursor.fetchone())["count"]
            if existing or not rules:
                return 0
            await self._connection.executemany(
                """
                INSERT INTO detection_rules (rule_name, rule_type, pattern, severity, is_active)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (
                        rule.name,
                        rule.kind.value,
                        rule.pattern,
                        rule.severity.value if rule.severity else None,
                        rule.active,
                    )
                    for rule in rules
                ],
            )
            await self._connection.commit()
        logger.info("Seeded %s default detection rules", len(rules))
        return len(rules)
