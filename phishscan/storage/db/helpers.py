"""Database row conversion helpers."""

from __future__ import annotations

import json
from typing import Optional


class DatabaseFetchMixin:
    """Row conversion helpers."""

    async def _fetchone_dict(self, cursor) -> Optional[dict]:
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def _fetchall_dicts(self, cursor) -> list[dict]:
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]


def decode_json_list(value) -> list:
    """Decode a JSON list column, tolerating NULL and legacy garbage."""
    if not value:
        return []
    if isinstance(value, list):
        return value
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        return []
    return decoded if isinstance(decoded, list) else []


def coerce_bools(row: Optional[dict], *keys: str) -> Optional[dict]:
    """SQLite stores booleans as 0/1; convert the named columns in place."""
    if row is None:
        return None
    for key in keys:
        if key in row and row[key] is not None:
            row[key] = bool(row[key])
    return row
