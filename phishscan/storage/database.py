"""SQLite database for PhishScan scans, rules and sender reputation."""

from __future__ import annotations

from .db.base import DatabaseBase
from .db.reputation import ReputationMixin
from .db.rules import RulesMixin
from .db.scans import ScansMixin
from .db.stats import StatsMixin


class Database(
    RulesMixin,
    ScansMixin,
    ReputationMixin,
    StatsMixin,
    DatabaseBase,
):
    """Async SQLite database composed from mixins."""


__all__ = ["Database"]
