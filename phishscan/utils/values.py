"""Loose value coercion for config files, stored rows and request payloads."""

from __future__ import annotations

TRUE_STRINGS = {"1", "true", "yes", "on"}


def coerce_bool(value: object, default: bool = False) -> bool:
    """Interpret booleans written as text ("no", "false", "0") the way a person means them."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in TRUE_STRINGS
