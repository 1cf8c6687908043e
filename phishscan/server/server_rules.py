"""Detection rule API handlers."""

from __future__ import annotations

import logging

from aiohttp import web

from ..analyzer.rules import validate_pattern
from ..constants import RuleKind, Severity
from .server_helpers import _coerce_bool, _error, _json_object, _path_id

logger = logging.getLogger(__name__)


def _parse_severity(value) -> tuple[Severity | None, str | None]:
    severity = Severity.from_string(value)
    if severity is None:
        return None, f"severity must be one of: {', '.join(s.value for s in Severity)}"
    return severity, None


class ApiServerRulesMixin:
    """Rule listing and management handlers."""

    async def _api_rules(self, request: web.Request) -> web.Response:
        active_only = _coerce_bool(request.query.get("active"))
        rules = await self.database.get_detection_rules(active_only=active_only)
        return web.json_response({"rules": rules, "count": len(rules)})

    async def _api_create_rule(self, request: web.Request) -> web.Response:
        data = await _json_object(request)
        if data is None:
            return _error("Invalid JSON payload")

        name = str(data.get("name") or data.get("rule_name") or "").strip()
        pattern = str(data.get("pattern") or "").strip()
        if not name or not pattern:
            return _error("name and pattern are required")

        pattern_error = validate_pattern(pattern)
        if pattern_error:
            return _error(f"Invalid pattern: {pattern_error}")

        severity, severity_error = _parse_severity(data.get("severity") or Severity.MEDIUM.value)
        if severity_error:
            return _error(severity_error)

        kind = RuleKind.from_string(data.get("kind") or data.get("rule_type"))
        active = _coerce_bool(data.get("active", data.get("is_active", True)))

        rule_id = await self.database.add_detection_rule(name, kind, pattern, severity, active)
        logger.info("Created rule %s (%s, %s, %s)", rule_id, name, kind.value, severity.value)
        rule = await self.database.get_detection_rule(rule_id)
        return web.json_response(rule, status=201)

    async def _api_update_rule(self, request: web.Request) -> web.Response:
        rule_id = _path_id(request, "rule_id")
        if rule_id is None:
            return _error("Invalid rule id")
        data = await _json_object(request)
        if data is None:
            return _error("Invalid JSON payload")

        updates: dict = {}
        if "name" in data:
            name = str(data.get("name") or "").strip()
            if not name:
                return _error("name cannot be empty")
            updates["name"] = name
        if "pattern" in data:
            pattern = str(data.get("pattern") or "").strip()
            pattern_error = validate_pattern(pattern) if pattern else "pattern cannot be empty"
            if pattern_error:
                return _error(f"Invalid pattern: {pattern_error}")
            updates["pattern"] = pattern
        if "severity" in data:
            severity, severity_error = _parse_severity(data.get("severity"))
            if severity_error:
                return _error(severity_error)
            updates["severity"] = severity
        if "active" in data:
            updates["active"] = _coerce_bool(data.get("active"))

        if not await self.database.update_detection_rule(rule_id, **updates):
            return _error("Rule not found", status=404)
        return web.json_response(await self.database.get_detection_rule(rule_id))

    async def _api_delete_rule(self, request: web.Request) -> web.Response:
        rule_id = _path_id(request, "rule_id")
        if rule_id is None:
            return _error("Invalid rule id")
        if not await self.database.delete_detection_rule(rule_id):
            return _error("Rule not found", status=404)
        return web.json_response({"deleted": rule_id})
