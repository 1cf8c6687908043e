"""Shared helpers for API handlers."""

from __future__ import annotations

from aiohttp import web

from ..utils.values import coerce_bool

MAX_LIST_LIMIT = 500

CONTENT_KEYS = ("content", "message_content", "messageContent")


def _coerce_int(value: object, *, default: int, min_value: int | None = None, max_value: int | None = None) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        parsed = int(default)
    if min_value is not None:
        parsed = max(min_value, parsed)
    if max_value is not None:
        parsed = min(max_value, parsed)
    return parsed


def _coerce_bool(value: object) -> bool:
    return coerce_bool(value)


def _error(message: str, status: int = 400) -> web.Response:
    return web.json_response({"error": message}, status=status)


def _path_id(request: web.Request, key: str) -> int | None:
    try:
        return int(request.match_info.get(key, ""))
    except ValueError:
        return None


async def _json_object(request: web.Request) -> dict | None:
    """Parse the request body as a JSON object, or None when it is not one."""
    try:
        data = await request.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _message_fields(data: dict) -> tuple[str, str, str, str]:
    """Message fields from a scan payload, accepting camelCase aliases."""

    def _text(*keys: str) -> str:
        for key in keys:
            value = data.get(key)
            if value is not None:
                return str(value)
        return ""

    return (
        _text("subject"),
        _text("sender_email", "senderEmail"),
        _text("sender_name", "senderName"),
        _text(*CONTENT_KEYS),
    )
