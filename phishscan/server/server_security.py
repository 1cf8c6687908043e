"""Bearer-token auth for mutating API requests."""

from __future__ import annotations

import secrets

from aiohttp import web

_SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}


class ApiServerSecurityMixin:
    """Auth middleware."""

    @web.middleware
    async def _token_auth_middleware(self, request: web.Request, handler):  # type: ignore[override]
        path = request.path or ""
        if not path.startswith("/api") or request.method in _SAFE_METHODS:
            return await handler(request)

        token = self.config.api_token
        if not token:
            return await handler(request)

        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return web.json_response(
                {"error": "Authentication required"},
                status=401,
                headers={"WWW-Authenticate": 'Bearer realm="PhishScan"'},
            )

        supplied = auth.split(" ", 1)[1].strip()
        if not secrets.compare_digest(supplied.encode(), token.encode()):
            return web.json_response({"error": "Invalid token"}, status=401)

        return await handler(request)
