"""Route registration for the API server."""

from __future__ import annotations


class ApiServerRoutesMixin:
    """Route registration helper."""

    def _register_routes(self) -> None:
        # Health + metrics
        self._app.router.add_get("/healthz", self._healthz)
        self._app.router.add_get("/metrics", self._metrics)

        # Scanning
        self._app.router.add_post("/api/analyze", self._api_analyze)
        self._app.router.add_post("/api/scan", self._api_scan)
        self._app.router.add_get("/api/scans", self._api_scans)
        self._app.router.add_get("/api/scans/{scan_id}", self._api_scan_detail)
        self._app.router.add_get("/api/senders/{email}", self._api_sender)
        self._app.router.add_get("/api/stats", self._api_stats)

        # Detection rules
        self._app.router.add_get("/api/rules", self._api_rules)
        self._app.router.add_post("/api/rules", self._api_create_rule)
        self._app.router.add_patch("/api/rules/{rule_id}", self._api_update_rule)
        self._app.router.add_delete("/api/rules/{rule_id}", self._api_delete_rule)
