"""Core API server initialization and lifecycle."""

from __future__ import annotations

import logging

from aiohttp import web

from ..analyzer.metrics import metrics
from ..pipeline.scan import ScanService
from ..storage.database import Database
from .server_config import ApiConfig

logger = logging.getLogger(__name__)


class ApiServerCoreMixin:
    """Core API server lifecycle."""

    def __init__(
        self,
        *,
        config: ApiConfig,
        database: Database,
        scan_service: ScanService | None = None,
    ):
        self.config = config
        self.database = database
        self.scan_service = scan_service or ScanService(
            database=database,
            max_content_chars=config.max_content_chars,
        )

        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

        self._app = web.Application(
            middlewares=[self._token_auth_middleware],
            client_max_size=max(1024**2, config.max_content_chars * 4 + 64 * 1024),
        )
        self._register_routes()

    @property
    def app(self) -> web.Application:
        return self._app

    async def start(self) -> None:
        if not self.config.enabled:
            logger.info("API server disabled")
            return
        if self._runner:
            return
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, host=self.config.host, port=int(self.config.port))
        await self._site.start()
        logger.info("API server listening on %s:%s", self.config.host, self.config.port)

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
        self._runner = None
        self._site = None

    async def _healthz(self, request: web.Request) -> web.Response:
        return web.json_response({"ok": True, "rules_loaded": len(self.scan_service.detector.rules)})

    async def _metrics(self, request: web.Request) -> web.Response:
        """Expose a handful of text metrics (Prometheus-ish)."""
        summary = metrics.get_summary()
        lines = [
            f"phishscan_uptime_seconds {summary['uptime_seconds']}",
            f"phishscan_scans_total {summary['total_scans']}",
            f"phishscan_links_total {summary['links_total']}",
            f"phishscan_links_suspicious_total {summary['links_suspicious']}",
        ]
        for verdict, count in sorted(summary["verdicts"].items()):
            lines.append(f'phishscan_verdicts_total{{verdict="{verdict}"}} {count}')
        for entry in summary["top_reasons"]:
            reason = entry["reason"].replace("\\", "\\\\").replace('"', '\\"')
            lines.append(f'phishscan_reason_hits_total{{reason="{reason}"}} {entry["hits"]}')
        return web.Response(text="\n".join(lines) + "\n")
