"""Main entry point for the PhishScan API service.

Run:
  python -m phishscan.main
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

from .analyzer.detector import PhishingDetector
from .config import Config, load_config, validate_config
from .pipeline.scan import ScanService
from .server.server import ApiConfig, ApiServer
from .storage import Database

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


async def run_service(config: Config) -> None:
    database = Database(config.database_path)
    await database.connect()

    if config.seed_default_rules:
        await database.seed_rules(config.default_rules)

    scan_service = ScanService(
        database=database,
        detector=PhishingDetector(),
        max_content_chars=config.max_content_chars,
    )
    rule_count = await scan_service.reload_rules()
    logger.info("Loaded %s active detection rules", rule_count)

    server = ApiServer(
        config=ApiConfig(
            host=config.api_host,
            port=config.api_port,
            api_token=config.api_token,
            max_content_chars=config.max_content_chars,
        ),
        database=database,
        scan_service=scan_service,
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:  # pragma: no cover - Windows
            pass

    await server.start()
    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down PhishScan...")
        await server.stop()
        await database.close()


def main() -> int:
    config = load_config()
    configure_logging(config.log_level)

    errors = validate_config(config)
    if errors:
        for error in errors:
            logger.error("Config error: %s", error)
        return 1

    logger.info("Starting PhishScan...")
    asyncio.run(run_service(config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
