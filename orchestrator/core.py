"""
Orchestrator - Core.

============================================================
RESPONSIBILITY
============================================================
Wires configuration, logging, the ingestion service and the
scheduler into one long-lived process.

- Sets up structured logging
- Builds the ingestion service from CrawlerConfig
- Runs the scheduler until a signal asks it to stop

============================================================
"""

import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional

from data_ingestion.ingestion_service import IngestionService, IngestionServiceConfig
from data_ingestion.types import MarketPageConfig, TickerApiConfig
from orchestrator.models import CrawlerConfig
from orchestrator.scheduler import CycleScheduler


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
) -> logging.Logger:
    """
    Set up structured logging.

    Args:
        level: Log level
        log_format: Output format (json or text)

    Returns:
        Configured logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

    return logging.getLogger("runtime")


# ============================================================
# RUNTIME
# ============================================================

def build_ingestion_service(config: CrawlerConfig) -> IngestionService:
    """Build the ingestion service for the configured data directory."""
    return IngestionService(
        IngestionServiceConfig(
            data_dir=config.data_dir,
            ticker_config=TickerApiConfig(timeout_seconds=config.http_timeout_seconds),
            market_config=MarketPageConfig(timeout_seconds=config.http_timeout_seconds),
        )
    )


class CrawlerRuntime:
    """
    Long-lived crawler process.

    Owns the scheduler and forwards termination signals to it.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        service: Optional[IngestionService] = None,
    ) -> None:
        self._config = config
        self._service = service or build_ingestion_service(config)
        self._scheduler = CycleScheduler(
            interval_seconds=config.interval_seconds,
            job=self._service.run_collection_cycle,
        )
        self._logger = logging.getLogger("runtime")

    @property
    def scheduler(self) -> CycleScheduler:
        return self._scheduler

    @property
    def service(self) -> IngestionService:
        return self._service

    async def run_forever(self) -> None:
        """Run collection cycles until stopped."""
        if not Path(self._config.data_dir).is_dir():
            self._logger.warning(
                f"Data directory {self._config.data_dir} does not exist, every write will fail"
            )

        self._logger.info(
            f"Crawler started... | interval={self._config.interval_minutes:g}min "
            f"data_dir={self._config.data_dir}"
        )

        self._install_signal_handlers()
        try:
            await self._scheduler.run_forever()
        finally:
            self._restore_signal_handlers()

    def request_shutdown(self) -> None:
        self._scheduler.stop()

    # --------------------------------------------------------
    # Signal Handlers
    # --------------------------------------------------------

    def _install_signal_handlers(self) -> None:
        """Install signal handlers for graceful shutdown."""
        if sys.platform == "win32":
            signal.signal(signal.SIGINT, self._signal_handler)
        else:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, self._on_signal, sig)

    def _restore_signal_handlers(self) -> None:
        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.remove_signal_handler(sig)

    def _signal_handler(self, signum: int, frame: Any) -> None:
        """Synchronous signal handler (Windows)."""
        self._logger.info(f"Received signal {signum}")
        self.request_shutdown()

    def _on_signal(self, sig: signal.Signals) -> None:
        self._logger.info(f"Received signal {sig.name}")
        self.request_shutdown()
