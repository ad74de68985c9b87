"""
Data Ingestion - Ingestion Service.

============================================================
RESPONSIBILITY
============================================================
Runs one collection cycle: both phases, concurrently.

- Starts the ticker phase and the market phase together
- Waits for both, whichever finishes first
- Isolates failures between the two phases
- Reports per-cycle results and aggregated metrics

============================================================
WORKFLOW
============================================================
1. Log cycle start
2. asyncio.gather(ticker phase, market phase)
3. Convert any escaped exception into a FAILED result
4. Record metrics, log completion marker

============================================================
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from core.clock import ClockFactory, ClockProtocol
from data_ingestion.collectors.base import BaseCollector
from data_ingestion.collectors.market_page import MarketCollector
from data_ingestion.collectors.ticker_api import TickerCollector
from data_ingestion.types import (
    CycleResult,
    DataType,
    IngestionMetrics,
    IngestionResult,
    IngestionStatus,
    MarketPageConfig,
    TickerApiConfig,
)
from storage.csv_appender import CsvAppender


# ============================================================
# CONFIGURATION
# ============================================================


@dataclass
class IngestionServiceConfig:
    """Configuration for the ingestion service."""

    data_dir: Union[str, Path] = "data"

    ticker_config: TickerApiConfig = field(default_factory=TickerApiConfig)
    market_config: MarketPageConfig = field(default_factory=MarketPageConfig)


# ============================================================
# INGESTION SERVICE
# ============================================================


class IngestionService:
    """
    Runs the dual-source collection cycle.

    ============================================================
    USAGE
    ============================================================
    ```python
    service = IngestionService(IngestionServiceConfig(data_dir="data"))
    result = await service.run_collection_cycle()
    ```

    ============================================================
    """

    def __init__(
        self,
        config: IngestionServiceConfig,
        collectors: Optional[Dict[str, BaseCollector]] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        """
        Initialize the ingestion service.

        Args:
            config: Service configuration
            collectors: Pre-built phase collectors keyed by name
            clock: Clock for cycle timestamps (defaults to global clock)
        """
        self._config = config
        self._clock = clock or ClockFactory.get_clock()
        self._logger = logging.getLogger("ingestion_service")
        self._appender = CsvAppender(config.data_dir)

        self._collectors: Dict[str, BaseCollector] = (
            dict(collectors) if collectors is not None else self._initialize_collectors()
        )

        self._run_count = 0
        self._metrics = IngestionMetrics()
        self._results: List[CycleResult] = []

    def _initialize_collectors(self) -> Dict[str, BaseCollector]:
        return {
            "ticker_api": TickerCollector(
                self._config.ticker_config, self._appender, clock=self._clock
            ),
            "market_page": MarketCollector(
                self._config.market_config, self._appender, clock=self._clock
            ),
        }

    # =========================================================
    # COLLECTION EXECUTION
    # =========================================================

    async def run_collection_cycle(self) -> CycleResult:
        """
        Run a single collection cycle for both phases.

        Returns:
            CycleResult with one IngestionResult per phase
        """
        self._run_count += 1
        cycle = CycleResult(started_at=self._clock.now())

        self._logger.info(
            f"Starting collection cycle {cycle.cycle_id} at {cycle.started_at.isoformat()}"
        )

        names = list(self._collectors.keys())

        outcomes = await asyncio.gather(
            *(self._run_collector(name, self._collectors[name]) for name in names),
            return_exceptions=True,
        )

        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, IngestionResult):
                cycle.results.append(outcome)
            else:
                self._logger.error(f"Collector {name} failed: {outcome}")
                cycle.results.append(self._error_to_result(outcome, name))

        cycle.completed_at = self._clock.now()
        self._record_cycle(cycle)

        duration = (cycle.completed_at - cycle.started_at).total_seconds()
        self._logger.info(
            f"Collection cycle {cycle.cycle_id} completed at {cycle.completed_at.isoformat()} "
            f"in {duration:.2f}s. Stored: {cycle.records_stored}, Failed: {cycle.records_failed}"
        )

        return cycle

    async def _run_collector(self, name: str, collector: BaseCollector) -> IngestionResult:
        """Run a single collector with error isolation."""
        try:
            self._logger.debug(f"Running collector: {name}")
            return await collector.collect()

        except Exception as e:
            self._logger.error(f"Collector {name} failed: {e}")
            return self._error_to_result(e, name)

    def _error_to_result(self, error: BaseException, source: str) -> IngestionResult:
        now = self._clock.now()
        result = IngestionResult(
            source=source,
            data_type=DataType.UNKNOWN,
            status=IngestionStatus.FAILED,
            started_at=now,
            errors=[str(error)],
        )
        result.mark_complete(now)
        return result

    def _record_cycle(self, cycle: CycleResult) -> None:
        self._metrics.total_cycles += 1
        for result in cycle.results:
            self._metrics.record_result(result)
        self._results.append(cycle)
        del self._results[:-100]

    # =========================================================
    # METRICS
    # =========================================================

    @property
    def run_count(self) -> int:
        return self._run_count

    def get_metrics(self) -> IngestionMetrics:
        return self._metrics

    def get_recent_results(self, limit: int = 10) -> List[CycleResult]:
        return self._results[-limit:]

    def get_collector_names(self) -> List[str]:
        return list(self._collectors.keys())

    def get_collector(self, name: str) -> Optional[BaseCollector]:
        return self._collectors.get(name)
