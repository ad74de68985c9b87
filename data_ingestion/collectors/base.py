"""
Data Ingestion - Base Collector.

============================================================
PURPOSE
============================================================
Abstract base class for the two collection phases.

============================================================
DESIGN PRINCIPLES
============================================================
- One attempt per cycle, no retry
- Fetch/decode errors abort the phase
- Persist errors are isolated to the item being written
- Full observability through IngestionResult

============================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Generic, Optional, TypeVar

from core.clock import ClockFactory, ClockProtocol
from data_ingestion.types import (
    CollectorConfig,
    DataType,
    IngestionError,
    IngestionResult,
    IngestionSource,
    IngestionStatus,
    PersistError,
)
from storage.csv_appender import CsvAppender


T = TypeVar("T")  # Type for items handed to store_item


class BaseCollector(ABC, Generic[T]):
    """
    Abstract base class for data collectors.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    - Fetch data from an external source
    - Turn it into typed items
    - Append each item to its CSV file
    - Track per-phase metrics

    ============================================================
    LIFECYCLE
    ============================================================
    1. Initialize with config and appender
    2. Call collect() once per cycle
    3. Rows are persisted and an IngestionResult returned

    ============================================================
    """

    def __init__(
        self,
        config: CollectorConfig,
        source: IngestionSource,
        data_type: DataType,
        appender: CsvAppender,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        """
        Initialize the collector.

        Args:
            config: Collector configuration
            source: Ingestion source identifier
            data_type: Type of data being collected
            appender: Row writer for the data directory
            clock: Clock for capture timestamps (defaults to global clock)
        """
        self._config = config
        self._source = source
        self._data_type = data_type
        self._appender = appender
        self._clock = clock or ClockFactory.get_clock()
        self._logger = logging.getLogger(f"collector.{source.value}")

    @property
    def source_name(self) -> str:
        return self._source.value

    # =========================================================
    # ABSTRACT METHODS - Must be implemented by subclasses
    # =========================================================

    @abstractmethod
    def iter_items(self, result: IngestionResult) -> AsyncIterator[T]:
        """
        Fetch from the source and yield items ready to persist.

        Implementations may bump ``result.records_skipped`` for
        lookups that legitimately return nothing.

        Raises:
            TransportError: On network or HTTP status errors
            DecodeError: On unexpected response shape
        """
        pass

    @abstractmethod
    def store_item(self, item: T) -> None:
        """
        Append a single item to its CSV file.

        Raises:
            PersistError: On write errors
        """
        pass

    # =========================================================
    # COLLECTION WORKFLOW
    # =========================================================

    async def collect(self) -> IngestionResult:
        """
        Run one phase of a collection cycle.

        This method:
        1. Fetches items from the source
        2. Stores each item as it arrives
        3. Returns metrics

        Returns:
            IngestionResult with metrics and status
        """
        result = IngestionResult(
            source=self.source_name,
            data_type=self._data_type,
            started_at=self._clock.now(),
        )

        self._logger.info(f"Starting collection for {self.source_name}")

        try:
            async for item in self.iter_items(result):
                result.records_fetched += 1
                try:
                    self.store_item(item)
                    result.records_stored += 1
                except PersistError as e:
                    result.records_failed += 1
                    result.add_error(f"Persist error: {e}")
                    self._logger.error(f"Err on save {self.source_name}: {e}")

            if result.records_failed == 0:
                result.status = IngestionStatus.SUCCESS
            elif result.records_stored > 0:
                result.status = IngestionStatus.PARTIAL
            else:
                result.status = IngestionStatus.FAILED

        except IngestionError as e:
            result.mark_failed(f"{type(e).__name__}: {e}")
            self._logger.error(f"Collection aborted for {self.source_name}: {e.to_log_format()}")

        except Exception as e:
            result.mark_failed(f"Unexpected error: {e}")
            self._logger.exception(f"Unexpected error in {self.source_name}")

        result.mark_complete(self._clock.now())
        self._log_result(result)
        return result

    def _log_result(self, result: IngestionResult) -> None:
        log_data = result.to_dict()

        if result.status == IngestionStatus.SUCCESS:
            self._logger.info(f"Collection complete: {log_data}")
        elif result.status == IngestionStatus.PARTIAL:
            self._logger.warning(f"Collection partial: {log_data}")
        else:
            self._logger.error(f"Collection failed: {log_data}")
