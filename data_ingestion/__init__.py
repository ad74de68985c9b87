"""
Data Ingestion Package.

This package handles all data collection and persistence.

Sub-packages:
- collectors: The ticker API and market page phases
- normalizers: Scraped text to number conversion

Main service:
- ingestion_service: Runs one dual-source collection cycle
"""

from data_ingestion.ingestion_service import IngestionService, IngestionServiceConfig
from data_ingestion.collectors import (
    BaseCollector,
    MarketCollector,
    MarketScraper,
    TickerCollector,
    TickerFetcher,
)
from data_ingestion.normalizers import NumericNormalizer
from data_ingestion.types import (
    IngestionSource,
    IngestionStatus,
    DataType,
    CollectorConfig,
    TickerApiConfig,
    MarketPageConfig,
    TickerRecord,
    MarketSnapshot,
    MarketSnapshotBuilder,
    IngestionResult,
    CycleResult,
    IngestionMetrics,
    IngestionError,
    TransportError,
    DecodeError,
    NormalizeError,
    PersistError,
)


__all__ = [
    # Service
    "IngestionService",
    "IngestionServiceConfig",
    # Collectors
    "BaseCollector",
    "MarketCollector",
    "MarketScraper",
    "TickerCollector",
    "TickerFetcher",
    # Normalizers
    "NumericNormalizer",
    # Types - Enums
    "IngestionSource",
    "IngestionStatus",
    "DataType",
    # Types - Configs
    "CollectorConfig",
    "TickerApiConfig",
    "MarketPageConfig",
    # Types - Records
    "TickerRecord",
    "MarketSnapshot",
    "MarketSnapshotBuilder",
    # Types - Results
    "IngestionResult",
    "CycleResult",
    "IngestionMetrics",
    # Types - Errors
    "IngestionError",
    "TransportError",
    "DecodeError",
    "NormalizeError",
    "PersistError",
]
