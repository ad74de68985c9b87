"""
Data Ingestion - Type Definitions.

============================================================
PURPOSE
============================================================
Shared types for the data ingestion layer.

- Configuration dataclasses
- Ticker and market record types
- Ingestion result types
- Error types (re-exported from core.exceptions)

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable data structures where possible
- Raw ticker strings are never reinterpreted
- Every row starts with the capture timestamp

============================================================
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from core.exceptions import (  # noqa: F401  re-exported for collectors
    DecodeError,
    IngestionError,
    NormalizeError,
    PersistError,
    TransportError,
)


# =============================================================
# ENUMS
# =============================================================

class IngestionSource(str, Enum):
    """Identifiers for ingestion sources."""
    TICKER_API = "ticker_api"
    MARKET_PAGE = "market_page"


class IngestionStatus(str, Enum):
    """Status of an ingestion operation."""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class DataType(str, Enum):
    """Types of data being ingested."""
    TICKER = "ticker"
    MARKET = "market"
    UNKNOWN = "unknown"


# =============================================================
# CONFIGURATION TYPES
# =============================================================

@dataclass(frozen=True)
class CollectorConfig:
    """Base configuration for all collectors."""
    source_name: str
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class TickerApiConfig(CollectorConfig):
    """Configuration for the ticker API collector."""
    source_name: str = IngestionSource.TICKER_API.value
    url_template: str = "https://api.coinmarketcap.com/v1/ticker/{}"
    tracked_coins: tuple = ("bitcoin", "ripple", "ethereum", "iota", "bitcoin-cash")


@dataclass(frozen=True)
class MarketPageConfig(CollectorConfig):
    """Configuration for the market page scraper."""
    source_name: str = IngestionSource.MARKET_PAGE.value
    page_url: str = "http://www.infomoney.com.br/mercados/cambio"
    file_name: str = "market"


# =============================================================
# TICKER RECORD
# =============================================================

@dataclass(frozen=True)
class TickerRecord:
    """One coin's ticker data as returned by the API, all values raw text."""
    id: str
    name: str
    symbol: str
    rank: str
    price_usd: str
    price_btc: str
    volume_24h_usd: str
    market_cap_usd: str
    available_supply: str
    total_supply: str
    max_supply: str
    percent_change_1h: str
    percent_change_24h: str
    percent_change_7d: str
    last_updated: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], source: str = "") -> "TickerRecord":
        """
        Build a record from one decoded ticker object.

        Missing keys and JSON nulls become empty strings.

        Raises:
            DecodeError: If a value is not a string
        """
        values: Dict[str, str] = {}
        for record_field in fields(cls):
            key = "24h_volume_usd" if record_field.name == "volume_24h_usd" else record_field.name
            value = payload.get(key)
            if value is None:
                value = ""
            elif not isinstance(value, str):
                raise DecodeError(
                    message=f"Ticker field {key} is not a string: {value!r}",
                    source=source,
                    details={"field": key},
                )
            values[record_field.name] = value
        return cls(**values)

    def to_row(self, captured_at: int) -> List[str]:
        """Serialize to a CSV row with the capture timestamp first."""
        return [
            str(captured_at),
            self.name,
            self.symbol,
            self.rank,
            self.price_usd,
            self.price_btc,
            self.volume_24h_usd,
            self.market_cap_usd,
            self.available_supply,
            self.total_supply,
            self.max_supply,
            self.percent_change_1h,
            self.percent_change_24h,
            self.percent_change_7d,
            self.last_updated,
        ]


# =============================================================
# MARKET SNAPSHOT
# =============================================================

MARKET_FIELDS = ("dollar", "euro", "nasdaq", "bovespa", "bitcoin")


@dataclass(frozen=True)
class MarketSnapshot:
    """One finalized market page scrape."""
    captured_at: datetime
    dollar: float = 0.0
    euro: float = 0.0
    nasdaq: float = 0.0
    bovespa: float = 0.0
    bitcoin: float = 0.0

    def to_row(self) -> List[str]:
        """Serialize to a CSV row, floats with two decimals."""
        return [str(int(self.captured_at.timestamp()))] + [
            f"{getattr(self, name):.2f}" for name in MARKET_FIELDS
        ]


@dataclass
class MarketSnapshotBuilder:
    """
    Mutable snapshot owned by a single scrape.

    Each extraction step overwrites its field, so the last match for a
    field wins. Unset fields stay at zero.
    """
    dollar: float = 0.0
    euro: float = 0.0
    nasdaq: float = 0.0
    bovespa: float = 0.0
    bitcoin: float = 0.0
    normalize_errors: int = 0

    def set_field(self, name: str, value: float) -> None:
        if name not in MARKET_FIELDS:
            raise ValueError(f"Unknown market field: {name}")
        setattr(self, name, value)

    def build(self, captured_at: datetime) -> MarketSnapshot:
        return MarketSnapshot(
            captured_at=captured_at,
            **{name: getattr(self, name) for name in MARKET_FIELDS},
        )


# =============================================================
# INGESTION RESULT TYPES
# =============================================================

@dataclass
class IngestionResult:
    """Result of a single phase run."""
    batch_id: UUID = field(default_factory=uuid4)
    source: str = ""
    data_type: DataType = DataType.UNKNOWN
    status: IngestionStatus = IngestionStatus.SUCCESS

    # Counts
    records_fetched: int = 0
    records_stored: int = 0
    records_skipped: int = 0
    records_failed: int = 0

    # Timing
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: float = 0.0

    # Errors
    errors: List[str] = field(default_factory=list)

    def mark_complete(self, completed_at: datetime) -> None:
        """Mark the ingestion as complete and calculate duration."""
        self.completed_at = completed_at
        if self.started_at:
            delta = completed_at - self.started_at
            self.duration_seconds = delta.total_seconds()

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)
        if self.status == IngestionStatus.SUCCESS:
            self.status = IngestionStatus.PARTIAL

    def mark_failed(self, error: str) -> None:
        """Mark the ingestion as failed."""
        self.status = IngestionStatus.FAILED
        self.add_error(error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "batch_id": str(self.batch_id),
            "source": self.source,
            "data_type": self.data_type.value,
            "status": self.status.value,
            "records_fetched": self.records_fetched,
            "records_stored": self.records_stored,
            "records_skipped": self.records_skipped,
            "records_failed": self.records_failed,
            "duration_seconds": self.duration_seconds,
            "error_count": len(self.errors),
            "errors": self.errors[:5],  # Limit for logging
        }


@dataclass
class CycleResult:
    """Outcome of one collection cycle, both phases included."""
    cycle_id: UUID = field(default_factory=uuid4)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    results: List[IngestionResult] = field(default_factory=list)

    @property
    def records_stored(self) -> int:
        return sum(r.records_stored for r in self.results)

    @property
    def records_failed(self) -> int:
        return sum(r.records_failed for r in self.results)

    def result_for(self, source: str) -> Optional[IngestionResult]:
        for result in self.results:
            if result.source == source:
                return result
        return None


@dataclass
class IngestionMetrics:
    """Aggregated metrics across cycles."""
    total_cycles: int = 0
    total_runs: int = 0
    successful_runs: int = 0
    failed_runs: int = 0

    total_records_fetched: int = 0
    total_records_stored: int = 0
    total_records_failed: int = 0

    last_run_at: Optional[datetime] = None
    last_success_at: Optional[datetime] = None
    last_failure_at: Optional[datetime] = None

    # Per-source metrics
    source_metrics: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def record_result(self, result: IngestionResult) -> None:
        """Record an ingestion result."""
        self.total_runs += 1
        self.last_run_at = result.completed_at

        self.total_records_fetched += result.records_fetched
        self.total_records_stored += result.records_stored
        self.total_records_failed += result.records_failed

        if result.status == IngestionStatus.SUCCESS:
            self.successful_runs += 1
            self.last_success_at = result.completed_at
        elif result.status == IngestionStatus.FAILED:
            self.failed_runs += 1
            self.last_failure_at = result.completed_at

        if result.source not in self.source_metrics:
            self.source_metrics[result.source] = {
                "runs": 0,
                "records_stored": 0,
                "last_run": None,
            }

        self.source_metrics[result.source]["runs"] += 1
        self.source_metrics[result.source]["records_stored"] += result.records_stored
        self.source_metrics[result.source]["last_run"] = result.completed_at


