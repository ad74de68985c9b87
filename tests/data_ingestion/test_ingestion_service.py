"""
Tests for the Ingestion Service.

============================================================
TEST SCENARIOS
============================================================
1. A full cycle writes one row per coin plus one market row
2. Market failure does not affect the ticker phase
3. Ticker failure does not affect the market phase
4. Both phases run concurrently
5. Unexpected collector exceptions become FAILED results
6. Metrics accumulate across cycles

============================================================
"""

import asyncio
import csv
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from core.clock import MockClock
from data_ingestion.collectors.market_page import MarketCollector, MarketScraper
from data_ingestion.collectors.ticker_api import TickerCollector
from data_ingestion.ingestion_service import IngestionService, IngestionServiceConfig
from data_ingestion.types import (
    IngestionResult,
    IngestionStatus,
    MarketPageConfig,
    TickerApiConfig,
    TickerRecord,
    TransportError,
)
from storage.csv_appender import CsvAppender


FIXED_TIME = datetime(2018, 1, 15, 12, 0, tzinfo=timezone.utc)

MARKET_HTML = """
<ul>
  <li class="li-dolar"><span class="last">R$ 3,25</span></li>
  <li class="li-euro"><span class="last">€ 4,75</span></li>
</ul>
"""


def ticker_record(coin_id: str, price_usd: str) -> TickerRecord:
    return TickerRecord.from_payload({
        "id": coin_id,
        "name": coin_id.title(),
        "symbol": coin_id[:3].upper(),
        "rank": "1",
        "price_usd": price_usd,
    })


def fake_fetcher(outcomes):
    async def fetch_coin(coin):
        outcome = outcomes[coin]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    fetcher = MagicMock()
    fetcher.fetch_coin = AsyncMock(side_effect=fetch_coin)
    return fetcher


def build_service(tmp_path, clock, ticker_outcomes, market_status=200):
    appender = CsvAppender(tmp_path)
    ticker_config = TickerApiConfig(tracked_coins=tuple(ticker_outcomes.keys()))
    market_config = MarketPageConfig()
    transport = httpx.MockTransport(
        lambda request: httpx.Response(market_status, text=MARKET_HTML)
    )

    collectors = {
        "ticker_api": TickerCollector(
            ticker_config, appender, fetcher=fake_fetcher(ticker_outcomes), clock=clock
        ),
        "market_page": MarketCollector(
            market_config,
            appender,
            scraper=MarketScraper(market_config, clock=clock, transport=transport),
            clock=clock,
        ),
    }
    return IngestionService(
        IngestionServiceConfig(data_dir=tmp_path), collectors=collectors, clock=clock
    )


def read_rows(path):
    with open(path, newline="") as handle:
        return list(csv.reader(handle))


class StaticCollector:
    """Collector stub returning a fixed result after an optional hook."""

    def __init__(self, source, hook=None, error=None):
        self.source = source
        self.hook = hook
        self.error = error

    async def collect(self):
        if self.hook is not None:
            await self.hook()
        if self.error is not None:
            raise self.error
        return IngestionResult(source=self.source, status=IngestionStatus.SUCCESS, records_stored=1)


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def clock():
    return MockClock(FIXED_TIME)


# ============================================================
# TEST: FULL CYCLE
# ============================================================

class TestCollectionCycle:
    """Tests for one complete cycle against fake sources."""

    @pytest.mark.asyncio
    async def test_writes_coin_and_market_rows(self, tmp_path, clock):
        service = build_service(tmp_path, clock, {
            "bitcoin": ticker_record("bitcoin", "9000.12"),
            "ripple": ticker_record("ripple", "1.05"),
        })

        cycle = await service.run_collection_cycle()

        assert cycle.records_stored == 3
        assert cycle.records_failed == 0
        assert read_rows(tmp_path / "bitcoin.csv")[0][:5] == [
            "1516017600", "Bitcoin", "BIT", "1", "9000.12",
        ]
        assert read_rows(tmp_path / "ripple.csv")[0][4] == "1.05"
        assert read_rows(tmp_path / "market.csv") == [
            ["1516017600", "3.25", "4.75", "0.00", "0.00", "0.00"],
        ]

    @pytest.mark.asyncio
    async def test_empty_coin_leaves_file_untouched(self, tmp_path, clock):
        service = build_service(tmp_path, clock, {
            "bitcoin": ticker_record("bitcoin", "9000.12"),
            "ripple": None,
        })

        cycle = await service.run_collection_cycle()

        ticker = cycle.result_for("ticker_api")
        assert ticker.status == IngestionStatus.SUCCESS
        assert ticker.records_skipped == 1
        assert cycle.records_failed == 0
        assert read_rows(tmp_path / "bitcoin.csv")[0][4] == "9000.12"
        assert not (tmp_path / "ripple.csv").exists()

    @pytest.mark.asyncio
    async def test_market_failure_keeps_ticker_rows(self, tmp_path, clock):
        service = build_service(
            tmp_path, clock, {"bitcoin": ticker_record("bitcoin", "9000.12")}, market_status=503
        )

        cycle = await service.run_collection_cycle()

        assert cycle.result_for("market_page").status == IngestionStatus.FAILED
        assert cycle.result_for("ticker_api").status == IngestionStatus.SUCCESS
        assert (tmp_path / "bitcoin.csv").exists()
        assert not (tmp_path / "market.csv").exists()

    @pytest.mark.asyncio
    async def test_ticker_failure_keeps_market_row(self, tmp_path, clock):
        service = build_service(tmp_path, clock, {
            "bitcoin": TransportError("HTTP 500", source="ticker_api"),
            "ripple": ticker_record("ripple", "1.05"),
        })

        cycle = await service.run_collection_cycle()

        assert cycle.result_for("ticker_api").status == IngestionStatus.FAILED
        assert cycle.result_for("market_page").status == IngestionStatus.SUCCESS
        assert not (tmp_path / "ripple.csv").exists()
        assert len(read_rows(tmp_path / "market.csv")) == 1

    @pytest.mark.asyncio
    async def test_repeated_cycles_append(self, tmp_path, clock):
        service = build_service(tmp_path, clock, {"bitcoin": ticker_record("bitcoin", "1")})

        await service.run_collection_cycle()
        clock.advance(minutes=15)
        await service.run_collection_cycle()

        rows = read_rows(tmp_path / "bitcoin.csv")
        assert [row[0] for row in rows] == ["1516017600", "1516018500"]
        assert len(read_rows(tmp_path / "market.csv")) == 2


# ============================================================
# TEST: CONCURRENCY AND ISOLATION
# ============================================================

class TestPhaseIsolation:
    """Tests for concurrent, independent phases."""

    @pytest.mark.asyncio
    async def test_phases_run_concurrently(self, tmp_path, clock):
        ticker_started = asyncio.Event()
        market_started = asyncio.Event()

        async def ticker_hook():
            ticker_started.set()
            await market_started.wait()

        async def market_hook():
            market_started.set()
            await ticker_started.wait()

        service = IngestionService(
            IngestionServiceConfig(data_dir=tmp_path),
            collectors={
                "ticker_api": StaticCollector("ticker_api", hook=ticker_hook),
                "market_page": StaticCollector("market_page", hook=market_hook),
            },
            clock=clock,
        )

        # Sequential execution would deadlock on the handshake
        cycle = await asyncio.wait_for(service.run_collection_cycle(), timeout=2.0)

        assert cycle.records_stored == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failed_result(self, tmp_path, clock):
        service = IngestionService(
            IngestionServiceConfig(data_dir=tmp_path),
            collectors={
                "ticker_api": StaticCollector("ticker_api", error=RuntimeError("boom")),
                "market_page": StaticCollector("market_page"),
            },
            clock=clock,
        )

        cycle = await service.run_collection_cycle()

        failed = cycle.result_for("ticker_api")
        assert failed.status == IngestionStatus.FAILED
        assert failed.errors == ["boom"]
        assert cycle.result_for("market_page").status == IngestionStatus.SUCCESS


# ============================================================
# TEST: METRICS
# ============================================================

class TestMetrics:
    """Tests for aggregated service metrics."""

    @pytest.mark.asyncio
    async def test_metrics_accumulate(self, tmp_path, clock):
        service = build_service(tmp_path, clock, {"bitcoin": ticker_record("bitcoin", "1")})

        await service.run_collection_cycle()
        await service.run_collection_cycle()

        metrics = service.get_metrics()
        assert service.run_count == 2
        assert metrics.total_cycles == 2
        assert metrics.total_runs == 4
        assert metrics.total_records_stored == 4
        assert metrics.source_metrics["market_page"]["runs"] == 2
        assert len(service.get_recent_results()) == 2

    def test_default_collectors(self, tmp_path):
        service = IngestionService(IngestionServiceConfig(data_dir=tmp_path))

        assert service.get_collector_names() == ["ticker_api", "market_page"]
        assert isinstance(service.get_collector("ticker_api"), TickerCollector)
        assert service.get_collector("missing") is None
