"""
Data Ingestion - Market Page Collector.

============================================================
RESPONSIBILITY
============================================================
Scrapes market indices and exchange rates from one HTML page.

- Exactly one page visit per cycle
- Five fixed CSS selectors, evaluated in order
- Scraped text goes through NumericNormalizer
- One shared market.csv file

============================================================
DATA FLOW
============================================================
1. GET the market page
2. Parse once, run each SelectorRule over the document
3. Finalize the snapshot with the scrape completion time
4. Append timestamp + five values to data/market.csv

============================================================
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Tuple, Union

import httpx
from bs4 import BeautifulSoup

from core.clock import ClockFactory, ClockProtocol
from data_ingestion.collectors.base import BaseCollector
from data_ingestion.normalizers.numeric_normalizer import NumericNormalizer
from data_ingestion.types import (
    DataType,
    IngestionResult,
    IngestionSource,
    MarketPageConfig,
    MarketSnapshot,
    MarketSnapshotBuilder,
    TransportError,
)
from storage.csv_appender import CsvAppender


@dataclass(frozen=True)
class SelectorRule:
    """A CSS selector and the snapshot field its text feeds."""
    selector: str
    field: str


# Tied to the layout of the market page. Order is evaluation order.
MARKET_SELECTORS: Tuple[SelectorRule, ...] = (
    SelectorRule(".li-ibovespa .last", "bovespa"),
    SelectorRule(".li-dolar .last", "dollar"),
    SelectorRule(".li-euro .last", "euro"),
    SelectorRule(".li-nasdaq .last", "nasdaq"),
    SelectorRule(".last-child .last", "bitcoin"),
)


class MarketScraper:
    """Visits the market page and builds one MarketSnapshot."""

    def __init__(
        self,
        config: MarketPageConfig,
        clock: Optional[ClockProtocol] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        selectors: Tuple[SelectorRule, ...] = MARKET_SELECTORS,
    ) -> None:
        self._config = config
        self._clock = clock or ClockFactory.get_clock()
        self._transport = transport
        self._selectors = selectors
        self._source = IngestionSource.MARKET_PAGE.value
        self._logger = logging.getLogger("collector.market_page")
        self._normalizer = NumericNormalizer(source=self._source, logger=self._logger)

    async def scrape_market(self) -> MarketSnapshot:
        """
        Scrape the market page once.

        Raises:
            TransportError: On network or HTTP status errors
        """
        response = await self.fetch_page()
        builder = self.extract(response.content, encoding=response.charset_encoding)
        if builder.normalize_errors:
            self._logger.warning(
                f"Market snapshot has {builder.normalize_errors} unparsed value(s), defaulted to 0"
            )
        return builder.build(self._clock.now())

    async def fetch_page(self) -> httpx.Response:
        url = self._config.page_url
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response

        except httpx.HTTPStatusError as e:
            body = e.response.text[:500]
            self._logger.error(
                f"Market page request failed | status={e.response.status_code} | response={body}"
            )
            raise TransportError(
                message=f"HTTP {e.response.status_code} on market page",
                source=self._source,
                details={"url": url, "status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            self._logger.error(f"Market page request failed | status=0 | error={e}")
            raise TransportError(
                message=f"Request error on market page: {e}",
                source=self._source,
                details={"url": url},
            ) from e

    def extract(
        self, html: Union[str, bytes], encoding: Optional[str] = None
    ) -> MarketSnapshotBuilder:
        """
        Run every selector rule over the parsed page.

        Raw bytes are decoded by BeautifulSoup, using ``encoding`` (the
        Content-Type charset) when given, else the markup's own declaration.
        """
        soup = BeautifulSoup(html, "html.parser", from_encoding=encoding)
        builder = MarketSnapshotBuilder()

        for rule in self._selectors:
            for element in soup.select(rule.selector):
                value, ok = self._normalizer.normalize(element.get_text())
                if not ok:
                    builder.normalize_errors += 1
                builder.set_field(rule.field, value)

        return builder


class MarketCollector(BaseCollector[MarketSnapshot]):
    """
    Market phase of the collection cycle.

    ============================================================
    WIRING
    ============================================================
    Source: market HTML page
    Sink: data/market.csv, one row per cycle

    ============================================================
    """

    def __init__(
        self,
        config: MarketPageConfig,
        appender: CsvAppender,
        scraper: Optional[MarketScraper] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        super().__init__(
            config=config,
            source=IngestionSource.MARKET_PAGE,
            data_type=DataType.MARKET,
            appender=appender,
            clock=clock,
        )
        self._market_config = config
        self._scraper = scraper or MarketScraper(config, clock=self._clock)

    async def iter_items(self, result: IngestionResult) -> AsyncIterator[MarketSnapshot]:
        yield await self._scraper.scrape_market()

    def store_item(self, item: MarketSnapshot) -> None:
        path = self._appender.path_for(self._market_config.file_name)
        self._appender.append_row(path, item.to_row())
        self._logger.info(f"Market saved at {self._clock.now().isoformat()}")
