"""
Data Ingestion - Ticker API Collector.

============================================================
RESPONSIBILITY
============================================================
Collects per-coin ticker data from the ticker JSON API.

- One GET per tracked coin, sequentially
- First element of the returned array is the record
- Raw string values are persisted untouched
- One CSV file per coin id

============================================================
DATA FLOW
============================================================
1. GET <url_template % coin_id>
2. Decode JSON array -> TickerRecord (or nothing when empty)
3. Append capture timestamp + ticker fields to data/<coin>.csv
4. Return ingestion metrics

============================================================
"""

import logging
from typing import AsyncIterator, Optional, Tuple

import httpx

from core.clock import ClockProtocol
from data_ingestion.collectors.base import BaseCollector
from data_ingestion.types import (
    DataType,
    DecodeError,
    IngestionResult,
    IngestionSource,
    TickerApiConfig,
    TickerRecord,
    TransportError,
)
from storage.csv_appender import CsvAppender


class TickerFetcher:
    """Fetches a single coin's ticker record."""

    def __init__(
        self,
        config: TickerApiConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            config: Ticker API configuration
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self._config = config
        self._transport = transport
        self._source = IngestionSource.TICKER_API.value
        self._logger = logging.getLogger("collector.ticker_api")

    async def fetch_coin(self, coin_id: str) -> Optional[TickerRecord]:
        """
        Fetch the ticker record for one coin.

        Returns:
            The first record of the response, or None if the array is empty

        Raises:
            TransportError: On network or HTTP status errors
            DecodeError: On a body that is not a JSON array of objects
        """
        url = self._config.url_template.format(coin_id)

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            raise TransportError(
                message=f"Error on ticker request: HTTP {e.response.status_code}",
                source=self._source,
                details={
                    "url": url,
                    "status_code": e.response.status_code,
                    "response": e.response.text[:200],
                },
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(
                message=f"Error on ticker request: timeout: {e}",
                source=self._source,
                details={"url": url},
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                message=f"Error on ticker request: {e}",
                source=self._source,
                details={"url": url},
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(
                message=f"Error on parse ticker response: {e}",
                source=self._source,
                details={"url": url, "response": response.text[:200]},
            ) from e

        if not isinstance(data, list):
            raise DecodeError(
                message=f"Error on parse ticker response: expected array, got {type(data).__name__}",
                source=self._source,
                details={"url": url},
            )

        if not data:
            return None

        first = data[0]
        if not isinstance(first, dict):
            raise DecodeError(
                message=f"Error on parse ticker response: expected object, got {type(first).__name__}",
                source=self._source,
                details={"url": url},
            )

        return TickerRecord.from_payload(first, source=self._source)


class TickerCollector(BaseCollector[Tuple[str, TickerRecord]]):
    """
    Ticker phase of the collection cycle.

    ============================================================
    WIRING
    ============================================================
    Source: ticker JSON API (REST)
    Sink: data/<coin>.csv, one row per coin per cycle

    ============================================================
    """

    def __init__(
        self,
        config: TickerApiConfig,
        appender: CsvAppender,
        fetcher: Optional[TickerFetcher] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        super().__init__(
            config=config,
            source=IngestionSource.TICKER_API,
            data_type=DataType.TICKER,
            appender=appender,
            clock=clock,
        )
        self._ticker_config = config
        self._fetcher = fetcher or TickerFetcher(config)

    @property
    def tracked_coins(self) -> Tuple[str, ...]:
        return tuple(self._ticker_config.tracked_coins)

    async def iter_items(
        self, result: IngestionResult
    ) -> AsyncIterator[Tuple[str, TickerRecord]]:
        # A fetch error propagates and ends the phase for the remaining coins.
        for coin in self._ticker_config.tracked_coins:
            record = await self._fetcher.fetch_coin(coin)
            if record is None:
                result.records_skipped += 1
                self._logger.warning(f"No ticker data returned for {coin}")
                continue
            yield coin, record

    def store_item(self, item: Tuple[str, TickerRecord]) -> None:
        coin, record = item
        row = record.to_row(self._clock.unix_seconds())
        self._appender.append_row(self._appender.path_for(coin), row)
        self._logger.debug(f"Stored ticker row for {coin}")
