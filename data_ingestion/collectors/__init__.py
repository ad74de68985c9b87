"""
Data Ingestion - Collectors Package.

This package contains the data collection modules.
Each collector is one phase of the collection cycle.

Collectors:
- ticker_api: Per-coin ticker data from the ticker JSON API
- market_page: Market indices scraped from an HTML page
"""

from data_ingestion.collectors.base import BaseCollector
from data_ingestion.collectors.ticker_api import TickerCollector, TickerFetcher
from data_ingestion.collectors.market_page import (
    MARKET_SELECTORS,
    MarketCollector,
    MarketScraper,
    SelectorRule,
)


__all__ = [
    "BaseCollector",
    "TickerCollector",
    "TickerFetcher",
    "MARKET_SELECTORS",
    "MarketCollector",
    "MarketScraper",
    "SelectorRule",
]
