"""
Core Module Package.

This package contains the infrastructure components
that all other modules depend on.

Components:
- clock: Unified time abstraction
- exceptions: Custom exception hierarchy
"""

from core.clock import ClockFactory, ClockProtocol, MockClock, SystemClock
from core.exceptions import (
    ConfigurationError,
    CrawlerException,
    DataIngestionError,
    InvalidConfigError,
    Severity,
)


__all__ = [
    "ClockFactory",
    "ClockProtocol",
    "MockClock",
    "SystemClock",
    "ConfigurationError",
    "CrawlerException",
    "DataIngestionError",
    "InvalidConfigError",
    "Severity",
]
