"""
Orchestrator - Models.

============================================================
RESPONSIBILITY
============================================================
Runtime configuration for the crawler process.

- Loaded from environment variables (and a .env file)
- Validated once at start-up
- Sources themselves (coins, URLs) are not configurable here

============================================================
"""

import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

from core.exceptions import InvalidConfigError


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "text")


def _get_float(key: str, default: str) -> float:
    value = os.getenv(key, default)
    try:
        return float(value)
    except ValueError:
        raise InvalidConfigError(key, value, "not a number")


@dataclass(frozen=True)
class CrawlerConfig:
    """Process-level configuration."""

    interval_minutes: float = 15.0
    """Minutes between collection cycles."""

    data_dir: str = "data"
    """Directory holding the CSV files. Must exist."""

    http_timeout_seconds: float = 30.0
    """Per-request timeout for the HTTP client."""

    log_level: str = "INFO"
    """Logging level."""

    log_format: str = "text"
    """Log output format (json or text)."""

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60

    @classmethod
    def from_env(cls) -> "CrawlerConfig":
        """Load configuration from environment variables."""
        load_dotenv()
        return cls(
            interval_minutes=_get_float("CRAWLER_INTERVAL_MINUTES", "15"),
            data_dir=os.getenv("CRAWLER_DATA_DIR", "data"),
            http_timeout_seconds=_get_float("HTTP_TIMEOUT_SECONDS", "30"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("LOG_FORMAT", "text").lower(),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.interval_minutes <= 0:
            errors.append("interval_minutes must be positive")

        if self.http_timeout_seconds <= 0:
            errors.append("http_timeout_seconds must be positive")

        if not self.data_dir:
            errors.append("data_dir must not be empty")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        if self.log_format not in LOG_FORMATS:
            errors.append(f"log_format must be one of {', '.join(LOG_FORMATS)}")

        return errors
