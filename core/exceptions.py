"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the exception hierarchy shared by the crawler.

- Provides clear exception hierarchy
- Enables specific error handling per phase
- Includes context for debugging

============================================================
EXCEPTION HIERARCHY
============================================================
CrawlerException (base)
├── ConfigurationError
│   └── InvalidConfigError
└── DataError
    └── DataIngestionError
        └── IngestionError
            ├── TransportError   (phase-fatal)
            ├── DecodeError      (phase-fatal)
            ├── NormalizeError   (field defaults to zero)
            └── PersistError     (item-fatal)

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels for log routing."""

    LOW = "low"
    """Minor issue, informational."""

    MEDIUM = "medium"
    """Moderate issue, one phase or one field affected."""

    HIGH = "high"
    """Serious issue, the process cannot run correctly."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class CrawlerException(Exception):
    """
    Base exception for all crawler errors.

    All exceptions carry:
    - severity: for log routing
    - context: for debugging
    - recoverable: whether the next cycle can succeed unchanged
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM
    default_recoverable: bool = True

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.recoverable = recoverable if recoverable is not None else self.default_recoverable
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }

    def to_log_format(self) -> str:
        """Format exception for structured logging."""
        line = (
            f"[{self.severity.value.upper()}] {type(self).__name__}: {self.message}"
            f" | recoverable={self.recoverable}"
        )
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        if ctx_str:
            line += f" | {ctx_str}"
        return line


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(CrawlerException):
    """Error in configuration."""

    default_severity = Severity.HIGH
    default_recoverable = False

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)


class InvalidConfigError(ConfigurationError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid configuration for {key}: {reason}",
            config_key=key,
            actual_value=value,
            context={"reason": reason},
        )


# ============================================================
# DATA ERRORS
# ============================================================

class DataError(CrawlerException):
    """Base class for data-related errors."""

    default_severity = Severity.MEDIUM
    default_recoverable = True


class DataIngestionError(DataError):
    """Failed to ingest data."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        endpoint: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if source:
            context["source"] = source
        if endpoint:
            context["endpoint"] = endpoint

        super().__init__(message, context=context, **kwargs)


# ============================================================
# INGESTION ERRORS
# ============================================================

class IngestionError(DataIngestionError):
    """Base exception for per-source ingestion errors."""

    def __init__(
        self,
        message: str,
        source: str,
        recoverable: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, source=source, recoverable=recoverable)
        self.source = source
        self.details = details or {}


class TransportError(IngestionError):
    """Network or HTTP status failure reaching a remote source."""
    pass


class DecodeError(IngestionError):
    """Response body has an unexpected shape."""
    pass


class NormalizeError(IngestionError):
    """Scraped text could not be parsed as a number."""

    default_severity = Severity.LOW


class PersistError(IngestionError):
    """Row could not be written to its CSV file."""
    pass


__all__ = [
    "Severity",
    "CrawlerException",
    "ConfigurationError",
    "InvalidConfigError",
    "DataError",
    "DataIngestionError",
    "IngestionError",
    "TransportError",
    "DecodeError",
    "NormalizeError",
    "PersistError",
]
