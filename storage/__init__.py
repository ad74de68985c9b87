"""
Storage Package.

This package manages all data persistence.
Every observation is appended to a per-source CSV file.

Modules:
- csv_appender: Append-only CSV row writer
"""

from storage.csv_appender import CsvAppender


__all__ = [
    "CsvAppender",
]
