"""
Data Ingestion - Numeric Normalizer.

============================================================
RESPONSIBILITY
============================================================
Converts scraped currency/index text into floats.

- Strips whitespace, ASCII letters, currency symbols and periods
- Treats the first remaining comma as the decimal separator
- Falls back to zero on failure, never aborts a snapshot

============================================================
NORMALIZATION RULES
============================================================
"R$ 4,75"       -> "4,75"      -> 4.75
"1.234,56 USD"  -> "1234,56"   -> 1234.56
"$1,234.56"     -> "1,23456"   -> 1.23456   (period is a thousands separator)
"1,234,56"      -> "1.234,56"  -> NormalizeError (only the first comma moves)

Historical rows were produced with these rules, so they are kept
exactly even where they look surprising.

============================================================
"""

import logging
import re
import unicodedata
from typing import Optional, Tuple

from data_ingestion.types import NormalizeError


_STRIP_PATTERN = re.compile(r"[\sa-zA-Z$.]")


class NumericNormalizer:
    """Text-to-float conversion for scraped market values."""

    def __init__(self, source: str = "", logger: Optional[logging.Logger] = None) -> None:
        self._source = source
        self._logger = logger or logging.getLogger("normalizer.numeric")

    @staticmethod
    def clean(text: str) -> str:
        """Remove decoration and move the first comma to a period."""
        value = _STRIP_PATTERN.sub("", text)
        value = "".join(ch for ch in value if unicodedata.category(ch) != "Sc")
        return value.replace(",", ".", 1)

    def parse(self, text: str) -> float:
        """
        Parse scraped text into a float.

        Raises:
            NormalizeError: If the cleaned text is not a number
        """
        cleaned = self.clean(text)
        try:
            return float(cleaned)
        except ValueError as e:
            raise NormalizeError(
                message=f"Error on convert {cleaned!r}: {e}",
                source=self._source,
                details={"raw": text, "cleaned": cleaned},
            ) from e

    def normalize(self, text: str) -> Tuple[float, bool]:
        """
        Parse scraped text, logging failures and returning 0.0 instead.

        Returns:
            (value, ok) where ok is False when the text did not parse
        """
        try:
            return self.parse(text), True
        except NormalizeError as e:
            self._logger.error(e.to_log_format())
            return 0.0, False
