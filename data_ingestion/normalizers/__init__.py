"""
Data Ingestion - Normalizers Package.

This package contains data normalization modules.

Normalizers:
- numeric_normalizer: Converts scraped currency text to floats
"""

from data_ingestion.normalizers.numeric_normalizer import NumericNormalizer


__all__ = [
    "NumericNormalizer",
]
