"""
Tests for the Numeric Normalizer.

============================================================
TEST SCENARIOS
============================================================
1. Currency decoration is stripped, comma becomes decimal point
2. Periods are thousands separators
3. Only the first comma is converted
4. Text without digits fails and defaults to zero

============================================================
"""

import logging

import pytest

from data_ingestion.normalizers import NumericNormalizer
from data_ingestion.types import NormalizeError


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def normalizer():
    return NumericNormalizer(source="market_page")


# ============================================================
# TEST: CLEANING
# ============================================================

class TestClean:
    """Tests for the text cleaning step."""

    def test_strips_letters_spaces_and_currency(self):
        assert NumericNormalizer.clean("R$ 3,25") == "3.25"

    def test_strips_non_dollar_currency_symbols(self):
        assert NumericNormalizer.clean("€ 4,75") == "4.75"
        assert NumericNormalizer.clean("£12,5") == "12.5"

    def test_only_first_comma_is_replaced(self):
        assert NumericNormalizer.clean("1,234,56") == "1.234,56"

    def test_periods_are_removed(self):
        assert NumericNormalizer.clean("1.234,56 USD") == "1234.56"


# ============================================================
# TEST: PARSING
# ============================================================

class TestParse:
    """Tests for strict parsing."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("€ 4,75", 4.75),
            ("R$ 3,25", 3.25),
            ("1.234,56 USD", 1234.56),
            ("US$ 9.000,12", 9000.12),
            ("75.432 pts", 75432.0),
            ("  -0,35 ", -0.35),
            ("42", 42.0),
        ],
    )
    def test_decorated_values(self, normalizer, text, expected):
        assert normalizer.parse(text) == pytest.approx(expected)

    def test_period_treated_as_thousands_separator(self, normalizer):
        """'$1,234.56' loses its period, so the comma becomes the decimal point."""
        assert normalizer.parse("$1,234.56") == pytest.approx(1.23456)

    def test_second_comma_fails(self, normalizer):
        with pytest.raises(NormalizeError) as exc_info:
            normalizer.parse("1,234,56")

        assert exc_info.value.details["cleaned"] == "1.234,56"
        assert exc_info.value.source == "market_page"

    @pytest.mark.parametrize("text", ["", "   ", "N/A", "abc", "$", "--"])
    def test_no_digits_fails(self, normalizer, text):
        with pytest.raises(NormalizeError):
            normalizer.parse(text)


# ============================================================
# TEST: FALLBACK NORMALIZATION
# ============================================================

class TestNormalize:
    """Tests for the zero-fallback entry point."""

    def test_valid_value_passes_through(self, normalizer):
        assert normalizer.normalize("€ 4,75") == (4.75, True)

    def test_invalid_value_returns_zero(self, normalizer):
        assert normalizer.normalize("sem cotação") == (0.0, False)

    def test_invalid_value_is_logged(self, caplog):
        normalizer = NumericNormalizer(source="market_page", logger=logging.getLogger("test.normalizer"))

        with caplog.at_level(logging.ERROR, logger="test.normalizer"):
            value, ok = normalizer.normalize("1,234,56")

        assert (value, ok) == (0.0, False)
        assert any("NormalizeError" in r.getMessage() for r in caplog.records)
