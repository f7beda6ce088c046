from decimal import Decimal

import pytest

from eex_scraper.scraper.utils import ScraperUtils


class TestVolumeParsing:
    """Test volume normalization"""

    def test_dot_thousands_separator(self):
        """Dots are thousands separators and are dropped"""
        assert ScraperUtils.parse_volume("236.995") == 236995
        assert ScraperUtils.parse_volume("1.943.184") == 1943184

    def test_plain_and_unit_suffixed(self):
        assert ScraperUtils.parse_volume("4500") == 4500
        assert ScraperUtils.parse_volume("12.000 MWh") == 12000
        assert ScraperUtils.parse_volume("0") == 0

    @pytest.mark.parametrize("value", ["", None, "-", "n/a", "MWh"])
    def test_unparseable_volume(self, value):
        """No digits means failure, never zero"""
        assert ScraperUtils.parse_volume(value) is None


class TestPriceParsing:
    """Test price normalization"""

    def test_comma_and_dot_decimal(self):
        assert ScraperUtils.parse_price("€ 0,15") == Decimal("0.15")
        assert ScraperUtils.parse_price("€ 0.49") == Decimal("0.49")
        assert ScraperUtils.parse_price("€0.5") == Decimal("0.5")

    def test_eur_word_marker(self):
        assert ScraperUtils.parse_price("EUR 1,25") == Decimal("1.25")

    def test_integer_price(self):
        assert ScraperUtils.parse_price("€ 2") == Decimal("2")

    @pytest.mark.parametrize("value", ["0.47", "", None, "€", "€ -", "price 0,15", "€ n/a (note 3)"])
    def test_unparseable_price(self, value):
        """Missing currency marker or number fails instead of defaulting"""
        assert ScraperUtils.parse_price(value) is None

    def test_number_must_follow_marker(self):
        assert ScraperUtils.parse_price("€ per MWh: 5") is None
        assert ScraperUtils.parse_price("€\n 0,15") == Decimal("0.15")

    def test_trailing_punctuation_ignored(self):
        assert ScraperUtils.parse_price("€ 0.49.") == Decimal("0.49")


class TestDecimalNormalization:
    """Test the separator disambiguation policy"""

    def test_single_separator_is_decimal(self):
        assert ScraperUtils.normalize_decimal("1.234") == Decimal("1.234")
        assert ScraperUtils.normalize_decimal("1,234") == Decimal("1.234")

    def test_repeated_separator_is_grouping(self):
        assert ScraperUtils.normalize_decimal("1.943.184") == Decimal("1943184")
        assert ScraperUtils.normalize_decimal("1,943,184") == Decimal("1943184")

    def test_mixed_separators_rightmost_is_decimal(self):
        assert ScraperUtils.normalize_decimal("1.234,56") == Decimal("1234.56")
        assert ScraperUtils.normalize_decimal("1,234.56") == Decimal("1234.56")

    def test_empty(self):
        assert ScraperUtils.normalize_decimal("") is None
        assert ScraperUtils.normalize_decimal(".,") is None


class TestTextHelpers:
    """Test reserve price, month and whitespace helpers"""

    def test_reserve_price(self):
        text = "The reserve price for the May auctions is: 0,15 €/MWh"
        assert ScraperUtils.parse_reserve_price(text) == Decimal("0.15")

    def test_reserve_price_case_insensitive(self):
        text = "RESERVE PRICE: 0.20 € / MWh applies"
        assert ScraperUtils.parse_reserve_price(text) == Decimal("0.20")

    def test_reserve_price_missing(self):
        assert ScraperUtils.parse_reserve_price("No reserve mentioned") is None
        assert ScraperUtils.parse_reserve_price("reserve price is 0,15 per unit") is None

    def test_find_month_year(self):
        assert ScraperUtils.find_month_year("Production month: February 2025 results") == "February 2025"
        assert ScraperUtils.find_month_year("the May auctions") is None

    def test_is_month_year(self):
        assert ScraperUtils.is_month_year("  February\n 2025 ")
        assert not ScraperUtils.is_month_year("Results February 2025")
        assert not ScraperUtils.is_month_year("")

    def test_clean_text(self):
        assert ScraperUtils.clean_text("  Grand \n\t Est\xa0 ") == "Grand Est"
        assert ScraperUtils.clean_text(None) == ""
