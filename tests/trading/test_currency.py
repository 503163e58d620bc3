"""Tests for fixed-rate P&L currency conversion."""

import pytest

from orderflow_app.trading.currency import CurrencyConverter, normalize_currency


class TestNormalizeCurrency:

    @pytest.mark.parametrize("value,expected", [
        ("£", "GBP"),
        ("$", "USD"),
        ("€", "EUR"),
        ("gbp", "GBP"),
        (" USD ", "USD"),
    ])
    def test_symbols_and_codes(self, value, expected):
        assert normalize_currency(value) == expected


class TestCurrencyConverter:
    """Test rate lookup and pass-through."""

    def test_default_usd_to_gbp(self):
        converter = CurrencyConverter()
        assert converter.convert(500.0, "USD", "GBP") == pytest.approx(395.0)
        assert converter.convert(500.0, "USD", "£") == pytest.approx(395.0)

    def test_missing_rate_passes_through(self):
        converter = CurrencyConverter()
        assert converter.convert(500.0, "USD", "EUR") == 500.0
        assert converter.convert(500.0, "GBP", "USD") == 500.0

    def test_same_currency(self):
        assert CurrencyConverter().rate("USD", "USD") == 1.0

    def test_no_source_currency(self):
        assert CurrencyConverter().convert(-120.0, None, "GBP") == -120.0

    def test_from_nested(self):
        converter = CurrencyConverter.from_nested({"USD": {"GBP": 0.8, "EUR": 0.9}})
        assert converter.rate("USD", "GBP") == 0.8
        assert converter.rate("USD", "EUR") == 0.9
        assert converter.rate("EUR", "USD") == 1.0

    def test_injected_table_replaces_default(self):
        converter = CurrencyConverter({("USD", "EUR"): 0.92})
        assert converter.rate("USD", "GBP") == 1.0
        assert converter.convert(100.0, "USD", "EUR") == pytest.approx(92.0)
