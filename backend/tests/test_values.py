from datetime import date
from decimal import Decimal

import pytest

from app.services.values import format_cents, parse_amount, parse_ofx_date, to_cents


class TestParseOfxDate:
    """Tests for OFX timestamp parsing."""

    @pytest.mark.parametrize("raw", ["20260210", "20260210120000", "20260210120000.000[-3:BRT]"])
    def test_leading_date_is_used(self, raw):
        """Time of day and timezone are ignored."""
        assert parse_ofx_date(raw) == date(2026, 2, 10)

    @pytest.mark.parametrize("raw", [None, "", "2026021", "2026AB10", "20261310", "20260230"])
    def test_invalid_yields_none(self, raw):
        """Short, non-numeric or impossible dates give None."""
        assert parse_ofx_date(raw) is None


class TestParseAmount:
    """Tests for amount parsing."""

    def test_dot_separator(self):
        assert parse_amount("-150.00") == Decimal("-150.00")

    def test_comma_separator(self):
        """A comma is accepted as the decimal separator."""
        assert parse_amount("2000,50") == Decimal("2000.50")

    def test_surrounding_whitespace(self):
        assert parse_amount("  -45.5 ") == Decimal("-45.5")

    @pytest.mark.parametrize("raw", [None, "", "abc", "NaN", "Infinity", "1.2.3"])
    def test_non_numeric_yields_none(self, raw):
        assert parse_amount(raw) is None

    @pytest.mark.parametrize("raw", ["1E+30", "-1e50", "99999999999999999.00", "1000000000000"])
    def test_out_of_range_yields_none(self, raw):
        """Amounts too large for integer cents are treated as unparseable."""
        assert parse_amount(raw) is None

    def test_largest_accepted_amount_converts_to_cents(self):
        assert to_cents(parse_amount("999999999999.99")) == 99999999999999


class TestCents:
    """Tests for cents conversion."""

    def test_to_cents(self):
        assert to_cents(Decimal("-150.00")) == -15000
        assert to_cents(Decimal("-45.5")) == -4550
        assert to_cents(Decimal("0.005")) == 1

    def test_format_cents(self):
        assert format_cents(-4550) == "-45.50"
        assert format_cents(200000) == "2000.00"
        assert format_cents(5) == "0.05"
        assert format_cents(-5) == "-0.05"
