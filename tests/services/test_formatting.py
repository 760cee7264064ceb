"""Tests for report formatting helpers."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from eduflow.services.formatting import (
    convert_to_mm,
    convert_to_px,
    format_currency,
    format_date,
    format_number,
    format_percentage,
    format_plain_percent,
    format_rate,
    format_status,
    format_transaction_type,
    hex_to_rgb,
    parse_date,
    payment_method_label,
)


class TestNumbers:
    """Tests for currency, number and percentage formatting."""

    @pytest.mark.parametrize(
        "amount,expected",
        [
            (Decimal("1234.5"), "GHS 1,234.50"),
            (0, "GHS 0.00"),
            (-20, "-GHS 20.00"),
            (0.005, "GHS 0.01"),
            (1000000, "GHS 1,000,000.00"),
        ],
    )
    def test_format_currency(self, amount, expected):
        assert format_currency(amount) == expected

    def test_format_currency_code(self):
        assert format_currency(5, "USD") == "USD 5.00"

    def test_format_currency_rejects_garbage(self):
        with pytest.raises(ValueError):
            format_currency("abc")

    def test_format_currency_out_of_range(self):
        """Amounts beyond decimal precision raise ValueError, not InvalidOperation."""
        with pytest.raises(ValueError, match="out of range"):
            format_currency(Decimal("1e30"))

    @pytest.mark.parametrize(
        "value,expected",
        [(1234, "1,234"), (12.5, "12.5"), (Decimal("1000.00"), "1,000"), (0, "0")],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_format_percentage(self):
        assert format_percentage(150, 500) == "30.0%"
        assert format_percentage(1, 3) == "33.3%"

    def test_format_percentage_zero_whole(self):
        """A zero denominator never produces NaN or Infinity."""
        assert format_percentage(5, 0) == "N/A"
        assert format_percentage(0, Decimal("0.00")) == "N/A"

    def test_format_plain_percent(self):
        assert format_plain_percent(4.5) == "4.5%"
        assert format_plain_percent(-2.25) == "-2.3%"

    def test_format_rate(self):
        assert format_rate(Decimal("0.0425")) == "4.25%"
        assert format_rate(0.05) == "5.00%"


class TestDates:
    """Tests for date parsing and formatting."""

    def test_parse_iso_datetime(self):
        assert parse_date("2026-07-15T10:00:00Z") == date(2026, 7, 15)

    def test_parse_passes_dates_through(self):
        assert parse_date(date(2026, 1, 2)) == date(2026, 1, 2)
        assert parse_date(datetime(2026, 1, 2, 8, 30)) == date(2026, 1, 2)

    @pytest.mark.parametrize("value", ["", "yesterday", 20260101])
    def test_parse_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            parse_date(value)

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2026-10-18", "October 18th, 2026"),
            ("2026-10-01", "October 1st, 2026"),
            ("2026-10-02", "October 2nd, 2026"),
            ("2026-10-03", "October 3rd, 2026"),
            ("2026-10-11", "October 11th, 2026"),
            ("2026-10-12", "October 12th, 2026"),
            ("2026-10-13", "October 13th, 2026"),
            ("2026-10-22", "October 22nd, 2026"),
            ("2026-10-31", "October 31st, 2026"),
        ],
    )
    def test_long_format(self, value, expected):
        assert format_date(value) == expected

    def test_other_patterns(self):
        day = date(2026, 10, 18)
        assert format_date(day, "short") == "Oct 18, 2026"
        assert format_date(day, "month_year") == "October 2026"
        assert format_date(day, "iso") == "2026-10-18"
        assert format_date(day, "dmy") == "18/10/2026"

    def test_unknown_pattern(self):
        with pytest.raises(ValueError, match="Unknown date pattern"):
            format_date(date(2026, 1, 1), "julian")


class TestLabels:
    """Tests for labels and unit helpers."""

    @pytest.mark.parametrize(
        "transaction_type,method,expected",
        [
            ("interest", None, "Interest Payment"),
            ("controller", None, "Controller Transfer"),
            ("momo", "momo", "Mobile Money"),
            ("deposit", None, "Bank Transfer"),
            ("momo", "deposit", "Bank Transfer"),
            ("momo", None, "Other"),
        ],
    )
    def test_payment_method_label(self, transaction_type, method, expected):
        assert payment_method_label(transaction_type, method) == expected

    def test_transaction_type_labels(self):
        assert format_transaction_type("momo") == "Mobile Money"
        assert format_transaction_type("controller") == "Controller"
        assert format_transaction_type("bonus") == "BONUS"

    def test_format_status(self):
        assert format_status("pending") == "Pending"
        assert format_status("") == ""

    def test_hex_to_rgb(self):
        assert hex_to_rgb("#2563eb") == (37, 99, 235)
        with pytest.raises(ValueError):
            hex_to_rgb("#fff")

    def test_unit_conversion(self):
        assert convert_to_mm(96) == pytest.approx(25.4)
        assert convert_to_px(25.4) == pytest.approx(96)
