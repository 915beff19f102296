from decimal import Decimal

import pytest

from kardex.utils.persian import format_number, format_currency, format_amount_or_dash, parse_number


class TestFormatNumber:
    @pytest.mark.parametrize("value,expected", [
        (0, "۰"),
        (999, "۹۹۹"),
        (1234567, "۱٬۲۳۴٬۵۶۷"),
        (Decimal("2250"), "۲٬۲۵۰"),
        (-1500, "-۱٬۵۰۰"),
    ])
    def test_integers(self, value, expected):
        assert format_number(value) == expected

    def test_decimals_use_persian_separator(self):
        assert format_number(Decimal("1234.5"), 2) == "۱٬۲۳۴٫۵۰"

    def test_rounds_half_up(self):
        assert format_number(Decimal("2.5")) == "۳"

    def test_missing_value(self):
        assert format_number(None) == "-"

    def test_currency(self):
        assert format_currency(1500) == "۱٬۵۰۰ ریال"
        assert format_currency(None) == "-"

    def test_dash_for_zero(self):
        assert format_amount_or_dash(Decimal("0.0")) == "-"
        assert format_amount_or_dash(None) == "-"
        assert format_amount_or_dash(750) == "۷۵۰"


class TestParseNumber:
    @pytest.mark.parametrize("text,expected", [
        ("۱٬۲۳۴", Decimal("1234")),
        ("1,234.50", Decimal("1234.50")),
        ("۱۲٫۵", Decimal("12.5")),
        (" 42 ", Decimal("42")),
    ])
    def test_readable_numbers(self, text, expected):
        assert parse_number(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "abc", None])
    def test_unreadable_numbers(self, text):
        assert parse_number(text) is None
