"""Tests for amount, date and description normalization."""

import re
from datetime import date, datetime
from decimal import Decimal

import pytest

from ledgerlens_core.normalizer import (
    PLACEHOLDER_DESCRIPTION,
    clean_description,
    format_date,
    is_explicit_credit,
    is_negative_amount,
    parse_amount,
)

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("₦1,234.56", Decimal("1234.56")),
            ("$ 2,000", Decimal("2000")),
            ("(500.00)", Decimal("500.00")),
            ("-75.25", Decimal("75.25")),
            ("1,000.00CR", Decimal("1000.00")),
            (1500, Decimal("1500")),
            (-12.5, Decimal("12.5")),
        ],
    )
    def test_parses_formatted_values(self, raw, expected):
        """Symbols, separators and signs should be stripped to a magnitude."""
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "N/A", "abc", True, float("nan")])
    def test_unparsable_returns_zero(self, raw):
        """Non-numeric input should degrade to zero, never raise."""
        assert parse_amount(raw) == Decimal("0")

    @pytest.mark.parametrize("raw", ["₦1,234.56", "(500.00)", "-75.25", "  12 ", 99.5])
    def test_idempotent(self, raw):
        """Parsing an already parsed amount should not change it."""
        once = parse_amount(raw)
        assert parse_amount(once) == once
        assert parse_amount(str(once)) == once

    def test_never_negative(self):
        """Results should always be non-negative."""
        for raw in ("-1", "(2)", "-0.5", -3):
            assert parse_amount(raw) >= 0


class TestAmountSigns:
    """Tests for is_negative_amount and is_explicit_credit."""

    @pytest.mark.parametrize("raw", ["-5,000.00", "(120.00)", "250.00DR", "₦ -10", -4])
    def test_negative_forms(self, raw):
        assert is_negative_amount(raw) is True

    @pytest.mark.parametrize("raw", ["5,000.00", "+20", "300CR", None, 0, ""])
    def test_non_negative_forms(self, raw):
        assert is_negative_amount(raw) is False

    def test_explicit_credit(self):
        """A leading plus or trailing CR marks money in."""
        assert is_explicit_credit("+1,000.00") is True
        assert is_explicit_credit("1,000.00 CR") is True
        assert is_explicit_credit("1,000.00") is False
        assert is_explicit_credit(1000) is False


class TestFormatDate:
    """Tests for format_date."""

    def test_iso_string(self):
        assert format_date("2024-01-05") == "2024-01-05"

    def test_date_and_datetime_objects(self):
        """Date objects should be formatted directly."""
        assert format_date(date(2024, 2, 29)) == "2024-02-29"
        assert format_date(datetime(2024, 2, 29, 13, 45)) == "2024-02-29"

    def test_spreadsheet_serial(self):
        """Serial 45292 is 2024-01-01 in spreadsheet day numbering."""
        assert format_date(45292) == "2024-01-01"
        assert format_date("45292") == "2024-01-01"
        assert format_date(25569) == "1970-01-01"

    def test_day_first_when_month_out_of_range(self):
        """Dates only valid day-first should be read day-first."""
        assert format_date("25/12/2023") == "2023-12-25"

    def test_month_name(self):
        assert format_date("05 Jan 2024") == "2024-01-05"
        assert format_date("5-Feb-2024") == "2024-02-05"

    @pytest.mark.parametrize("raw", [None, "", "   ", "not a date", "99/99/99", True])
    def test_unparsable_falls_back_to_today(self, raw):
        """Unparsable dates become the processing date."""
        assert format_date(raw, today=date(2024, 3, 1)) == "2024-03-01"

    @pytest.mark.parametrize("raw", ["10:15", "Jan", "-5", "2024-01", "March 2024"])
    def test_partial_dates_fall_back_to_today(self, raw):
        """Text missing a day, month or year should not borrow them from the clock."""
        assert format_date(raw, today=date(2024, 3, 1)) == "2024-03-01"

    def test_full_dates_still_parse_generically(self):
        assert format_date("January 5, 2024") == "2024-01-05"
        assert format_date("2024-01-05T23:10:00") == "2024-01-05"

    def test_unparsable_defaults_to_current_date(self):
        assert format_date("garbage") == date.today().isoformat()

    @pytest.mark.parametrize(
        "raw", [None, "", 45292, "45292", "2024-01-05", "garbage", "05 Jan 2024", 10**9]
    )
    def test_always_iso_format(self, raw):
        """Every input should produce a YYYY-MM-DD string."""
        assert ISO_DATE.match(format_date(raw))


class TestCleanDescription:
    """Tests for clean_description."""

    def test_strips_noise_and_collapses_whitespace(self):
        assert clean_description("  POS*PURCHASE   @ SHOPRITE #123 ") == "POS PURCHASE SHOPRITE 123"

    def test_keeps_hyphens_and_periods(self):
        assert clean_description("TRF-ADA O. OBI") == "TRF-ADA O. OBI"

    def test_truncates(self):
        result = clean_description("A" * 150)
        assert len(result) == 100
        assert len(clean_description("B" * 40, max_length=10)) == 10

    @pytest.mark.parametrize("raw", [None, "", "***", "   "])
    def test_placeholder_for_empty(self, raw):
        assert clean_description(raw) == PLACEHOLDER_DESCRIPTION
