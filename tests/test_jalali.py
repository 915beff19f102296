"""
Jalaali calendar tests.

Fixed reference dates around the 1402/1403 leap boundary, parse/format edge
cases, fiscal-year boundaries and a day-by-day walk across three centuries.
"""

from datetime import date, datetime, timedelta, timezone

import jdatetime
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from kardex.utils import jalali
from kardex.utils.jalali import JalaaliDate


class TestLeapYears:
    @pytest.mark.parametrize("year", [1370, 1375, 1379, 1383, 1387, 1391, 1395, 1399, 1403, 1408])
    def test_leap_years(self, year):
        assert jalali.is_leap_year(year) is True

    @pytest.mark.parametrize("year", [1398, 1400, 1401, 1402, 1404, 1405, 1406, 1407])
    def test_common_years(self, year):
        assert jalali.is_leap_year(year) is False

    def test_esfand_length_follows_leap_rule(self):
        assert jalali.month_length(1403, 12) == 30
        assert jalali.month_length(1402, 12) == 29

    @pytest.mark.parametrize("month,length", [(1, 31), (6, 31), (7, 30), (11, 30)])
    def test_fixed_month_lengths(self, month, length):
        assert jalali.month_length(1402, month) == length
        assert jalali.month_length(1403, month) == length

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_out_of_range(self, month):
        with pytest.raises(ValueError):
            jalali.month_length(1403, month)

    def test_days_in_year(self):
        assert jalali.days_in_year(1403) == 366
        assert jalali.days_in_year(1402) == 365


class TestConversion:
    @pytest.mark.parametrize("gregorian,expected", [
        (date(2024, 3, 20), JalaaliDate(1403, 1, 1)),
        (date(2025, 3, 20), JalaaliDate(1403, 12, 30)),
        (date(2025, 3, 21), JalaaliDate(1404, 1, 1)),
        (date(2024, 3, 19), JalaaliDate(1402, 12, 29)),
        (date(2023, 3, 21), JalaaliDate(1402, 1, 1)),
        (date(2021, 3, 21), JalaaliDate(1400, 1, 1)),
        (date(2021, 3, 20), JalaaliDate(1399, 12, 30)),
        (date(1979, 2, 11), JalaaliDate(1357, 11, 22)),
    ])
    def test_known_dates(self, gregorian, expected):
        assert jalali.to_jalaali(gregorian) == expected
        assert jalali.to_gregorian(*expected) == gregorian

    def test_datetime_uses_its_calendar_date(self):
        assert jalali.to_jalaali(datetime(2024, 3, 20, 23, 59)) == JalaaliDate(1403, 1, 1)

    def test_round_trip_across_three_centuries(self):
        day = jalali.to_gregorian(1300, 1, 1)
        last = jalali.to_gregorian(1600, 1, 1)
        previous = jalali.to_jalaali(day - timedelta(days=1))
        while day <= last:
            current = jalali.to_jalaali(day)
            assert jalali.to_gregorian(*current) == day
            # each day is the successor of the one before it
            if current.day == 1:
                assert previous.day == jalali.month_length(previous.year, previous.month)
                if current.month == 1:
                    assert (previous.year, previous.month) == (current.year - 1, 12)
                else:
                    assert (previous.year, previous.month) == (current.year, current.month - 1)
            else:
                assert previous == JalaaliDate(current.year, current.month, current.day - 1)
            previous = current
            day += timedelta(days=1)

    @given(st.dates(min_value=date(1800, 1, 1), max_value=date(2200, 12, 31)))
    def test_round_trip_property(self, value):
        assert jalali.to_gregorian(*jalali.to_jalaali(value)) == value

    @given(st.integers(min_value=1200, max_value=1600), st.integers(min_value=1, max_value=12), st.data())
    def test_valid_jalaali_dates_round_trip(self, year, month, data):
        day = data.draw(st.integers(min_value=1, max_value=jalali.month_length(year, month)))
        assert jalali.to_jalaali(jalali.to_gregorian(year, month, day)) == JalaaliDate(year, month, day)

    @given(st.integers(min_value=1200, max_value=1600))
    def test_year_length_matches_leap_rule(self, year):
        span = jalali.to_gregorian(year + 1, 1, 1) - jalali.to_gregorian(year, 1, 1)
        assert span.days == jalali.days_in_year(year)


class TestParse:
    @pytest.mark.parametrize("text,expected", [
        ("1403/12/30", date(2025, 3, 20)),
        ("1402/12/29", date(2024, 3, 19)),
        ("1403/01/01", date(2024, 3, 20)),
        ("1403/1/1", date(2024, 3, 20)),
        ("۱۴۰۳/۱۲/۳۰", date(2025, 3, 20)),
        ("١٤٠٢/١٢/٢٩", date(2024, 3, 19)),
        (" 1403/06/31 ", date(2024, 9, 21)),
    ])
    def test_valid_dates(self, text, expected):
        assert jalali.parse(text) == expected
        assert jalali.is_valid(text) is True

    @pytest.mark.parametrize("text", [
        "1403/12/31",
        "1402/12/30",
        "1403/07/31",
        "1403/13/01",
        "1403/00/10",
        "1403/05/00",
        "1403/05",
        "1403/05/10/1",
        "1403-05-10",
        "abcd/ef/gh",
        "",
        "   ",
        "1_403/01/01",
        "+1403/01/01",
        " 1403 / 1 / 1 ",
        "1403/-1/01",
        "1403/01/01.0",
        "1403/\u00b2/01",
    ])
    def test_invalid_dates(self, text):
        assert jalali.parse(text) is None
        assert jalali.is_valid(text) is False

    @pytest.mark.parametrize("value", [None, 14030101, b"1403/01/01"])
    def test_non_text_is_invalid(self, value):
        assert jalali.parse(value) is None

    @given(st.text(max_size=20))
    def test_parse_never_raises(self, text):
        result = jalali.parse(text)
        assert result is None or isinstance(result, date)


class TestFormat:
    def test_persian_digits_and_padding(self):
        assert jalali.format(date(2024, 3, 20)) == "۱۴۰۳/۰۱/۰۱"
        assert jalali.format(date(2025, 3, 20)) == "۱۴۰۳/۱۲/۳۰"

    def test_aware_datetime_is_shown_in_display_zone(self):
        # 21:00 UTC on 19 March is already 1 Farvardin in Tehran
        assert jalali.format(datetime(2024, 3, 19, 21, 0, tzinfo=timezone.utc)) == "۱۴۰۳/۰۱/۰۱"

    def test_format_then_parse(self):
        value = date(2024, 11, 5)
        assert jalali.parse(jalali.format(value)) == value

    def test_format_long(self):
        assert jalali.format_long(date(2024, 3, 20)) == "۱ فروردین ۱۴۰۳"
        assert jalali.format_long(date(2025, 3, 20)) == "۳۰ اسفند ۱۴۰۳"

    def test_weekday_name(self):
        assert jalali.weekday_name(date(2024, 3, 20)) == "چهارشنبه"
        assert jalali.weekday_name(date(2024, 3, 23)) == "شنبه"

    def test_digit_translation(self):
        assert jalali.persian_to_english("۱۴۰۳/۰۱/۰۱") == "1403/01/01"
        assert jalali.english_to_persian(1403) == "۱۴۰۳"


class TestFiscalYear:
    def test_leap_fiscal_year_ends_on_30_esfand(self):
        bounds = jalali.fiscal_year_boundaries(1403)
        assert bounds.start == date(2024, 3, 20)
        assert bounds.end == date(2025, 3, 20)
        assert jalali.to_jalaali(bounds.end) == JalaaliDate(1403, 12, 30)

    def test_common_fiscal_year_ends_on_29_esfand(self):
        bounds = jalali.fiscal_year_boundaries(1402)
        assert bounds.start == date(2023, 3, 21)
        assert bounds.end == date(2024, 3, 19)
        assert jalali.to_jalaali(bounds.end) == JalaaliDate(1402, 12, 29)

    @given(st.integers(min_value=1300, max_value=1500))
    def test_consecutive_fiscal_years_touch(self, year):
        assert jalali.fiscal_year_boundaries(year).end + timedelta(days=1) == \
            jalali.fiscal_year_boundaries(year + 1).start

    def test_is_in_fiscal_year(self):
        assert jalali.is_in_fiscal_year(date(2025, 3, 20), 1403)
        assert not jalali.is_in_fiscal_year(date(2025, 3, 21), 1403)
        assert jalali.is_in_fiscal_year(datetime(2024, 3, 20, 8, 0), 1403)
        assert jalali.jalaali_year_of(date(2024, 3, 19)) == 1402

    def test_months_in_year(self):
        months = jalali.months_in_year(1403)
        assert len(months) == 12
        assert months[0]["name"] == "فروردین"
        assert months[0]["first_day"] == date(2024, 3, 20)
        assert months[11]["last_day"] == date(2025, 3, 20)
        assert jalali.last_day_of_month(1402, 12) == date(2024, 3, 19)
        assert jalali.first_day_of_month(1403, 7) == date(2024, 9, 22)

    def test_add_days_crosses_year_end(self):
        assert jalali.add_days(JalaaliDate(1402, 12, 29), 1) == JalaaliDate(1403, 1, 1)
        assert jalali.add_days(JalaaliDate(1403, 12, 30), 1) == JalaaliDate(1404, 1, 1)


class TestJdatetimeInterop:
    @given(st.dates(min_value=date(1990, 1, 1), max_value=date(2023, 3, 1)))
    @settings(max_examples=300)
    def test_agrees_with_jdatetime(self, value):
        reference = jdatetime.date.fromgregorian(date=value)
        assert jalali.to_jalaali(value) == JalaaliDate(reference.year, reference.month, reference.day)

    def test_to_and_from_jdatetime(self):
        jdate = jalali.to_jdatetime(1402, 7, 15)
        assert (jdate.year, jdate.month, jdate.day) == (1402, 7, 15)
        assert jalali.from_jdatetime(jdate) == jalali.to_gregorian(1402, 7, 15)

    def test_last_day_of_a_leap_year(self):
        jdate = jalali.to_jdatetime(1403, 12, 30)
        assert (jdate.year, jdate.month, jdate.day) == (1403, 12, 30)
        assert jalali.from_jdatetime(jdate) == date(2025, 3, 20)

    @given(st.integers(min_value=1200, max_value=1633), st.integers(min_value=1, max_value=12), st.data())
    def test_round_trip_keeps_the_jalaali_day(self, year, month, data):
        day = data.draw(st.integers(min_value=1, max_value=jalali.month_length(year, month)))
        jdate = jalali.to_jdatetime(year, month, day)
        assert (jdate.year, jdate.month, jdate.day) == (year, month, day)
        assert jalali.from_jdatetime(jdate) == jalali.to_gregorian(year, month, day)

    @pytest.mark.parametrize("year", [y for y in range(1634, 1701) if jalali.is_leap_year(y)])
    def test_esfand_30_after_1633_is_never_shifted(self, year):
        try:
            jdate = jalali.to_jdatetime(year, 12, 30)
        except ValueError:
            return
        assert (jdate.year, jdate.month, jdate.day) == (year, 12, 30)

    def test_to_jdatetime_rejects_invalid_dates(self):
        with pytest.raises(ValueError):
            jalali.to_jdatetime(1402, 12, 30)

    def test_format_accepts_jdatetime(self):
        assert jalali.format(jdatetime.date(1402, 7, 5)) == "۱۴۰۲/۰۷/۰۵"
