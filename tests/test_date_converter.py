from datetime import date, datetime, timezone

import jdatetime
import pytest

from kardex.utils import date_converter


TEHRAN_MIDNIGHT_1403 = datetime(2024, 3, 19, 20, 30, tzinfo=timezone.utc)


class TestToInstant:
    def test_plain_date_is_local_midnight(self):
        assert date_converter.to_instant(date(2024, 3, 20)) == TEHRAN_MIDNIGHT_1403

    def test_naive_datetime_is_local_wall_clock(self):
        assert date_converter.to_instant(datetime(2024, 3, 20, 0, 0)) == TEHRAN_MIDNIGHT_1403

    def test_aware_datetime_is_converted_to_utc(self):
        value = date_converter.to_instant(datetime(2024, 3, 20, 12, 0, tzinfo=timezone.utc))
        assert value.tzinfo == timezone.utc
        assert value.hour == 12

    def test_epoch_milliseconds(self):
        assert date_converter.to_instant(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert date_converter.to_epoch_ms(datetime(2024, 1, 1, tzinfo=timezone.utc)) == 1704067200000

    @pytest.mark.parametrize("value", [True, "2024-03-20", None])
    def test_rejects_non_instants(self, value):
        with pytest.raises(TypeError):
            date_converter.to_instant(value)


class TestLocalDates:
    def test_local_date_of_instant(self):
        assert date_converter.to_local_date(datetime(2024, 3, 19, 21, 0, tzinfo=timezone.utc)) == date(2024, 3, 20)
        assert date_converter.to_local_date(datetime(2024, 3, 19, 20, 0, tzinfo=timezone.utc)) == date(2024, 3, 19)

    def test_end_of_day(self):
        assert date_converter.end_of_day(date(2024, 3, 20)) == \
            datetime(2024, 3, 20, 20, 29, 59, 999999, tzinfo=timezone.utc)

    def test_upper_bound_of_date_covers_the_day(self):
        assert date_converter.to_upper_bound(date(2024, 3, 20)) == date_converter.end_of_day(date(2024, 3, 20))
        instant = datetime(2024, 3, 20, 5, 0, tzinfo=timezone.utc)
        assert date_converter.to_upper_bound(instant) == instant


class TestShamsi:
    def test_to_shamsi_str(self):
        assert date_converter.to_shamsi_str(datetime(2024, 3, 19, 21, 0, tzinfo=timezone.utc)) == "۱۴۰۳/۰۱/۰۱"
        assert date_converter.to_shamsi_str(date(2025, 3, 20)) == "۱۴۰۳/۱۲/۳۰"
        assert date_converter.to_shamsi_str(jdatetime.date(1402, 12, 29)) == "۱۴۰۲/۱۲/۲۹"

    def test_missing_value_is_dash(self):
        assert date_converter.to_shamsi_str(None) == "-"

    def test_shamsi_to_instant(self):
        assert date_converter.shamsi_to_instant("1403/01/01") == TEHRAN_MIDNIGHT_1403
        assert date_converter.shamsi_to_instant("۱۴۰۳/۰۱/۰۱") == TEHRAN_MIDNIGHT_1403

    def test_shamsi_to_instant_invalid(self):
        assert date_converter.shamsi_to_instant("1402/12/30") is None
        assert date_converter.shamsi_to_end_of_day("1402/12/30") is None

    def test_shamsi_to_end_of_day(self):
        assert date_converter.shamsi_to_end_of_day("1403/12/30") == date_converter.end_of_day(date(2025, 3, 20))
