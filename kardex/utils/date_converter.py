# kardex/utils/date_converter.py

from datetime import date, datetime, time, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

import jdatetime

from kardex import config
from kardex.utils import jalali

Instantish = Union[datetime, date, int, float]


def display_zone() -> ZoneInfo:
    return ZoneInfo(config.DISPLAY_TIMEZONE)


def to_instant(value: Instantish) -> datetime:
    """
    یک مقدار زمانی را به لحظه مطلق (datetime آگاه از منطقه زمانی، UTC) تبدیل می‌کند.

    - int/float are epoch milliseconds
    - naive datetimes and plain dates are read as wall-clock time in the display zone
    """
    if isinstance(value, bool):
        raise TypeError("A boolean is not a point in time")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=display_zone())
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=display_zone()).astimezone(timezone.utc)
    raise TypeError(f"Cannot interpret {value!r} as a point in time")


def to_epoch_ms(value: Instantish) -> int:
    return int(to_instant(value).timestamp() * 1000)


def to_local_date(value: Instantish) -> date:
    """Calendar date of an instant as seen in the display zone."""
    return to_instant(value).astimezone(display_zone()).date()


def end_of_day(value: date) -> datetime:
    """Last microsecond of a display-zone calendar day, as a UTC instant."""
    return datetime.combine(value, time.max, tzinfo=display_zone()).astimezone(timezone.utc)


def to_shamsi_str(value: Optional[Instantish]) -> str:
    """یک لحظه زمانی را به رشته تاریخ شمسی با فرمت YYYY/MM/DD (ارقام فارسی) تبدیل می‌کند."""
    if value is None:
        return "-"
    if isinstance(value, (jdatetime.date, jdatetime.datetime)):
        return jalali.format(value)
    return jalali.format(to_local_date(value))


def shamsi_to_instant(shamsi_date_str: str) -> Optional[datetime]:
    """Local midnight of a Jalaali "YYYY/MM/DD" string as a UTC instant, None if invalid."""
    gregorian = jalali.parse(shamsi_date_str)
    if gregorian is None:
        return None
    return to_instant(gregorian)


def shamsi_to_end_of_day(shamsi_date_str: str) -> Optional[datetime]:
    gregorian = jalali.parse(shamsi_date_str)
    if gregorian is None:
        return None
    return end_of_day(gregorian)


def to_upper_bound(value: Instantish) -> datetime:
    """Inclusive upper bound of a date filter: a plain date covers its whole local day."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return end_of_day(value)
    return to_instant(value)
