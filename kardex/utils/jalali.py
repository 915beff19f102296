# kardex/utils/jalali.py

"""
Jalaali (Persian solar hijri) calendar arithmetic.

Conversion uses the standard intercalation algorithm based on the table of
"break" years of the 33-year cycles, which is valid for Jalaali years
-61 .. 3177. Gregorian dates are plain ``datetime.date`` objects and
day numbers are ``date.toordinal()`` values.

Functions that read user text (``parse``, ``is_valid``) never raise on
malformed input, they return ``None`` / ``False``.
"""

from datetime import date, datetime, timedelta
from typing import List, NamedTuple, Optional, Union
from zoneinfo import ZoneInfo

import jdatetime

from kardex import config

# Jalaali years starting the 33-year intercalation cycles.
BREAKS = (
    -61, 9, 38, 199, 426, 686, 756, 818, 1111, 1181, 1210,
    1635, 2060, 2097, 2192, 2262, 2324, 2394, 2456, 3178,
)

MIN_YEAR = BREAKS[0]
MAX_YEAR = BREAKS[-1] - 1

MONTH_NAMES = (
    "فروردین", "اردیبهشت", "خرداد", "تیر", "مرداد", "شهریور",
    "مهر", "آبان", "آذر", "دی", "بهمن", "اسفند",
)

# Indexed by date.weekday() (Monday == 0).
WEEKDAY_NAMES = (
    "دوشنبه", "سه‌شنبه", "چهارشنبه", "پنج‌شنبه", "جمعه", "شنبه", "یکشنبه",
)

PERSIAN_DIGITS = "۰۱۲۳۴۵۶۷۸۹"
ARABIC_INDIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
ENGLISH_DIGITS = "0123456789"

_TO_ENGLISH = str.maketrans(PERSIAN_DIGITS + ARABIC_INDIC_DIGITS, ENGLISH_DIGITS * 2)
_TO_PERSIAN = str.maketrans(ENGLISH_DIGITS, PERSIAN_DIGITS)


class JalaaliDate(NamedTuple):
    year: int
    month: int
    day: int


class FiscalYearBoundaries(NamedTuple):
    start: date
    end: date


class _YearInfo(NamedTuple):
    leap: int          # years since the last leap year, 0 means leap
    gregorian_year: int
    march: int         # day of March on which Farvardin 1 falls


def _div(a: int, b: int) -> int:
    # truncating division, the algorithm is defined on it rather than floor division
    return int(a / b)


def _mod(a: int, b: int) -> int:
    return a - _div(a, b) * b


def _year_info(jy: int) -> _YearInfo:
    if jy < MIN_YEAR or jy > MAX_YEAR:
        raise ValueError(f"Jalaali year {jy} is outside the supported range {MIN_YEAR}..{MAX_YEAR}")

    gy = jy + 621
    leap_j = -14
    jp = BREAKS[0]
    jump = 0
    for jm in BREAKS[1:]:
        jump = jm - jp
        if jy < jm:
            break
        leap_j += _div(jump, 33) * 8 + _div(_mod(jump, 33), 4)
        jp = jm

    n = jy - jp
    leap_j += _div(n, 33) * 8 + _div(_mod(n, 33) + 3, 4)
    if _mod(jump, 33) == 4 and jump - n == 4:
        leap_j += 1

    leap_g = _div(gy, 4) - _div((_div(gy, 100) + 1) * 3, 4) - 150
    march = 20 + leap_j - leap_g

    if jump - n < 6:
        n = n - jump + _div(jump + 4, 33) * 33
    leap = _mod(_mod(n + 1, 33) - 1, 4)
    if leap == -1:
        leap = 4
    return _YearInfo(leap=leap, gregorian_year=gy, march=march)


def _farvardin_first(jy: int) -> int:
    info = _year_info(jy)
    return date(info.gregorian_year, 3, info.march).toordinal()


def is_leap_year(jy: int) -> bool:
    """True when Esfand of ``jy`` has 30 days."""
    return _year_info(jy).leap == 0


def month_length(jy: int, jm: int) -> int:
    if jm < 1 or jm > 12:
        raise ValueError(f"Invalid Jalaali month: {jm}")
    if jm <= 6:
        return 31
    if jm <= 11:
        return 30
    return 30 if is_leap_year(jy) else 29


def is_valid_date(jy: int, jm: int, jd: int) -> bool:
    if jy < MIN_YEAR or jy > MAX_YEAR or jm < 1 or jm > 12 or jd < 1:
        return False
    return jd <= month_length(jy, jm)


def to_gregorian(jy: int, jm: int, jd: int) -> date:
    """Converts a Jalaali date to a Gregorian ``date``."""
    ordinal = _farvardin_first(jy) + (jm - 1) * 31 - _div(jm, 7) * (jm - 7) + jd - 1
    return date.fromordinal(ordinal)


def to_jalaali(value: Union[date, datetime]) -> JalaaliDate:
    """Converts a Gregorian date (or the calendar date of a datetime) to Jalaali."""
    if isinstance(value, datetime):
        value = value.date()
    ordinal = value.toordinal()
    jy = value.year - 621
    info = _year_info(jy)
    k = ordinal - date(info.gregorian_year, 3, info.march).toordinal()

    if k >= 0:
        if k <= 185:
            return JalaaliDate(jy, 1 + _div(k, 31), _mod(k, 31) + 1)
        k -= 186
    else:
        # still in the previous Jalaali year (Dey .. Esfand)
        jy -= 1
        k += 179
        if info.leap == 1:
            k += 1
    return JalaaliDate(jy, 7 + _div(k, 30), _mod(k, 30) + 1)


def persian_to_english(text: str) -> str:
    """Translates Persian and Arabic-Indic digits to ASCII digits."""
    return text.translate(_TO_ENGLISH)


def english_to_persian(value: Union[str, int]) -> str:
    return str(value).translate(_TO_PERSIAN)


def parse_parts(text: str) -> Optional[JalaaliDate]:
    """
    Parses "YYYY/MM/DD" (any digit glyphs) into a validated ``JalaaliDate``.
    Returns None for anything that is not a real calendar day.
    """
    if not isinstance(text, str):
        return None
    parts = persian_to_english(text.strip()).split("/")
    if len(parts) != 3:
        return None
    # ASCII digits only: no sign, underscore or inner spaces
    if not all(p.isascii() and p.isdigit() for p in parts):
        return None
    jy, jm, jd = (int(p) for p in parts)
    if not is_valid_date(jy, jm, jd):
        return None
    return JalaaliDate(jy, jm, jd)


def parse(text: str) -> Optional[date]:
    """Parses a Jalaali "YYYY/MM/DD" string to a Gregorian date, or None when invalid."""
    parts = parse_parts(text)
    if parts is None:
        return None
    return to_gregorian(*parts)


def is_valid(text: str) -> bool:
    return parse_parts(text) is not None


def _as_jalaali(value: Union[date, datetime, "jdatetime.date"]) -> JalaaliDate:
    if isinstance(value, (jdatetime.date, jdatetime.datetime)):
        return JalaaliDate(value.year, value.month, value.day)
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(ZoneInfo(config.DISPLAY_TIMEZONE))
    return to_jalaali(value)


def format(value: Union[date, datetime, "jdatetime.date"]) -> str:
    """Renders "YYYY/MM/DD" with Persian digits."""
    jy, jm, jd = _as_jalaali(value)
    return english_to_persian(f"{jy:04d}/{jm:02d}/{jd:02d}")


def format_long(value: Union[date, datetime, "jdatetime.date"]) -> str:
    """e.g. "۱ فروردین ۱۴۰۳"."""
    jy, jm, jd = _as_jalaali(value)
    return f"{english_to_persian(jd)} {MONTH_NAMES[jm - 1]} {english_to_persian(jy)}"


def weekday_name(value: Union[date, datetime]) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return WEEKDAY_NAMES[value.weekday()]


def first_day_of_month(jy: int, jm: int) -> date:
    return to_gregorian(jy, jm, 1)


def last_day_of_month(jy: int, jm: int) -> date:
    return to_gregorian(jy, jm, month_length(jy, jm))


def months_in_year(jy: int) -> List[dict]:
    return [
        {
            "month": jm,
            "name": MONTH_NAMES[jm - 1],
            "first_day": first_day_of_month(jy, jm),
            "last_day": last_day_of_month(jy, jm),
        }
        for jm in range(1, 13)
    ]


def fiscal_year_boundaries(jy: int) -> FiscalYearBoundaries:
    """
    Gregorian first and last day of the Jalaali fiscal year ``jy``:
    1 Farvardin .. 29 or 30 Esfand depending on the leap rule.
    """
    return FiscalYearBoundaries(
        start=to_gregorian(jy, 1, 1),
        end=to_gregorian(jy, 12, month_length(jy, 12)),
    )


def jalaali_year_of(value: Union[date, datetime]) -> int:
    return to_jalaali(value).year


def is_in_fiscal_year(value: Union[date, datetime], jy: int) -> bool:
    if isinstance(value, datetime):
        value = value.date()
    bounds = fiscal_year_boundaries(jy)
    return bounds.start <= value <= bounds.end


def days_in_year(jy: int) -> int:
    return 366 if is_leap_year(jy) else 365


def add_days(jdate: JalaaliDate, days: int) -> JalaaliDate:
    return to_jalaali(to_gregorian(*jdate) + timedelta(days=days))


def to_jdatetime(jy: int, jm: int, jd: int) -> "jdatetime.date":
    """
    Builds a ``jdatetime.date`` with the same Jalaali parts.

    jdatetime has its own leap rule, which agrees with the breaks table up to
    1633; after that an Esfand 30 may exist here and not there, and such a day
    raises ValueError rather than shifting to a neighbouring day.
    """
    if not is_valid_date(jy, jm, jd):
        raise ValueError(f"Invalid Jalaali date: {jy}/{jm}/{jd}")
    try:
        return jdatetime.date(jy, jm, jd)
    except ValueError as e:
        raise ValueError(f"jdatetime cannot represent {jy}/{jm}/{jd}: {e}") from e


def from_jdatetime(value: "jdatetime.date") -> date:
    """Gregorian date of the Jalaali parts of a jdatetime, by the breaks table."""
    return to_gregorian(value.year, value.month, value.day)
