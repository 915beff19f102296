# kardex/utils/persian.py

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from kardex import config
from kardex.utils.jalali import english_to_persian, persian_to_english

PERSIAN_THOUSANDS_SEPARATOR = "٬"
PERSIAN_DECIMAL_SEPARATOR = "٫"

Number = Union[int, float, Decimal]


def format_number(value: Optional[Number], decimals: int = 0) -> str:
    """عدد را با ارقام فارسی و جداکننده هزارگان برمی‌گرداند."""
    if value is None:
        return "-"
    amount = Decimal(str(value))
    quantum = Decimal(1).scaleb(-decimals) if decimals > 0 else Decimal(1)
    amount = amount.quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{amount:,.{decimals}f}"
    text = text.replace(",", PERSIAN_THOUSANDS_SEPARATOR).replace(".", PERSIAN_DECIMAL_SEPARATOR)
    return english_to_persian(text)


def format_currency(value: Optional[Number], currency: Optional[str] = None) -> str:
    if value is None:
        return "-"
    return f"{format_number(value)} {currency or config.CURRENCY_LABEL}"


def format_amount_or_dash(value: Optional[Number], decimals: int = 0) -> str:
    """Zero and missing amounts render as "-" in report tables."""
    if value is None or Decimal(str(value)) == 0:
        return "-"
    return format_number(value, decimals)


def parse_number(text: str) -> Optional[Decimal]:
    """Reads a number typed with Persian or ASCII digits and separators; None when unreadable."""
    if not isinstance(text, str) or not text.strip():
        return None
    normalized = persian_to_english(text.strip())
    normalized = normalized.replace(PERSIAN_THOUSANDS_SEPARATOR, "").replace(",", "")
    normalized = normalized.replace(PERSIAN_DECIMAL_SEPARATOR, ".")
    try:
        return Decimal(normalized)
    except ArithmeticError:
        return None
