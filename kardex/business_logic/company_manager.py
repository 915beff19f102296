# kardex/business_logic/company_manager.py
from typing import Optional, Any, Tuple, Union, TYPE_CHECKING
from datetime import date, datetime, timezone
import sqlite3
import logging

from kardex import config
from kardex.exceptions import ValidationError, StorageError
from kardex.utils import jalali
from kardex.utils.date_converter import to_instant, to_upper_bound, to_local_date, shamsi_to_instant, shamsi_to_end_of_day
from kardex.business_logic.entities.company_entity import CompanyEntity

if TYPE_CHECKING:
    from kardex.data_access.companies_repository import CompaniesRepository

logger = logging.getLogger(__name__)

_DETAIL_FIELDS = ("national_code", "economic_code", "address", "phone", "email")

DateInput = Union[datetime, date, str]


def _boundary(value: DateInput, field_name: str, end: bool) -> datetime:
    """Start or end instant of a fiscal-year boundary given as a date, an instant or Jalaali text."""
    if isinstance(value, str):
        instant = shamsi_to_end_of_day(value) if end else shamsi_to_instant(value)
        if instant is None:
            raise ValidationError(f"تاریخ شمسی نامعتبر است: {value}", field=field_name)
        return instant
    try:
        return to_upper_bound(value) if end else to_instant(value)
    except TypeError:
        raise ValidationError(f"تاریخ نامعتبر است: {value!r}", field=field_name) from None


class CompanyManager:
    """اطلاعات شرکت و سال مالی. در هر لحظه فقط یک رکورد فعال وجود دارد."""

    def __init__(self, companies_repository: 'CompaniesRepository'):
        if companies_repository is None:
            raise ValueError("companies_repository cannot be None")
        self.companies_repository = companies_repository

    def create_or_update_company(self,
                                 name: str,
                                 fiscal_year: Optional[int] = None,
                                 fiscal_year_start: Optional[DateInput] = None,
                                 fiscal_year_end: Optional[DateInput] = None,
                                 **details: Any) -> CompanyEntity:
        """
        Saves the company settings as a new active record; the previous active
        record is deactivated in the same transaction, never edited in place.

        ``fiscal_year`` is a Jalaali year whose 1 Farvardin .. last day of
        Esfand becomes the fiscal period. Without it both explicit boundaries
        are required; with neither, the current Jalaali year is used.
        """
        if not name or not name.strip():
            raise ValidationError("نام شرکت نمی‌تواند خالی باشد.", field="name")
        unknown = set(details) - set(_DETAIL_FIELDS)
        if unknown:
            raise ValidationError(f"فیلدهای نامعتبر برای شرکت: {', '.join(sorted(unknown))}")

        if fiscal_year is not None:
            if not jalali.MIN_YEAR <= fiscal_year <= jalali.MAX_YEAR:
                raise ValidationError(f"سال مالی نامعتبر است: {fiscal_year}", field="fiscal_year")
            bounds = jalali.fiscal_year_boundaries(fiscal_year)
            start, end = to_instant(bounds.start), to_upper_bound(bounds.end)
        elif fiscal_year_start is not None or fiscal_year_end is not None:
            if fiscal_year_start is None or fiscal_year_end is None:
                raise ValidationError("شروع و پایان سال مالی هر دو لازم است.", field="fiscal_year_start")
            start = _boundary(fiscal_year_start, "fiscal_year_start", end=False)
            end = _boundary(fiscal_year_end, "fiscal_year_end", end=True)
        else:
            current_year = jalali.jalaali_year_of(to_local_date(datetime.now(timezone.utc)))
            bounds = jalali.fiscal_year_boundaries(current_year)
            start, end = to_instant(bounds.start), to_upper_bound(bounds.end)

        if start >= end:
            raise ValidationError("تاریخ شروع سال مالی باید قبل از تاریخ پایان باشد.", field="fiscal_year_end")

        company = CompanyEntity(
            name=name.strip(),
            fiscal_year_start=start,
            fiscal_year_end=end,
            is_active=True,
            created_at=datetime.now(timezone.utc),
            **details,
        )
        try:
            with self.companies_repository.db_manager.transaction():
                deactivated = self.companies_repository.deactivate_all()
                self.companies_repository.add(company)
        except sqlite3.Error as e:
            logger.error(f"Error saving company '{name}': {e}", exc_info=True)
            raise StorageError(f"Could not save company '{name}'") from e

        logger.info(f"Company '{company.name}' (ID: {company.id}) is now active; {deactivated} previous record(s) deactivated.")
        return company

    def get_active_company(self) -> Optional[CompanyEntity]:
        return self.companies_repository.get_active()

    def get_company_name(self) -> str:
        company = self.get_active_company()
        return company.name if company else config.COMPANY_NAME

    def get_fiscal_year_range(self) -> Optional[Tuple[datetime, datetime]]:
        """(start, end) instants of the active company's fiscal year, None without a company."""
        company = self.get_active_company()
        if company is None:
            logger.debug("No active company; fiscal year range unavailable.")
            return None
        return company.fiscal_year_start, company.fiscal_year_end

    def is_in_fiscal_year(self, value: Union[datetime, date]) -> bool:
        fiscal_range = self.get_fiscal_year_range()
        if fiscal_range is None:
            return False
        instant = to_instant(value)
        return fiscal_range[0] <= instant <= fiscal_range[1]
