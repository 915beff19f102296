# kardex/business_logic/entities/company_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime
from .base_entity import BaseEntity


@dataclass
class CompanyEntity(BaseEntity):
    name: str
    fiscal_year_start: datetime
    fiscal_year_end: datetime

    national_code: Optional[str] = field(default=None)
    economic_code: Optional[str] = field(default=None)
    address: Optional[str] = field(default=None)
    phone: Optional[str] = field(default=None)
    email: Optional[str] = field(default=None)
    is_active: bool = field(default=True)
    created_at: Optional[datetime] = field(default=None)
