# kardex/business_logic/entities/document_item_entity.py
from dataclasses import dataclass, field
from typing import Optional
from decimal import Decimal
from .base_entity import BaseEntity
from kardex.constants import AdjustmentDirection


@dataclass
class DocumentItemEntity(BaseEntity):
    # --- فیلدهایی که در دیتابیس ذخیره می‌شوند ---
    document_id: Optional[int] = None
    product_id: Optional[int] = None
    quantity: Decimal = field(default_factory=lambda: Decimal("0.0"))
    unit_price: Decimal = field(default_factory=lambda: Decimal("0.0"))
    direction: Optional[AdjustmentDirection] = None  # only meaningful on STOCK_ADJUSTMENT lines
    description: Optional[str] = None
    line_number: int = 0

    # --- فیلدهای نمایشی (از دیتابیس خوانده نمی‌شوند) ---
    product_name: Optional[str] = field(default=None, compare=False, repr=False, init=False)
    product_code: Optional[str] = field(default=None, compare=False, repr=False, init=False)
    unit: Optional[str] = field(default=None, compare=False, repr=False, init=False)

    @property
    def total_price(self) -> Decimal:
        """quantity × unit_price, never taken from input."""
        qty = self.quantity if self.quantity is not None else Decimal("0.0")
        price = self.unit_price if self.unit_price is not None else Decimal("0.0")
        return qty * price
