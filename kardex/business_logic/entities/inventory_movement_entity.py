# kardex/business_logic/entities/inventory_movement_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from .base_entity import BaseEntity
from kardex.constants import MovementType
from kardex.exceptions import ValidationError


@dataclass
class InventoryMovementEntity(BaseEntity):
    product_id: int
    movement_type: MovementType
    quantity: Decimal  # signed: negative for SALE / ADJUSTMENT_OUT
    unit_price: Decimal
    movement_date: datetime

    document_id: Optional[int] = field(default=None)
    document_item_id: Optional[int] = field(default=None)
    description: Optional[str] = field(default=None)

    def __post_init__(self):
        if self.movement_type.is_outgoing and self.quantity >= 0:
            raise ValidationError(f"{self.movement_type.value} movement must have a negative quantity, got {self.quantity}")
        if not self.movement_type.is_outgoing and self.quantity <= 0:
            raise ValidationError(f"{self.movement_type.value} movement must have a positive quantity, got {self.quantity}")

    @property
    def total_price(self) -> Decimal:
        return abs(self.quantity) * self.unit_price
