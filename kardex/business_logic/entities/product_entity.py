# kardex/business_logic/entities/product_entity.py
from dataclasses import dataclass, field
from typing import Optional
from decimal import Decimal
from .base_entity import BaseEntity
from kardex.constants import DEFAULT_PRODUCT_UNIT


@dataclass
class ProductEntity(BaseEntity):
    code: str
    name: str

    unit: str = field(default=DEFAULT_PRODUCT_UNIT)
    category: Optional[str] = field(default=None)
    description: Optional[str] = field(default=None)
    minimum_stock: Decimal = field(default_factory=lambda: Decimal("0.0"))
    maximum_stock: Optional[Decimal] = field(default=None)
    is_active: bool = field(default=True)
