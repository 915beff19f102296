# kardex/business_logic/entities/cardex_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from kardex.constants import DocumentType, MovementType

_ZERO = Decimal("0.0")


@dataclass
class CardexEntry:
    """One chronological row of a product's Rial cardex. Computed, never stored."""
    date: datetime
    document_type: Optional[DocumentType]  # None on the opening-balance row
    document_number: str
    document_id: Optional[int] = None
    movement_type: Optional[MovementType] = None
    is_finalized: bool = True
    description: Optional[str] = None

    in_quantity: Decimal = _ZERO
    in_unit_price: Decimal = _ZERO
    in_total_price: Decimal = _ZERO
    out_quantity: Decimal = _ZERO
    out_unit_price: Decimal = _ZERO   # stated document price, display only
    out_total_price: Decimal = _ZERO  # costed at the running average
    balance_quantity: Decimal = _ZERO
    balance_unit_price: Decimal = _ZERO
    balance_total_price: Decimal = _ZERO

    @property
    def is_opening_balance(self) -> bool:
        return self.document_type is None


@dataclass
class SummaryBucket:
    quantity: Decimal = field(default_factory=lambda: Decimal("0.0"))
    total_price: Decimal = field(default_factory=lambda: Decimal("0.0"))

    @property
    def unit_price(self) -> Decimal:
        """Weighted-average unit price of the bucket."""
        if self.quantity > 0:
            return self.total_price / self.quantity
        return Decimal("0.0")

    def add(self, quantity: Decimal, total_price: Decimal) -> None:
        self.quantity += quantity
        self.total_price += total_price


@dataclass
class ProductMovementSummary:
    product_id: int
    initial_stock: SummaryBucket = field(default_factory=SummaryBucket)
    incoming: SummaryBucket = field(default_factory=SummaryBucket)
    outgoing: SummaryBucket = field(default_factory=SummaryBucket)

    @property
    def balance(self) -> SummaryBucket:
        return SummaryBucket(
            quantity=self.initial_stock.quantity + self.incoming.quantity - self.outgoing.quantity,
            total_price=self.initial_stock.total_price + self.incoming.total_price - self.outgoing.total_price,
        )
