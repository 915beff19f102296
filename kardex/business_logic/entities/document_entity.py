# kardex/business_logic/entities/document_entity.py
from dataclasses import dataclass, field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from .base_entity import BaseEntity, NOT_PERSISTED
from .document_item_entity import DocumentItemEntity
from kardex.constants import DocumentType


@dataclass
class DocumentEntity(BaseEntity):
    document_type: DocumentType
    document_number: str
    document_date: datetime  # aware UTC instant

    supplier_id: Optional[int] = field(default=None)
    customer_id: Optional[int] = field(default=None)
    total_amount: Decimal = field(default_factory=lambda: Decimal("0.0"))
    is_finalized: bool = field(default=False)
    is_active: bool = field(default=True)
    description: Optional[str] = field(default=None)
    created_at: Optional[datetime] = field(default=None)
    updated_at: Optional[datetime] = field(default=None)
    items: List[DocumentItemEntity] = field(default_factory=list, metadata=NOT_PERSISTED)

    # display only
    party_name: Optional[str] = field(default=None, compare=False, repr=False, init=False)

    @property
    def party_id(self) -> Optional[int]:
        return self.supplier_id if self.supplier_id is not None else self.customer_id

    def items_total(self) -> Decimal:
        return sum((item.total_price for item in self.items), Decimal("0.0"))
