# kardex/business_logic/inventory_movement_manager.py

from typing import Optional, List, Tuple, TYPE_CHECKING
from collections import Counter
from decimal import Decimal
import logging

from kardex.constants import MovementType, INCOMING_MOVEMENT_TYPES
from kardex.exceptions import ConsistencyError, ReferentialError
from kardex.utils.date_converter import Instantish, to_instant, to_upper_bound
from .entities.document_entity import DocumentEntity
from .entities.inventory_movement_entity import InventoryMovementEntity
from .valuation import movement_type_for

if TYPE_CHECKING:
    from kardex.data_access.inventory_movements_repository import InventoryMovementsRepository
    from kardex.data_access.documents_repository import DocumentsRepository
    from kardex.data_access.document_items_repository import DocumentItemsRepository

logger = logging.getLogger(__name__)

_MovementKey = Tuple[int, MovementType, Decimal, Decimal, str]


def _key(movement: InventoryMovementEntity) -> _MovementKey:
    return (movement.product_id, movement.movement_type, movement.quantity, movement.unit_price,
            to_instant(movement.movement_date).isoformat())


class InventoryMovementManager:
    """
    گردش کالا: یک حرکت به ازای هر ردیف سند.

    Movements are a derived index of the document ledger. Valuation reads
    documents; stock lookups and consistency checks read movements.
    """

    def __init__(self,
                 inventory_movements_repository: 'InventoryMovementsRepository',
                 documents_repository: 'DocumentsRepository',
                 document_items_repository: 'DocumentItemsRepository'):
        self.movements_repo = inventory_movements_repository
        self.documents_repo = documents_repository
        self.document_items_repo = document_items_repository

    def build_movements(self, document: DocumentEntity) -> List[InventoryMovementEntity]:
        """Projects a document onto its movements. Nothing is saved."""
        movements = []
        for item in document.items:
            movement_type = movement_type_for(document.document_type, item.direction)
            quantity = abs(item.quantity)
            movements.append(InventoryMovementEntity(
                product_id=item.product_id,
                movement_type=movement_type,
                quantity=-quantity if movement_type.is_outgoing else quantity,
                unit_price=item.unit_price,
                movement_date=document.document_date,
                document_id=document.id,
                document_item_id=item.id,
                description=f"{document.document_type.label} {document.document_number}",
            ))
        return movements

    def record_movements(self, document: DocumentEntity) -> List[InventoryMovementEntity]:
        """Saves the projection of a document. Callers run this inside the document's transaction."""
        saved = [self.movements_repo.add(m) for m in self.build_movements(document)]
        logger.debug(f"{len(saved)} movements recorded for document {document.id}.")
        return saved

    def retract_movements(self, document_id: int) -> int:
        removed = self.movements_repo.delete_by_document_id(document_id)
        logger.info(f"{removed} movements retracted for document {document_id}.")
        return removed

    def find_movements(self,
                       product_id: Optional[int] = None,
                       movement_type: Optional[MovementType] = None,
                       date_from: Optional[Instantish] = None,
                       date_to: Optional[Instantish] = None) -> List[InventoryMovementEntity]:
        return self.movements_repo.find_movements(
            product_id=product_id,
            movement_type=movement_type,
            date_from=to_instant(date_from) if date_from is not None else None,
            date_to=to_upper_bound(date_to) if date_to is not None else None,
        )

    def get_current_stock(self, product_id: int, up_to: Optional[Instantish] = None) -> Decimal:
        """موجودی فعلی: جمع مقادیر علامت‌دار حرکات کالا."""
        movements = self.find_movements(product_id=product_id, date_to=up_to)
        return sum((m.quantity for m in movements), Decimal("0.0"))

    def get_average_price(self, product_id: int, up_to: Optional[Instantish] = None) -> Decimal:
        """Average price of everything received, ignoring issues."""
        incoming = [m for m in self.find_movements(product_id=product_id, date_to=up_to)
                    if m.movement_type in INCOMING_MOVEMENT_TYPES]
        quantity = sum((m.quantity for m in incoming), Decimal("0.0"))
        if quantity <= 0:
            return Decimal("0.0")
        return sum((m.total_price for m in incoming), Decimal("0.0")) / quantity

    def verify_document_movements(self, document: DocumentEntity) -> None:
        """
        Raises ConsistencyError when the stored movements of a document differ
        from what its current lines project to. An inactive document should
        have none left.
        """
        stored = self.movements_repo.get_by_document_id(document.id)
        expected = self.build_movements(document) if document.is_active else []

        stored_keys = Counter(_key(m) for m in stored)
        expected_keys = Counter(_key(m) for m in expected)
        if stored_keys == expected_keys:
            return

        missing = list((expected_keys - stored_keys).elements())
        stale = list((stored_keys - expected_keys).elements())
        logger.warning(f"Document {document.id} movements diverge: {len(missing)} missing, {len(stale)} stale.")
        raise ConsistencyError(
            f"حرکات انبار سند {document.document_number} با اقلام آن همخوانی ندارد.",
            document_id=document.id,
            details=[("missing", k) for k in missing] + [("stale", k) for k in stale],
        )

    def rebuild_movements(self, document_id: int) -> List[InventoryMovementEntity]:
        """Deletes and regenerates one document's movements from its current lines."""
        document = self.documents_repo.get_by_id(document_id)
        if document is None:
            raise ReferentialError(f"سند با شناسه {document_id} یافت نشد.", entity="document", entity_id=document_id)
        document.items = self.document_items_repo.get_by_document_id(document_id)

        with self.movements_repo.db_manager.transaction():
            self.movements_repo.delete_by_document_id(document_id)
            saved = self.record_movements(document) if document.is_active else []
        logger.info(f"Movements of document {document_id} rebuilt: {len(saved)} rows.")
        return saved
