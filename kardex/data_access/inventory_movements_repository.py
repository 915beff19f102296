# kardex/data_access/inventory_movements_repository.py

from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from kardex.data_access.base_repository import BaseRepository
from kardex.data_access.database_manager import DatabaseManager
from kardex.business_logic.entities.inventory_movement_entity import InventoryMovementEntity
from kardex.constants import MovementType

logger = logging.getLogger(__name__)


class InventoryMovementsRepository(BaseRepository[InventoryMovementEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=InventoryMovementEntity,
                         table_name="inventory_movements")

    def find_movements(self,
                       product_id: Optional[int] = None,
                       movement_type: Optional[MovementType] = None,
                       date_from: Optional[datetime] = None,
                       date_to: Optional[datetime] = None) -> List[InventoryMovementEntity]:
        criteria: Dict[str, Any] = {}
        if product_id is not None:
            criteria["product_id"] = product_id
        if movement_type is not None:
            criteria["movement_type"] = movement_type
        if date_from is not None and date_to is not None:
            criteria["movement_date"] = ("BETWEEN", (date_from, date_to))
        elif date_from is not None:
            criteria["movement_date"] = (">=", date_from)
        elif date_to is not None:
            criteria["movement_date"] = ("<=", date_to)
        return self.find_by_criteria(criteria, order_by="movement_date ASC, id ASC")

    def get_by_document_id(self, document_id: int) -> List[InventoryMovementEntity]:
        return self.find_by_criteria({"document_id": document_id}, order_by="id ASC")

    def delete_by_document_id(self, document_id: int) -> int:
        query = f"DELETE FROM {self._table_name} WHERE document_id = ?"
        cursor = self.db_manager.execute_query(query, (document_id,))
        return cursor.rowcount
