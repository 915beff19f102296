# kardex/data_access/document_items_repository.py

from typing import Dict, List, Sequence
import logging

from kardex.data_access.base_repository import BaseRepository
from kardex.data_access.database_manager import DatabaseManager
from kardex.business_logic.entities.document_item_entity import DocumentItemEntity

logger = logging.getLogger(__name__)


class DocumentItemsRepository(BaseRepository[DocumentItemEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=DocumentItemEntity,
                         table_name="document_items")

    def get_by_document_id(self, document_id: int) -> List[DocumentItemEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE document_id = ? ORDER BY line_number ASC, id ASC"
        rows = self.db_manager.fetch_all(query, (document_id,))
        return [self._entity_from_row(dict(row)) for row in rows]

    def get_by_document_ids(self, document_ids: Sequence[int]) -> Dict[int, List[DocumentItemEntity]]:
        """Items of several documents at once, grouped by document id in line order."""
        grouped: Dict[int, List[DocumentItemEntity]] = {doc_id: [] for doc_id in document_ids}
        if not document_ids:
            return grouped
        placeholders = ", ".join("?" * len(document_ids))
        query = (f"SELECT * FROM {self._table_name} WHERE document_id IN ({placeholders}) "
                 f"ORDER BY document_id ASC, line_number ASC, id ASC")
        for row in self.db_manager.fetch_all(query, tuple(document_ids)):
            item = self._entity_from_row(dict(row))
            grouped.setdefault(item.document_id, []).append(item)
        return grouped

    def delete_by_document_id(self, document_id: int) -> int:
        query = f"DELETE FROM {self._table_name} WHERE document_id = ?"
        cursor = self.db_manager.execute_query(query, (document_id,))
        return cursor.rowcount
