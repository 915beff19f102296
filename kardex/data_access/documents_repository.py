# kardex/data_access/documents_repository.py

from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from kardex.data_access.base_repository import BaseRepository, to_db_value
from kardex.data_access.database_manager import DatabaseManager
from kardex.business_logic.entities.document_entity import DocumentEntity
from kardex.constants import DocumentType

logger = logging.getLogger(__name__)


class DocumentsRepository(BaseRepository[DocumentEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=DocumentEntity,
                         table_name="documents")

    def get_by_number(self, document_type: DocumentType, document_number: str) -> Optional[DocumentEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE document_type = ? AND document_number = ?"
        row = self.db_manager.fetch_one(query, (document_type.value, document_number))
        return self._entity_from_row(dict(row)) if row else None

    def find_documents(self,
                       document_type: Optional[DocumentType] = None,
                       date_from: Optional[datetime] = None,
                       date_to: Optional[datetime] = None,
                       party_id: Optional[int] = None,
                       is_finalized: Optional[bool] = None,
                       include_inactive: bool = False,
                       product_id: Optional[int] = None) -> List[DocumentEntity]:
        """
        Documents matching every given filter, ordered by date then id.
        ``party_id`` matches either the supplier or the customer column and
        ``product_id`` keeps documents with at least one line for that product.
        """
        conditions: List[str] = []
        params: List[Any] = []
        criteria: Dict[str, Any] = {}
        if document_type is not None:
            criteria["document_type"] = document_type
        if date_from is not None:
            criteria["document_date"] = (">=", date_from)
        if is_finalized is not None:
            criteria["is_finalized"] = is_finalized
        if not include_inactive:
            criteria["is_active"] = True
        if criteria:
            where, params = self._build_where(criteria)
            conditions.append(where)
        if date_to is not None:
            # a second condition on the same column cannot share the criteria dict
            conditions.append("document_date <= ?")
            params.append(to_db_value(date_to))
        if party_id is not None:
            conditions.append("(supplier_id = ? OR customer_id = ?)")
            params.extend([party_id, party_id])
        if product_id is not None:
            conditions.append("id IN (SELECT document_id FROM document_items WHERE product_id = ?)")
            params.append(product_id)

        query = f"SELECT * FROM {self._table_name}"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY document_date ASC, id ASC"
        logger.debug(f"DocumentsRepository.find_documents: {query} {params}")
        rows = self.db_manager.fetch_all(query, tuple(params))
        return [self._entity_from_row(dict(row)) for row in rows]

