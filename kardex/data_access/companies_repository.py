# kardex/data_access/companies_repository.py

from typing import Optional
import logging

from kardex.data_access.base_repository import BaseRepository
from kardex.data_access.database_manager import DatabaseManager
from kardex.business_logic.entities.company_entity import CompanyEntity

logger = logging.getLogger(__name__)


class CompaniesRepository(BaseRepository[CompanyEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=CompanyEntity,
                         table_name="companies")

    def get_active(self) -> Optional[CompanyEntity]:
        """The active company; newest record wins if the index was ever bypassed."""
        query = (f"SELECT * FROM {self._table_name} WHERE is_active = 1 "
                 f"ORDER BY created_at DESC, id DESC LIMIT 1")
        row = self.db_manager.fetch_one(query)
        return self._entity_from_row(dict(row)) if row else None

    def deactivate_all(self) -> int:
        query = f"UPDATE {self._table_name} SET is_active = 0 WHERE is_active = 1"
        cursor = self.db_manager.execute_query(query)
        return cursor.rowcount
