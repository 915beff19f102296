# kardex/data_access/products_repository.py

from typing import Optional, List
import logging

from kardex.data_access.base_repository import BaseRepository
from kardex.data_access.database_manager import DatabaseManager
from kardex.business_logic.entities.product_entity import ProductEntity

logger = logging.getLogger(__name__)


class ProductsRepository(BaseRepository[ProductEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=ProductEntity,
                         table_name="products")

    def get_by_code(self, code: str, active_only: bool = True) -> Optional[ProductEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE code = ?"
        if active_only:
            query += " AND is_active = 1"
        query += " ORDER BY id DESC LIMIT 1"
        row = self.db_manager.fetch_one(query, (code,))
        return self._entity_from_row(dict(row)) if row else None

    def search(self, text: str, active_only: bool = True) -> List[ProductEntity]:
        """Case-insensitive match on name, code or description."""
        pattern = f"%{text}%"
        query = (f"SELECT * FROM {self._table_name} "
                 f"WHERE (name LIKE ? OR code LIKE ? OR description LIKE ?)")
        if active_only:
            query += " AND is_active = 1"
        query += " ORDER BY name ASC"
        rows = self.db_manager.fetch_all(query, (pattern, pattern, pattern))
        return [self._entity_from_row(dict(row)) for row in rows]

    def get_categories(self) -> List[str]:
        query = f"SELECT DISTINCT category FROM {self._table_name} WHERE category IS NOT NULL ORDER BY category"
        return [row["category"] for row in self.db_manager.fetch_all(query)]
