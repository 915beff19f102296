# kardex/data_access/persons_repository.py

from typing import List
import logging

from kardex.data_access.base_repository import BaseRepository
from kardex.data_access.database_manager import DatabaseManager
from kardex.business_logic.entities.person_entity import PersonEntity
from kardex.constants import PersonType

logger = logging.getLogger(__name__)


class PersonsRepository(BaseRepository[PersonEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=PersonEntity,
                         table_name="persons")

    def get_by_name(self, name: str, exact: bool = True) -> List[PersonEntity]:
        if exact:
            query = f"SELECT * FROM {self._table_name} WHERE name = ?"
            params = (name,)
        else:
            query = f"SELECT * FROM {self._table_name} WHERE name LIKE ?"
            params = (f"%{name}%",)
        rows = self.db_manager.fetch_all(query, params)
        return [self._entity_from_row(dict(row)) for row in rows]

    def get_by_type(self, person_type: PersonType, active_only: bool = True) -> List[PersonEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE person_type = ?"
        if active_only:
            query += " AND is_active = 1"
        query += " ORDER BY name ASC"
        rows = self.db_manager.fetch_all(query, (person_type.value,))
        return [self._entity_from_row(dict(row)) for row in rows]
