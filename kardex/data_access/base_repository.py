# kardex/data_access/base_repository.py

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from dataclasses import fields, MISSING
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar, Union, TYPE_CHECKING

from kardex.data_access.database_manager import DatabaseManager

if TYPE_CHECKING:
    from kardex.business_logic.entities.base_entity import BaseEntity

logger = logging.getLogger(__name__)

T = TypeVar('T', bound='BaseEntity')


def to_db_value(value: Any) -> Any:
    """Python value -> sqlite value. Decimals are kept as text so no precision is lost."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.isoformat(timespec="microseconds")
    if isinstance(value, date):
        return value.isoformat()
    return value


def _unwrap_optional(field_type: Any) -> Any:
    if getattr(field_type, '__origin__', None) is Union:
        possible_types = [arg for arg in getattr(field_type, '__args__', []) if arg is not type(None)]
        if possible_types:
            return possible_types[0]
    return field_type


def _is_optional(field_type: Any) -> bool:
    return getattr(field_type, '__origin__', None) is Union and type(None) in getattr(field_type, '__args__', [])


class BaseRepository(Generic[T]):
    def __init__(self, db_manager: DatabaseManager, model_type: Type[T], table_name: str):
        self.db_manager = db_manager
        self.model_type = model_type
        self._table_name = table_name
        self._db_columns = [
            f.name for f in fields(model_type)
            if f.init and f.metadata.get("persist", True)
        ]
        logger.debug(f"BaseRepository for {self._table_name} initialized. Columns: {self._db_columns}")

    @property
    def table_name(self) -> str:
        return self._table_name

    def get_by_id(self, entity_id: int) -> Optional[T]:
        query = f"SELECT * FROM {self._table_name} WHERE id = ?"
        row = self.db_manager.fetch_one(query, (entity_id,))
        return self._entity_from_row(dict(row)) if row else None

    def get_all(self, order_by: Optional[str] = None) -> List[T]:
        query = f"SELECT * FROM {self._table_name}"
        if order_by:
            query += f" ORDER BY {order_by}"
        rows = self.db_manager.fetch_all(query)
        return [self._entity_from_row(dict(row)) for row in rows]

    def _entity_to_dict_for_db(self, entity: T) -> Dict[str, Any]:
        """فیلدهای entity را به دیکشنری برای ذخیره در دیتابیس تبدیل می‌کند."""
        return {col: to_db_value(getattr(entity, col, None)) for col in self._db_columns}

    def add(self, entity: T) -> T:
        logger.debug(f"BaseRepository.add: Type {type(entity).__name__} to table '{self._table_name}'.")
        fields_to_insert = self._entity_to_dict_for_db(entity)
        fields_to_insert.pop('id', None)  # id is AUTOINCREMENT

        columns = ', '.join(fields_to_insert.keys())
        placeholders = ', '.join(['?'] * len(fields_to_insert))
        values_tuple = tuple(fields_to_insert.values())
        query = f"INSERT INTO {self._table_name} ({columns}) VALUES ({placeholders})"

        cursor = self.db_manager.execute_query(query, values_tuple)
        entity.id = cursor.lastrowid
        logger.debug(f"BaseRepository.add: {self._table_name} row inserted with ID {entity.id}.")
        return entity

    def update(self, entity: T) -> T:
        if entity.id is None:
            raise ValueError(f"Entity of type {type(entity).__name__} must have an ID to be updated.")

        fields_to_update = self._entity_to_dict_for_db(entity)
        fields_to_update.pop('id', None)
        set_clause = ', '.join([f"{key} = ?" for key in fields_to_update.keys()])
        values_tuple = tuple(fields_to_update.values()) + (entity.id,)
        query = f"UPDATE {self._table_name} SET {set_clause} WHERE id = ?"

        self.db_manager.execute_query(query, values_tuple)
        logger.debug(f"BaseRepository.update: Entity ID {entity.id} in table {self._table_name} updated.")
        return entity

    def delete(self, entity_id: int) -> bool:
        query = f"DELETE FROM {self._table_name} WHERE id = ?"
        cursor = self.db_manager.execute_query(query, (entity_id,))
        return cursor.rowcount > 0

    def _build_where(self, criteria: Dict[str, Any]) -> Tuple[str, List[Any]]:
        """
        Criteria values are either plain values (equality) or ``(operator, value)``
        tuples; ``('BETWEEN', (low, high))`` and ``('IN', [...])`` are supported.
        """
        conditions = []
        params: List[Any] = []
        for key, value in criteria.items():
            if isinstance(value, tuple) and len(value) == 2:
                operator, val = value
                operator = str(operator).upper()
                if operator == 'BETWEEN' and isinstance(val, (list, tuple)) and len(val) == 2:
                    conditions.append(f"{key} BETWEEN ? AND ?")
                    params.extend(to_db_value(v) for v in val)
                elif operator == 'IN' and isinstance(val, (list, tuple, set)):
                    if not val:
                        conditions.append("0")
                        continue
                    conditions.append(f"{key} IN ({', '.join('?' * len(val))})")
                    params.extend(to_db_value(v) for v in val)
                else:
                    conditions.append(f"{key} {operator} ?")
                    params.append(to_db_value(val))
            elif value is None:
                conditions.append(f"{key} IS NULL")
            else:
                conditions.append(f"{key} = ?")
                params.append(to_db_value(value))
        return " AND ".join(conditions), params

    def find_by_criteria(self, criteria: Dict[str, Any], order_by: Optional[str] = None,
                         limit: Optional[int] = None) -> List[T]:
        """موجودیت‌ها را بر اساس دیکشنری از معیارها پیدا می‌کند."""
        query = f"SELECT * FROM {self._table_name}"
        params: List[Any] = []
        if criteria:
            where, params = self._build_where(criteria)
            query += f" WHERE {where}"
        if order_by:
            query += f" ORDER BY {order_by}"
        if limit:
            query += f" LIMIT {int(limit)}"

        logger.debug(f"BaseRepository.find_by_criteria: Query: {query}, Values: {tuple(params)}")
        rows = self.db_manager.fetch_all(query, tuple(params))
        return [self._entity_from_row(dict(row)) for row in rows]

    def _entity_from_row(self, row: Dict[str, Any]) -> T:
        """
        یک دیکشنری از داده‌های ردیف دیتابیس را به یک آبجکت دیتاکلاس تبدیل می‌کند.
        """
        entity_data = {}
        for f in fields(self.model_type):
            if not f.init or not f.metadata.get("persist", True):
                continue

            field_name = f.name
            value_from_db = row.get(field_name)

            if value_from_db is None:
                if f.default is MISSING and f.default_factory is MISSING and not _is_optional(f.type):
                    raise ValueError(
                        f"Database integrity error: NULL value found for required field '{field_name}' "
                        f"in table '{self._table_name}' for row: {row}"
                    )
                if field_name in row:
                    entity_data[field_name] = None
                continue

            actual_type = _unwrap_optional(f.type)
            if isinstance(actual_type, type) and issubclass(actual_type, Enum):
                entity_data[field_name] = actual_type(value_from_db)
            elif actual_type is Decimal:
                entity_data[field_name] = Decimal(str(value_from_db))
            elif actual_type is datetime and isinstance(value_from_db, str):
                entity_data[field_name] = datetime.fromisoformat(value_from_db)
            elif actual_type is date and isinstance(value_from_db, str):
                entity_data[field_name] = date.fromisoformat(value_from_db.split(" ")[0])
            elif actual_type is bool:
                entity_data[field_name] = bool(value_from_db)
            else:
                entity_data[field_name] = value_from_db

        try:
            return self.model_type(**entity_data)
        except TypeError as e:
            logger.error(f"Failed to instantiate {self.model_type.__name__}. Error: {e}. Data passed: {entity_data}")
            raise
