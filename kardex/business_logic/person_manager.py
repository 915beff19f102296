# kardex/business_logic/person_manager.py

from typing import Optional, List, Any, Dict, TYPE_CHECKING
import sqlite3
import logging

from kardex.business_logic.entities.person_entity import PersonEntity
from kardex.constants import PersonType
from kardex.exceptions import ValidationError, StorageError

if TYPE_CHECKING:
    from kardex.data_access.persons_repository import PersonsRepository

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("name", "national_code", "economic_code", "phone", "address")


class PersonManager:
    def __init__(self, persons_repository: 'PersonsRepository'):
        """
        Suppliers and customers share one table and are told apart by person_type.
        :param persons_repository: An instance of PersonsRepository.
        """
        if persons_repository is None:
            raise ValueError("persons_repository cannot be None")
        self.persons_repository = persons_repository

    def add_person(self, name: str, person_type: PersonType,
                   national_code: Optional[str] = None,
                   economic_code: Optional[str] = None,
                   phone: Optional[str] = None,
                   address: Optional[str] = None) -> PersonEntity:
        """
        Adds a new supplier or customer.
        Validates input and then uses the repository to save the person.
        """
        if not name or not isinstance(name, str) or not name.strip():
            logger.error("Person name cannot be empty.")
            raise ValidationError("نام شخص نمی‌تواند خالی باشد.", field="name")
        if not isinstance(person_type, PersonType):
            logger.error(f"Invalid person_type: {person_type}")
            raise ValidationError("نوع شخص نامعتبر است.", field="person_type")

        person_entity = PersonEntity(
            name=name.strip(),
            person_type=person_type,
            national_code=national_code,
            economic_code=economic_code,
            phone=phone,
            address=address,
        )

        try:
            created_person = self.persons_repository.add(person_entity)
        except sqlite3.Error as e:
            logger.error(f"Error adding person '{name}': {e}", exc_info=True)
            raise StorageError(f"Could not save person '{name}'") from e
        logger.info(f"Person '{created_person.name}' (ID: {created_person.id}) added successfully.")
        return created_person

    def get_person_by_id(self, person_id: int) -> Optional[PersonEntity]:
        """Retrieves a person by their ID."""
        if not isinstance(person_id, int) or person_id <= 0:
            logger.error(f"Invalid person_id: {person_id}")
            return None

        person = self.persons_repository.get_by_id(person_id)
        if person:
            logger.debug(f"Person with ID {person_id} found: {person.name}")
        else:
            logger.debug(f"Person with ID {person_id} not found.")
        return person

    def get_all_persons(self) -> List[PersonEntity]:
        logger.debug("Fetching all persons.")
        return self.persons_repository.get_all(order_by="name ASC")

    def get_persons_by_type(self, person_type: PersonType, active_only: bool = True) -> List[PersonEntity]:
        """Retrieves suppliers or customers."""
        if not isinstance(person_type, PersonType):
            raise ValidationError("نوع شخص نامعتبر است.", field="person_type")
        logger.debug(f"Fetching persons of type: {person_type.value}")
        return self.persons_repository.get_by_type(person_type, active_only=active_only)

    def search_persons(self, text: str) -> List[PersonEntity]:
        return self.persons_repository.get_by_name(text, exact=False)

    def update_person(self, person_id: int, update_data: Dict[str, Any]) -> PersonEntity:
        person = self.persons_repository.get_by_id(person_id)
        if not person:
            raise ValidationError(f"شخص با شناسه {person_id} یافت نشد.", field="id")
        unknown = set(update_data) - set(_UPDATABLE_FIELDS)
        if unknown:
            # person_type is fixed once documents may point at the person
            raise ValidationError(f"فیلدهای نامعتبر برای شخص: {', '.join(sorted(unknown))}")
        if "name" in update_data and not (update_data["name"] or "").strip():
            raise ValidationError("نام شخص نمی‌تواند خالی باشد.", field="name")

        for key, value in update_data.items():
            setattr(person, key, value.strip() if key == "name" else value)
        self.persons_repository.update(person)
        logger.info(f"Person ID {person_id} updated.")
        return person

    def deactivate_person(self, person_id: int) -> bool:
        person = self.persons_repository.get_by_id(person_id)
        if not person:
            return False
        person.is_active = False
        self.persons_repository.update(person)
        logger.info(f"Person ID {person_id} deactivated.")
        return True
