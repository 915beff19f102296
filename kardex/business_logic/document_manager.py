# kardex/business_logic/document_manager.py

from typing import Optional, List, Dict, Any, Iterable, Union, TYPE_CHECKING
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
import sqlite3
import logging

from kardex import config
from kardex.constants import DocumentType, PersonType, AdjustmentDirection, REQUIRED_PARTY_TYPES
from kardex.exceptions import ValidationError, ReferentialError, StorageError
from kardex.utils.date_converter import Instantish, to_instant, to_upper_bound, shamsi_to_instant
from .entities.document_entity import DocumentEntity
from .entities.document_item_entity import DocumentItemEntity

if TYPE_CHECKING:
    from .product_manager import ProductManager
    from .person_manager import PersonManager
    from .inventory_movement_manager import InventoryMovementManager
    from kardex.data_access.documents_repository import DocumentsRepository
    from kardex.data_access.document_items_repository import DocumentItemsRepository

logger = logging.getLogger(__name__)

ItemInput = Union[DocumentItemEntity, Dict[str, Any]]

_UPDATABLE_FIELDS = ("document_number", "document_date", "items", "supplier_id", "customer_id", "description")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _decimal(value: Any, field_name: str, line: int) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"ردیف {line}: مقدار {field_name} وارد نشده است.", field=field_name)
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"ردیف {line}: مقدار {field_name} نامعتبر است: {value}", field=field_name) from None
    if not number.is_finite():
        raise ValidationError(f"ردیف {line}: مقدار {field_name} نامعتبر است: {value}", field=field_name)
    return number


def _document_type(value: Any) -> DocumentType:
    if isinstance(value, DocumentType):
        return value
    try:
        return DocumentType(value)
    except ValueError:
        raise ValidationError(f"نوع سند نامعتبر است: {value}", field="document_type") from None


def _document_date(value: Any) -> datetime:
    """Instant of a document. Jalaali text is accepted only here, at the input edge."""
    if isinstance(value, str):
        instant = shamsi_to_instant(value)
        if instant is None:
            raise ValidationError(f"تاریخ شمسی نامعتبر است: {value}", field="document_date")
        return instant
    try:
        return to_instant(value)
    except TypeError:
        raise ValidationError(f"تاریخ سند نامعتبر است: {value!r}", field="document_date") from None


class DocumentManager:
    """
    ثبت، ویرایش، قطعی کردن و حذف اسناد انبار.

    A document, its lines and its inventory movements are always written in a
    single transaction, so readers never see a document without movements.
    """

    def __init__(self,
                 documents_repository: 'DocumentsRepository',
                 document_items_repository: 'DocumentItemsRepository',
                 movement_manager: 'InventoryMovementManager',
                 product_manager: 'ProductManager',
                 person_manager: 'PersonManager'):
        self.documents_repo = documents_repository
        self.document_items_repo = document_items_repository
        self.movement_manager = movement_manager
        self.product_manager = product_manager
        self.person_manager = person_manager

    # --- validation ---

    def _build_items(self, document_type: DocumentType, items_data: Optional[Iterable[ItemInput]]) -> List[DocumentItemEntity]:
        items_data = list(items_data or [])
        if not items_data:
            raise ValidationError("سند باید حداقل یک ردیف کالا داشته باشد.", field="items")

        items: List[DocumentItemEntity] = []
        for line, raw in enumerate(items_data, start=1):
            data = raw if isinstance(raw, dict) else {
                "product_id": raw.product_id, "quantity": raw.quantity, "unit_price": raw.unit_price,
                "direction": raw.direction, "description": raw.description,
            }
            product_id = data.get("product_id")
            if product_id is None:
                raise ValidationError(f"ردیف {line}: کالا انتخاب نشده است.", field="product_id")

            quantity = _decimal(data.get("quantity"), "quantity", line)
            unit_price = _decimal(data.get("unit_price"), "unit_price", line)
            if quantity <= 0:
                raise ValidationError(f"ردیف {line}: مقدار باید بزرگتر از صفر باشد.", field="quantity")
            if unit_price < 0:
                raise ValidationError(f"ردیف {line}: قیمت واحد نمی‌تواند منفی باشد.", field="unit_price")

            direction = None
            if document_type == DocumentType.STOCK_ADJUSTMENT:
                raw_direction = data.get("direction")
                try:
                    direction = AdjustmentDirection(raw_direction) if raw_direction is not None else AdjustmentDirection.IN
                except ValueError:
                    raise ValidationError(f"ردیف {line}: جهت تعدیل نامعتبر است: {raw_direction}",
                                          field="direction") from None

            product = self.product_manager.get_product_by_id(product_id)
            if product is None:
                raise ReferentialError(f"ردیف {line}: کالا با شناسه {product_id} یافت نشد.",
                                       entity="product", entity_id=product_id)
            if not product.is_active:
                raise ValidationError(f"ردیف {line}: کالای '{product.name}' غیرفعال است.", field="product_id")

            # any total supplied by the caller is ignored; DocumentItemEntity derives it
            items.append(DocumentItemEntity(
                product_id=product_id,
                quantity=quantity,
                unit_price=unit_price,
                direction=direction,
                description=data.get("description"),
                line_number=line,
            ))
        return items

    def _check_party(self, document_type: DocumentType,
                     supplier_id: Optional[int], customer_id: Optional[int],
                     current_party_id: Optional[int] = None) -> None:
        """``current_party_id`` is the party a draft already has; it may have been deactivated since."""
        required = REQUIRED_PARTY_TYPES.get(document_type)
        if required == PersonType.SUPPLIER and supplier_id is None:
            raise ValidationError("فاکتور خرید باید تامین کننده داشته باشد.", field="supplier_id")
        if required == PersonType.CUSTOMER and customer_id is None:
            raise ValidationError("فاکتور فروش باید مشتری داشته باشد.", field="customer_id")
        if required == PersonType.SUPPLIER and customer_id is not None:
            raise ValidationError("فاکتور خرید مشتری ندارد.", field="customer_id")
        if required == PersonType.CUSTOMER and supplier_id is not None:
            raise ValidationError("فاکتور فروش تامین کننده ندارد.", field="supplier_id")

        for person_id, expected_type in ((supplier_id, PersonType.SUPPLIER), (customer_id, PersonType.CUSTOMER)):
            if person_id is None:
                continue
            person = self.person_manager.get_person_by_id(person_id)
            if person is None:
                raise ReferentialError(f"شخص با شناسه {person_id} یافت نشد.", entity="person", entity_id=person_id)
            if person.person_type != expected_type:
                raise ReferentialError(
                    f"'{person.name}' {expected_type.label} نیست.", entity="person", entity_id=person_id)
            if not person.is_active and person_id != current_party_id:
                raise ValidationError(f"'{person.name}' غیرفعال است.",
                                      field="supplier_id" if expected_type == PersonType.SUPPLIER else "customer_id")

    def _check_number(self, document_type: DocumentType, document_number: Any,
                      document_id: Optional[int] = None) -> str:
        number = str(document_number).strip() if document_number is not None else ""
        if not number:
            raise ValidationError("شماره سند نمی‌تواند خالی باشد.", field="document_number")
        existing = self.documents_repo.get_by_number(document_type, number)
        if existing and existing.id != document_id:
            raise ValidationError(
                f"سند {document_type.label} با شماره '{number}' از قبل موجود است (شناسه: {existing.id}).",
                field="document_number")
        return number

    def _save_items(self, document: DocumentEntity) -> None:
        for item in document.items:
            item.document_id = document.id
            self.document_items_repo.add(item)

    # --- commands ---

    def create_document(self,
                        document_type: Union[DocumentType, str],
                        document_number: str,
                        items: Iterable[ItemInput],
                        document_date: Union[Instantish, str],
                        supplier_id: Optional[int] = None,
                        customer_id: Optional[int] = None,
                        description: Optional[str] = None) -> DocumentEntity:
        doc_type = _document_type(document_type)
        logger.info(f"Attempting to create {doc_type.value} document '{document_number}'.")

        number = self._check_number(doc_type, document_number)
        instant = _document_date(document_date)
        self._check_party(doc_type, supplier_id, customer_id)
        document_items = self._build_items(doc_type, items)

        now = _now()
        document = DocumentEntity(
            document_type=doc_type,
            document_number=number,
            document_date=instant,
            supplier_id=supplier_id,
            customer_id=customer_id,
            # the opening balance is authoritative as soon as it is entered
            is_finalized=doc_type == DocumentType.INITIAL_STOCK,
            description=description,
            created_at=now,
            updated_at=now,
            items=document_items,
        )
        document.total_amount = document.items_total()

        try:
            with self.documents_repo.db_manager.transaction():
                self.documents_repo.add(document)
                self._save_items(document)
                self.movement_manager.record_movements(document)
        except sqlite3.IntegrityError as e:
            logger.warning(f"Document '{number}' rejected by the database: {e}")
            raise ValidationError(f"ثبت سند '{number}' ممکن نیست: {e}", field="document_number") from e
        except sqlite3.Error as e:
            logger.error(f"Error saving document '{number}': {e}", exc_info=True)
            raise StorageError(f"Could not save document '{number}'") from e

        logger.info(f"Document '{number}' (ID: {document.id}) created with {len(document.items)} items, "
                    f"total {document.total_amount}.")
        return document

    def _get_existing(self, document_id: int) -> DocumentEntity:
        document = self.documents_repo.get_by_id(document_id)
        if document is None:
            raise ReferentialError(f"سند با شناسه {document_id} یافت نشد.", entity="document", entity_id=document_id)
        return document

    def update_document(self, document_id: int, **fields: Any) -> DocumentEntity:
        """
        Edits a draft. ``items``, when given, replaces every line of the document.
        Finalized and deleted documents cannot be edited.
        """
        logger.info(f"Attempting to update document ID {document_id} with fields {sorted(fields)}.")
        unknown = set(fields) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"فیلدهای نامعتبر برای سند: {', '.join(sorted(unknown))}")

        document = self._get_existing(document_id)
        if not document.is_active:
            raise ValidationError("سند حذف شده قابل ویرایش نیست.", field="id")
        if document.is_finalized:
            raise ValidationError("سند قطعی شده قابل ویرایش نیست.", field="is_finalized")
        current_party_id = document.party_id

        if "document_number" in fields:
            document.document_number = self._check_number(document.document_type, fields["document_number"], document_id)
        if "document_date" in fields:
            document.document_date = _document_date(fields["document_date"])
        if "description" in fields:
            document.description = fields["description"]
        if "supplier_id" in fields:
            document.supplier_id = fields["supplier_id"]
        if "customer_id" in fields:
            document.customer_id = fields["customer_id"]
        self._check_party(document.document_type, document.supplier_id, document.customer_id, current_party_id)

        if "items" in fields:
            document.items = self._build_items(document.document_type, fields["items"])
        else:
            document.items = self.document_items_repo.get_by_document_id(document_id)
        document.total_amount = document.items_total()
        document.updated_at = _now()

        resync = config.RESYNC_MOVEMENTS_ON_EDIT
        try:
            with self.documents_repo.db_manager.transaction():
                self.documents_repo.update(document)
                if "items" in fields:
                    self.document_items_repo.delete_by_document_id(document_id)
                    self._save_items(document)
                if resync:
                    self.movement_manager.retract_movements(document_id)
                    self.movement_manager.record_movements(document)
        except sqlite3.IntegrityError as e:
            raise ValidationError(f"ویرایش سند {document_id} ممکن نیست: {e}") from e
        except sqlite3.Error as e:
            logger.error(f"Error updating document {document_id}: {e}", exc_info=True)
            raise StorageError(f"Could not update document {document_id}") from e

        if not resync:
            logger.warning(f"Document {document_id} edited without regenerating its inventory movements.")
        logger.info(f"Document ID {document_id} updated, total {document.total_amount}.")
        return document

    def finalize_document(self, document_id: int) -> DocumentEntity:
        """قطعی کردن سند؛ یک‌طرفه است و تکرار آن اثری ندارد."""
        document = self._get_existing(document_id)
        if not document.is_active:
            raise ValidationError("سند حذف شده قابل قطعی شدن نیست.", field="id")
        if document.is_finalized:
            logger.debug(f"Document {document_id} is already finalized.")
        else:
            document.is_finalized = True
            document.updated_at = _now()
            self.documents_repo.update(document)
            logger.info(f"Document ID {document_id} finalized.")
        document.items = self.document_items_repo.get_by_document_id(document_id)
        return document

    def delete_document(self, document_id: int) -> bool:
        """
        Soft delete: the document is marked inactive and drops out of valuation.
        Returns False when there is no active document with this id.
        """
        document = self.documents_repo.get_by_id(document_id)
        if document is None or not document.is_active:
            logger.warning(f"No active document with ID {document_id} to delete.")
            return False

        document.is_active = False
        document.updated_at = _now()
        resync = config.RESYNC_MOVEMENTS_ON_EDIT
        try:
            with self.documents_repo.db_manager.transaction():
                self.documents_repo.update(document)
                if resync:
                    self.movement_manager.retract_movements(document_id)
        except sqlite3.Error as e:
            logger.error(f"Error deleting document {document_id}: {e}", exc_info=True)
            raise StorageError(f"Could not delete document {document_id}") from e

        logger.info(f"Document ID {document_id} deleted (soft).")
        return True

    # --- queries ---

    def _populate(self, documents: List[DocumentEntity]) -> List[DocumentEntity]:
        """Loads items and fills display names; missing references get placeholders."""
        grouped = self.document_items_repo.get_by_document_ids([d.id for d in documents])
        product_details: Dict[Optional[int], Dict[str, str]] = {}
        party_names: Dict[int, str] = {}

        for document in documents:
            document.items = grouped.get(document.id, [])
            for item in document.items:
                if item.product_id not in product_details:
                    product_details[item.product_id] = self.product_manager.get_product_display_details(item.product_id)
                details = product_details[item.product_id]
                item.product_name = details["name"]
                item.product_code = details["code"]
                item.unit = details["unit"]

            party_id = document.party_id
            if party_id is not None:
                if party_id not in party_names:
                    person = self.person_manager.get_person_by_id(party_id)
                    party_names[party_id] = person.name if person else config.UNKNOWN_PARTY_LABEL
                document.party_name = party_names[party_id]
        return documents

    def get_document_with_items(self, document_id: int) -> Optional[DocumentEntity]:
        """یک سند و اقلام آن را واکشی کرده و نام کالاها و طرف حساب را برای نمایش پر می‌کند."""
        logger.debug(f"Fetching document with items for ID: {document_id}")
        document = self.documents_repo.get_by_id(document_id)
        if not document:
            return None
        return self._populate([document])[0]

    def find_documents(self,
                       document_type: Optional[DocumentType] = None,
                       date_from: Optional[Instantish] = None,
                       date_to: Optional[Instantish] = None,
                       party_id: Optional[int] = None,
                       is_finalized: Optional[bool] = None,
                       include_inactive: bool = False) -> List[DocumentEntity]:
        """Documents oldest first, each with its items loaded."""
        documents = self.documents_repo.find_documents(
            document_type=_document_type(document_type) if document_type is not None else None,
            date_from=to_instant(date_from) if date_from is not None else None,
            date_to=to_upper_bound(date_to) if date_to is not None else None,
            party_id=party_id,
            is_finalized=is_finalized,
            include_inactive=include_inactive,
        )
        return self._populate(documents)

    def find_documents_for_product(self,
                                   product_id: int,
                                   date_to: Optional[Instantish] = None,
                                   include_drafts: bool = True,
                                   include_inactive: bool = False) -> List[DocumentEntity]:
        """Documents with at least one line for the product; the input of the cardex."""
        documents = self.documents_repo.find_documents(
            date_to=to_upper_bound(date_to) if date_to is not None else None,
            is_finalized=None if include_drafts else True,
            include_inactive=include_inactive,
            product_id=product_id,
        )
        return self._populate(documents)
