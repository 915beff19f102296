# kardex/business_logic/product_manager.py
from typing import Optional, List, Any, Dict, TYPE_CHECKING
from decimal import Decimal, InvalidOperation
import sqlite3

from kardex import config
from kardex.business_logic.entities.product_entity import ProductEntity
from kardex.constants import PRODUCT_UNITS, DEFAULT_PRODUCT_UNIT
from kardex.exceptions import ValidationError, StorageError

if TYPE_CHECKING:
    from ..data_access.products_repository import ProductsRepository

import logging

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("code", "name", "unit", "category", "description", "minimum_stock", "maximum_stock")


def _to_decimal(value: Any, field_name: str) -> Decimal:
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"مقدار عددی نامعتبر برای {field_name}: {value}", field=field_name) from None


class ProductManager:
    def __init__(self, product_repository: 'ProductsRepository'):
        if product_repository is None:
            raise ValueError("product_repository cannot be None")
        self.product_repo = product_repository

    def get_product_by_id(self, product_id: int) -> Optional[ProductEntity]:
        """یک کالا را با شناسه آن واکشی می‌کند."""
        logger.debug(f"Fetching product by ID: {product_id}")
        product = self.product_repo.get_by_id(product_id)
        if not product:
            logger.warning(f"Product with ID {product_id} not found.")
        return product

    def get_product_by_code(self, code: str) -> Optional[ProductEntity]:
        if not code:
            return None
        return self.product_repo.get_by_code(code.strip(), active_only=True)

    def get_all_products(self,
                         active_only: bool = True,
                         category: Optional[str] = None,
                         search_text: Optional[str] = None) -> List[ProductEntity]:
        """لیست کالاها با فیلتر فعال بودن، دسته‌بندی و جستجوی متنی."""
        logger.debug(f"Fetching products. Active only: {active_only}, category: {category}, search: {search_text}")
        if search_text:
            products = self.product_repo.search(search_text.strip(), active_only=active_only)
            if category:
                products = [p for p in products if p.category == category]
            return products

        criteria: Dict[str, Any] = {}
        if active_only:
            criteria["is_active"] = True
        if category:
            criteria["category"] = category
        if criteria:
            return self.product_repo.find_by_criteria(criteria, order_by="name ASC")
        return self.product_repo.get_all(order_by="name ASC")

    def get_categories(self) -> List[str]:
        return self.product_repo.get_categories()

    def _validate(self, product: ProductEntity, product_id: Optional[int] = None) -> None:
        if not product.code or not product.code.strip():
            raise ValidationError("کد کالا نمی‌تواند خالی باشد.", field="code")
        if not product.name or not product.name.strip():
            raise ValidationError("نام کالا نمی‌تواند خالی باشد.", field="name")
        if product.unit not in PRODUCT_UNITS:
            raise ValidationError(f"واحد '{product.unit}' در فهرست واحدهای مجاز نیست.", field="unit")
        if product.minimum_stock < 0:
            raise ValidationError("حداقل موجودی نمی‌تواند منفی باشد.", field="minimum_stock")
        if product.maximum_stock is not None and product.maximum_stock < product.minimum_stock:
            raise ValidationError("حداکثر موجودی نمی‌تواند کمتر از حداقل موجودی باشد.", field="maximum_stock")

        existing = self.product_repo.get_by_code(product.code, active_only=True)
        if existing and existing.id != product_id:
            raise ValidationError(f"کالای دیگری با کد '{product.code}' از قبل موجود است (شناسه: {existing.id}).",
                                  field="code")

    def create_product(self,
                       code: str,
                       name: str,
                       unit: str = DEFAULT_PRODUCT_UNIT,
                       category: Optional[str] = None,
                       description: Optional[str] = None,
                       minimum_stock: Any = Decimal("0.0"),
                       maximum_stock: Any = None) -> ProductEntity:
        product = ProductEntity(
            code=(code or "").strip(),
            name=(name or "").strip(),
            unit=unit,
            category=category,
            description=description,
            minimum_stock=_to_decimal(minimum_stock if minimum_stock is not None else "0", "minimum_stock"),
            maximum_stock=_to_decimal(maximum_stock, "maximum_stock") if maximum_stock is not None else None,
        )
        self._validate(product)
        try:
            created = self.product_repo.add(product)
        except sqlite3.IntegrityError as e:
            raise ValidationError(f"ثبت کالا با کد '{product.code}' ممکن نیست: {e}", field="code") from e
        except sqlite3.Error as e:
            logger.error(f"Error adding product '{product.code}': {e}", exc_info=True)
            raise StorageError(f"Could not save product '{product.code}'") from e
        logger.info(f"Product '{created.name}' (ID: {created.id}) created successfully.")
        return created

    def update_product(self, product_id: int, update_data: Dict[str, Any]) -> ProductEntity:
        """یک کالای موجود را به‌روزرسانی می‌کند."""
        logger.info(f"Attempting to update product ID: {product_id} with data: {update_data}")
        product = self.product_repo.get_by_id(product_id)
        if not product:
            raise ValidationError(f"کالا با شناسه {product_id} یافت نشد.", field="id")

        unknown = set(update_data) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"فیلدهای نامعتبر برای کالا: {', '.join(sorted(unknown))}")

        for key, value in update_data.items():
            if key == "minimum_stock":
                value = _to_decimal(value if value is not None else "0", key)
            elif key == "maximum_stock" and value is not None:
                value = _to_decimal(value, key)
            elif key in ("code", "name") and isinstance(value, str):
                value = value.strip()
            setattr(product, key, value)

        self._validate(product, product_id=product_id)
        try:
            self.product_repo.update(product)
        except sqlite3.Error as e:
            logger.error(f"Error updating product {product_id}: {e}", exc_info=True)
            raise StorageError(f"Could not update product {product_id}") from e
        logger.info(f"Product ID {product_id} updated.")
        return product

    def set_product_activity(self, product_id: int, is_active: bool) -> bool:
        """حذف نرم: کالا غیرفعال می‌شود و اسناد گذشته همچنان به آن ارجاع می‌دهند."""
        product = self.product_repo.get_by_id(product_id)
        if not product:
            logger.warning(f"Cannot change activity of missing product {product_id}.")
            return False
        clash = self.product_repo.get_by_code(product.code, active_only=True) if is_active else None
        if clash and clash.id != product_id:
            raise ValidationError(f"کالای فعال دیگری با کد '{product.code}' وجود دارد.", field="code")
        product.is_active = is_active
        self.product_repo.update(product)
        logger.info(f"Product ID {product_id} active flag set to {is_active}.")
        return True

    def get_product_display_details(self, product_id: Optional[int]) -> Dict[str, str]:
        """نام، کد و واحد کالا برای نمایش؛ برای کالای حذف شده یک جایگزین برمی‌گرداند."""
        product = self.product_repo.get_by_id(product_id) if product_id is not None else None
        if product is None:
            logger.warning(f"Product {product_id} referenced by a document no longer exists.")
            return {
                "name": config.DELETED_PRODUCT_LABEL,
                "code": config.DELETED_PRODUCT_CODE,
                "unit": "",
            }
        return {"name": product.name, "code": product.code, "unit": product.unit}
