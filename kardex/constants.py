# kardex/constants.py

from enum import Enum


class PersonType(Enum):
    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"

    @property
    def label(self) -> str:
        return PERSON_TYPE_LABELS[self]


class DocumentType(Enum):
    INITIAL_STOCK = "INITIAL_STOCK"
    PURCHASE_INVOICE = "PURCHASE_INVOICE"
    SALE_INVOICE = "SALE_INVOICE"
    STOCK_ADJUSTMENT = "STOCK_ADJUSTMENT"

    @property
    def label(self) -> str:
        return DOCUMENT_TYPE_LABELS[self]


class MovementType(Enum):
    INITIAL_STOCK = "INITIAL_STOCK"
    PURCHASE = "PURCHASE"
    SALE = "SALE"
    ADJUSTMENT_IN = "ADJUSTMENT_IN"
    ADJUSTMENT_OUT = "ADJUSTMENT_OUT"

    @property
    def label(self) -> str:
        return MOVEMENT_TYPE_LABELS[self]

    @property
    def is_outgoing(self) -> bool:
        return self in OUTGOING_MOVEMENT_TYPES


class AdjustmentDirection(Enum):
    IN = "IN"
    OUT = "OUT"


PERSON_TYPE_LABELS = {
    PersonType.CUSTOMER: "مشتری",
    PersonType.SUPPLIER: "تامین کننده",
}

DOCUMENT_TYPE_LABELS = {
    DocumentType.INITIAL_STOCK: "موجودی اولیه",
    DocumentType.PURCHASE_INVOICE: "فاکتور خرید",
    DocumentType.SALE_INVOICE: "فاکتور فروش",
    DocumentType.STOCK_ADJUSTMENT: "تعدیل موجودی",
}

MOVEMENT_TYPE_LABELS = {
    MovementType.INITIAL_STOCK: "موجودی اولیه",
    MovementType.PURCHASE: "خرید",
    MovementType.SALE: "فروش",
    MovementType.ADJUSTMENT_IN: "تعدیل موجودی (افزایش)",
    MovementType.ADJUSTMENT_OUT: "تعدیل موجودی (کاهش)",
}

OUTGOING_MOVEMENT_TYPES = frozenset({MovementType.SALE, MovementType.ADJUSTMENT_OUT})
INCOMING_MOVEMENT_TYPES = frozenset({
    MovementType.INITIAL_STOCK, MovementType.PURCHASE, MovementType.ADJUSTMENT_IN,
})

# Movement type emitted for each document line; STOCK_ADJUSTMENT depends on the item direction.
DOCUMENT_MOVEMENT_TYPES = {
    DocumentType.INITIAL_STOCK: MovementType.INITIAL_STOCK,
    DocumentType.PURCHASE_INVOICE: MovementType.PURCHASE,
    DocumentType.SALE_INVOICE: MovementType.SALE,
}

ADJUSTMENT_MOVEMENT_TYPES = {
    AdjustmentDirection.IN: MovementType.ADJUSTMENT_IN,
    AdjustmentDirection.OUT: MovementType.ADJUSTMENT_OUT,
}

# Party each document type requires; None when the type takes no party.
REQUIRED_PARTY_TYPES = {
    DocumentType.PURCHASE_INVOICE: PersonType.SUPPLIER,
    DocumentType.SALE_INVOICE: PersonType.CUSTOMER,
}

PRODUCT_UNITS = (
    "عدد", "کیلوگرم", "گرم", "تن", "لیتر", "میلی‌لیتر", "متر", "سانتی‌متر",
    "متر مربع", "متر مکعب", "جعبه", "بسته", "کارتن", "دستگاه", "جفت",
    "ست", "رول", "ورق", "شاخه", "بطری", "قوطی", "بشکه", "کیسه",
)
DEFAULT_PRODUCT_UNIT = "عدد"

OPENING_BALANCE_LABEL = "موجودی از قبل"
DRAFT_LABEL = "پیش‌نویس"
FINALIZED_LABEL = "قطعی"
