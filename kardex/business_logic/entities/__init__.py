# kardex/business_logic/entities/__init__.py
from .base_entity import BaseEntity
from .product_entity import ProductEntity
from .person_entity import PersonEntity
from .document_item_entity import DocumentItemEntity
from .document_entity import DocumentEntity
from .inventory_movement_entity import InventoryMovementEntity
from .company_entity import CompanyEntity
from .cardex_entity import CardexEntry, SummaryBucket, ProductMovementSummary

__all__ = [
    "BaseEntity", "ProductEntity", "PersonEntity", "DocumentItemEntity",
    "DocumentEntity", "InventoryMovementEntity", "CompanyEntity",
    "CardexEntry", "SummaryBucket", "ProductMovementSummary",
]
