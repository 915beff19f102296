# kardex/business_logic/__init__.py
from .product_manager import ProductManager
from .person_manager import PersonManager
from .inventory_movement_manager import InventoryMovementManager
from .document_manager import DocumentManager
from .reports_manager import ReportsManager
from .company_manager import CompanyManager
from .valuation import compute_cardex, compute_product_movement_summary
