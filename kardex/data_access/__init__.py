# kardex/data_access/__init__.py

from .database_manager import DatabaseManager
from .base_repository import BaseRepository

from .products_repository import ProductsRepository
from .persons_repository import PersonsRepository
from .documents_repository import DocumentsRepository
from .document_items_repository import DocumentItemsRepository
from .inventory_movements_repository import InventoryMovementsRepository
from .companies_repository import CompaniesRepository
