# kardex/app.py
import logging
from typing import Optional

from kardex import config

# --- Data Access Layer (DAL) ---
from kardex.data_access.database_manager import DatabaseManager
from kardex.data_access.products_repository import ProductsRepository
from kardex.data_access.persons_repository import PersonsRepository
from kardex.data_access.documents_repository import DocumentsRepository
from kardex.data_access.document_items_repository import DocumentItemsRepository
from kardex.data_access.inventory_movements_repository import InventoryMovementsRepository
from kardex.data_access.companies_repository import CompaniesRepository

# --- Business Logic Layer (BLL) ---
from kardex.business_logic.product_manager import ProductManager
from kardex.business_logic.person_manager import PersonManager
from kardex.business_logic.inventory_movement_manager import InventoryMovementManager
from kardex.business_logic.document_manager import DocumentManager
from kardex.business_logic.reports_manager import ReportsManager
from kardex.business_logic.company_manager import CompanyManager

logger = logging.getLogger(__name__)


class KardexApp:
    """Builds the database, the repositories and the managers that sit on them."""

    def __init__(self, db_path: Optional[str] = None):
        logger.info("Initializing Database Manager and creating tables...")
        self.db_manager = DatabaseManager(db_path or config.DATABASE_PATH)
        try:
            self.db_manager.create_tables()
            logger.info("Database tables checked/created successfully.")
        except Exception as e:
            logger.error(f"FATAL: Could not initialize database: {e}", exc_info=True)
            raise

        self.products_repo = ProductsRepository(self.db_manager)
        self.persons_repo = PersonsRepository(self.db_manager)
        self.documents_repo = DocumentsRepository(self.db_manager)
        self.document_items_repo = DocumentItemsRepository(self.db_manager)
        self.inventory_movements_repo = InventoryMovementsRepository(self.db_manager)
        self.companies_repo = CompaniesRepository(self.db_manager)

        self.product_manager = ProductManager(self.products_repo)
        self.person_manager = PersonManager(self.persons_repo)
        self.movement_manager = InventoryMovementManager(
            inventory_movements_repository=self.inventory_movements_repo,
            documents_repository=self.documents_repo,
            document_items_repository=self.document_items_repo,
        )
        self.document_manager = DocumentManager(
            documents_repository=self.documents_repo,
            document_items_repository=self.document_items_repo,
            movement_manager=self.movement_manager,
            product_manager=self.product_manager,
            person_manager=self.person_manager,
        )
        self.reports_manager = ReportsManager(
            document_manager=self.document_manager,
            product_manager=self.product_manager,
        )
        self.company_manager = CompanyManager(self.companies_repo)
        logger.info("All managers initialized.")


def main():
    config.ensure_directories()
    config.setup_logging()
    logger.info("Application starting...")
    app = KardexApp()
    stats = app.reports_manager.get_dashboard_stats()
    logger.info(f"{app.company_manager.get_company_name()}: {stats}")
    return app


if __name__ == '__main__':
    main()
