# kardex/data_access/database_manager.py

import sqlite3
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from kardex import config
from kardex.constants import DocumentType, MovementType, PersonType, AdjustmentDirection

logger = logging.getLogger(__name__)


def _in_list(enum_cls) -> str:
    return ", ".join(f"'{member.value}'" for member in enum_cls)


class DatabaseManager:
    """
    Opens a short-lived sqlite connection per operation, or pins a single
    connection for the duration of ``transaction()`` so that every repository
    call inside it joins the same unit of work.

    Every operation opens its own connection, so ``:memory:`` databases do not
    persist between calls; use a file path.

    The connection stack and the pinned transaction are per thread: one
    manager can serve concurrent readers, and a reader never joins another
    thread's open transaction.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or config.DATABASE_PATH
        self._local = threading.local()

    @property
    def _opened(self) -> List[Optional[sqlite3.Connection]]:
        if not hasattr(self._local, "opened"):
            self._local.opened = []
        return self._local.opened

    @property
    def _tx_conn(self) -> Optional[sqlite3.Connection]:
        return getattr(self._local, "tx_conn", None)

    @_tx_conn.setter
    def _tx_conn(self, conn: Optional[sqlite3.Connection]) -> None:
        self._local.tx_conn = conn

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row  # Access columns by name
            conn.execute("PRAGMA foreign_keys = ON;")  # Enforce foreign key constraints
            logger.debug(f"Database connection established to {self.db_path}")
            return conn
        except sqlite3.Error as e:
            logger.error(f"Error connecting to database {self.db_path}: {e}")
            raise

    def __enter__(self) -> sqlite3.Connection:
        if self._tx_conn is not None:
            self._opened.append(None)
            return self._tx_conn
        conn = self._connect()
        self._opened.append(conn)
        return conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        conn = self._opened.pop() if self._opened else None
        if conn is not None:
            conn.close()
            logger.debug("Database connection closed.")

    @property
    def in_transaction(self) -> bool:
        return self._tx_conn is not None

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Runs the enclosed repository calls atomically: commit on success,
        rollback on any exception. Nested calls join the outer transaction.
        """
        if self._tx_conn is not None:
            yield self._tx_conn
            return

        conn = self._connect()
        conn.isolation_level = None  # explicit BEGIN/COMMIT below
        conn.execute("BEGIN")
        self._tx_conn = conn
        logger.debug("Transaction started.")
        try:
            yield conn
            conn.execute("COMMIT")
            logger.debug("Transaction committed.")
        except BaseException:
            conn.execute("ROLLBACK")
            logger.warning("Transaction rolled back.")
            raise
        finally:
            self._tx_conn = None
            conn.close()

    def execute_query(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                if not self.in_transaction:
                    conn.commit()
                return cursor
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {query} with params {params} - {e}")
            raise

    def fetch_one(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                return cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Fetch one failed: {query} with params {params} - {e}")
            raise

    def fetch_all(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                return cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Fetch all failed: {query} with params {params} - {e}")
            raise

    def create_tables(self):
        queries = [
            f"""
            CREATE TABLE IF NOT EXISTS products (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                code TEXT NOT NULL,
                name TEXT NOT NULL,
                unit TEXT NOT NULL,
                category TEXT,
                description TEXT,
                minimum_stock TEXT NOT NULL DEFAULT '0',
                maximum_stock TEXT,
                is_active INTEGER NOT NULL DEFAULT 1
            );
            """,
            # product codes only need to be unique among active products
            """
            CREATE UNIQUE INDEX IF NOT EXISTS ux_products_active_code
                ON products (code) WHERE is_active = 1;
            """,
            f"""
            CREATE TABLE IF NOT EXISTS persons (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                person_type TEXT NOT NULL CHECK(person_type IN ({_in_list(PersonType)})),
                national_code TEXT,
                economic_code TEXT,
                phone TEXT,
                address TEXT,
                is_active INTEGER NOT NULL DEFAULT 1
            );
            """,
            f"""
            CREATE TABLE IF NOT EXISTS documents (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                document_type TEXT NOT NULL CHECK(document_type IN ({_in_list(DocumentType)})),
                document_number TEXT NOT NULL,
                document_date TEXT NOT NULL, -- ISO-8601 UTC instant
                supplier_id INTEGER,
                customer_id INTEGER,
                total_amount TEXT NOT NULL DEFAULT '0',
                is_finalized INTEGER NOT NULL DEFAULT 0,
                is_active INTEGER NOT NULL DEFAULT 1,
                description TEXT,
                created_at TEXT,
                updated_at TEXT,
                UNIQUE (document_type, document_number),
                FOREIGN KEY (supplier_id) REFERENCES persons(id) ON DELETE SET NULL,
                FOREIGN KEY (customer_id) REFERENCES persons(id) ON DELETE SET NULL
            );
            """,
            f"""
            CREATE TABLE IF NOT EXISTS document_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                document_id INTEGER NOT NULL,
                product_id INTEGER,
                quantity TEXT NOT NULL,
                unit_price TEXT NOT NULL,
                direction TEXT CHECK(direction IS NULL OR direction IN ({_in_list(AdjustmentDirection)})),
                description TEXT,
                line_number INTEGER NOT NULL DEFAULT 0,
                FOREIGN KEY (document_id) REFERENCES documents(id) ON DELETE CASCADE,
                FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE SET NULL
            );
            """,
            f"""
            CREATE TABLE IF NOT EXISTS inventory_movements (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                product_id INTEGER NOT NULL,
                movement_type TEXT NOT NULL CHECK(movement_type IN ({_in_list(MovementType)})),
                quantity TEXT NOT NULL,
                unit_price TEXT NOT NULL,
                movement_date TEXT NOT NULL,
                document_id INTEGER,
                document_item_id INTEGER,
                description TEXT,
                FOREIGN KEY (document_id) REFERENCES documents(id) ON DELETE CASCADE
            );
            """,
            """
            CREATE TABLE IF NOT EXISTS companies (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                fiscal_year_start TEXT NOT NULL,
                fiscal_year_end TEXT NOT NULL,
                national_code TEXT,
                economic_code TEXT,
                address TEXT,
                phone TEXT,
                email TEXT,
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TEXT
            );
            """,
            # at most one active company
            """
            CREATE UNIQUE INDEX IF NOT EXISTS ux_companies_single_active
                ON companies (is_active) WHERE is_active = 1;
            """,
            "CREATE INDEX IF NOT EXISTS ix_documents_date ON documents (document_date);",
            "CREATE INDEX IF NOT EXISTS ix_document_items_product ON document_items (product_id);",
            "CREATE INDEX IF NOT EXISTS ix_movements_product_date ON inventory_movements (product_id, movement_date);",
            "CREATE INDEX IF NOT EXISTS ix_movements_document ON inventory_movements (document_id);",
        ]

        try:
            with self as conn:
                for query in queries:
                    conn.execute(query)
                conn.commit()
            logger.info(f"Database schema ready at {self.db_path} ({len(queries)} statements).")
        except sqlite3.Error as e:
            logger.error(f"Error creating tables: {e}", exc_info=True)
            raise
