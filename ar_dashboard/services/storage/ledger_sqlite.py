"""
SQLite-based ledger storage for production use.

Provides persistent storage of suppliers, invoices and invoice line items.
Monetary columns are stored as TEXT decimal strings so cents survive the
round trip untouched.
"""

import sqlite3
from contextlib import closing
from datetime import datetime, UTC
from typing import Optional
from .ledger_base import LedgerStoreBase, SupplierInUseError, to_row_values

SUPPLIER_COLUMNS = ("name", "contact_person", "email", "phone", "address")
INVOICE_COLUMNS = (
    "supplier_id", "invoice_number", "total_amount", "currency",
    "due_date", "is_paid", "payment_date", "notes",
)
ITEM_COLUMNS = ("description", "quantity", "unit_price", "total_price")


class SQLiteLedgerStore(LedgerStoreBase):
    """
    SQLite-backed ledger store with persistent storage.

    Features:
    - Persistent storage across application restarts
    - Foreign keys between suppliers, invoices and items
    - Item replacement and invoice deletion run in one transaction
    """

    def __init__(self, db_path: str = "ledger.db"):
        """
        Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (default: ledger.db)
        """
        self.db_path = db_path
        self._init_database()

    def _init_database(self):
        """Create tables if they don't exist"""
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS suppliers (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                contact_person TEXT,
                email TEXT,
                phone TEXT,
                address TEXT,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS invoices (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                supplier_id INTEGER REFERENCES suppliers(id),
                invoice_number TEXT,
                total_amount TEXT NOT NULL,
                currency TEXT NOT NULL DEFAULT 'USD',
                due_date TEXT NOT NULL,
                is_paid INTEGER NOT NULL DEFAULT 0,
                payment_date TEXT,
                notes TEXT,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS invoice_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                invoice_id INTEGER NOT NULL REFERENCES invoices(id) ON DELETE CASCADE,
                description TEXT NOT NULL,
                quantity TEXT,
                unit_price TEXT,
                total_price TEXT NOT NULL
            )
        """)

        # Create indexes for common queries
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_invoices_supplier
            ON invoices(supplier_id)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_items_invoice
            ON invoice_items(invoice_id)
        """)

        conn.commit()
        conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory and foreign keys enabled"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @staticmethod
    def _invoice_row(row: sqlite3.Row) -> dict:
        data = dict(row)
        data["is_paid"] = bool(data["is_paid"])
        return data

    # Suppliers

    def create_supplier(self, data: dict) -> dict:
        values = to_row_values({k: data.get(k) for k in SUPPLIER_COLUMNS})
        created_at = datetime.now(UTC).isoformat()

        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("""
            INSERT INTO suppliers (name, contact_person, email, phone, address, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (*(values[k] for k in SUPPLIER_COLUMNS), created_at))

        supplier_id = cursor.lastrowid
        conn.commit()
        conn.close()

        return self.get_supplier(supplier_id)

    def get_supplier(self, supplier_id: int) -> Optional[dict]:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("SELECT * FROM suppliers WHERE id = ?", (supplier_id,))

        row = cursor.fetchone()
        conn.close()

        return dict(row) if row is not None else None

    def list_suppliers(self) -> list:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("SELECT * FROM suppliers ORDER BY id")

        rows = cursor.fetchall()
        conn.close()

        return [dict(row) for row in rows]

    def update_supplier(self, supplier_id: int, data: dict) -> Optional[dict]:
        values = to_row_values({k: v for k, v in data.items() if k in SUPPLIER_COLUMNS})
        if values:
            assignments = ", ".join(f"{column} = ?" for column in values)

            conn = self._get_connection()
            cursor = conn.cursor()
            cursor.execute(
                f"UPDATE suppliers SET {assignments} WHERE id = ?",
                (*values.values(), supplier_id),
            )
            conn.commit()
            conn.close()

        return self.get_supplier(supplier_id)

    def delete_supplier(self, supplier_id: int) -> bool:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("SELECT COUNT(*) FROM invoices WHERE supplier_id = ?", (supplier_id,))
        owned = cursor.fetchone()[0]
        if owned:
            conn.close()
            raise SupplierInUseError(supplier_id, owned)

        cursor.execute("DELETE FROM suppliers WHERE id = ?", (supplier_id,))

        rows_affected = cursor.rowcount
        conn.commit()
        conn.close()

        return rows_affected > 0

    # Invoices

    @staticmethod
    def _insert_items(cursor: sqlite3.Cursor, invoice_id: int, items: list):
        for item in items:
            values = to_row_values({k: item.get(k) for k in ITEM_COLUMNS})
            cursor.execute("""
                INSERT INTO invoice_items (invoice_id, description, quantity, unit_price, total_price)
                VALUES (?, ?, ?, ?, ?)
            """, (invoice_id, *(values[k] for k in ITEM_COLUMNS)))

    def create_invoice(self, data: dict, items: Optional[list] = None) -> dict:
        values = to_row_values({k: data.get(k) for k in INVOICE_COLUMNS})
        values["currency"] = values["currency"] or "USD"
        values["is_paid"] = int(bool(values["is_paid"]))
        created_at = datetime.now(UTC).isoformat()

        with closing(self._get_connection()) as conn, conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO invoices (supplier_id, invoice_number, total_amount, currency,
                                      due_date, is_paid, payment_date, notes, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (*(values[k] for k in INVOICE_COLUMNS), created_at))
            invoice_id = cursor.lastrowid
            self._insert_items(cursor, invoice_id, items or [])

        return self.get_invoice(invoice_id)

    def get_invoice(self, invoice_id: int) -> Optional[dict]:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("SELECT * FROM invoices WHERE id = ?", (invoice_id,))
        row = cursor.fetchone()
        if row is None:
            conn.close()
            return None

        cursor.execute("""
            SELECT id, invoice_id, description, quantity, unit_price, total_price
            FROM invoice_items
            WHERE invoice_id = ?
            ORDER BY id
        """, (invoice_id,))
        items = [dict(item) for item in cursor.fetchall()]
        conn.close()

        return {**self._invoice_row(row), "items": items}

    def list_invoices(self) -> list:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("SELECT * FROM invoices ORDER BY id")

        rows = cursor.fetchall()
        conn.close()

        return [self._invoice_row(row) for row in rows]

    def list_invoices_for_supplier(self, supplier_id: int) -> list:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("SELECT * FROM invoices WHERE supplier_id = ? ORDER BY id", (supplier_id,))

        rows = cursor.fetchall()
        conn.close()

        return [self._invoice_row(row) for row in rows]

    def update_invoice(self, invoice_id: int, data: dict, items: Optional[list] = None) -> Optional[dict]:
        values = to_row_values({k: v for k, v in data.items() if k in INVOICE_COLUMNS})
        if "is_paid" in values:
            values["is_paid"] = int(bool(values["is_paid"]))

        if self.get_invoice(invoice_id) is None:
            return None

        with closing(self._get_connection()) as conn, conn:
            cursor = conn.cursor()
            if values:
                assignments = ", ".join(f"{column} = ?" for column in values)
                cursor.execute(
                    f"UPDATE invoices SET {assignments} WHERE id = ?",
                    (*values.values(), invoice_id),
                )
            if items is not None:
                cursor.execute("DELETE FROM invoice_items WHERE invoice_id = ?", (invoice_id,))
                self._insert_items(cursor, invoice_id, items)

        return self.get_invoice(invoice_id)

    def mark_paid(self, invoice_id: int, payment_date: str) -> Optional[dict]:
        return self.update_invoice(invoice_id, {"is_paid": True, "payment_date": payment_date})

    def delete_invoice(self, invoice_id: int) -> bool:
        with closing(self._get_connection()) as conn, conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM invoices WHERE id = ?", (invoice_id,))
            rows_affected = cursor.rowcount

        return rows_affected > 0
