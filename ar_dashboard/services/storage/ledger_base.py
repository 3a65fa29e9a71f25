"""
Abstract base class for ledger storage implementations.

Defines the supplier/invoice CRUD interface every store must implement,
enabling dependency injection and easy swapping of storage backends.
Rows are plain dicts with snake_case keys; callers validate them into
records (see ``services.ar_types``) before aggregating.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional


class SupplierInUseError(Exception):
    """Raised when deleting a supplier that still owns invoices."""

    def __init__(self, supplier_id: int, invoice_count: int):
        self.supplier_id = supplier_id
        self.invoice_count = invoice_count
        super().__init__(f"Supplier {supplier_id} still has {invoice_count} invoice(s)")


class LedgerStoreBase(ABC):
    """
    Abstract base class for supplier and invoice storage.

    Implementations can use:
    - In-memory storage (for testing/demo)
    - SQLite (for single-instance deployments)
    - PostgreSQL (for production)
    """

    # Suppliers

    @abstractmethod
    def create_supplier(self, data: dict) -> dict:
        """
        Insert a supplier and return the stored row (with its new id).

        Args:
            data: Supplier fields (name, contact_person, email, phone, address)
        """
        pass

    @abstractmethod
    def get_supplier(self, supplier_id: int) -> Optional[dict]:
        """Return a supplier row, or None if not found."""
        pass

    @abstractmethod
    def list_suppliers(self) -> list:
        """List all suppliers ordered by id."""
        pass

    @abstractmethod
    def update_supplier(self, supplier_id: int, data: dict) -> Optional[dict]:
        """
        Apply a partial update.

        Returns:
            Updated row, or None if the supplier does not exist
        """
        pass

    @abstractmethod
    def delete_supplier(self, supplier_id: int) -> bool:
        """
        Delete a supplier.

        Returns:
            True if deleted, False if not found

        Raises:
            SupplierInUseError: if invoices still reference the supplier
        """
        pass

    # Invoices

    @abstractmethod
    def create_invoice(self, data: dict, items: Optional[list] = None) -> dict:
        """
        Insert an invoice together with its line items.

        Args:
            data: Invoice fields (supplier_id, invoice_number, total_amount,
                currency, due_date, is_paid, notes)
            items: Line item dicts (description, quantity, unit_price, total_price)

        Returns:
            Stored invoice row including ``items``
        """
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: int) -> Optional[dict]:
        """Return an invoice row with its ``items``, or None if not found."""
        pass

    @abstractmethod
    def list_invoices(self) -> list:
        """List all invoices (without items) ordered by id."""
        pass

    @abstractmethod
    def list_invoices_for_supplier(self, supplier_id: int) -> list:
        """List a supplier's invoices (without items) ordered by id."""
        pass

    @abstractmethod
    def update_invoice(self, invoice_id: int, data: dict, items: Optional[list] = None) -> Optional[dict]:
        """
        Apply a partial update; when ``items`` is given it replaces all line items.

        Returns:
            Updated row including ``items``, or None if not found
        """
        pass

    @abstractmethod
    def mark_paid(self, invoice_id: int, payment_date: str) -> Optional[dict]:
        """Flag an invoice as paid on ``payment_date`` (ISO date)."""
        pass

    @abstractmethod
    def delete_invoice(self, invoice_id: int) -> bool:
        """Delete an invoice and its items. Returns False if not found."""
        pass


def to_row_values(data: dict) -> dict:
    """Convert Decimal/date values to the strings both backends store."""
    row = {}
    for key, value in data.items():
        if isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, date):
            value = value.isoformat()
        row[key] = value
    return row
