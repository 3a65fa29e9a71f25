"""
In-memory ledger storage (for tests and demos).
In production, use the SQLite store or a real database.
"""
from datetime import datetime, UTC
from typing import Dict, Optional
from .ledger_base import LedgerStoreBase, SupplierInUseError, to_row_values

SUPPLIER_FIELDS = ("name", "contact_person", "email", "phone", "address")
INVOICE_FIELDS = (
    "supplier_id", "invoice_number", "total_amount", "currency",
    "due_date", "is_paid", "payment_date", "notes",
)
ITEM_FIELDS = ("description", "quantity", "unit_price", "total_price")


class InMemoryLedgerStore(LedgerStoreBase):
    def __init__(self):
        self._suppliers: Dict[int, dict] = {}
        self._invoices: Dict[int, dict] = {}
        self._items: Dict[int, list] = {}
        self._next_id = {"supplier": 1, "invoice": 1, "item": 1}

    def _allocate(self, kind: str) -> int:
        new_id = self._next_id[kind]
        self._next_id[kind] += 1
        return new_id

    def create_supplier(self, data: dict) -> dict:
        supplier_id = self._allocate("supplier")
        row = {field: None for field in SUPPLIER_FIELDS}
        row.update(to_row_values({k: v for k, v in data.items() if k in SUPPLIER_FIELDS}))
        row["id"] = supplier_id
        row["created_at"] = datetime.now(UTC).isoformat()
        self._suppliers[supplier_id] = row
        return dict(row)

    def get_supplier(self, supplier_id: int) -> Optional[dict]:
        row = self._suppliers.get(supplier_id)
        return dict(row) if row else None

    def list_suppliers(self) -> list:
        return [dict(self._suppliers[k]) for k in sorted(self._suppliers)]

    def update_supplier(self, supplier_id: int, data: dict) -> Optional[dict]:
        if supplier_id not in self._suppliers:
            return None
        self._suppliers[supplier_id].update(
            to_row_values({k: v for k, v in data.items() if k in SUPPLIER_FIELDS})
        )
        return self.get_supplier(supplier_id)

    def delete_supplier(self, supplier_id: int) -> bool:
        if supplier_id not in self._suppliers:
            return False
        owned = len(self.list_invoices_for_supplier(supplier_id))
        if owned:
            raise SupplierInUseError(supplier_id, owned)
        del self._suppliers[supplier_id]
        return True

    def _store_items(self, invoice_id: int, items: list):
        self._items[invoice_id] = []
        for item in items:
            row = {field: None for field in ITEM_FIELDS}
            row.update(to_row_values({k: v for k, v in item.items() if k in ITEM_FIELDS}))
            row["id"] = self._allocate("item")
            row["invoice_id"] = invoice_id
            self._items[invoice_id].append(row)

    def create_invoice(self, data: dict, items: Optional[list] = None) -> dict:
        invoice_id = self._allocate("invoice")
        row = {field: None for field in INVOICE_FIELDS}
        row.update({"currency": "USD", "is_paid": False})
        row.update(to_row_values({k: v for k, v in data.items() if k in INVOICE_FIELDS}))
        row["id"] = invoice_id
        row["created_at"] = datetime.now(UTC).isoformat()
        self._invoices[invoice_id] = row
        self._store_items(invoice_id, items or [])
        return self.get_invoice(invoice_id)

    def get_invoice(self, invoice_id: int) -> Optional[dict]:
        row = self._invoices.get(invoice_id)
        if row is None:
            return None
        return {**row, "items": [dict(item) for item in self._items.get(invoice_id, [])]}

    def list_invoices(self) -> list:
        return [dict(self._invoices[k]) for k in sorted(self._invoices)]

    def list_invoices_for_supplier(self, supplier_id: int) -> list:
        return [row for row in self.list_invoices() if row["supplier_id"] == supplier_id]

    def update_invoice(self, invoice_id: int, data: dict, items: Optional[list] = None) -> Optional[dict]:
        if invoice_id not in self._invoices:
            return None
        self._invoices[invoice_id].update(
            to_row_values({k: v for k, v in data.items() if k in INVOICE_FIELDS})
        )
        if items is not None:
            self._store_items(invoice_id, items)
        return self.get_invoice(invoice_id)

    def mark_paid(self, invoice_id: int, payment_date: str) -> Optional[dict]:
        return self.update_invoice(invoice_id, {"is_paid": True, "payment_date": payment_date})

    def delete_invoice(self, invoice_id: int) -> bool:
        if invoice_id not in self._invoices:
            return False
        del self._invoices[invoice_id]
        self._items.pop(invoice_id, None)
        return True
