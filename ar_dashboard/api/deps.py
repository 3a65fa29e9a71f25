from fastapi import HTTPException
from ..services.ar_types import InvoiceRecord, SupplierRecord, load_invoice, load_supplier
from ..services.storage import LedgerStoreBase, ledger_store


def get_store() -> LedgerStoreBase:
    """Ledger store dependency (overridden in tests)"""
    return ledger_store


def require_supplier(store: LedgerStoreBase, supplier_id: int) -> SupplierRecord:
    row = store.get_supplier(supplier_id)
    if not row:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return load_supplier(row)


def require_invoice(store: LedgerStoreBase, invoice_id: int) -> InvoiceRecord:
    row = store.get_invoice(invoice_id)
    if not row:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return load_invoice(row)
