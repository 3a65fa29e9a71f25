from datetime import date
import httpx
from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger
from ..deps import get_store, require_supplier
from ...models.ledger import (
    OutstandingResponse,
    StatementLine,
    SupplierCreate,
    SupplierUpdate,
    SupplierWithBalance,
)
from ...services.aggregator import (
    compute_aging_buckets,
    compute_outstanding_balance,
    days_overdue,
    unpaid_invoices,
)
from ...services.ar_types import InvoiceRecord, SupplierRecord, as_date, load_invoices
from ...services.documents import render_statement_pdf
from ...services.notify import post_overdue_reminder
from ...services.storage import LedgerStoreBase, SupplierInUseError

router = APIRouter(prefix="/suppliers", tags=["suppliers"])


@router.get("", response_model=list[SupplierWithBalance])
async def list_suppliers(store: LedgerStoreBase = Depends(get_store)):
    """List suppliers with their outstanding balance"""
    invoices = load_invoices(store.list_invoices())
    return [
        SupplierWithBalance(**row, outstanding_amount=compute_outstanding_balance(row["id"], invoices))
        for row in store.list_suppliers()
    ]


@router.post("", response_model=SupplierRecord, status_code=201)
async def create_supplier(req: SupplierCreate, store: LedgerStoreBase = Depends(get_store)):
    row = store.create_supplier(req.model_dump())
    logger.info("Supplier created", supplier_id=row["id"], name=row["name"])
    return row


@router.get("/{supplier_id}", response_model=SupplierWithBalance)
async def get_supplier(supplier_id: int, store: LedgerStoreBase = Depends(get_store)):
    supplier = require_supplier(store, supplier_id)
    invoices = load_invoices(store.list_invoices_for_supplier(supplier_id))
    return SupplierWithBalance(
        **supplier.model_dump(),
        outstanding_amount=compute_outstanding_balance(supplier_id, invoices),
    )


@router.patch("/{supplier_id}", response_model=SupplierRecord)
async def update_supplier(supplier_id: int, req: SupplierUpdate, store: LedgerStoreBase = Depends(get_store)):
    require_supplier(store, supplier_id)
    return store.update_supplier(supplier_id, req.model_dump(exclude_unset=True))


@router.delete("/{supplier_id}")
async def delete_supplier(supplier_id: int, store: LedgerStoreBase = Depends(get_store)):
    try:
        deleted = store.delete_supplier(supplier_id)
    except SupplierInUseError as e:
        logger.warning("Supplier delete blocked", supplier_id=supplier_id, invoices=e.invoice_count)
        raise HTTPException(status_code=409, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return {"deleted": True, "supplier_id": supplier_id}


@router.get("/{supplier_id}/invoices", response_model=list[InvoiceRecord])
async def list_supplier_invoices(supplier_id: int, store: LedgerStoreBase = Depends(get_store)):
    require_supplier(store, supplier_id)
    return load_invoices(store.list_invoices_for_supplier(supplier_id))


@router.get("/{supplier_id}/outstanding", response_model=OutstandingResponse)
async def supplier_outstanding(
    supplier_id: int,
    as_of: date | None = None,
    store: LedgerStoreBase = Depends(get_store),
):
    """
    Outstanding balance for one supplier plus the unpaid invoices behind it.

    Each line carries the days overdue as of ``as_of`` (default: today),
    the same content the account statement PDF prints.
    """
    require_supplier(store, supplier_id)
    today = as_date(as_of)
    open_invoices = unpaid_invoices(store.list_invoices_for_supplier(supplier_id))

    return OutstandingResponse(
        supplier_id=supplier_id,
        as_of=today,
        outstanding_amount=compute_outstanding_balance(supplier_id, open_invoices),
        invoices=[
            StatementLine(
                invoice_id=inv.id,
                invoice_number=inv.display_number,
                due_date=inv.due_date,
                total_amount=inv.total_amount,
                days_overdue=days_overdue(inv, today),
            )
            for inv in open_invoices
        ],
    )


@router.get("/{supplier_id}/statement.pdf")
async def supplier_statement(
    supplier_id: int,
    as_of: date | None = None,
    store: LedgerStoreBase = Depends(get_store),
):
    """Account statement PDF listing the supplier's unpaid invoices"""
    supplier = require_supplier(store, supplier_id)
    invoices = load_invoices(store.list_invoices_for_supplier(supplier_id))
    pdf = render_statement_pdf(supplier, invoices, reference_date=as_of)

    filename = f"statement-{supplier_id}-{as_date(as_of).isoformat()}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.post("/{supplier_id}/remind")
async def remind_supplier(supplier_id: int, store: LedgerStoreBase = Depends(get_store)):
    """Post an outstanding-balance reminder card to Teams"""
    supplier = require_supplier(store, supplier_id)
    invoices = load_invoices(store.list_invoices_for_supplier(supplier_id))
    balance = compute_outstanding_balance(supplier_id, invoices)

    if not balance:
        return {"result": {"status": "skipped", "reason": "No outstanding balance"}, "outstanding_amount": 0.0}

    try:
        result = await post_overdue_reminder(supplier, balance, compute_aging_buckets(invoices))
    except httpx.HTTPError as e:
        logger.error(f"Reminder webhook failed: {e}")
        raise HTTPException(status_code=502, detail="Reminder webhook failed")

    return {"result": result, "outstanding_amount": float(balance)}
