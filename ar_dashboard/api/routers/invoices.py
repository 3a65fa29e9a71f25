from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger
from ..deps import get_store, require_invoice, require_supplier
from ...models.ledger import InvoiceCreate, InvoiceUpdate, PaymentRequest, check_items_total
from ...services.ar_types import InvoiceRecord, load_invoices, load_supplier
from ...services.documents import render_invoice_pdf
from ...services.storage import LedgerStoreBase

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("", response_model=list[InvoiceRecord])
async def list_invoices(
    supplier_id: int | None = None,
    is_paid: bool | None = None,
    store: LedgerStoreBase = Depends(get_store),
):
    rows = store.list_invoices() if supplier_id is None else store.list_invoices_for_supplier(supplier_id)
    invoices = load_invoices(rows)
    if is_paid is not None:
        invoices = [inv for inv in invoices if inv.is_paid == is_paid]
    return invoices


@router.post("", response_model=InvoiceRecord, status_code=201)
async def create_invoice(req: InvoiceCreate, store: LedgerStoreBase = Depends(get_store)):
    """
    Create an invoice together with its line items.

    Example request:
    {
        "supplier_id": 1,
        "invoice_number": "INV-1001",
        "total_amount": "450.00",
        "due_date": "2025-11-15",
        "items": [
            {"description": "Paperbacks", "quantity": 30, "unit_price": "15.00", "total_price": "450.00"}
        ]
    }
    """
    if req.supplier_id is not None:
        require_supplier(store, req.supplier_id)

    data = req.model_dump(exclude={"items"})
    row = store.create_invoice(data, [item.model_dump() for item in req.items])
    logger.info(
        "Invoice created",
        invoice_id=row["id"],
        supplier_id=req.supplier_id,
        total_amount=str(req.total_amount),
        items=len(req.items),
    )
    return row


@router.get("/{invoice_id}", response_model=InvoiceRecord)
async def get_invoice(invoice_id: int, store: LedgerStoreBase = Depends(get_store)):
    return require_invoice(store, invoice_id)


@router.patch("/{invoice_id}", response_model=InvoiceRecord)
async def update_invoice(invoice_id: int, req: InvoiceUpdate, store: LedgerStoreBase = Depends(get_store)):
    current = require_invoice(store, invoice_id)
    if req.supplier_id is not None:
        require_supplier(store, req.supplier_id)

    # Line items must still add up once the update is applied
    total = req.total_amount if req.total_amount is not None else current.total_amount
    try:
        if req.items is not None:
            check_items_total(total, req.items)
        elif req.total_amount is not None and current.items:
            if current.items_total() != total:
                raise ValueError(
                    f"total_amount {total} does not match sum of line items {current.items_total()}"
                )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    data = req.model_dump(exclude_unset=True, exclude={"items"})

    # Keep payment_date in step with the paid flag
    if "is_paid" in data:
        if not data["is_paid"]:
            data["payment_date"] = None
        elif not current.is_paid and data.get("payment_date") is None:
            data["payment_date"] = date.today()

    items = None if req.items is None else [item.model_dump() for item in req.items]
    return store.update_invoice(invoice_id, data, items)


@router.post("/{invoice_id}/pay", response_model=InvoiceRecord)
async def pay_invoice(
    invoice_id: int,
    req: PaymentRequest | None = None,
    store: LedgerStoreBase = Depends(get_store),
):
    """Mark an invoice as paid (payment_date defaults to today)"""
    invoice = require_invoice(store, invoice_id)
    if invoice.is_paid:
        raise HTTPException(status_code=409, detail="Invoice already paid")

    payment_date = (req.payment_date if req and req.payment_date else date.today()).isoformat()
    row = store.mark_paid(invoice_id, payment_date)
    logger.info("Invoice marked paid", invoice_id=invoice_id, payment_date=payment_date)
    return row


@router.delete("/{invoice_id}")
async def delete_invoice(invoice_id: int, store: LedgerStoreBase = Depends(get_store)):
    if not store.delete_invoice(invoice_id):
        raise HTTPException(status_code=404, detail="Invoice not found")
    return {"deleted": True, "invoice_id": invoice_id}


@router.get("/{invoice_id}/pdf")
async def invoice_pdf(invoice_id: int, store: LedgerStoreBase = Depends(get_store)):
    invoice = require_invoice(store, invoice_id)
    supplier_row = store.get_supplier(invoice.supplier_id) if invoice.supplier_id is not None else None
    supplier = load_supplier(supplier_row) if supplier_row else None

    pdf = render_invoice_pdf(invoice, supplier)
    filename = f"invoice-{invoice.invoice_number or invoice.id}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
