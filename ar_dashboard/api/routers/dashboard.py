from datetime import date
from fastapi import APIRouter, Depends, HTTPException
from ..deps import get_store
from ...core.config import settings
from ...models.ledger import AgingResponse
from ...services.aggregator import (
    AROverview,
    OverdueSummary,
    SupplierBalance,
    SupplierRevenueReport,
    compute_aging_buckets,
    compute_ar_overview,
    compute_ar_overview_by_currency,
    compute_overdue_summary,
    compute_supplier_balances,
    compute_supplier_revenue,
    parse_window,
)
from ...services.ar_types import as_date, load_invoices
from ...services.storage import LedgerStoreBase

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/aging", response_model=AgingResponse)
async def aging(as_of: date | None = None, store: LedgerStoreBase = Depends(get_store)):
    """Unpaid amounts bucketed by days past due (0-30, 31-60, 61-90, 90+)"""
    today = as_date(as_of)
    return AgingResponse(as_of=today, buckets=compute_aging_buckets(store.list_invoices(), today))


@router.get("/overview", response_model=AROverview)
async def overview(store: LedgerStoreBase = Depends(get_store)):
    return compute_ar_overview(store.list_invoices())


@router.get("/overview/by-currency", response_model=dict[str, AROverview])
async def overview_by_currency(store: LedgerStoreBase = Depends(get_store)):
    return compute_ar_overview_by_currency(store.list_invoices())


@router.get("/summary", response_model=OverdueSummary)
async def summary(as_of: date | None = None, store: LedgerStoreBase = Depends(get_store)):
    return compute_overdue_summary(store.list_invoices(), as_of)


@router.get("/revenue", response_model=SupplierRevenueReport)
async def supplier_revenue(
    window: str | None = None,
    as_of: date | None = None,
    store: LedgerStoreBase = Depends(get_store),
):
    """
    Suppliers ranked by invoiced revenue.

    ``window`` is a day count or "all" (default: DEFAULT_REVENUE_WINDOW).
    A day count keeps invoices that fell due at most that many days ago,
    including ones not yet due.
    """
    try:
        parsed = parse_window(window or settings.default_revenue_window)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    invoices = load_invoices(store.list_invoices())
    return compute_supplier_revenue(store.list_suppliers(), invoices, parsed, as_of)


@router.get("/supplier-balances", response_model=list[SupplierBalance])
async def supplier_balances(store: LedgerStoreBase = Depends(get_store)):
    return compute_supplier_balances(store.list_suppliers(), store.list_invoices())
