"""
Accounts-receivable aggregation over invoice and supplier snapshots.

Every function here is pure: it reads the records it is given, never touches
the ledger store, and returns fresh values. Inputs may be typed records or
plain mappings straight from the store; mappings are validated on entry so
malformed money or missing due dates surface as InvoiceDataError instead of
being silently counted as zero.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Literal, Mapping
from pydantic import BaseModel
from .ar_types import (
    ZERO,
    InvoiceRecord,
    Money,
    SupplierRecord,
    as_date,
    load_invoices,
    load_suppliers,
)

AGING_BUCKETS: tuple[tuple[str, int | None], ...] = (
    ("0-30 days", 30),
    ("31-60 days", 60),
    ("61-90 days", 90),
    ("90+ days", None),
)

RevenueWindow = int | Literal["all"]

InvoiceInput = Iterable[InvoiceRecord | Mapping[str, Any]]
SupplierInput = Iterable[SupplierRecord | Mapping[str, Any]]


class AROverview(BaseModel):
    total_ar: Money
    paid_ar: Money
    unpaid_ar: Money


class OverdueSummary(BaseModel):
    total: Money
    count: int
    overdue: Money
    overdue_count: int


class SupplierRevenue(BaseModel):
    supplier: SupplierRecord
    revenue: Money


class SupplierRevenueReport(BaseModel):
    window: RevenueWindow
    suppliers: list[SupplierRevenue]
    total: Money


class SupplierBalance(BaseModel):
    supplier: SupplierRecord
    outstanding_amount: Money


def days_overdue(invoice: InvoiceRecord, reference_date: date | None = None) -> int:
    """Whole days between the due date and the reference date (negative if not yet due)."""
    return (as_date(reference_date) - invoice.due_date).days


def aging_bucket(overdue_days: int) -> str:
    """Label of the bucket a given number of overdue days falls into."""
    for label, upper in AGING_BUCKETS:
        if upper is None or overdue_days <= upper:
            return label
    raise AssertionError("unreachable: last bucket is open-ended")


def unpaid_invoices(invoices: InvoiceInput) -> list[InvoiceRecord]:
    return [inv for inv in load_invoices(invoices) if not inv.is_paid]


def compute_aging_buckets(invoices: InvoiceInput, reference_date: date | None = None) -> dict[str, Decimal]:
    """
    Sum unpaid invoice amounts into the four aging buckets.

    Buckets use inclusive upper bounds (30/60/90 days overdue); invoices that
    are not yet due land in "0-30 days". All four labels are always present
    and returned in display order.

    Args:
        invoices: Invoice records or store rows
        reference_date: "Today" for the calculation (defaults to the current date)

    Returns:
        Ordered mapping of bucket label to summed amount
    """
    today = as_date(reference_date)
    buckets = {label: ZERO for label, _ in AGING_BUCKETS}

    for invoice in unpaid_invoices(invoices):
        buckets[aging_bucket(days_overdue(invoice, today))] += invoice.amount

    return buckets


def compute_ar_overview(invoices: InvoiceInput) -> AROverview:
    """Total, paid and unpaid AR. unpaid_ar is derived so the three always reconcile."""
    records = load_invoices(invoices)
    total = sum((inv.amount for inv in records), ZERO)
    paid = sum((inv.amount for inv in records if inv.is_paid), ZERO)
    return AROverview(total_ar=total, paid_ar=paid, unpaid_ar=total - paid)


def compute_ar_overview_by_currency(invoices: InvoiceInput) -> dict[str, AROverview]:
    """AR overview split by invoice currency, currencies in order of first appearance."""
    grouped: dict[str, list[InvoiceRecord]] = {}
    for invoice in load_invoices(invoices):
        grouped.setdefault(invoice.currency, []).append(invoice)
    return {currency: compute_ar_overview(records) for currency, records in grouped.items()}


def compute_overdue_summary(invoices: InvoiceInput, reference_date: date | None = None) -> OverdueSummary:
    """Invoice count and total, plus the unpaid part that is strictly past due."""
    today = as_date(reference_date)
    records = load_invoices(invoices)
    overdue = [inv for inv in records if not inv.is_paid and inv.due_date < today]
    return OverdueSummary(
        total=sum((inv.total_amount for inv in records), ZERO),
        count=len(records),
        overdue=sum((inv.total_amount for inv in overdue), ZERO),
        overdue_count=len(overdue),
    )


def parse_window(value: str | int) -> RevenueWindow:
    """Parse a window query value: a positive day count or "all"."""
    if isinstance(value, str) and value.strip().lower() == "all":
        return "all"
    days = int(value)
    if days < 0:
        raise ValueError(f"window must be a non-negative day count or 'all', got {value!r}")
    return days


def in_window(invoice: InvoiceRecord, window: RevenueWindow, now: date | None = None) -> bool:
    """
    Whether an invoice falls inside a revenue window.

    A finite window keeps invoices that became due at most ``window`` days
    before ``now``; invoices not yet due are always kept.
    """
    if window == "all":
        return True
    return (as_date(now) - invoice.due_date).days <= window


def compute_supplier_revenue(
    suppliers: SupplierInput,
    invoices: InvoiceInput,
    window: RevenueWindow = "all",
    now: date | None = None,
) -> SupplierRevenueReport:
    """
    Rank suppliers by the total_amount of their invoices inside a window.

    Suppliers with no invoice in the window are left out, as are invoices
    whose supplier is not in ``suppliers``. Ties keep supplier input order.
    """
    today = as_date(now)
    revenue: dict[int | None, Decimal] = {}
    for invoice in load_invoices(invoices):
        if in_window(invoice, window, today):
            revenue[invoice.supplier_id] = revenue.get(invoice.supplier_id, ZERO) + invoice.total_amount

    rows = [
        SupplierRevenue(supplier=supplier, revenue=revenue[supplier.id])
        for supplier in load_suppliers(suppliers)
        if supplier.id in revenue
    ]
    rows.sort(key=lambda row: row.revenue, reverse=True)

    return SupplierRevenueReport(
        window=window,
        suppliers=rows,
        total=sum((row.revenue for row in rows), ZERO),
    )


def compute_outstanding_balance(supplier_id: int, invoices: InvoiceInput) -> Decimal:
    """Sum of total_amount over a supplier's unpaid invoices."""
    return sum(
        (inv.total_amount for inv in unpaid_invoices(invoices) if inv.supplier_id == supplier_id),
        ZERO,
    )


def compute_supplier_balances(suppliers: SupplierInput, invoices: InvoiceInput) -> list[SupplierBalance]:
    """Every supplier with its outstanding balance, largest balance first."""
    records = unpaid_invoices(invoices)
    balances = [
        SupplierBalance(supplier=supplier, outstanding_amount=compute_outstanding_balance(supplier.id, records))
        for supplier in load_suppliers(suppliers)
    ]
    balances.sort(key=lambda row: row.outstanding_amount, reverse=True)
    return balances
