"""
PDF invoice and account-statement rendering.

Both documents are drawn straight onto a reportlab canvas and returned as
bytes; the API layer decides whether to stream them or write them to disk.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from io import BytesIO
from typing import Iterable
from loguru import logger
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas
from .aggregator import compute_outstanding_balance, days_overdue, unpaid_invoices
from .ar_types import InvoiceRecord, SupplierRecord, as_date
from ..core.config import settings

W, H = letter
MARGIN = 50
LINE = 20


@dataclass
class CompanyInfo:
    name: str
    address_lines: list[str] = field(default_factory=list)

    @classmethod
    def from_settings(cls) -> "CompanyInfo":
        return cls(name=settings.company_name, address_lines=settings.company_address_lines)


def format_money(amount: Decimal | None) -> str:
    if amount is None:
        return ""
    return f"${amount:,.2f}"


class _Document:
    """Thin wrapper over a canvas that tracks the write position and page breaks."""

    def __init__(self, title: str, company: CompanyInfo):
        self.buffer = BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=letter)
        self.c.setTitle(title)
        self.c.setAuthor(company.name)
        self.company = company
        self.y = H - MARGIN
        self.page_num = 1

    def text(self, x: float, value: str, font: str = "Helvetica", size: int = 10):
        self.c.setFont(font, size)
        self.c.drawString(x, self.y, value)

    def right(self, x: float, value: str, font: str = "Helvetica", size: int = 10):
        self.c.setFont(font, size)
        self.c.drawRightString(x, self.y, value)

    def down(self, amount: float = LINE):
        self.y -= amount

    def rule(self):
        self.c.setLineWidth(0.5)
        self.c.line(MARGIN, self.y + 6, W - MARGIN, self.y + 6)

    def needs_break(self, reserve: float = 3 * LINE) -> bool:
        return self.y < MARGIN + reserve

    def new_page(self):
        self.c.setFont("Helvetica", 8)
        self.c.drawRightString(W - MARGIN, MARGIN / 2, f"Page {self.page_num}")
        self.c.showPage()
        self.page_num += 1
        self.y = H - MARGIN

    def header(self):
        self.text(MARGIN, self.company.name, font="Helvetica-Bold", size=20)
        self.down(18)
        for line in self.company.address_lines:
            self.text(MARGIN, line)
            self.down(15)
        self.down(25)

    def finish(self) -> bytes:
        self.c.setFont("Helvetica", 8)
        self.c.drawRightString(W - MARGIN, MARGIN / 2, f"Page {self.page_num}")
        self.c.save()
        return self.buffer.getvalue()


def _bill_to(doc: _Document, supplier: SupplierRecord | None, heading: str = "Bill To:"):
    doc.text(MARGIN, heading, font="Helvetica-Bold", size=12)
    doc.down()
    if supplier is None:
        doc.text(MARGIN, "Unassigned supplier")
        doc.down(30)
        return
    doc.text(MARGIN, supplier.name)
    doc.down(15)
    for line in (
        supplier.address or "",
        f"Contact: {supplier.contact_person or ''}",
        f"Email: {supplier.email or ''}",
    ):
        doc.text(MARGIN, line)
        doc.down(15)
    doc.down(25)


def render_invoice_pdf(
    invoice: InvoiceRecord,
    supplier: SupplierRecord | None,
    company: CompanyInfo | None = None,
) -> bytes:
    """
    Render a single invoice: header, bill-to block, line items and total.

    Args:
        invoice: Invoice with its items loaded
        supplier: Supplier being billed (None for orphaned invoices)
        company: Issuing company (defaults to COMPANY_NAME / COMPANY_ADDRESS)

    Returns:
        PDF document bytes
    """
    company = company or CompanyInfo.from_settings()
    doc = _Document(f"Invoice {invoice.display_number}", company)
    doc.header()

    doc.text(MARGIN, "INVOICE", font="Helvetica-Bold", size=16)
    doc.down(25)
    doc.text(MARGIN, f"Invoice Number: {invoice.display_number}")
    doc.down(15)
    doc.text(MARGIN, f"Due Date: {invoice.due_date.isoformat()}")
    doc.down(15)
    doc.text(MARGIN, f"Currency: {invoice.currency}")
    doc.down(30)

    _bill_to(doc, supplier)

    def table_header():
        doc.text(MARGIN, "Description", font="Helvetica-Bold")
        doc.right(340, "Quantity", font="Helvetica-Bold")
        doc.right(440, "Unit Price", font="Helvetica-Bold")
        doc.right(W - MARGIN, "Total", font="Helvetica-Bold")
        doc.down(8)
        doc.rule()
        doc.down(17)

    table_header()
    for item in invoice.items:
        if doc.needs_break():
            doc.new_page()
            table_header()
        doc.text(MARGIN, item.description[:45])
        doc.right(340, "" if item.quantity is None else f"{item.quantity.normalize():f}")
        doc.right(440, format_money(item.unit_price))
        doc.right(W - MARGIN, format_money(item.total_price))
        doc.down()

    if doc.needs_break(4 * LINE):
        doc.new_page()
    doc.down()
    doc.right(440, "Total Amount:", font="Helvetica-Bold")
    doc.right(W - MARGIN, format_money(invoice.total_amount), font="Helvetica-Bold")
    doc.down(30)
    doc.text(MARGIN, "Thank you for your business!", size=8)

    pdf = doc.finish()
    logger.info(
        "Rendered invoice PDF",
        invoice_id=invoice.id,
        items=len(invoice.items),
        pages=doc.page_num,
        size=len(pdf),
    )
    return pdf


def render_statement_pdf(
    supplier: SupplierRecord,
    invoices: Iterable[InvoiceRecord],
    company: CompanyInfo | None = None,
    reference_date: date | None = None,
) -> bytes:
    """
    Render an account statement listing a supplier's unpaid invoices.

    Each line shows the invoice number (or ``#id``), due date, total amount
    and days overdue as of ``reference_date``; the outstanding balance is
    printed at the end.
    """
    company = company or CompanyInfo.from_settings()
    today = as_date(reference_date)
    open_invoices = [inv for inv in unpaid_invoices(invoices) if inv.supplier_id == supplier.id]
    balance = compute_outstanding_balance(supplier.id, open_invoices)

    doc = _Document(f"Statement {supplier.name}", company)
    doc.header()

    doc.text(MARGIN, "ACCOUNT STATEMENT", font="Helvetica-Bold", size=16)
    doc.down(25)
    doc.text(MARGIN, f"Statement Date: {today.isoformat()}")
    doc.down(30)

    _bill_to(doc, supplier, heading="Account:")

    def table_header():
        doc.text(MARGIN, "Invoice", font="Helvetica-Bold")
        doc.text(200, "Due Date", font="Helvetica-Bold")
        doc.right(420, "Amount", font="Helvetica-Bold")
        doc.right(W - MARGIN, "Days Overdue", font="Helvetica-Bold")
        doc.down(8)
        doc.rule()
        doc.down(17)

    table_header()
    if not open_invoices:
        doc.text(MARGIN, "No outstanding invoices.")
        doc.down()

    for invoice in open_invoices:
        if doc.needs_break():
            doc.new_page()
            table_header()
        overdue = days_overdue(invoice, today)
        doc.text(MARGIN, invoice.display_number)
        doc.text(200, invoice.due_date.isoformat())
        doc.right(420, format_money(invoice.total_amount))
        doc.right(W - MARGIN, str(overdue) if overdue > 0 else "Current")
        doc.down()

    if doc.needs_break(4 * LINE):
        doc.new_page()
    doc.down()
    doc.right(420, "Outstanding Balance:", font="Helvetica-Bold")
    doc.right(W - MARGIN, format_money(balance), font="Helvetica-Bold")
    doc.down(30)
    doc.text(MARGIN, "Please remit payment for any overdue amounts at your earliest convenience.", size=8)

    pdf = doc.finish()
    logger.info(
        "Rendered account statement PDF",
        supplier_id=supplier.id,
        invoices=len(open_invoices),
        balance=str(balance),
        pages=doc.page_num,
    )
    return pdf
