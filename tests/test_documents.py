"""
Tests for PDF invoice and statement rendering.
"""

from datetime import date, timedelta
from ar_dashboard.services.ar_types import load_invoice, load_supplier
from ar_dashboard.services.documents import (
    CompanyInfo,
    format_money,
    render_invoice_pdf,
    render_statement_pdf,
)

TODAY = date(2025, 6, 30)
COMPANY = CompanyInfo(name="Test Books Co", address_lines=["1 Test Way", "Testville"])


def supplier():
    return load_supplier({"id": 1, "name": "Acme Books", "address": "9 Shelf Rd", "contact_person": "Jo", "email": "jo@acme.test"})


def invoice(id, total, days_ago, paid=False, supplier_id=1, number=None, items=None):
    return load_invoice({
        "id": id,
        "supplier_id": supplier_id,
        "invoice_number": number,
        "total_amount": total,
        "due_date": (TODAY - timedelta(days=days_ago)).isoformat(),
        "is_paid": paid,
        "items": items or [],
    })


def rendered(log_records, message):
    return [r for r in log_records if r["message"] == message]


def test_format_money():
    assert format_money(load_invoice({"total_amount": "1234.5", "due_date": "2025-01-01"}).total_amount) == "$1,234.50"
    assert format_money(None) == ""


def test_invoice_pdf(log_records):
    items = [
        {"description": "Paperbacks", "quantity": "30", "unit_price": "12.50", "total_price": "375.00"},
        {"description": "Freight", "total_price": "75.00"},
    ]

    pdf = render_invoice_pdf(invoice(5, "450.00", -10, number="INV-5", items=items), supplier(), COMPANY)

    assert pdf.startswith(b"%PDF")
    [record] = rendered(log_records, "Rendered invoice PDF")
    assert record["extra"]["invoice_id"] == 5
    assert record["extra"]["items"] == 2
    assert record["extra"]["pages"] == 1


def test_invoice_pdf_many_items_paginates(log_records):
    items = [{"description": f"Title {i}", "quantity": 1, "unit_price": "1.00", "total_price": "1.00"} for i in range(80)]

    pdf = render_invoice_pdf(invoice(6, "80.00", 0, items=items), supplier(), COMPANY)

    assert pdf.startswith(b"%PDF")
    [record] = rendered(log_records, "Rendered invoice PDF")
    assert record["extra"]["pages"] >= 2


def test_invoice_pdf_without_supplier_uses_settings_company():
    pdf = render_invoice_pdf(invoice(7, "10.00", 0), None)
    assert pdf.startswith(b"%PDF")


def test_statement_lists_only_unpaid_for_supplier(log_records):
    invoices = [
        invoice(1, "120.50", 10, number="INV-1"),
        invoice(2, "79.50", 45),
        invoice(3, "200.00", 5, paid=True),
        invoice(4, "999.00", 5, supplier_id=2),
    ]

    pdf = render_statement_pdf(supplier(), invoices, COMPANY, reference_date=TODAY)

    assert pdf.startswith(b"%PDF")
    [record] = rendered(log_records, "Rendered account statement PDF")
    assert record["extra"]["invoices"] == 2
    assert record["extra"]["balance"] == "200.00"


def test_statement_with_nothing_outstanding(log_records):
    pdf = render_statement_pdf(supplier(), [invoice(1, "10.00", 3, paid=True)], COMPANY, reference_date=TODAY)

    assert pdf.startswith(b"%PDF")
    [record] = rendered(log_records, "Rendered account statement PDF")
    assert record["extra"]["invoices"] == 0
    assert record["extra"]["balance"] == "0.00"


def test_statement_paginates(log_records):
    invoices = [invoice(i, "5.00", i) for i in range(1, 120)]

    render_statement_pdf(supplier(), invoices, COMPANY, reference_date=TODAY)

    [record] = rendered(log_records, "Rendered account statement PDF")
    assert record["extra"]["pages"] >= 3
