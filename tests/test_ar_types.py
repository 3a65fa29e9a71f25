"""
Tests for record validation at the store boundary.
"""

from datetime import date, datetime
from decimal import Decimal
import pytest
from ar_dashboard.services.ar_types import (
    InvoiceDataError,
    InvoiceRecord,
    MalformedAmountError,
    MissingDueDateError,
    as_date,
    load_invoice,
    load_supplier,
    to_money,
)


def test_accepts_camel_and_snake_case():
    camel = load_invoice({"id": 1, "supplierId": 2, "totalAmount": "10.5", "dueDate": "2025-01-31", "isPaid": True})
    snake = load_invoice({"id": 1, "supplier_id": 2, "total_amount": "10.5", "due_date": "2025-01-31", "is_paid": True})

    assert camel == snake
    assert camel.total_amount == Decimal("10.50")
    assert camel.due_date == date(2025, 1, 31)


def test_unknown_fields_are_ignored():
    record = load_invoice({"totalAmount": 5, "dueDate": "2025-01-01", "bolFile": "x.pdf", "freightCost": "12.00"})
    assert not hasattr(record, "bolFile")
    assert record.total_amount == Decimal("5.00")


def test_amount_defaults_to_total_amount():
    record = load_invoice({"total_amount": "99.99", "due_date": "2025-01-01"})
    assert record.amount == Decimal("99.99")


def test_due_date_with_time_part():
    record = load_invoice({"total_amount": 1, "due_date": "2025-03-04T00:00:00.000Z"})
    assert record.due_date == date(2025, 3, 4)

    record = load_invoice({"total_amount": 1, "due_date": datetime(2025, 3, 4, 17, 30)})
    assert record.due_date == date(2025, 3, 4)


def test_items_are_loaded():
    record = load_invoice({
        "total_amount": "30.00",
        "due_date": "2025-01-01",
        "items": [
            {"description": "Hardcovers", "quantity": "2", "unitPrice": "10.00", "totalPrice": "20.00"},
            {"description": "Shipping", "total_price": "10"},
        ],
    })

    assert len(record.items) == 2
    assert record.items[1].unit_price is None
    assert record.items_total() == record.total_amount


def test_display_number_falls_back_to_id():
    assert load_invoice({"id": 12, "total_amount": 1, "due_date": "2025-01-01"}).display_number == "#12"
    assert load_invoice({"id": 12, "invoice_number": "INV-9", "total_amount": 1, "due_date": "2025-01-01"}).display_number == "INV-9"


@pytest.mark.parametrize("value", ["abc", "", None, True, "NaN", "Infinity", [1]])
def test_malformed_money(value):
    with pytest.raises(MalformedAmountError):
        to_money(value)


def test_malformed_money_in_row():
    with pytest.raises(MalformedAmountError):
        load_invoice({"total_amount": "12,5x", "due_date": "2025-01-01"})


def test_malformed_item_total():
    with pytest.raises(MalformedAmountError):
        load_invoice({"total_amount": "1", "due_date": "2025-01-01", "items": [{"description": "x", "total_price": "?"}]})


def test_missing_due_date():
    with pytest.raises(MissingDueDateError):
        load_invoice({"total_amount": "1"})

    with pytest.raises(MissingDueDateError):
        load_invoice({"total_amount": "1", "dueDate": "not a date"})


def test_data_errors_are_value_errors():
    assert issubclass(MalformedAmountError, InvoiceDataError)
    assert issubclass(InvoiceDataError, ValueError)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("120.50", Decimal("120.50")),
        (79.5, Decimal("79.50")),
        (0.1, Decimal("0.10")),
        (3, Decimal("3.00")),
        ("1,234.565", Decimal("1234.57")),
        (Decimal("2.005"), Decimal("2.01")),
    ],
)
def test_to_money(value, expected):
    assert to_money(value) == expected


def test_record_passthrough():
    record = InvoiceRecord(total_amount=1, due_date=date(2025, 1, 1))
    assert load_invoice(record) is record


def test_supplier_record():
    supplier = load_supplier({"id": 3, "name": "Acme Books", "contactPerson": "Jo", "createdAt": "2025-01-01"})
    assert supplier.contact_person == "Jo"


def test_as_date():
    assert as_date("2025-02-03") == date(2025, 2, 3)
    assert as_date(datetime(2025, 2, 3, 8)) == date(2025, 2, 3)
    assert as_date(None) == date.today()
