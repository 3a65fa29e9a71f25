from datetime import date
from decimal import Decimal
from pydantic import BaseModel, Field, model_validator
from ..services.ar_types import ZERO, Money, SupplierRecord

NON_NULLABLE_INVOICE_FIELDS = ("total_amount", "currency", "due_date", "is_paid")


def check_items_total(total_amount: Decimal, items: list["InvoiceItemIn"]):
    """Raise ValueError when line items exist and don't add up to total_amount"""
    if not items:
        return
    items_total = sum((item.total_price for item in items), ZERO)
    if items_total != total_amount:
        raise ValueError(
            f"total_amount {total_amount} does not match sum of line items {items_total}"
        )


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    contact_person: str | None = Field(default=None)
    email: str | None = Field(default=None)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None)


class SupplierUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    contact_person: str | None = Field(default=None)
    email: str | None = Field(default=None)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None)


class SupplierWithBalance(SupplierRecord):
    outstanding_amount: Money


class InvoiceItemIn(BaseModel):
    description: str = Field(min_length=1)
    quantity: Decimal | None = Field(default=None)
    unit_price: Money | None = Field(default=None)
    total_price: Money


class InvoiceCreate(BaseModel):
    supplier_id: int | None = Field(default=None)
    invoice_number: str | None = Field(default=None, max_length=50)
    total_amount: Money
    currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")
    due_date: date
    is_paid: bool = Field(default=False)
    notes: str | None = Field(default=None)
    items: list[InvoiceItemIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def _items_match_total(self):
        check_items_total(self.total_amount, self.items)
        return self


class InvoiceUpdate(BaseModel):
    supplier_id: int | None = Field(default=None)
    invoice_number: str | None = Field(default=None, max_length=50)
    total_amount: Money | None = Field(default=None)
    currency: str | None = Field(default=None, pattern=r"^[A-Z]{3}$")
    due_date: date | None = Field(default=None)
    is_paid: bool | None = Field(default=None)
    payment_date: date | None = Field(default=None)
    notes: str | None = Field(default=None)
    items: list[InvoiceItemIn] | None = Field(default=None)  # None keeps the existing items

    @model_validator(mode="before")
    @classmethod
    def _reject_null_columns(cls, data):
        # Omitting a field leaves it alone; null would blank a NOT NULL column
        if isinstance(data, dict):
            nulls = [name for name in NON_NULLABLE_INVOICE_FIELDS if name in data and data[name] is None]
            if nulls:
                raise ValueError(f"{', '.join(nulls)} cannot be null")
        return data


class PaymentRequest(BaseModel):
    payment_date: date | None = Field(default=None)  # Defaults to today


class StatementLine(BaseModel):
    invoice_id: int | None
    invoice_number: str
    due_date: date
    total_amount: Money
    days_overdue: int


class OutstandingResponse(BaseModel):
    supplier_id: int
    as_of: date
    outstanding_amount: Money
    invoices: list[StatementLine]


class AgingResponse(BaseModel):
    as_of: date
    buckets: dict[str, Money]
