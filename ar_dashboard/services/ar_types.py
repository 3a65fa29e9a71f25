"""
Typed invoice and supplier records used by the AR aggregator.

Rows coming out of the ledger store (or any other source) are validated once
here so that aggregation code can rely on ``Decimal`` money and ``date`` due
dates. Money is held at cent precision and only turned into a float when a
model is serialized to JSON.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Annotated, Any, Iterable, Mapping
from pydantic import (
    AliasChoices,
    AliasGenerator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

MONEY_FIELDS = {"amount", "total_amount", "totalAmount", "unit_price", "unitPrice", "total_price", "totalPrice"}
DUE_DATE_FIELDS = {"due_date", "dueDate"}


class InvoiceDataError(ValueError):
    """An invoice row could not be turned into a well-typed record."""


class MalformedAmountError(InvoiceDataError):
    """A monetary field is missing or not a finite number."""


class MissingDueDateError(InvoiceDataError):
    """An invoice has no usable due date."""


def to_money(value: Any) -> Decimal:
    """
    Convert a store value into a cent-precision Decimal.

    Accepts Decimal, int, float (through its shortest repr) and numeric
    strings. Anything else raises MalformedAmountError rather than
    coercing to zero.
    """
    if isinstance(value, bool) or value is None:
        raise MalformedAmountError(f"malformed monetary value: {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            raise MalformedAmountError(f"malformed monetary value: {value!r}") from None
    else:
        raise MalformedAmountError(f"malformed monetary value: {value!r}")

    if not amount.is_finite():
        raise MalformedAmountError(f"malformed monetary value: {value!r}")

    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def as_date(value: Any = None) -> date:
    """Normalize a reference date; None means today."""
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _date_only(value: Any) -> Any:
    # Stores hand back either dates, datetimes or ISO strings with a time part
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return value[:10]
    return value


Money = Annotated[
    Decimal,
    BeforeValidator(to_money),
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]
DateOnly = Annotated[date, BeforeValidator(_date_only)]


class _Record(BaseModel):
    # Accept snake_case and camelCase keys, ignore anything we don't know about
    model_config = ConfigDict(
        extra="ignore",
        alias_generator=AliasGenerator(
            validation_alias=lambda name: AliasChoices(name, to_camel(name)),
        ),
    )


class InvoiceItemRecord(_Record):
    description: str
    quantity: Decimal | None = None
    unit_price: Money | None = None
    total_price: Money


class InvoiceRecord(_Record):
    id: int | None = None
    supplier_id: int | None = None
    invoice_number: str | None = None
    amount: Money
    total_amount: Money
    currency: str = "USD"
    due_date: DateOnly
    is_paid: bool = False
    payment_date: DateOnly | None = None
    notes: str | None = None
    items: list[InvoiceItemRecord] = []

    @model_validator(mode="before")
    @classmethod
    def _amount_defaults_to_total(cls, data: Any) -> Any:
        # The store only keeps total_amount; amount mirrors it unless given
        if isinstance(data, Mapping) and data.get("amount") is None:
            total = data.get("total_amount", data.get("totalAmount"))
            data = {**data, "amount": total}
        return data

    @property
    def display_number(self) -> str:
        return self.invoice_number or f"#{self.id}"

    def items_total(self) -> Decimal:
        return sum((item.total_price for item in self.items), ZERO)


class SupplierRecord(_Record):
    id: int | None = None
    name: str
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None


def _data_error(exc: ValidationError) -> InvoiceDataError:
    for err in exc.errors():
        field = err["loc"][-1] if err["loc"] else None
        if field in MONEY_FIELDS:
            return MalformedAmountError(f"malformed monetary value in {field}: {err.get('input')!r}")
        if field in DUE_DATE_FIELDS:
            return MissingDueDateError(f"missing or invalid due date: {err.get('input')!r}")
    return InvoiceDataError(str(exc))


def load_invoice(row: InvoiceRecord | Mapping[str, Any]) -> InvoiceRecord:
    """Validate a single invoice row, raising an InvoiceDataError subclass on bad data."""
    if isinstance(row, InvoiceRecord):
        return row
    try:
        return InvoiceRecord.model_validate(row)
    except ValidationError as exc:
        raise _data_error(exc) from exc


def load_invoices(rows: Iterable[InvoiceRecord | Mapping[str, Any]]) -> list[InvoiceRecord]:
    return [load_invoice(row) for row in rows]


def load_supplier(row: SupplierRecord | Mapping[str, Any]) -> SupplierRecord:
    if isinstance(row, SupplierRecord):
        return row
    return SupplierRecord.model_validate(row)


def load_suppliers(rows: Iterable[SupplierRecord | Mapping[str, Any]]) -> list[SupplierRecord]:
    return [load_supplier(row) for row in rows]
