from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any

from ..models.entities import (
    Customer,
    Invoice,
    InvoiceStatus,
    Mockup,
    MockupStatus,
    Order,
    OrderStatus,
    Product,
    SampleRequest,
    SampleStatus,
)
from ..models.sheet import Cell, Row

"""Positional row <-> entity mapping.

Every function here is pure and total: short rows read missing cells as
``""`` / ``0`` / the entity's default status, and nothing raises on
hand-entered spreadsheet data. Cells past an entity's known columns are
ignored and not written back.

Status heuristics (kept lenient on purpose for typed-in sheet data):
- Order: substring match in precedence ready > schedule|press >
  complete|shipped > cancel, first match wins, else awaiting_link
- Invoice: paid / yes / complete are paid, everything else unpaid
- Mockup: known vocabulary, else pending
- Sample: sent is Sent, everything else New
"""

__all__ = [
    "parse_currency",
    "normalize_status",
    "map_order_status",
    "map_invoice_status",
    "map_mockup_status",
    "map_sample_status",
    "customer_from_row",
    "customer_to_row",
    "product_from_row",
    "product_to_row",
    "order_from_row",
    "order_to_row",
    "invoice_from_row",
    "invoice_to_row",
    "mockup_from_row",
    "mockup_to_row",
    "sample_from_row",
    "sample_to_row",
    "MAPPERS",
    "to_entity",
    "to_row",
]

_NON_NUMERIC = re.compile(r"[^0-9.\-]+")
_LEADING_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")

# (keywords, status) checked in order
ORDER_STATUS_RULES: tuple[tuple[tuple[str, ...], OrderStatus], ...] = (
    (("ready",), OrderStatus.READY_TO_SCHEDULE),
    (("schedule", "press"), OrderStatus.SCHEDULED),
    (("complete", "shipped"), OrderStatus.COMPLETED),
    (("cancel",), OrderStatus.CANCELLED),
)
PAID_VALUES = frozenset({"paid", "yes", "complete"})


def _cell(row: Sequence[Cell], index: int) -> Cell:
    return row[index] if 0 <= index < len(row) else None


def _text(row: Sequence[Cell], index: int) -> str:
    value = _cell(row, index)
    # falsy cells (None, "", 0, False) read as empty text
    if not value:
        return ""
    if value is True:
        return "true"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_currency(value: Any) -> float:
    """Coerce a currency-ish cell to a number.

    Numbers pass through. Anything else keeps only digits, ``.`` and ``-``
    and parses the leading number; empty or unparsable input is 0.

    >>> parse_currency("$1,200.00")
    1200
    >>> parse_currency("abc")
    0
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    if not value:
        return 0
    cleaned = _NON_NUMERIC.sub("", str(value))
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return 0
    number = float(match.group(0))
    return int(number) if number.is_integer() else number


def normalize_status(value: Any) -> str:
    """``"  Paid "`` -> ``"paid"``; empty for missing cells."""
    if value is None or value is False:
        return ""
    return str(value).strip().lower()


def map_order_status(value: Any) -> OrderStatus:
    raw = normalize_status(value)
    for keywords, status in ORDER_STATUS_RULES:
        if any(k in raw for k in keywords):
            return status
    return OrderStatus.AWAITING_LINK


def map_invoice_status(value: Any) -> InvoiceStatus:
    return InvoiceStatus.PAID if normalize_status(value) in PAID_VALUES else InvoiceStatus.UNPAID


def map_mockup_status(value: Any) -> MockupStatus:
    raw = normalize_status(value).replace(" ", "_")
    try:
        return MockupStatus(raw)
    except ValueError:
        return MockupStatus.PENDING


def map_sample_status(value: Any) -> SampleStatus:
    return SampleStatus.SENT if normalize_status(value) == "sent" else SampleStatus.NEW


# Customers ---------------------------------------------------------------

def customer_from_row(row: Sequence[Cell], row_index: int) -> Customer:
    return Customer(
        id=_text(row, 0),
        name=_text(row, 1),
        address=_text(row, 2),
        city=_text(row, 3),
        state=_text(row, 4),
        zip=_text(row, 5),
        phone=_text(row, 6),
        email=_text(row, 7),
        website=_text(row, 8),
        contact_name=_text(row, 9),
        row_index=row_index,
    )


def customer_to_row(c: Customer) -> Row:
    return [c.id, c.name, c.address, c.city, c.state, c.zip, c.phone, c.email, c.website, c.contact_name]


# Products ----------------------------------------------------------------

def product_from_row(row: Sequence[Cell], row_index: int) -> Product:
    return Product(
        id=_text(row, 0),
        sku=_text(row, 1),
        name=_text(row, 2),
        category=_text(row, 3),
        price=parse_currency(_cell(row, 4)),
        stock=parse_currency(_cell(row, 5)),
        row_index=row_index,
    )


def product_to_row(p: Product) -> Row:
    return [p.id, p.sku, p.name, p.category, p.price, p.stock]


# Orders ------------------------------------------------------------------

def order_from_row(row: Sequence[Cell], row_index: int) -> Order:
    return Order(
        id=_text(row, 0),
        course_id=_text(row, 1),
        status=map_order_status(_cell(row, 2)),
        details=_text(row, 3),
        tracking_number=_text(row, 4),
        shipping_carrier=_text(row, 5),
        created_at=_text(row, 6),
        production_link=_text(row, 7),
        job_number=_text(row, 8),
        row_index=row_index,
    )


def order_to_row(o: Order) -> Row:
    return [
        o.id,
        o.course_id,
        o.status.value,
        o.details,
        o.tracking_number,
        o.shipping_carrier,
        o.created_at,
        o.production_link,
        o.job_number,
    ]


# Invoices ----------------------------------------------------------------

def invoice_from_row(row: Sequence[Cell], row_index: int) -> Invoice:
    created_at = _text(row, 7)
    return Invoice(
        id=_text(row, 0),
        order_id=_text(row, 1),
        course_id=_text(row, 2),
        amount=parse_currency(_cell(row, 3)),
        status=map_invoice_status(_cell(row, 4)),
        pdf_url=_text(row, 5),
        payment_url=_text(row, 6),
        created_at=created_at,
        due_date=created_at,
        row_index=row_index,
    )


def invoice_to_row(i: Invoice) -> Row:
    return [i.id, i.order_id, i.course_id, i.amount, i.status.value, i.pdf_url, i.payment_url, i.created_at]


# Mockups -----------------------------------------------------------------

def mockup_from_row(row: Sequence[Cell], row_index: int) -> Mockup:
    return Mockup(
        id=_text(row, 0),
        course_id=_text(row, 1),
        type=_text(row, 2),
        notes=_text(row, 3),
        status=map_mockup_status(_cell(row, 4)),
        ziflow_link=_text(row, 5),
        created_at=_text(row, 6),
        row_index=row_index,
    )


def mockup_to_row(m: Mockup) -> Row:
    return [m.id, m.course_id, m.type, m.notes, m.status.value, m.ziflow_link, m.created_at]


# Samples -----------------------------------------------------------------

def sample_from_row(row: Sequence[Cell], row_index: int) -> SampleRequest:
    return SampleRequest(
        id=_text(row, 0),
        customer_name=_text(row, 1),
        address=_text(row, 2),
        items_requested=_text(row, 3),
        status=map_sample_status(_cell(row, 4)),
        request_date=_text(row, 5),
        row_index=row_index,
    )


def sample_to_row(s: SampleRequest) -> Row:
    return [s.id, s.customer_name, s.address, s.items_requested, s.status.value, s.request_date]


# Registry ----------------------------------------------------------------

MAPPERS: dict[str, tuple[Callable[[Sequence[Cell], int], Any], Callable[[Any], Row]]] = {
    "Customers": (customer_from_row, customer_to_row),
    "Products": (product_from_row, product_to_row),
    "Orders": (order_from_row, order_to_row),
    "Invoices": (invoice_from_row, invoice_to_row),
    "Mockups": (mockup_from_row, mockup_to_row),
    "Samples": (sample_from_row, sample_to_row),
}

_TO_ROW_BY_TYPE: dict[type, Callable[[Any], Row]] = {
    Customer: customer_to_row,
    Product: product_to_row,
    Order: order_to_row,
    Invoice: invoice_to_row,
    Mockup: mockup_to_row,
    SampleRequest: sample_to_row,
}


def to_entity(sheet_name: str, row: Sequence[Cell], row_index: int) -> Any:
    """Map a row of ``sheet_name`` to its entity.

    Raises:
        KeyError: If no mapper is registered for the sheet
    """
    from_row, _ = MAPPERS[sheet_name]
    return from_row(row, row_index)


def to_row(entity: Any) -> Row:
    """Serialize any known entity back to its positional row."""
    try:
        serializer = _TO_ROW_BY_TYPE[type(entity)]
    except KeyError:
        raise TypeError(f"no row mapping for {type(entity).__name__}") from None
    return serializer(entity)
