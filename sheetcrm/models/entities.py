from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Typed domain entities projected from sheet rows.

Entities are disposable views rebuilt on every refresh; the row stays the
source of truth. Each carries the ``row_index`` it was read from so an update
can be written back to the same position.
"""

__all__ = [
    "OrderStatus",
    "InvoiceStatus",
    "MockupStatus",
    "SampleStatus",
    "Customer",
    "Product",
    "Order",
    "Invoice",
    "Mockup",
    "SampleRequest",
    "UNKNOWN_CUSTOMER_ID",
]

UNKNOWN_CUSTOMER_ID = "Unknown"


class OrderStatus(Enum):
    """Order lifecycle.

    awaiting_link → ready_to_schedule → scheduled → (completed | shipped),
    cancelled reachable from any non-terminal state.
    """
    AWAITING_LINK = "awaiting_link"
    READY_TO_SCHEDULE = "ready_to_schedule"
    SCHEDULED = "scheduled"  # "On Press"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    SHIPPED = "shipped"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.SHIPPED, OrderStatus.CANCELLED)


class InvoiceStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    CANCELLED = "cancelled"
    VOID = "void"


class MockupStatus(Enum):
    DRAFT = "draft"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    REVISION_NEEDED = "revision_needed"
    PENDING = "pending"


class SampleStatus(Enum):
    NEW = "New"
    SENT = "Sent"


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    contact_name: str = ""
    row_index: int = -1


@dataclass(frozen=True)
class Product:
    id: str
    sku: str
    name: str
    category: str = ""
    price: float = 0
    stock: float = 0
    row_index: int = -1


@dataclass(frozen=True)
class Order:
    id: str
    course_id: str
    status: OrderStatus = OrderStatus.AWAITING_LINK
    details: str = ""
    tracking_number: str = ""
    shipping_carrier: str = ""
    created_at: str = ""
    production_link: str = ""
    job_number: str = ""
    row_index: int = -1


@dataclass(frozen=True)
class Invoice:
    id: str
    order_id: str
    course_id: str
    amount: float = 0
    status: InvoiceStatus = InvoiceStatus.UNPAID
    pdf_url: str = ""
    payment_url: str = ""
    created_at: str = ""
    due_date: str = ""  # no column of its own; read from created_at
    row_index: int = -1


@dataclass(frozen=True)
class Mockup:
    id: str
    course_id: str
    type: str = ""
    notes: str = ""
    status: MockupStatus = MockupStatus.PENDING
    ziflow_link: str = ""
    created_at: str = ""
    row_index: int = -1


@dataclass(frozen=True)
class SampleRequest:
    id: str
    customer_name: str
    address: str = ""
    items_requested: str = ""
    status: SampleStatus = SampleStatus.NEW
    request_date: str = ""
    row_index: int = -1
