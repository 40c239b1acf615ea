"""Domain models for the sheet-backed CRM.

Sheet/Row describe the storage layer's untyped tables; the entity dataclasses
are typed projections produced by ``sheetcrm.mapping.mapper``.
"""

from .entities import (
    UNKNOWN_CUSTOMER_ID,
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
from .sheet import Cell, Row, Sheet
from .snapshot import CRMSnapshot

__all__ = [
    # Storage models
    "Cell",
    "Row",
    "Sheet",
    # Entities
    "Customer",
    "Product",
    "Order",
    "Invoice",
    "Mockup",
    "SampleRequest",
    "OrderStatus",
    "InvoiceStatus",
    "MockupStatus",
    "SampleStatus",
    "UNKNOWN_CUSTOMER_ID",
    # Published state
    "CRMSnapshot",
]
