from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .entities import Customer, Invoice, Mockup, Order, Product, SampleRequest

"""Published CRM state.

A snapshot is immutable and replaced as a whole on refresh, so readers never
see orders from one sync next to invoices from another.
"""

__all__ = [
    "CRMSnapshot",
]


@dataclass(frozen=True)
class CRMSnapshot:
    """All six entity collections from one refresh."""
    customers: tuple[Customer, ...] = ()
    products: tuple[Product, ...] = ()
    orders: tuple[Order, ...] = ()
    invoices: tuple[Invoice, ...] = ()
    mockups: tuple[Mockup, ...] = ()
    samples: tuple[SampleRequest, ...] = ()
    last_sync: datetime | None = None  # None until the first successful refresh

    def counts(self) -> dict[str, int]:
        return {
            "customers": len(self.customers),
            "products": len(self.products),
            "orders": len(self.orders),
            "invoices": len(self.invoices),
            "mockups": len(self.mockups),
            "samples": len(self.samples),
        }
