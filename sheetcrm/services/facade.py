from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any
from zoneinfo import ZoneInfo

from ..mapping.mapper import map_order_status, order_to_row, to_entity
from ..models.entities import (
    UNKNOWN_CUSTOMER_ID,
    Customer,
    Invoice,
    InvoiceStatus,
    Mockup,
    Order,
    OrderStatus,
    Product,
    SampleRequest,
    SampleStatus,
)
from ..models.snapshot import CRMSnapshot
from ..storage.sheet_store import SheetStore

"""Domain facade: the one entry point UI code and the assistant bridge use.

Composes the sheet store and the mapper into CRM operations and publishes an
immutable ``CRMSnapshot``. Every write ends with a refresh so callers observe
their own change.

Concurrency model: a single event loop. ``refresh`` reads all sheets with
``asyncio.gather`` and publishes by one reference swap. Two writes racing on
the same order row are last-write-wins; the store keeps them from corrupting
each other but nothing serializes them.
"""

__all__ = [
    "CRMFacade",
    "SHEETS",
]

logger = logging.getLogger(__name__)

SHEETS: tuple[str, ...] = ("Customers", "Products", "Orders", "Invoices", "Mockups", "Samples")

_ORDER_FIELDS = frozenset(f.name for f in dataclasses.fields(Order)) - {"row_index"}


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class CRMFacade:
    """Refresh / create / update operations over a ``SheetStore``.

    Args:
        store: Explicitly constructed store owned by this facade
        settle_delay: Seconds to wait after a bulk import before refreshing
        timezone: IANA zone used for "today" on new rows
        millis: Clock for id generation (milliseconds since epoch)
    """

    def __init__(
        self,
        store: SheetStore,
        *,
        settle_delay: float = 0.0,
        timezone: str = "UTC",
        millis: Callable[[], int] = _epoch_millis,
    ) -> None:
        self.store = store
        self.settle_delay = settle_delay
        self.timezone = ZoneInfo(timezone)
        self._millis = millis
        self._last_id = 0
        self._snapshot = CRMSnapshot()
        self.is_loading = False
        self.sync_error: str | None = None

    # -- lifecycle -------------------------------------------------------

    async def start(self) -> CRMSnapshot:
        """Initialize the store and publish the first snapshot."""
        await self.store.initialize()
        return await self.refresh()

    def close(self) -> None:
        self.store.close()

    # -- published state -------------------------------------------------

    @property
    def snapshot(self) -> CRMSnapshot:
        return self._snapshot

    @property
    def customers(self) -> tuple[Customer, ...]:
        return self._snapshot.customers

    @property
    def products(self) -> tuple[Product, ...]:
        return self._snapshot.products

    @property
    def orders(self) -> tuple[Order, ...]:
        return self._snapshot.orders

    @property
    def invoices(self) -> tuple[Invoice, ...]:
        return self._snapshot.invoices

    @property
    def mockups(self) -> tuple[Mockup, ...]:
        return self._snapshot.mockups

    @property
    def samples(self) -> tuple[SampleRequest, ...]:
        return self._snapshot.samples

    @property
    def last_sync(self) -> datetime | None:
        return self._snapshot.last_sync

    @property
    def is_stale(self) -> bool:
        """True when the last refresh failed and older data is still shown."""
        return self.sync_error is not None

    # -- refresh ---------------------------------------------------------

    async def refresh(self) -> CRMSnapshot:
        """Read all sheets in parallel and publish a new snapshot.

        On any sheet failure the previous snapshot stays published, the
        facade is marked stale and the error propagates.
        """
        self.is_loading = True
        try:
            results = await asyncio.gather(*(self.store.get_rows(name) for name in SHEETS))
        except Exception as e:
            self.sync_error = str(e)
            logger.error("Failed to sync with sheets: %s", e)
            raise
        finally:
            self.is_loading = False

        mapped = {
            name: tuple(to_entity(name, row, i) for i, row in enumerate(rows))
            for name, rows in zip(SHEETS, results, strict=True)
        }
        self._snapshot = CRMSnapshot(
            customers=mapped["Customers"],
            products=mapped["Products"],
            orders=mapped["Orders"],
            invoices=mapped["Invoices"],
            mockups=mapped["Mockups"],
            samples=mapped["Samples"],
            last_sync=datetime.now(UTC),
        )
        self.sync_error = None
        logger.debug("refresh published counts=%s", self._snapshot.counts())
        return self._snapshot

    # -- helpers ---------------------------------------------------------

    def _today(self) -> str:
        return datetime.now(self.timezone).date().isoformat()

    def _next_id(self) -> str:
        # time based, bumped so two calls in the same millisecond still differ
        value = max(self._millis(), self._last_id + 1)
        self._last_id = value
        return str(value)

    # -- lookups (best effort, never raise on a miss) --------------------

    def find_customers(self, name: str) -> list[Customer]:
        needle = name.lower()
        return [c for c in self.customers if needle in c.name.lower()]

    def find_customer(self, name: str) -> Customer | None:
        matches = self.find_customers(name)
        return matches[0] if matches else None

    def resolve_customer_id(self, name: str) -> str:
        customer = self.find_customer(name)
        return customer.id if customer is not None else UNKNOWN_CUSTOMER_ID

    def customer_name_for(self, course_id: str) -> str:
        for c in self.customers:
            if c.id == course_id:
                return c.name
        return UNKNOWN_CUSTOMER_ID

    def find_products(self, term: str) -> list[Product]:
        needle = term.lower()
        return [p for p in self.products if needle in p.name.lower() or needle in p.sku.lower()]

    def find_order(self, order_id: str) -> Order | None:
        for o in self.orders:
            if o.id == order_id:
                return o
        return None

    def find_invoice(self, invoice_id: str) -> Invoice | None:
        """Match ``"16"`` as well as ``"INV-16"``."""
        for inv in self.invoices:
            if inv.id == invoice_id or inv.id == f"INV-{invoice_id}":
                return inv
        return None

    # -- writes ----------------------------------------------------------

    async def create_order(self, customer_name: str, details: str, total: float) -> str:
        """Append an order and its linked unpaid invoice, then refresh.

        An unmatched customer name is stored as ``"Unknown"`` rather than
        blocking the order.

        Returns:
            The new order id
        """
        course_id = self.resolve_customer_id(customer_name)
        order_id = self._next_id()
        date = self._today()

        order_row = [order_id, course_id, OrderStatus.AWAITING_LINK.value, details, "", "", date, "", ""]
        invoice_row = [f"INV-{order_id}", order_id, course_id, total, InvoiceStatus.UNPAID.value, "", "", date]

        # one save for both rows so an order is never stored without its invoice
        await self.store.append_rows({"Orders": order_row, "Invoices": invoice_row})
        logger.info("order created id=%s course_id=%s total=%s", order_id, course_id, total)
        await self.refresh()
        return order_id

    async def update_order_status(self, order: Order, status: OrderStatus) -> None:
        """Rewrite ``order`` with a new status at its recorded row index."""
        updated = dataclasses.replace(order, status=status)
        await self.store.update_row("Orders", order.row_index, order_to_row(updated))
        logger.info("order status id=%s %s -> %s", order.id, order.status.value, status.value)
        await self.refresh()

    async def update_order_partial(self, order_id: str, updates: Mapping[str, Any]) -> bool:
        """Merge ``updates`` over the order with ``order_id`` and write it back.

        A missing order is a silent no-op (the caller may have raced a
        refresh).

        Returns:
            True if a row was written

        Raises:
            ValueError: If ``updates`` names a field Order does not have
        """
        unknown = set(updates) - _ORDER_FIELDS
        if unknown:
            raise ValueError(f"unknown order fields: {sorted(unknown)}")

        order = self.find_order(order_id)
        if order is None:
            logger.debug("update_order_partial: order id=%s not found; ignored", order_id)
            return False

        changes = dict(updates)
        if "status" in changes and not isinstance(changes["status"], OrderStatus):
            raw = changes["status"]
            try:
                changes["status"] = OrderStatus(raw)
            except ValueError:
                changes["status"] = map_order_status(raw)

        merged = dataclasses.replace(order, **changes)
        await self.store.update_row("Orders", order.row_index, order_to_row(merged))
        await self.refresh()
        return True

    async def add_sample_request(self, customer_name: str, address: str, items: str) -> str:
        """Append a ``New`` sample request dated today, then refresh."""
        sample_id = f"SMP-{self._next_id()}"
        row = [sample_id, customer_name, address, items, SampleStatus.NEW.value, self._today()]
        await self.store.append_row("Samples", row)
        logger.info("sample request logged id=%s customer=%s", sample_id, customer_name)
        await self.refresh()
        return sample_id

    async def import_to_sheet(self, sheet_name: str, csv_content: str | bytes) -> int:
        """Bulk import CSV into ``sheet_name``; failures propagate unchanged."""
        try:
            count = await self.store.bulk_import(sheet_name, csv_content)
        except Exception as e:
            logger.error("Failed to import to %s: %s", sheet_name, e)
            raise
        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)
        await self.refresh()
        return count

    async def reset_data(self, *, confirmed: bool) -> bool:
        """Restore factory defaults. Does nothing unless ``confirmed``."""
        if not confirmed:
            logger.info("reset declined; data unchanged")
            return False
        await self.store.reset()
        await self.refresh()
        return True
