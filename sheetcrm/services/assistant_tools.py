from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..models.entities import InvoiceStatus, SampleStatus
from .facade import CRMFacade

"""Tool bridge for the conversational assistant.

Each tool takes JSON arguments (validated against its declaration) and
returns a plain dict: counts, summaries and matches, never raw rows. Results
go back to the model, so failures are reported as ``{"error": ...}`` instead
of raised.
"""

__all__ = [
    "TOOL_DECLARATIONS",
    "execute_tool",
]

logger = logging.getLogger(__name__)

TOOL_DECLARATIONS: dict[str, dict[str, Any]] = {
    "log_new_order": {
        "description": (
            "Log a new order row into the 'Orders' sheet. Use this when the user confirms an order. "
            "It automatically creates an invoice entry as well."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "customerName": {"type": "string", "description": "Name of the golf course or customer"},
                "itemsDescription": {"type": "string", "description": "Summary of items"},
                "estimatedTotal": {"type": "number", "description": "Total value of the order"},
            },
            "required": ["customerName", "itemsDescription", "estimatedTotal"],
        },
    },
    "check_sheet_status": {
        "description": "Check pending invoices, recent production orders, or sample requests.",
        "parameters": {
            "type": "object",
            "properties": {
                "queryType": {
                    "type": "string",
                    "enum": ["PENDING_INVOICES", "RECENT_ORDERS", "SAMPLE_REQUESTS"],
                },
            },
            "required": ["queryType"],
        },
    },
    "find_golf_course": {
        "description": "Search the 'Customers' sheet for a golf course by name.",
        "parameters": {
            "type": "object",
            "properties": {"name": {"type": "string"}},
            "required": ["name"],
        },
    },
    "log_sample_request": {
        "description": "Add a new row to the 'Samples' sheet.",
        "parameters": {
            "type": "object",
            "properties": {
                "customerName": {"type": "string"},
                "address": {"type": "string"},
                "items": {"type": "string"},
            },
            "required": ["customerName", "address", "items"],
        },
    },
    "lookup_product": {
        "description": "Search the 'Products' sheet by name or SKU for stock and pricing.",
        "parameters": {
            "type": "object",
            "properties": {"searchTerm": {"type": "string"}},
            "required": ["searchTerm"],
        },
    },
    "get_invoice_details": {
        "description": "Get details for an invoice by id ('16' or 'INV-16').",
        "parameters": {
            "type": "object",
            "properties": {"invoiceId": {"type": "string"}},
            "required": ["invoiceId"],
        },
    },
}

RECENT_ORDER_LIMIT = 3


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


async def _log_new_order(facade: CRMFacade, args: dict[str, Any]) -> dict[str, Any]:
    name = args["customerName"]
    order_id = await facade.create_order(name, args["itemsDescription"], args["estimatedTotal"])
    return {
        "success": True,
        "orderId": order_id,
        "message": f"Successfully created Order #{order_id} for {name}.",
    }


async def _check_sheet_status(facade: CRMFacade, args: dict[str, Any]) -> dict[str, Any]:
    query = args["queryType"]
    if query == "PENDING_INVOICES":
        pending = [i for i in facade.invoices if i.status == InvoiceStatus.UNPAID]
        total = sum(i.amount for i in pending)
        return {
            "count": len(pending),
            "totalAmount": total,
            "summary": f"Found {len(pending)} unpaid invoices totaling {_money(total)}.",
        }
    if query == "SAMPLE_REQUESTS":
        waiting = [s for s in facade.samples if s.status == SampleStatus.NEW]
        return {
            "count": len(waiting),
            "summary": f"There are {len(waiting)} new sample packet requests waiting to be processed.",
        }
    # RECENT_ORDERS: rows are append-only, so the newest are at the end
    recent = list(facade.orders[-RECENT_ORDER_LIMIT:])[::-1]
    return {"recentOrders": [f"Order #{o.id} ({o.status.value})" for o in recent]}


async def _find_golf_course(facade: CRMFacade, args: dict[str, Any]) -> dict[str, Any]:
    found = facade.find_customers(args["name"])
    return {
        "foundCount": len(found),
        "matches": [
            {"id": c.id, "name": c.name, "location": f"{c.city}, {c.state}", "email": c.email}
            for c in found
        ],
    }


async def _log_sample_request(facade: CRMFacade, args: dict[str, Any]) -> dict[str, Any]:
    name = args["customerName"]
    sample_id = await facade.add_sample_request(name, args["address"], args["items"])
    return {"success": True, "sampleId": sample_id, "message": f"Sample request logged for {name}."}


async def _lookup_product(facade: CRMFacade, args: dict[str, Any]) -> dict[str, Any]:
    found = facade.find_products(args["searchTerm"])
    return {
        "foundCount": len(found),
        "products": [{"sku": p.sku, "name": p.name, "price": p.price, "stock": p.stock} for p in found],
    }


async def _get_invoice_details(facade: CRMFacade, args: dict[str, Any]) -> dict[str, Any]:
    inv = facade.find_invoice(args["invoiceId"])
    if inv is None:
        return {"found": False, "message": "Invoice not found"}
    return {
        "found": True,
        "invoice": {
            "id": inv.id,
            "customer": facade.customer_name_for(inv.course_id),
            "amount": inv.amount,
            "status": inv.status.value,
            "date": inv.created_at,
            "paymentUrl": inv.payment_url,
        },
    }


_HANDLERS: dict[str, Callable[[CRMFacade, dict[str, Any]], Awaitable[dict[str, Any]]]] = {
    "log_new_order": _log_new_order,
    "check_sheet_status": _check_sheet_status,
    "find_golf_course": _find_golf_course,
    "log_sample_request": _log_sample_request,
    "lookup_product": _lookup_product,
    "get_invoice_details": _get_invoice_details,
}


async def execute_tool(facade: CRMFacade, name: str, args: dict[str, Any] | None) -> dict[str, Any]:
    """Run assistant tool ``name`` with ``args`` against the facade.

    Returns:
        A JSON-serializable result; ``{"error": ...}`` for unknown tools,
        invalid arguments, or failed operations
    """
    handler = _HANDLERS.get(name)
    if handler is None:
        return {"error": "Unknown function"}
    args = dict(args or {})
    try:
        jsonschema.validate(args, TOOL_DECLARATIONS[name]["parameters"])
    except ValidationError as e:
        return {"error": f"invalid arguments for {name}: {e.message}"}

    logger.info("executing tool=%s", name)
    try:
        return await handler(facade, args)
    except Exception as e:
        logger.error("tool=%s failed: %s", name, e)
        return {"error": str(e)}
