from __future__ import annotations

from typing import Any

"""Built-in headers and starter rows used on first run and after a reset."""

__all__ = [
    "SHEET_NAMES",
    "HEADERS",
    "SEED_ROWS",
]

SHEET_NAMES: tuple[str, ...] = (
    "Customers",
    "Products",
    "Orders",
    "Invoices",
    "Mockups",
    "Samples",
)

HEADERS: dict[str, list[str]] = {
    "Customers": [
        "Course ID", "Name", "Address", "City", "State", "Zip",
        "Phone", "Email", "Website", "Contact Name",
    ],
    "Products": ["SKU", "Vendor SKU", "Name", "Category", "Price", "Stock"],
    "Orders": [
        "Order ID", "Course ID", "Status", "Details", "Tracking Number",
        "Carrier", "Created At", "Production Link", "Job Number",
    ],
    "Invoices": [
        "Invoice ID", "Order ID", "Course ID", "Amount", "Status",
        "PDF URL", "Payment URL", "Created At",
    ],
    "Mockups": ["Mockup ID", "Course ID", "Type", "Notes", "Status", "Ziflow Link", "Created At"],
    "Samples": ["Sample ID", "Customer Name", "Address", "Items Requested", "Status", "Request Date"],
}

SEED_ROWS: dict[str, list[list[Any]]] = {
    "Customers": [
        ["GC-001", "Pine Valley Golf Club", "1 E Atlantic Ave", "Pine Valley", "NJ", "08021",
         "856-555-0101", "proshop@pinevalley.example", "pinevalley.example", "Tom Harmon"],
        ["GC-002", "Cedar Ridge Country Club", "4120 Ridge Rd", "Tulsa", "OK", "74133",
         "918-555-0144", "office@cedarridge.example", "cedarridge.example", "Lisa Park"],
        ["GC-003", "Harbor Links", "2 Shore Dr", "Port Washington", "NY", "11050",
         "516-555-0190", "golf@harborlinks.example", "", "Dave Ortiz"],
    ],
    "Products": [
        ["SC-001", "SC-001-STD", "Scorecards (Standard)", "Print", "$0.45", 5000],
        ["PN-01", "PN-01-WHT", "Golf Pencils", "Accessories", 0.08, 12000],
        ["YB-01", "YB-01-SPIRAL", "Yardage Books", "Print", "$3.25", 800],
        ["TE-01", "TE-01-WOOD", "Logo Tees (100 pack)", "Accessories", "12.00", 150],
    ],
    "Orders": [
        ["1001", "GC-001", "Ready to Schedule", "500 Scorecards", "", "", "2026-09-02", "", "J-5521"],
        ["1002", "GC-002", "On Press", "1000 Scorecards, 500 Pencils", "", "", "2026-09-10", "", "J-5530"],
        ["1003", "GC-003", "Shipped", "200 Yardage Books", "1Z999AA10123456784", "UPS",
         "2026-08-21", "", "J-5498"],
    ],
    "Invoices": [
        ["INV-1001", "1001", "GC-001", "$225.00", "Unpaid", "", "", "2026-09-02"],
        ["INV-1002", "1002", "GC-002", "$490.00", "Unpaid", "", "", "2026-09-10"],
        ["INV-1003", "1003", "GC-003", "$650.00", "Paid", "", "", "2026-08-21"],
    ],
    "Mockups": [
        ["MK-01", "GC-001", "Scorecard", "Use new logo", "in_review", "", "2026-08-30"],
        ["MK-02", "GC-002", "Yardage Book", "", "approved", "", "2026-09-05"],
    ],
    "Samples": [
        ["SMP-1", "Harbor Links", "2 Shore Dr, Port Washington NY", "Scorecard sample pack", "Sent", "2026-08-12"],
    ],
}
