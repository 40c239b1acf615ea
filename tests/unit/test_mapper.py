from __future__ import annotations

import pytest

from sheetcrm.mapping.mapper import (
    customer_from_row,
    invoice_from_row,
    map_invoice_status,
    map_mockup_status,
    map_order_status,
    map_sample_status,
    mockup_from_row,
    order_from_row,
    parse_currency,
    product_from_row,
    sample_from_row,
    to_entity,
    to_row,
)
from sheetcrm.models.entities import InvoiceStatus, MockupStatus, OrderStatus, SampleStatus
from sheetcrm.storage.seed import SEED_ROWS, SHEET_NAMES


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("$1,200.00", 1200),
        ("abc", 0),
        ("", 0),
        (None, 0),
        (350, 350),
        (12.5, 12.5),
        ("-45.10", -45.1),
        ("USD 0.75 each", 0.75),
        (True, 0),
    ],
)
def test_parse_currency(raw, expected):
    assert parse_currency(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Ready to Schedule", OrderStatus.READY_TO_SCHEDULE),
        ("On Press", OrderStatus.SCHEDULED),
        ("scheduled", OrderStatus.SCHEDULED),
        ("Completed", OrderStatus.COMPLETED),
        ("Shipped", OrderStatus.COMPLETED),
        ("CANCELLED", OrderStatus.CANCELLED),
        ("already scheduled", OrderStatus.READY_TO_SCHEDULE),
        ("Shipped Complete", OrderStatus.COMPLETED),
        ("cancelled - customer request", OrderStatus.CANCELLED),
        ("pending review", OrderStatus.AWAITING_LINK),
        ("complete, not cancelled", OrderStatus.COMPLETED),
        ("pressed then cancelled", OrderStatus.SCHEDULED),
        ("", OrderStatus.AWAITING_LINK),
        ("who knows", OrderStatus.AWAITING_LINK),
        (None, OrderStatus.AWAITING_LINK),
    ],
)
def test_map_order_status(raw, expected):
    assert map_order_status(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        (" Paid ", InvoiceStatus.PAID),
        ("YES", InvoiceStatus.PAID),
        ("complete", InvoiceStatus.PAID),
        ("Unpaid", InvoiceStatus.UNPAID),
        ("", InvoiceStatus.UNPAID),
        ("void", InvoiceStatus.UNPAID),
    ],
)
def test_map_invoice_status(raw, expected):
    assert map_invoice_status(raw) == expected


def test_map_mockup_and_sample_status():
    assert map_mockup_status("In Review") == MockupStatus.IN_REVIEW
    assert map_mockup_status("approved") == MockupStatus.APPROVED
    assert map_mockup_status("rejected") == MockupStatus.PENDING
    assert map_mockup_status(None) == MockupStatus.PENDING
    assert map_sample_status("Sent") == SampleStatus.SENT
    assert map_sample_status("pending") == SampleStatus.NEW


def test_short_rows_use_defaults():
    order = order_from_row(["1001"], 4)
    assert order.id == "1001"
    assert order.course_id == ""
    assert order.status == OrderStatus.AWAITING_LINK
    assert order.row_index == 4

    invoice = invoice_from_row(["INV-1", "1"], 0)
    assert invoice.amount == 0
    assert invoice.status == InvoiceStatus.UNPAID

    product = product_from_row([], 2)
    assert product.price == 0
    assert product.stock == 0

    assert customer_from_row(["GC-1", "Course"], 0).email == ""
    assert mockup_from_row(["MK"], 0).status == MockupStatus.PENDING
    assert sample_from_row(["SMP"], 0).status == SampleStatus.NEW


def test_numeric_cells_read_as_text():
    order = order_from_row([1001.0, "GC-001", "Scheduled", None, 123456], 0)
    assert order.id == "1001"
    assert order.details == ""
    assert order.tracking_number == "123456"


def test_invoice_due_date_mirrors_created_at():
    invoice = invoice_from_row(["INV-9", "9", "GC-001", "$90", "paid", "", "", "2026-05-01"], 0)
    assert invoice.created_at == "2026-05-01"
    assert invoice.due_date == "2026-05-01"
    assert invoice.amount == 90


def test_extra_cells_are_ignored():
    sample = sample_from_row(["SMP-1", "Pat", "1 Main", "Tees", "New", "2026-01-01", "extra"], 0)
    assert to_row(sample) == ["SMP-1", "Pat", "1 Main", "Tees", "New", "2026-01-01"]


@pytest.mark.parametrize("sheet", SHEET_NAMES)
def test_seed_rows_round_trip(sheet):
    for idx, row in enumerate(SEED_ROWS[sheet]):
        entity = to_entity(sheet, row, idx)
        assert to_entity(sheet, to_row(entity), idx) == entity


def test_to_entity_unknown_sheet():
    with pytest.raises(KeyError):
        to_entity("Nope", [], 0)


def test_to_row_unknown_type():
    with pytest.raises(TypeError):
        to_row(object())
