from __future__ import annotations

import re
from datetime import datetime, timezone

import pytest

from sheetcrm.models.import_result import ImportBatchResult
from sheetcrm.models.snapshot import CRMSnapshot
from sheetcrm.services.summary import format_number, render_import_summary, render_sync_summary

IMPORT_PATTERN = re.compile(
    r"^SUMMARY\s+files=([0-9]+)/(\1)\s+success=([0-9]+)\s+failed=([0-9]+)\s+"
    r"rows=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)\s+throughput_rps=([0-9]+\.?[0-9]*)$"
)

T0 = datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def _result(success, failed, rows, elapsed, rps) -> ImportBatchResult:
    return ImportBatchResult(
        success_files=success,
        failed_files=failed,
        total_rows=rows,
        start_time=T0,
        end_time=T0,
        elapsed_seconds=elapsed,
        throughput_rows_per_sec=rps,
    )


def test_render_import_summary_all_success():
    line = render_import_summary(_result(2, 0, 1000, 2.0, 500.0))
    assert line == "SUMMARY files=2/2 success=2 failed=0 rows=1000 elapsed_sec=2 throughput_rps=500"
    assert IMPORT_PATTERN.match(line)


def test_render_import_summary_partial_failure():
    line = render_import_summary(_result(1, 2, 500, 3.0, 166.67))
    m = IMPORT_PATTERN.match(line)
    assert m
    assert m.group(1) == "3"
    assert m.group(4) == "2"
    assert m.group(7) == "166.67"


def test_render_import_summary_zero_files():
    assert render_import_summary(_result(0, 0, 0, 0.0, 0.0)) == (
        "SUMMARY files=0/0 success=0 failed=0 rows=0 elapsed_sec=0 throughput_rps=0"
    )


@pytest.mark.parametrize(
    "value,expected",
    [(0, "0"), (5.0, "5"), (0.84, "0.84"), (0.00005, "0.00005"), (4761.9, "4761.9")],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_render_sync_summary_before_first_sync():
    assert render_sync_summary(CRMSnapshot()) == (
        "SUMMARY customers=0 products=0 orders=0 invoices=0 mockups=0 samples=0 last_sync=never"
    )


def test_render_sync_summary_counts(facade):
    line = render_sync_summary(facade.snapshot)
    assert line.startswith("SUMMARY customers=3 products=4 orders=3 invoices=3 mockups=2 samples=1 last_sync=")
    assert "never" not in line
