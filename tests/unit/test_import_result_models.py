from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from sheetcrm.models.import_result import FileImportStat, ImportBatchResult


def test_file_import_stat_defaults():
    stat = FileImportStat(file_name="a.csv", sheet="Products", status="success", rows_added=2, elapsed_seconds=0.1)
    assert stat.error is None
    with pytest.raises(FrozenInstanceError):
        stat.rows_added = 3  # type: ignore[misc]


def test_import_batch_result_total_files():
    t = datetime(2026, 1, 1, tzinfo=timezone.utc)
    result = ImportBatchResult(
        success_files=2,
        failed_files=1,
        total_rows=10,
        start_time=t,
        end_time=t,
        elapsed_seconds=0.0,
        throughput_rows_per_sec=0.0,
    )
    assert result.total_files == 3
    assert result.file_stats is None
