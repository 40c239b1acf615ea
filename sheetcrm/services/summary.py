from __future__ import annotations

from ..models.import_result import ImportBatchResult
from ..models.snapshot import CRMSnapshot

"""SUMMARY line rendering.

Import:
    SUMMARY files={n}/{n} success={s} failed={f} rows={rows} elapsed_sec={e} throughput_rps={t}
Sync:
    SUMMARY customers={c} products={p} orders={o} invoices={i} mockups={m} samples={s} last_sync={iso|never}

The returned strings carry the ``SUMMARY `` prefix; strip it before handing
the text to ``log_summary`` (which adds its own label).
"""

__all__ = [
    "format_number",
    "render_import_summary",
    "render_sync_summary",
]


def format_number(value: float) -> str:
    """Integers without a decimal part, tiny values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_import_summary(result: ImportBatchResult) -> str:
    """
    >>> from datetime import datetime, timezone
    >>> t = datetime(2026, 1, 1, tzinfo=timezone.utc)
    >>> r = ImportBatchResult(1, 0, 40, t, t, 2.0, 20.0)
    >>> render_import_summary(r)
    'SUMMARY files=1/1 success=1 failed=0 rows=40 elapsed_sec=2 throughput_rps=20'
    """
    total = result.total_files
    return (
        f"SUMMARY files={total}/{total} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_rows} "
        f"elapsed_sec={format_number(result.elapsed_seconds)} "
        f"throughput_rps={format_number(result.throughput_rows_per_sec)}"
    )


def render_sync_summary(snapshot: CRMSnapshot) -> str:
    counts = " ".join(f"{k}={v}" for k, v in snapshot.counts().items())
    last_sync = snapshot.last_sync.isoformat() if snapshot.last_sync else "never"
    return f"SUMMARY {counts} last_sync={last_sync}"
