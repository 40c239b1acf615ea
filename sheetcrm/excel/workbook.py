from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from ..parsing.csv_parser import to_csv
from ..storage.sheet_store import SheetStore

"""Workbook import/export with pandas.

Export turns each sheet into a DataFrame with the sheet headers as columns.
Rows are positional and may be ragged, so short rows are padded with None and
cells past the header width are dropped.

Import reads one worksheet of an .xlsx file and renders it as CSV text so it
goes through the same bulk import path as an uploaded CSV.
"""

__all__ = [
    "rows_to_frame",
    "sheet_frames",
    "write_workbook",
    "read_sheet_as_csv",
]


def rows_to_frame(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> pd.DataFrame:
    width = len(headers)
    fitted = [list(r[:width]) + [None] * (width - len(r)) for r in rows]
    return pd.DataFrame(fitted, columns=list(headers), dtype=object)


async def sheet_frames(store: SheetStore) -> dict[str, pd.DataFrame]:
    """One DataFrame per sheet, in store order."""
    frames: dict[str, pd.DataFrame] = {}
    for name in store.sheet_names():
        rows = await store.get_rows(name)
        frames[name] = rows_to_frame(store.headers(name), rows)
    return frames


def write_workbook(path: Path, frames: dict[str, pd.DataFrame]) -> Path:
    """Write frames to ``path``: .xlsx as one workbook, otherwise one CSV per sheet in a directory."""
    path = Path(path)
    if path.suffix.lower() == ".xlsx":
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path) as writer:
            for name, df in frames.items():
                df.to_excel(writer, sheet_name=name, index=False)
        return path
    path.mkdir(parents=True, exist_ok=True)
    for name, df in frames.items():
        df.to_csv(path / f"{name}.csv", index=False)
    return path


def _cell(value: Any) -> Any:
    if pd.isna(value):
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def read_sheet_as_csv(path: Path, sheet_name: str | None = None) -> str:
    """Read a worksheet (header row included) and render it as CSV text.

    Args:
        path: .xlsx file
        sheet_name: Worksheet to read; the first one when None or absent
    """
    with pd.ExcelFile(path) as xls:
        names = [str(n) for n in xls.sheet_names]
        target = sheet_name if sheet_name in names else names[0]
        df = xls.parse(target, header=None, dtype=object)
    rows = [[_cell(v) for v in raw] for raw in df.itertuples(index=False, name=None)]
    return to_csv(rows)
