from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..excel.workbook import read_sheet_as_csv
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.import_result import FileImportStat, ImportBatchResult
from ..parsing.csv_parser import ParseError
from ..storage.sheet_store import NotFoundError
from ..storage.slots import PersistenceError
from .facade import CRMFacade
from .progress import ProgressTracker

"""Batch import of CSV / XLSX files into one sheet.

Each file is its own all-or-nothing ``bulk_import``: a bad file is recorded
in the error log and the batch moves on. Published state is refreshed once
after the last file.
"""

__all__ = [
    "ImportBatchError",
    "SUPPORTED_SUFFIXES",
    "collect_import_files",
    "import_files",
]

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".csv", ".xlsx")


class ImportBatchError(Exception):
    """Raised for problems that prevent the batch from starting."""


def collect_import_files(paths: Iterable[Path]) -> list[Path]:
    """Expand directories (non-recursive) into their .csv/.xlsx files.

    Raises:
        ImportBatchError: If a given path does not exist
    """
    files: list[Path] = []
    for p in paths:
        p = Path(p)
        if not p.exists():
            raise ImportBatchError(f"path not found: {p}")
        if p.is_dir():
            files.extend(sorted(c for c in p.iterdir() if c.is_file() and c.suffix.lower() in SUPPORTED_SUFFIXES))
        else:
            files.append(p)
    return files


def _read_payload(path: Path, sheet_name: str) -> str | bytes:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return path.read_bytes()
    if suffix == ".xlsx":
        return read_sheet_as_csv(path, sheet_name)
    raise ParseError(f"unsupported file type: {path.suffix or '<none>'}")


def _classify(e: Exception) -> str:
    if isinstance(e, ParseError):
        return "PARSE_ERROR"
    if isinstance(e, PersistenceError):
        return "PERSISTENCE_ERROR"
    if isinstance(e, NotFoundError):
        return "SHEET_NOT_FOUND"
    if isinstance(e, OSError):
        return "READ_ERROR"
    return "UNEXPECTED_ERROR"


async def import_files(
    facade: CRMFacade,
    sheet_name: str,
    paths: Iterable[Path],
    error_log: ErrorLogBuffer,
) -> ImportBatchResult:
    """Import every file into ``sheet_name`` and refresh once at the end.

    Returns:
        ImportBatchResult with per-file stats
    """
    start_time = datetime.now(UTC)
    files = collect_import_files(paths)
    stats: list[FileImportStat] = []
    success = failed = total_rows = 0

    with ProgressTracker(len(files)) as progress:
        for path in files:
            progress.start_file(path)
            file_start = datetime.now(UTC)
            try:
                payload = _read_payload(path, sheet_name)
                added = await facade.store.bulk_import(sheet_name, payload)
            except Exception as e:
                failed += 1
                error_type = _classify(e)
                logger.warning("import failed file=%s sheet=%s type=%s: %s", path.name, sheet_name, error_type, e)
                error_log.append(ErrorRecord.create(path.name, sheet_name, -1, error_type, str(e)))
                stats.append(FileImportStat(
                    file_name=path.name,
                    sheet=sheet_name,
                    status="failed",
                    rows_added=0,
                    elapsed_seconds=(datetime.now(UTC) - file_start).total_seconds(),
                    error=str(e),
                ))
                progress.finish_file(success=False)
                continue

            success += 1
            total_rows += added
            logger.info("imported file=%s sheet=%s rows=%d", path.name, sheet_name, added)
            stats.append(FileImportStat(
                file_name=path.name,
                sheet=sheet_name,
                status="success",
                rows_added=added,
                elapsed_seconds=(datetime.now(UTC) - file_start).total_seconds(),
            ))
            progress.set_postfix(success=success, failed=failed, rows=total_rows)
            progress.finish_file(success=True)

    if success:
        await facade.refresh()

    end_time = datetime.now(UTC)
    elapsed = (end_time - start_time).total_seconds()
    return ImportBatchResult(
        success_files=success,
        failed_files=failed,
        total_rows=total_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed,
        throughput_rows_per_sec=total_rows / elapsed if elapsed > 0 else 0.0,
        file_stats=stats,
    )
