from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Result models for batch file imports.

Aggregates per-file outcomes into the figures printed on the SUMMARY line.
"""

__all__ = [
    "FileImportStat",
    "ImportBatchResult",
]


@dataclass(frozen=True)
class FileImportStat:
    """Outcome of importing one file into one sheet."""
    file_name: str
    sheet: str
    status: str  # success / failed
    rows_added: int
    elapsed_seconds: float
    error: str | None = None


@dataclass(frozen=True)
class ImportBatchResult:
    success_files: int
    failed_files: int
    total_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    file_stats: list[FileImportStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
