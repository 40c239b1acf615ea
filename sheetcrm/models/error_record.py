from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per failed import file (or failed row batch). ``row`` is -1 when
the failure is not tied to a specific CSV line.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: File name (or operation name) that failed
        sheet: Target sheet name
        row: 1-based CSV line, or -1 when unknown
        error_type: Classification in UPPER_SNAKE_CASE (PARSE_ERROR, ...)
        message: Human readable description
    """
    timestamp: str
    source: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(source: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
