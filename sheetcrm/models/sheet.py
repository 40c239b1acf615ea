from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

"""Sheet model for the spreadsheet-emulating store.

A Sheet is a named table with fixed headers and an ordered list of rows.
Rows are positional lists of scalar cells; the store never enforces their
width against the headers.
"""

__all__ = [
    "Cell",
    "Row",
    "Sheet",
]

Cell = Union[str, int, float, bool, None]
Row = list[Cell]


@dataclass
class Sheet:
    """Named tabular resource (headers fixed at creation, rows append-only)."""
    name: str
    headers: list[str]
    rows: list[Row] = field(default_factory=list)

    def to_envelope_entry(self) -> dict[str, Any]:
        return {"headers": list(self.headers), "rows": [list(r) for r in self.rows]}

    @staticmethod
    def from_envelope_entry(name: str, entry: dict[str, Any]) -> Sheet:
        return Sheet(
            name=name,
            headers=[str(h) for h in entry["headers"]],
            rows=[list(r) for r in entry["rows"]],
        )
