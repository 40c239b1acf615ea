from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

"""CSV tokenizer for sheet bulk import.

Turns raw delimited text into rows of string cells:
- double-quoted cells may hold commas and newlines, ``""`` is a literal quote
- ``\\r\\n`` and bare ``\\r`` are normalized to ``\\n`` first
- whitespace outside quotes is trimmed, whitespace inside quotes is kept
- rows whose cells are all empty are dropped
- an unterminated quote is closed at end of input

``parse_csv`` never raises for ``str`` input; decoding problems belong to the
I/O boundary (``decode_csv_bytes``) and surface as ``ParseError``.
"""

__all__ = [
    "ParseError",
    "parse_csv",
    "decode_csv_bytes",
    "format_csv_row",
    "to_csv",
]

QUOTE = '"'
DELIMITER = ","
NEWLINE = "\n"


class ParseError(Exception):
    """Raised when raw import input cannot be turned into rows."""


class _CellBuffer:
    """Characters of the cell being built.

    ``protected`` marks how many leading characters came from a quoted
    section; those are never trimmed.
    """

    def __init__(self) -> None:
        self.chars: list[str] = []
        self.protected = 0
        self.was_quoted = False

    def at_content_start(self) -> bool:
        return not self.was_quoted and all(c.isspace() for c in self.chars)

    def open_quote(self) -> None:
        # whitespace before the opening quote is outside the cell
        self.chars.clear()
        self.was_quoted = True

    def close_quote(self) -> None:
        self.protected = len(self.chars)

    def finish(self) -> str:
        if not self.was_quoted:
            return "".join(self.chars).strip()
        head = "".join(self.chars[: self.protected])
        tail = "".join(self.chars[self.protected :]).rstrip()
        return head + tail


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", NEWLINE).replace("\r", NEWLINE)


def parse_csv(text: str) -> list[list[str]]:
    """Parse CSV text into a list of rows.

    Args:
        text: Raw CSV content

    Returns:
        Rows of trimmed string cells, blank rows removed
    """
    data = _normalize_newlines(text)
    rows: list[list[str]] = []
    row: list[str] = []
    cell = _CellBuffer()
    quoted = False

    def end_cell() -> None:
        nonlocal cell
        row.append(cell.finish())
        cell = _CellBuffer()

    def end_row() -> None:
        nonlocal row
        if any(c != "" for c in row):
            rows.append(row)
        row = []

    i = 0
    n = len(data)
    while i < n:
        ch = data[i]
        if quoted:
            if ch == QUOTE:
                if i + 1 < n and data[i + 1] == QUOTE:
                    cell.chars.append(QUOTE)
                    i += 2
                    continue
                quoted = False
                cell.close_quote()
            else:
                cell.chars.append(ch)
        elif ch == QUOTE and cell.at_content_start():
            quoted = True
            cell.open_quote()
        elif ch == DELIMITER:
            end_cell()
        elif ch == NEWLINE:
            end_cell()
            end_row()
        else:
            cell.chars.append(ch)
        i += 1

    if quoted:
        # implicit close at end of input
        cell.close_quote()
    if cell.chars or cell.was_quoted or row:
        end_cell()
        end_row()
    return rows


def decode_csv_bytes(raw: bytes, encoding: str = "utf-8-sig") -> str:
    """Decode uploaded bytes into text for ``parse_csv``.

    Raises:
        ParseError: If the payload is not valid in ``encoding``
    """
    try:
        return raw.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise ParseError(f"cannot decode CSV payload as {encoding}: {e}") from e


def _needs_quotes(text: str) -> bool:
    if text != text.strip():
        return True
    return any(c in text for c in (DELIMITER, QUOTE, NEWLINE, "\r"))


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_csv_row(row: Sequence[Any]) -> str:
    """Render one row as a CSV line, quoting cells only where needed."""
    out: list[str] = []
    for value in row:
        text = _cell_text(value)
        if _needs_quotes(text):
            text = QUOTE + text.replace(QUOTE, QUOTE * 2) + QUOTE
        out.append(text)
    return DELIMITER.join(out)


def to_csv(rows: Iterable[Sequence[Any]]) -> str:
    """Render rows as CSV text (one line per row, trailing newline)."""
    lines = [format_csv_row(r) for r in rows]
    if not lines:
        return ""
    return NEWLINE.join(lines) + NEWLINE
