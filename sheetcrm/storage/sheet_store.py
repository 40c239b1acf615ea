from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..models.sheet import Cell, Row, Sheet
from ..parsing.csv_parser import ParseError, decode_csv_bytes, parse_csv
from .seed import HEADERS, SEED_ROWS
from .slots import KeyValueSlot, PersistenceError

"""Sheet store: spreadsheet semantics over a durable key-value slot.

Every sheet lives in memory as a ``Sheet``; the whole collection is written to
the slot as one JSON envelope after each mutation. Row identity is purely
positional and there is no delete, so a row index stays valid for as long as
the process only appends.

Mutations apply in memory and save without yielding to the event loop in
between, so each one is a single unit for concurrent callers. A failed save
rolls the in-memory change back before ``PersistenceError`` propagates.
"""

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "NotFoundError",
    "IndexOutOfRangeError",
    "StoreNotInitializedError",
    "ParseError",
    "PersistenceError",
    "SheetStore",
]

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "starter_box_crm_data_v1"
ENVELOPE_SCHEMA_PATH = Path(__file__).with_name("envelope_schema.json")


class NotFoundError(Exception):
    """Raised when a sheet name is unknown."""


class IndexOutOfRangeError(Exception):
    """Raised when a row index is outside ``[0, len(rows))``."""


class StoreNotInitializedError(Exception):
    """Raised when data is accessed before ``initialize()``."""


def _load_envelope_schema() -> dict[str, Any]:
    return json.loads(ENVELOPE_SCHEMA_PATH.read_text(encoding="utf-8"))


def _seed_sheets(
    headers: Mapping[str, Sequence[str]], seed_rows: Mapping[str, Sequence[Sequence[Cell]]]
) -> dict[str, Sheet]:
    return {
        name: Sheet(name=name, headers=list(cols), rows=[list(r) for r in seed_rows.get(name, [])])
        for name, cols in headers.items()
    }


def is_header_row(first_row: Sequence[str], known_header: str) -> bool:
    """Header heuristic for bulk import.

    The first parsed row is a header when its first cell contains the sheet's
    first header label, case-insensitively.
    """
    if not first_row or not known_header:
        return False
    return known_header.lower() in str(first_row[0]).lower()


class SheetStore:
    """Async read / append / update / bulk-import contract over named sheets.

    Args:
        slot: Durable key-value slot holding the envelope
        storage_key: Fixed key of the envelope inside the slot
        latency: Seconds awaited before each operation (0 in tests)
        headers: Sheet name -> header labels used for seeding
        seed_rows: Sheet name -> starter rows used for seeding
    """

    def __init__(
        self,
        slot: KeyValueSlot,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        latency: float = 0.0,
        headers: Mapping[str, Sequence[str]] | None = None,
        seed_rows: Mapping[str, Sequence[Sequence[Cell]]] | None = None,
    ) -> None:
        self.slot = slot
        self.storage_key = storage_key
        self.latency = latency
        self._headers = headers if headers is not None else HEADERS
        self._seed_rows = seed_rows if seed_rows is not None else SEED_ROWS
        self._sheets: dict[str, Sheet] | None = None

    # -- lifecycle -------------------------------------------------------

    async def initialize(self) -> None:
        """Rehydrate from the slot, or seed defaults on first run / bad data."""
        await self._simulate_latency()
        sheets = self._rehydrate()
        if sheets is None:
            self._reseed()
            return
        missing = [name for name in self._headers if name not in sheets]
        for name in missing:
            logger.info("sheet=%s missing from stored envelope; seeding defaults", name)
            sheets[name] = _seed_sheets({name: self._headers[name]}, self._seed_rows)[name]
        self._sheets = sheets
        if missing:
            self._save_quietly()
        logger.debug("store rehydrated sheets=%s", list(sheets))

    def close(self) -> None:
        self.slot.close()

    def _rehydrate(self) -> dict[str, Sheet] | None:
        try:
            stored = self.slot.load(self.storage_key)
        except PersistenceError as e:
            logger.warning("failed to load stored sheets, resetting to defaults: %s", e)
            return None
        if stored is None:
            return None
        try:
            data = json.loads(stored)
            jsonschema.validate(data, _load_envelope_schema())
            return {name: Sheet.from_envelope_entry(name, entry) for name, entry in data.items()}
        except (json.JSONDecodeError, ValidationError, KeyError, TypeError, AttributeError) as e:
            logger.warning("stored envelope is corrupt, resetting to defaults: %s", e)
            return None

    def _reseed(self) -> None:
        self._sheets = _seed_sheets(self._headers, self._seed_rows)
        self._save_quietly()

    def _save_quietly(self) -> None:
        # initialization must not be fatal; the next mutation surfaces save errors
        try:
            self._save()
        except PersistenceError as e:
            logger.warning("could not persist initial sheets: %s", e)

    # -- internals -------------------------------------------------------

    async def _simulate_latency(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    def _sheet(self, sheet_name: str) -> Sheet:
        if self._sheets is None:
            raise StoreNotInitializedError("sheet store used before initialize()")
        sheet = self._sheets.get(sheet_name)
        if sheet is None:
            raise NotFoundError(f"Sheet {sheet_name} not found")
        return sheet

    def serialize(self) -> str:
        """Whole-store envelope as JSON text."""
        if self._sheets is None:
            raise StoreNotInitializedError("sheet store used before initialize()")
        return json.dumps(
            {name: sheet.to_envelope_entry() for name, sheet in self._sheets.items()},
            ensure_ascii=False,
        )

    def _save(self) -> None:
        # blocking slot I/O on purpose: no await between a mutation and its save
        self.slot.save(self.storage_key, self.serialize())

    # -- read path -------------------------------------------------------

    def sheet_names(self) -> list[str]:
        if self._sheets is None:
            raise StoreNotInitializedError("sheet store used before initialize()")
        return list(self._sheets)

    def headers(self, sheet_name: str) -> list[str]:
        return list(self._sheet(sheet_name).headers)

    async def get_rows(self, sheet_name: str) -> list[Row]:
        """Rows of ``sheet_name`` in positional order (copies, safe to modify).

        Raises:
            NotFoundError: If the sheet does not exist
        """
        await self._simulate_latency()
        return [list(r) for r in self._sheet(sheet_name).rows]

    # -- write path ------------------------------------------------------

    async def append_row(self, sheet_name: str, row: Sequence[Cell]) -> int:
        """Append ``row`` and persist. Returns the new row's index."""
        await self._simulate_latency()
        sheet = self._sheet(sheet_name)
        sheet.rows.append(list(row))
        try:
            self._save()
        except PersistenceError:
            sheet.rows.pop()
            raise
        return len(sheet.rows) - 1

    async def append_rows(self, rows_by_sheet: Mapping[str, Sequence[Cell]]) -> dict[str, int]:
        """Append one row to each named sheet and persist them with a single save.

        Either every row is stored or none is.

        Returns:
            Sheet name -> index of the row appended there

        Raises:
            NotFoundError: If any sheet does not exist (nothing is appended)
            PersistenceError: If the save fails (every append is rolled back)
        """
        await self._simulate_latency()
        sheets = {name: self._sheet(name) for name in rows_by_sheet}
        for name, row in rows_by_sheet.items():
            sheets[name].rows.append(list(row))
        try:
            self._save()
        except PersistenceError:
            for sheet in sheets.values():
                sheet.rows.pop()
            raise
        return {name: len(sheet.rows) - 1 for name, sheet in sheets.items()}

    async def update_row(self, sheet_name: str, row_index: int, row: Sequence[Cell]) -> None:
        """Replace the row at ``row_index`` and persist.

        Raises:
            NotFoundError: If the sheet does not exist
            IndexOutOfRangeError: If ``row_index`` is negative or past the end
        """
        await self._simulate_latency()
        sheet = self._sheet(sheet_name)
        if row_index < 0 or row_index >= len(sheet.rows):
            raise IndexOutOfRangeError(
                f"row index {row_index} out of bounds for sheet {sheet_name} (rows={len(sheet.rows)})"
            )
        previous = sheet.rows[row_index]
        sheet.rows[row_index] = list(row)
        try:
            self._save()
        except PersistenceError:
            sheet.rows[row_index] = previous
            raise

    async def bulk_import(self, sheet_name: str, raw: str | bytes, encoding: str = "utf-8-sig") -> int:
        """Append every CSV row of ``raw`` to ``sheet_name``.

        A leading header row is skipped (see ``is_header_row``). Cells are
        appended verbatim as strings. The batch is all-or-nothing and saved once.

        Returns:
            Number of rows appended

        Raises:
            NotFoundError: If the sheet does not exist
            ParseError: If the payload cannot be decoded or tokenized
            PersistenceError: If the save fails (nothing is kept in memory)
        """
        await self._simulate_latency()
        sheet = self._sheet(sheet_name)
        try:
            text = decode_csv_bytes(raw, encoding) if isinstance(raw, bytes) else raw
            parsed = parse_csv(text)
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(f"Failed to parse CSV data for sheet {sheet_name}: {e}") from e

        if not parsed:
            return 0
        start = 1 if is_header_row(parsed[0], sheet.headers[0] if sheet.headers else "") else 0
        batch: list[Row] = [list(r) for r in parsed[start:]]
        if not batch:
            return 0

        before = len(sheet.rows)
        sheet.rows.extend(batch)
        try:
            self._save()
        except PersistenceError:
            del sheet.rows[before:]
            raise
        logger.info("sheet=%s bulk import appended rows=%d header_skipped=%s", sheet_name, len(batch), start == 1)
        return len(batch)

    async def reset(self) -> None:
        """Drop the stored envelope and reseed every sheet. Irreversible."""
        await self._simulate_latency()
        self.slot.remove(self.storage_key)
        self._sheets = _seed_sheets(self._headers, self._seed_rows)
        # an absent envelope reseeds on next load, so memory and slot agree
        # even if this save fails
        self._save()
        logger.info("store reset to seed defaults")
