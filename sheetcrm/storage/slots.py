from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import psycopg2

"""Durable key-value slots holding the serialized sheet envelope.

A slot stores opaque text under a key. The sheet store writes the whole
envelope on every mutation, so slots only need load / save / remove.

- MemorySlot: in-process dict (tests, ephemeral runs)
- FileSlot: one ``<key>.json`` file per key, written with an atomic replace
- PostgresSlot: ``kv_store`` table via psycopg2, one upsert per save
"""

__all__ = [
    "PersistenceError",
    "KeyValueSlot",
    "MemorySlot",
    "FileSlot",
    "PostgresSlot",
]


class PersistenceError(Exception):
    """Raised when the durable slot cannot be read or written."""


class KeyValueSlot(Protocol):
    def load(self, key: str) -> str | None: ...

    def save(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def close(self) -> None: ...


class MemorySlot:
    """Dict-backed slot. ``fail_saves`` lets tests simulate a full disk."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.fail_saves = False
        self.save_count = 0

    def load(self, key: str) -> str | None:
        return self.data.get(key)

    def save(self, key: str, value: str) -> None:
        if self.fail_saves:
            raise PersistenceError(f"simulated save failure for key={key}")
        self.data[key] = value
        self.save_count += 1

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def close(self) -> None:  # pragma: no cover (trivial)
        pass


class FileSlot:
    """Stores each key as ``<directory>/<key>.json``.

    Saves go to a temp file in the same directory followed by ``os.replace``
    so a crash mid-write never leaves a truncated envelope behind.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"failed reading {path}: {e}") from e

    def save(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}-", suffix=".tmp", dir=self.directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise PersistenceError(f"failed writing {path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"failed removing {path}: {e}") from e

    def close(self) -> None:  # pragma: no cover (trivial)
        pass


class PostgresSlot:
    """Slot backed by a single ``kv_store`` table.

    The connection is owned by the slot and committed after every write,
    so one save is one transaction.
    """

    TABLE = "kv_store"

    def __init__(self, dsn: str | None = None, connection: Any = None) -> None:
        if connection is None:
            try:
                connection = psycopg2.connect(dsn)
            except Exception as e:
                raise PersistenceError(f"database connection failed: {e}") from e
        self.conn = connection
        self._ensure_table()

    def _execute(self, sql: str, params: tuple[Any, ...] = ()) -> Any:
        cur = self.conn.cursor()
        try:
            cur.execute(sql, params)
            return cur
        except Exception:
            cur.close()
            raise

    def _ensure_table(self) -> None:
        try:
            cur = self._execute(
                f"CREATE TABLE IF NOT EXISTS {self.TABLE} (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            cur.close()
            self.conn.commit()
        except Exception as e:
            self._rollback()
            raise PersistenceError(f"failed preparing {self.TABLE}: {e}") from e

    def _rollback(self) -> None:
        try:
            self.conn.rollback()
        except Exception:  # pragma: no cover
            pass

    def load(self, key: str) -> str | None:
        try:
            cur = self._execute(f"SELECT value FROM {self.TABLE} WHERE key = %s", (key,))
            row = cur.fetchone()
            cur.close()
            self.conn.commit()
        except Exception as e:
            self._rollback()
            raise PersistenceError(f"failed loading key={key}: {e}") from e
        return row[0] if row else None

    def save(self, key: str, value: str) -> None:
        try:
            cur = self._execute(
                f"INSERT INTO {self.TABLE} (key, value) VALUES (%s, %s) "
                "ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value",
                (key, value),
            )
            cur.close()
            self.conn.commit()
        except Exception as e:
            self._rollback()
            raise PersistenceError(f"failed saving key={key}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            cur = self._execute(f"DELETE FROM {self.TABLE} WHERE key = %s", (key,))
            cur.close()
            self.conn.commit()
        except Exception as e:
            self._rollback()
            raise PersistenceError(f"failed removing key={key}: {e}") from e

    def close(self) -> None:
        try:
            self.conn.close()
        except Exception:  # pragma: no cover
            pass
