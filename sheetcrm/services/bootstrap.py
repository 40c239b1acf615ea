from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from ..config.loader import CRMConfig, DatabaseConfig
from ..storage.sheet_store import SheetStore
from ..storage.slots import FileSlot, KeyValueSlot, MemorySlot, PostgresSlot
from .facade import CRMFacade

"""Application wiring: config -> slot -> store -> facade.

The store is built once here and handed to the facade that owns it; nothing
in the package keeps a module-level store.

Environment overrides (typically loaded from ``.env``):
    CRM_STORAGE_BACKEND, CRM_STORAGE_PATH
    DATABASE_URL / PGDSN, or PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
"""

__all__ = [
    "resolve_dsn",
    "build_slot",
    "build_store",
    "build_facade",
]

logger = logging.getLogger(__name__)


def resolve_dsn(db: DatabaseConfig, env: Mapping[str, str] | None = None) -> str:
    """Connection string for the postgres slot.

    Resolution order: DATABASE_URL / PGDSN, then config dsn, then individual
    PG* variables falling back to the config's fields.
    """
    env = os.environ if env is None else env
    direct = env.get("DATABASE_URL") or env.get("PGDSN") or db.dsn
    if direct:
        return direct
    host = env.get("PGHOST", db.host or "localhost")
    port = env.get("PGPORT", str(db.port) if db.port else "5432")
    user = env.get("PGUSER", db.user or "postgres")
    password = env.get("PGPASSWORD", db.password or "")
    database = env.get("PGDATABASE", db.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


def build_slot(cfg: CRMConfig, env: Mapping[str, str] | None = None) -> KeyValueSlot:
    env = os.environ if env is None else env
    backend = env.get("CRM_STORAGE_BACKEND", cfg.storage.backend)
    if backend == "memory":
        return MemorySlot()
    if backend == "postgres":
        return PostgresSlot(resolve_dsn(cfg.database, env))
    if backend != "file":
        raise ValueError(f"unknown storage backend: {backend}")
    path = Path(env.get("CRM_STORAGE_PATH", cfg.storage.path))
    logger.debug("file slot directory=%s", path)
    return FileSlot(path)


def build_store(cfg: CRMConfig, env: Mapping[str, str] | None = None) -> SheetStore:
    return SheetStore(build_slot(cfg, env), storage_key=cfg.storage.key, latency=cfg.latency_seconds)


def build_facade(cfg: CRMConfig, env: Mapping[str, str] | None = None) -> CRMFacade:
    return CRMFacade(build_store(cfg, env), settle_delay=cfg.settle_seconds, timezone=cfg.timezone)
