# Shared pytest fixtures
from __future__ import annotations

import asyncio
import logging
import tempfile
from pathlib import Path

import pytest

from sheetcrm.logging.init import APP_LOGGER_NAME, reset_logging
from sheetcrm.services.facade import CRMFacade
from sheetcrm.storage.sheet_store import SheetStore
from sheetcrm.storage.slots import MemorySlot


@pytest.fixture(autouse=True)
def _clean_app_logger():
    yield
    # handlers bound to a captured stdout must not leak into the next test
    reset_logging()
    logger = logging.getLogger(APP_LOGGER_NAME)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        for var in ("CRM_STORAGE_BACKEND", "CRM_STORAGE_PATH", "DATABASE_URL", "PGDSN"):
            monkeypatch.delenv(var, raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """storage:
  backend: file
  path: ./data
  key: starter_box_crm_data_v1
latency_seconds: 0
settle_seconds: 0
timezone: UTC
error_log_dir: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "crm.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def slot() -> MemorySlot:
    return MemorySlot()


@pytest.fixture()
def store(slot: MemorySlot) -> SheetStore:
    s = SheetStore(slot)
    asyncio.run(s.initialize())
    return s


@pytest.fixture()
def facade(store: SheetStore) -> CRMFacade:
    f = CRMFacade(store)
    asyncio.run(f.refresh())
    return f
