from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load YAML (config/crm.yml by default)
- Validate against the packaged JSON schema (unknown keys rejected)
- Apply defaults for every omitted key
"""

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "StorageConfig",
    "CRMConfig",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "default_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/crm.yml")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    """Fallback connection settings for the postgres slot.

    Environment variables (DATABASE_URL / PG*) take precedence.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class StorageConfig:
    backend: str = "file"  # file | memory | postgres
    path: str = "./data"  # FileSlot directory
    key: str = "starter_box_crm_data_v1"


@dataclass(frozen=True)
class CRMConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    latency_seconds: float = 0.0
    settle_seconds: float = 0.5
    timezone: str = "UTC"
    error_log_dir: str = "./logs"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate raw config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing/invalid or validation fails
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def default_config() -> CRMConfig:
    return CRMConfig()


def load_config(path: Path) -> CRMConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    defaults = CRMConfig()
    storage_raw = data.get("storage") or {}
    db_raw = data.get("database") or {}
    tz = data.get("timezone", defaults.timezone)
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown timezone: {tz}") from e

    return CRMConfig(
        storage=StorageConfig(
            backend=storage_raw.get("backend", defaults.storage.backend),
            path=storage_raw.get("path", defaults.storage.path),
            key=storage_raw.get("key", defaults.storage.key),
        ),
        latency_seconds=float(data.get("latency_seconds", defaults.latency_seconds)),
        settle_seconds=float(data.get("settle_seconds", defaults.settle_seconds)),
        timezone=tz,
        error_log_dir=data.get("error_log_dir", defaults.error_log_dir),
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
    )
