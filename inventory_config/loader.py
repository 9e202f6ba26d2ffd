"""
Settings Loader (``inventory_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the frozen dataclasses of
``inventory_config.schema``.  Callers obtain settings through
``inventory_config.get_active_config()``; this module is its internal
tooling.

Failure modes
-------------
* Missing YAML file  -> ``ConfigError``.
* Malformed YAML  -> ``ConfigError`` wrapping ``yaml.YAMLError``.
* Unknown sections or keys, wrong types, non-positive limits  ->
  ``ConfigError`` naming the offending key.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    DatabaseSettings,
    KernelSettings,
    LoggingSettings,
    StoreSettings,
)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Settings file missing, malformed, or semantically invalid."""


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        ConfigError: if the file is missing, unreadable YAML, or not a
            mapping at the top level.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as exc:
        raise ConfigError(f"Settings file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")
    return data


def _section(data: dict[str, Any], name: str, cls: type) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}': {', '.join(unknown)}")
    return section


def _typed(section: str, key: str, value: Any, expected: type | tuple[type, ...]) -> Any:
    # bool is an int subclass; only accept it where bool is expected
    if isinstance(value, bool) and expected is not bool:
        raise ConfigError(f"'{section}.{key}' must not be a boolean")
    if not isinstance(value, expected):
        raise ConfigError(f"'{section}.{key}' has invalid type {type(value).__name__}")
    return value


def parse_database(data: dict[str, Any], url_override: str | None = None) -> DatabaseSettings:
    section = _section(data, "database", DatabaseSettings)
    url = url_override or section.get("url")
    if not url or not isinstance(url, str):
        raise ConfigError("'database.url' is required")

    settings = DatabaseSettings(
        url=url,
        echo=_typed("database", "echo", section.get("echo", False), bool),
        pool_size=_typed("database", "pool_size", section.get("pool_size", 10), int),
        max_overflow=_typed("database", "max_overflow", section.get("max_overflow", 10), int),
        pool_pre_ping=_typed(
            "database", "pool_pre_ping", section.get("pool_pre_ping", True), bool
        ),
        pool_recycle=_typed("database", "pool_recycle", section.get("pool_recycle", 1800), int),
    )
    if settings.pool_size <= 0:
        raise ConfigError("'database.pool_size' must be positive")
    if settings.max_overflow < 0:
        raise ConfigError("'database.max_overflow' must not be negative")
    return settings


def parse_store(data: dict[str, Any]) -> StoreSettings:
    section = _section(data, "store", StoreSettings)
    timeout = _typed(
        "store", "timeout_seconds", section.get("timeout_seconds", 5.0), (int, float)
    )
    if timeout <= 0:
        raise ConfigError("'store.timeout_seconds' must be positive")
    return StoreSettings(
        timeout_seconds=float(timeout),
        install_triggers=_typed(
            "store", "install_triggers", section.get("install_triggers", True), bool
        ),
    )


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    section = _section(data, "logging", LoggingSettings)
    level = str(section.get("level", "INFO")).upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"'logging.level' must be one of {', '.join(_LOG_LEVELS)}")
    return LoggingSettings(level=level)


def parse_settings(
    data: dict[str, Any],
    url_override: str | None = None,
    source: str | None = None,
) -> KernelSettings:
    """Parse a settings mapping into KernelSettings."""
    unknown = sorted(set(data) - {"database", "store", "logging"})
    if unknown:
        raise ConfigError(f"Unknown settings sections: {', '.join(unknown)}")
    return KernelSettings(
        database=parse_database(data, url_override),
        store=parse_store(data),
        logging=parse_logging(data),
        source=source,
    )


def log_level(settings: LoggingSettings) -> int:
    return logging.getLevelName(settings.level)
