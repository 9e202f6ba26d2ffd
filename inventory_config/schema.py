"""
Inventory kernel settings schema.

Frozen dataclasses parsed from a YAML settings file by the loader.  The
kernel never sees YAML: bridges translate these values into engine and
service arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseSettings:
    """Durable store connection settings."""

    url: str
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 10
    pool_pre_ping: bool = True
    pool_recycle: int = 1800


@dataclass(frozen=True)
class StoreSettings:
    """Blocking and integrity settings for the inventory service."""

    timeout_seconds: float = 5.0
    install_triggers: bool = True


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class KernelSettings:
    """Complete, validated settings for one kernel instance."""

    database: DatabaseSettings
    store: StoreSettings = field(default_factory=StoreSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source: str | None = None
