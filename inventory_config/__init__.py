"""
inventory_config -- single public entrypoint for kernel settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_config()``.  No other component reads settings files or
    environment variables.

Architecture position:
    Configuration -- sits above ``inventory_kernel``.  The kernel MUST NEVER
    import from ``inventory_config``; ``inventory_config.bridges`` translates
    settings into kernel calls.

Environment:
    INVENTORY_CONFIG        path of the YAML settings file to load
    INVENTORY_DATABASE_URL  overrides ``database.url``

Failure modes:
    - ``ConfigError`` -- missing file, malformed YAML or invalid values.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from inventory_config.loader import ConfigError, load_yaml_file, parse_settings
from inventory_config.schema import (
    DatabaseSettings,
    KernelSettings,
    LoggingSettings,
    StoreSettings,
)

_logger = logging.getLogger("inventory_kernel.config")

CONFIG_PATH_ENV = "INVENTORY_CONFIG"
DATABASE_URL_ENV = "INVENTORY_DATABASE_URL"

# Default settings file
DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> KernelSettings:
    """The ONLY public settings entrypoint.

    Resolution order for the file: ``config_path``, then
    ``$INVENTORY_CONFIG``, then the packaged default.  ``$INVENTORY_DATABASE_URL``
    always wins over the file's ``database.url``.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    path = Path(config_path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    url_override = os.environ.get(DATABASE_URL_ENV) or None

    settings = parse_settings(
        load_yaml_file(path),
        url_override=url_override,
        source=str(path),
    )

    _logger.info(
        "config_loaded",
        extra={
            "config_source": settings.source,
            "database_url_overridden": url_override is not None,
            "timeout_seconds": settings.store.timeout_seconds,
        },
    )
    return settings


__all__ = [
    "ConfigError",
    "DatabaseSettings",
    "KernelSettings",
    "LoggingSettings",
    "StoreSettings",
    "get_active_config",
]
