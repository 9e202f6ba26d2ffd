"""
Config -> Kernel Bridges.

Functions that turn KernelSettings into an initialized kernel.  They live
in inventory_config (the producer) because the kernel must NEVER import
inventory_config.

Usage:
    from inventory_config import get_active_config
    from inventory_config.bridges import init_kernel, build_inventory_service

    settings = get_active_config()
    init_kernel(settings)
    service = build_inventory_service(settings)
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from inventory_config.loader import log_level
from inventory_config.schema import KernelSettings
from inventory_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
)
from inventory_kernel.db.immutability import register_immutability_listeners
from inventory_kernel.domain.clock import Clock
from inventory_kernel.logging_config import configure_logging
from inventory_kernel.services.inventory_service import InventoryService


def init_kernel(settings: KernelSettings, *, create_schema: bool = True) -> Engine:
    """
    Configure logging, initialize the engine and (optionally) the schema.

    Postconditions:
        - The engine module holds an engine for ``settings.database.url``.
        - ORM immutability listeners are registered.
        - With ``create_schema``, tables exist and, when
          ``store.install_triggers`` is set, so do the database triggers.
    """
    configure_logging(level=log_level(settings.logging))

    db = settings.database
    engine = init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_pre_ping=db.pool_pre_ping,
        timeout_seconds=settings.store.timeout_seconds,
        pool_recycle=db.pool_recycle,
    )
    register_immutability_listeners()

    if create_schema:
        create_tables(install_triggers=settings.store.install_triggers)
    return engine


def build_inventory_service(
    settings: KernelSettings,
    clock: Clock | None = None,
    actor: str | None = None,
) -> InventoryService:
    """InventoryService bound to the initialized engine and the store timeout."""
    return InventoryService(
        get_session_factory(),
        clock=clock,
        lock_timeout=settings.store.timeout_seconds,
        actor=actor,
    )
