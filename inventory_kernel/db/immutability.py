"""
ORM-Level Immutability Enforcement (Layer 1 of 2).

===============================================================================
WHY THIS EXISTS
===============================================================================

The transaction log is the audit history of every stock movement: entries
are appended, never edited or removed.  Products have no update path (a
restock is an export followed by an import) and warehouses are frozen once
registered.

  Layer 1: THIS FILE (ORM event listeners)
    - Catches modifications through Python/SQLAlchemy code
    - Fires BEFORE the SQL is sent to the database

  Layer 2: db/sql/<dialect>/*.sql (database triggers)
    - Catches raw SQL and bulk UPDATE/DELETE statements
    - Fires AT the database level, independent of application code

Both layers enforce the SAME rules.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity               | UPDATE   | DELETE
---------------------|----------|---------------------------------------
TransactionLogEntry  | blocked  | blocked
Product              | blocked  | allowed (export removes the product)
Warehouse            | blocked  | blocked

===============================================================================
USAGE
===============================================================================

    from inventory_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup; repeat calls are no-ops

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
"""

from sqlalchemy import event

from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _block(entity_type: str, target, operation: str, reason: str) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "db_operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_log_entry_update(mapper, connection, target):
    _block(
        "TransactionLogEntry",
        target,
        "UPDATE",
        "Transaction log entries are append-only and cannot be modified",
    )


def _check_log_entry_delete(mapper, connection, target):
    _block(
        "TransactionLogEntry",
        target,
        "DELETE",
        "Transaction log entries are append-only and cannot be deleted",
    )


def _check_product_update(mapper, connection, target):
    _block(
        "Product",
        target,
        "UPDATE",
        "Products cannot be modified in place; export and re-import instead",
    )


def _check_warehouse_update(mapper, connection, target):
    _block(
        "Warehouse",
        target,
        "UPDATE",
        "Warehouses are immutable after registration",
    )


def _check_warehouse_delete(mapper, connection, target):
    _block(
        "Warehouse",
        target,
        "DELETE",
        "Warehouses cannot be deleted",
    )


def _listeners():
    from inventory_kernel.models.product import Product
    from inventory_kernel.models.transaction_log import TransactionLogEntry
    from inventory_kernel.models.warehouse import Warehouse

    return (
        (TransactionLogEntry, "before_update", _check_log_entry_update),
        (TransactionLogEntry, "before_delete", _check_log_entry_delete),
        (Product, "before_update", _check_product_update),
        (Warehouse, "before_update", _check_warehouse_update),
        (Warehouse, "before_delete", _check_warehouse_delete),
    )


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Call after the models are importable and before any database work.
    """
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if not registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests that need to bypass layer 1 to verify
    that the database triggers still hold.
    """
    for target, event_name, listener_fn in _listeners():
        _safe_remove_listener(target, event_name, listener_fn)


def immutability_listeners_registered() -> bool:
    return all(
        event.contains(target, event_name, listener_fn)
        for target, event_name, listener_fn in _listeners()
    )
