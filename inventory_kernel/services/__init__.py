"""Services for the inventory kernel (write side)."""

from inventory_kernel.services.entity_store import EntityStore
from inventory_kernel.services.inventory_service import InventoryService
from inventory_kernel.services.locking import KeyedLockRegistry
from inventory_kernel.services.sequence_service import SequenceService
from inventory_kernel.services.transaction_log import TransactionLog, TransactionLogFilter

__all__ = [
    "EntityStore",
    "InventoryService",
    "KeyedLockRegistry",
    "SequenceService",
    "TransactionLog",
    "TransactionLogFilter",
]
