"""Domain models for the inventory kernel."""

from inventory_kernel.models.product import Product
from inventory_kernel.models.transaction_log import TransactionLogEntry, TransactionType
from inventory_kernel.models.warehouse import Warehouse

__all__ = [
    "Product",
    "TransactionLogEntry",
    "TransactionType",
    "Warehouse",
]
