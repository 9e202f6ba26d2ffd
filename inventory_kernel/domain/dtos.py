"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable records that cross the service boundary: WarehouseInfo,
    ProductInfo, TransactionRecord, and the ImportResult / ExportResult
    returned by InventoryService.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods exist as boundary converters but are only
    invoked from the service layer (never from domain logic).

Invariants enforced:
    - Domain logic accepts/returns DTOs, never ORM entities, so nothing a
      caller holds can be flushed back into the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from inventory_kernel.domain.values import AllowedCategories
from inventory_kernel.models.transaction_log import TransactionType

if TYPE_CHECKING:
    from inventory_kernel.models.product import Product as ProductModel
    from inventory_kernel.models.transaction_log import (
        TransactionLogEntry as TransactionLogEntryModel,
    )
    from inventory_kernel.models.warehouse import Warehouse as WarehouseModel


@dataclass(frozen=True)
class WarehouseInfo:
    """Read-only view of a warehouse."""

    id: int
    name: str
    location: str
    allowed_categories: AllowedCategories
    capacity: int

    @classmethod
    def from_model(cls, model: WarehouseModel) -> WarehouseInfo:
        return cls(
            id=model.id,
            name=model.name,
            location=model.location,
            allowed_categories=AllowedCategories.of(model.allowed_categories),
            capacity=model.capacity,
        )


@dataclass(frozen=True)
class ProductInfo:
    """Read-only view of a product."""

    id: int
    category: str
    quantity: int
    warehouse_id: int

    @classmethod
    def from_model(cls, model: ProductModel) -> ProductInfo:
        return cls(
            id=model.id,
            category=model.category,
            quantity=model.quantity,
            warehouse_id=model.warehouse_id,
        )


@dataclass(frozen=True)
class TransactionRecord:
    """Read-only view of one transaction log entry."""

    id: int
    type: TransactionType
    category: str
    warehouse_id: int
    quantity_changed: int
    timestamp: datetime

    @classmethod
    def from_model(cls, model: TransactionLogEntryModel) -> TransactionRecord:
        return cls(
            id=model.id,
            type=TransactionType(model.transaction_type),
            category=model.category,
            warehouse_id=model.warehouse_id,
            quantity_changed=model.quantity_changed,
            timestamp=model.timestamp,
        )


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a committed import."""

    product: ProductInfo
    log_entry: TransactionRecord
    load_after: int

    @property
    def product_id(self) -> int:
        return self.product.id


@dataclass(frozen=True)
class ExportResult:
    """Outcome of a committed export."""

    product: ProductInfo
    log_entry: TransactionRecord
    load_after: int

    @property
    def product_id(self) -> int:
        return self.product.id
