"""
Constraint Engine -- pure validation of stock-increasing changes.

Responsibility:
    Decides whether a proposed import may be committed, given the target
    warehouse and its current load.  Raises a typed exception on the first
    violated rule; returns None when the import is acceptable.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  The caller
    (InventoryService) reads the warehouse and its load through the
    EntityStore while holding the warehouse lock, then calls into here.

Invariants enforced:
    - Category: allowed iff the warehouse is unrestricted or the label is an
      exact, case-sensitive member of its allowed set.
    - Capacity: allowed iff current_load + quantity <= capacity.  Filling a
      warehouse exactly to capacity is allowed.
    - Quantity: strictly positive integer.

Exports are never validated here: removal cannot increase load.
"""

from inventory_kernel.db.types import CATEGORY_MAX_LENGTH
from inventory_kernel.domain.dtos import WarehouseInfo
from inventory_kernel.exceptions import (
    CapacityExceededError,
    CategoryNotAllowedError,
    InvalidQuantityError,
)


def validate_quantity(quantity: object) -> None:
    """Reject zero, negative, boolean and non-integer quantities."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(quantity)
    if quantity <= 0:
        raise InvalidQuantityError(quantity)


def validate_category(warehouse: WarehouseInfo, category: str) -> None:
    # Labels that cannot be stored are never allowed, even when unrestricted
    storable = (
        isinstance(category, str)
        and category.strip() != ""
        and len(category) <= CATEGORY_MAX_LENGTH
    )
    if not storable or not warehouse.allowed_categories.allows(category):
        raise CategoryNotAllowedError(
            warehouse_id=warehouse.id,
            category=category,
            allowed=warehouse.allowed_categories.sorted_labels(),
        )


def validate_capacity(
    warehouse: WarehouseInfo,
    current_load: int,
    additional_quantity: int,
) -> None:
    if current_load + additional_quantity > warehouse.capacity:
        raise CapacityExceededError(
            warehouse_id=warehouse.id,
            capacity=warehouse.capacity,
            current_load=current_load,
            requested=additional_quantity,
        )


def check_import(
    warehouse: WarehouseInfo,
    current_load: int,
    category: str,
    quantity: int,
) -> None:
    """
    Run every import rule in order: quantity, category, capacity.

    Raises:
        InvalidQuantityError, CategoryNotAllowedError, CapacityExceededError
    """
    validate_quantity(quantity)
    validate_category(warehouse, category)
    validate_capacity(warehouse, current_load, quantity)
