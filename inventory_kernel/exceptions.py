"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the inventory core must react differently to a full warehouse,
a forbidden category and an unreachable database.  Parsing message strings
for that is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)
  4. Every exception declares whether retrying the same input can succeed

Example:
    try:
        service.import_product(warehouse_id, "Meat", 40)
    except CapacityExceededError as e:
        notify(f"Only {e.free_capacity} units left in {e.warehouse_id}")
    except StoreUnavailableError:
        schedule_retry()

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base)
    |
    +-- NotFoundError
    |   +-- WarehouseNotFoundError
    |   +-- ProductNotFoundError
    |
    +-- ConstraintViolationError          (permanent for the given input)
    |   +-- InvalidQuantityError
    |   +-- CategoryNotAllowedError
    |   +-- CapacityExceededError
    |   +-- InvalidWarehouseError
    |
    +-- StoreUnavailableError             (retryable)
    |   +-- LockTimeoutError
    |
    +-- OperationCancelledError
    |
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                  | When Raised
----------------------|--------------------------------------------------
WAREHOUSE_NOT_FOUND   | Referenced warehouse id does not exist
PRODUCT_NOT_FOUND     | Product id does not exist (never imported, or exported)
INVALID_QUANTITY      | Quantity <= 0 or not an integer
CATEGORY_NOT_ALLOWED  | Category outside the warehouse's allowed set
CAPACITY_EXCEEDED     | Import would push the warehouse over capacity
INVALID_WAREHOUSE     | Administrative warehouse definition is malformed
STORE_UNAVAILABLE     | Durable store I/O failure or timeout
LOCK_TIMEOUT          | Serialization lock not acquired within the timeout
CANCELLED             | Caller cancelled before the commit point
IMMUTABILITY_VIOLATION| Update/delete of an append-only or frozen record
"""


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"
    retryable: bool = False


# Lookup failures


class NotFoundError(InventoryKernelError):
    """Base exception for missing warehouses and products."""

    code: str = "NOT_FOUND"


class WarehouseNotFoundError(NotFoundError):
    """Warehouse with given ID was not found."""

    code: str = "WAREHOUSE_NOT_FOUND"

    def __init__(self, warehouse_id: int):
        self.warehouse_id = warehouse_id
        super().__init__(f"Warehouse not found: {warehouse_id}")


class ProductNotFoundError(NotFoundError):
    """Product with given ID was not found."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


# Validation failures


class ConstraintViolationError(InventoryKernelError):
    """Base exception for rejected stock changes. Never retried unchanged."""

    code: str = "CONSTRAINT_VIOLATION"


class InvalidQuantityError(ConstraintViolationError):
    """Quantity is zero, negative or not an integer."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: object):
        self.quantity = quantity
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")


class CategoryNotAllowedError(ConstraintViolationError):
    """Category is not in the warehouse's allowed-category set."""

    code: str = "CATEGORY_NOT_ALLOWED"

    def __init__(self, warehouse_id: int, category: str, allowed: tuple[str, ...]):
        self.warehouse_id = warehouse_id
        self.category = category
        self.allowed = allowed
        super().__init__(
            f"Category '{category}' is not allowed in warehouse {warehouse_id} "
            f"(allowed: {', '.join(allowed)})"
        )


class CapacityExceededError(ConstraintViolationError):
    """Import would exceed the warehouse capacity."""

    code: str = "CAPACITY_EXCEEDED"

    def __init__(
        self,
        warehouse_id: int,
        capacity: int,
        current_load: int,
        requested: int,
    ):
        self.warehouse_id = warehouse_id
        self.capacity = capacity
        self.current_load = current_load
        self.requested = requested
        self.free_capacity = capacity - current_load
        super().__init__(
            f"Adding {requested} units to warehouse {warehouse_id} would exceed "
            f"capacity {capacity} (current load {current_load})"
        )


class InvalidWarehouseError(ConstraintViolationError):
    """Warehouse definition is malformed."""

    code: str = "INVALID_WAREHOUSE"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid warehouse {field}: {reason}")


# Infrastructure failures


class StoreUnavailableError(InventoryKernelError):
    """
    The durable store could not be reached or did not answer in time.

    The only error category a caller may reasonably retry.
    """

    code: str = "STORE_UNAVAILABLE"
    retryable: bool = True

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store unavailable during {operation}: {reason}")


class LockTimeoutError(StoreUnavailableError):
    """A serialization lock was not acquired within the configured timeout."""

    code: str = "LOCK_TIMEOUT"

    def __init__(self, lock_key: str, timeout_seconds: float):
        self.lock_key = lock_key
        self.timeout_seconds = timeout_seconds
        super().__init__(
            operation=f"lock {lock_key}",
            reason=f"not acquired within {timeout_seconds}s",
        )


class OperationCancelledError(InventoryKernelError):
    """The caller cancelled the operation before its commit point."""

    code: str = "CANCELLED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Operation cancelled before commit: {operation}")


# Immutability


class ImmutabilityViolationError(InventoryKernelError):
    """
    Attempted to modify or delete an immutable record.

    Transaction log entries are append-only, products have no update
    path and warehouses are frozen after registration.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
