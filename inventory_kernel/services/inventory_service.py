"""
InventoryService -- the only mutation entry point of the inventory kernel.

Responsibility:
    Orchestrates EntityStore, the constraint engine and TransactionLog into
    two atomic operations, import_product() and export_product(), plus the
    administrative register_warehouse() and snapshot read helpers.

Architecture position:
    Kernel > Services -- imperative shell.  Owns transaction boundaries,
    keyed locks, cancellation checks, timeouts and operation logging.
    Session-bound collaborators only flush; this class commits.

Invariants enforced:
    - Atomicity: the product change and its log entry are flushed in one
      session and committed together.  Any failure rolls both back.
    - Capacity under concurrency: the load is read and the new product is
      inserted while holding the warehouse's key lock and its row lock, so
      two concurrent imports can never both see the same free capacity.
    - Lock order: product key before warehouse key.  Imports take only the
      warehouse key.
    - Cancellation is honoured on entry and right before the first write;
      after commit it has no effect.

Failure modes:
    - WarehouseNotFoundError, ProductNotFoundError
    - InvalidQuantityError, CategoryNotAllowedError, CapacityExceededError
    - InvalidWarehouseError (register_warehouse only)
    - LockTimeoutError / StoreUnavailableError (retryable)
    - OperationCancelledError

Audit relevance:
    Every committed import/export produces exactly one transaction log
    entry; a rejected one produces none, but is logged as
    ``import_rejected`` / ``export_rejected`` with its error code.
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, TypeVar
from uuid import uuid4

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from inventory_kernel.db.engine import get_session_factory
from inventory_kernel.db.types import (
    BIGINT_MAX,
    CATEGORY_MAX_LENGTH,
    LOCATION_MAX_LENGTH,
    WAREHOUSE_NAME_MAX_LENGTH,
)
from inventory_kernel.domain.cancellation import NEVER_CANCELLED, CancellationToken
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.constraints import check_import
from inventory_kernel.domain.dtos import (
    ExportResult,
    ImportResult,
    ProductInfo,
    TransactionRecord,
    WarehouseInfo,
)
from inventory_kernel.domain.values import AllowedCategories
from inventory_kernel.exceptions import (
    InvalidWarehouseError,
    InventoryKernelError,
    StoreUnavailableError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.transaction_log import TransactionType
from inventory_kernel.services.entity_store import EntityStore
from inventory_kernel.services.locking import (
    KeyedLockRegistry,
    product_key,
    warehouse_key,
)
from inventory_kernel.services.transaction_log import (
    TransactionLog,
    TransactionLogFilter,
)

logger = get_logger("services.inventory")

T = TypeVar("T")

DEFAULT_LOCK_TIMEOUT_SECONDS = 5.0

# Driver and pool failures that mean "the store did not answer"
_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)


def _elapsed_ms(t0: float) -> float:
    return round((time.monotonic() - t0) * 1000, 2)


class InventoryService:
    """
    Atomic, validated stock changes over warehouses and products.

    One instance may be shared by any number of threads.  Each call opens
    its own session from the factory; no session outlives a call.

    Usage:
        service = InventoryService(get_session_factory(), lock_timeout=5.0)
        result = service.import_product(warehouse_id, "Meat", 40)
        service.export_product(result.product_id)
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
        locks: KeyedLockRegistry | None = None,
        actor: str | None = None,
    ):
        """
        Args:
            session_factory: Session factory; defaults to the engine module's.
            clock: Time source for log timestamps.
            lock_timeout: Seconds to wait for a warehouse or product lock.
            locks: Lock registry, shared when several services must
                serialize against each other.
            actor: Optional caller identity added to every log record.
        """
        if lock_timeout <= 0:
            raise ValueError(f"lock_timeout must be positive, got {lock_timeout}")
        self._session_factory = session_factory or get_session_factory()
        self._clock = clock or SystemClock()
        self._lock_timeout = lock_timeout
        self._locks = locks or KeyedLockRegistry()
        self._actor = actor

    @property
    def lock_timeout(self) -> float:
        return self._lock_timeout

    # ------------------------------------------------------------------
    # Transaction scope
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        """
        Commit on normal exit, roll back on any exception.

        Driver/pool failures are re-raised as StoreUnavailableError; every
        other exception propagates unchanged.
        """
        session = self._session_factory()
        try:
            try:
                yield session
                session.commit()
            except Exception as exc:
                session.rollback()
                logger.warning(
                    "transaction_rolled_back",
                    extra={"operation": operation, "error_type": type(exc).__name__},
                )
                raise
        except _UNAVAILABLE_ERRORS as exc:
            reason = str(getattr(exc, "orig", None) or exc)
            raise StoreUnavailableError(operation, reason) from exc
        finally:
            session.close()

    def _read(self, operation: str, fn: Callable[[EntityStore], T]) -> T:
        with self._transaction(operation) as session:
            return fn(EntityStore(session, self._clock))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def import_product(
        self,
        warehouse_id: int,
        category: str,
        quantity: int,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> ImportResult:
        """
        Store ``quantity`` units of ``category`` in a warehouse.

        Rule order: warehouse exists, quantity positive, category allowed,
        capacity not exceeded.  On success the new product and its IMPORT
        log entry are committed together.

        Raises:
            WarehouseNotFoundError, InvalidQuantityError,
            CategoryNotAllowedError, CapacityExceededError,
            OperationCancelledError, LockTimeoutError, StoreUnavailableError
        """
        token = cancel_token or NEVER_CANCELLED
        operation = "import_product"

        with LogContext.bind(
            correlation_id=str(uuid4()),
            operation=operation,
            warehouse_id=warehouse_id,
            actor=self._actor,
        ):
            logger.info(
                "import_started",
                extra={"category": category, "quantity": quantity},
            )
            t0 = time.monotonic()

            try:
                token.raise_if_cancelled(operation)
                with self._locks.hold(warehouse_key(warehouse_id), self._lock_timeout):
                    with self._transaction(operation) as session:
                        store = EntityStore(session, self._clock)
                        warehouse = store.get_warehouse(warehouse_id, for_update=True)
                        current_load = store.sum_quantity(warehouse_id)
                        check_import(warehouse, current_load, category, quantity)

                        token.raise_if_cancelled(operation)
                        product = store.insert_product(category, quantity, warehouse_id)
                        entry = TransactionLog(session, self._clock).append(
                            TransactionType.IMPORT,
                            category,
                            warehouse_id,
                            quantity,
                        )
                        result = ImportResult(
                            product=product,
                            log_entry=entry,
                            load_after=current_load + quantity,
                        )
            except InventoryKernelError as exc:
                logger.warning(
                    "import_rejected",
                    extra={
                        "error_code": exc.code,
                        "retryable": exc.retryable,
                        "detail": str(exc),
                        "duration_ms": _elapsed_ms(t0),
                    },
                )
                raise

            logger.info(
                "import_committed",
                extra={
                    "product_id": result.product_id,
                    "entry_id": result.log_entry.id,
                    "load_after": result.load_after,
                    "capacity": warehouse.capacity,
                    "duration_ms": _elapsed_ms(t0),
                },
            )
            return result

    def export_product(
        self,
        product_id: int,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> ExportResult:
        """
        Remove a product entirely and record an EXPORT entry.

        A product can be exported once; the second call raises
        ProductNotFoundError and changes nothing.

        Raises:
            ProductNotFoundError, OperationCancelledError,
            LockTimeoutError, StoreUnavailableError
        """
        token = cancel_token or NEVER_CANCELLED
        operation = "export_product"

        with LogContext.bind(
            correlation_id=str(uuid4()),
            operation=operation,
            product_id=product_id,
            actor=self._actor,
        ):
            logger.info("export_started")
            t0 = time.monotonic()

            try:
                token.raise_if_cancelled(operation)
                with self._locks.hold(product_key(product_id), self._lock_timeout):
                    # warehouse_id never changes and the product cannot vanish
                    # while its key is held, so the owner read here stays valid
                    owner_id = self._read(
                        operation, lambda store: store.get_product(product_id)
                    ).warehouse_id

                    with self._locks.hold(warehouse_key(owner_id), self._lock_timeout):
                        with self._transaction(operation) as session:
                            store = EntityStore(session, self._clock)
                            token.raise_if_cancelled(operation)
                            removed = store.remove_product(product_id)
                            entry = TransactionLog(session, self._clock).append(
                                TransactionType.EXPORT,
                                removed.category,
                                removed.warehouse_id,
                                removed.quantity,
                            )
                            result = ExportResult(
                                product=removed,
                                log_entry=entry,
                                load_after=store.sum_quantity(removed.warehouse_id),
                            )
            except InventoryKernelError as exc:
                logger.warning(
                    "export_rejected",
                    extra={
                        "error_code": exc.code,
                        "retryable": exc.retryable,
                        "detail": str(exc),
                        "duration_ms": _elapsed_ms(t0),
                    },
                )
                raise

            logger.info(
                "export_committed",
                extra={
                    "warehouse_id": removed.warehouse_id,
                    "entry_id": entry.id,
                    "quantity_changed": removed.quantity,
                    "load_after": result.load_after,
                    "duration_ms": _elapsed_ms(t0),
                },
            )
            return result

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def register_warehouse(
        self,
        name: str,
        location: str,
        allowed_categories: AllowedCategories | Iterable[str] | str | None,
        capacity: int,
    ) -> WarehouseInfo:
        """
        Create a warehouse.  Warehouses are immutable once registered.

        ``allowed_categories`` may be an AllowedCategories value, an iterable
        of labels, a comma-separated string, or None.  Empty means
        unrestricted.

        Raises:
            InvalidWarehouseError
        """
        categories = _coerce_categories(allowed_categories)
        _validate_definition(name, location, categories, capacity)

        with LogContext.bind(operation="register_warehouse", actor=self._actor):
            with self._transaction("register_warehouse") as session:
                warehouse = EntityStore(session, self._clock).insert_warehouse(
                    name=name.strip(),
                    location=location.strip(),
                    allowed_categories=categories,
                    capacity=capacity,
                )
            logger.info(
                "warehouse_registered",
                extra={"warehouse_id": warehouse.id, "warehouse_name": warehouse.name},
            )
            return warehouse

    # ------------------------------------------------------------------
    # Snapshot reads
    # ------------------------------------------------------------------

    def get_warehouse(self, warehouse_id: int) -> WarehouseInfo:
        return self._read("get_warehouse", lambda store: store.get_warehouse(warehouse_id))

    def list_warehouses(self) -> tuple[WarehouseInfo, ...]:
        return self._read("list_warehouses", lambda store: tuple(store.list_warehouses()))

    def get_product(self, product_id: int) -> ProductInfo:
        return self._read("get_product", lambda store: store.get_product(product_id))

    def list_products(self, warehouse_id: int) -> tuple[ProductInfo, ...]:
        """
        Products of a warehouse in insertion order.

        Raises:
            WarehouseNotFoundError
        """

        def _list(store: EntityStore) -> tuple[ProductInfo, ...]:
            store.get_warehouse(warehouse_id)
            return tuple(store.list_products(warehouse_id))

        return self._read("list_products", _list)

    def sum_quantity(self, warehouse_id: int) -> int:
        """
        Raises:
            WarehouseNotFoundError
        """

        def _sum(store: EntityStore) -> int:
            store.get_warehouse(warehouse_id)
            return store.sum_quantity(warehouse_id)

        return self._read("sum_quantity", _sum)

    def query_log(
        self, log_filter: TransactionLogFilter | None = None
    ) -> tuple[TransactionRecord, ...]:
        with self._transaction("query_log") as session:
            return tuple(TransactionLog(session, self._clock).query(log_filter))


def _coerce_categories(
    value: AllowedCategories | Iterable[str] | str | None,
) -> AllowedCategories:
    if isinstance(value, AllowedCategories):
        return value
    if value is None or isinstance(value, str):
        return AllowedCategories.parse(value)
    labels = list(value)
    if not all(isinstance(label, str) for label in labels):
        raise InvalidWarehouseError("allowed_categories", "labels must be strings")
    return AllowedCategories.of(labels)


def _validate_definition(
    name: str,
    location: str,
    categories: AllowedCategories,
    capacity: int,
) -> None:
    for field, value, limit in (
        ("name", name, WAREHOUSE_NAME_MAX_LENGTH),
        ("location", location, LOCATION_MAX_LENGTH),
    ):
        if not isinstance(value, str) or not value.strip():
            raise InvalidWarehouseError(field, "must be a non-empty string")
        if len(value.strip()) > limit:
            raise InvalidWarehouseError(field, f"must be at most {limit} characters")

    too_long = [label for label in categories.sorted_labels() if len(label) > CATEGORY_MAX_LENGTH]
    if too_long:
        raise InvalidWarehouseError(
            "allowed_categories",
            f"labels longer than {CATEGORY_MAX_LENGTH} characters: {', '.join(too_long)}",
        )

    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise InvalidWarehouseError("capacity", f"must be a positive integer, got {capacity!r}")
    if capacity > BIGINT_MAX:
        raise InvalidWarehouseError("capacity", f"must be at most {BIGINT_MAX}")
