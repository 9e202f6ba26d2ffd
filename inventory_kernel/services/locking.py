"""
KeyedLockRegistry -- in-process mutual exclusion per warehouse / product.

Responsibility:
    Serializes operations that touch the same key ("warehouse:3",
    "product:17") while letting unrelated keys proceed in parallel.
    Locks exist only while someone holds or waits for them.

Architecture position:
    Kernel > Services -- used by InventoryService.  Database row locks
    (SELECT ... FOR UPDATE) cover the multi-process PostgreSQL case; this
    registry covers threads sharing one InventoryService, including on
    SQLite where FOR UPDATE is a no-op.

Invariants enforced:
    - Bounded waiting: acquisition gives up after ``timeout`` seconds with
      LockTimeoutError instead of blocking forever.
    - Callers nest locks in a fixed order (product before warehouse) so no
      cycle can form.
"""

import threading
from contextlib import contextmanager
from typing import Iterator

from inventory_kernel.exceptions import LockTimeoutError
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.locking")


def warehouse_key(warehouse_id: int) -> str:
    return f"warehouse:{warehouse_id}"


def product_key(product_id: int) -> str:
    return f"product:{product_id}"


class _KeyedLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLockRegistry:
    """Registry of per-key non-reentrant locks with timeout."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, _KeyedLock] = {}

    @contextmanager
    def hold(self, key: str, timeout: float) -> Iterator[None]:
        """
        Hold the lock for ``key`` for the duration of the block.

        Raises:
            LockTimeoutError: if the lock is not acquired within ``timeout``.
        """
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyedLock()
            entry.users += 1

        acquired = False
        try:
            acquired = entry.lock.acquire(timeout=timeout)
            if not acquired:
                logger.warning(
                    "lock_timeout",
                    extra={"lock_key": key, "timeout_seconds": timeout},
                )
                raise LockTimeoutError(key, timeout)
            yield
        finally:
            if acquired:
                entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def active_keys(self) -> list[str]:
        """Keys currently held or waited on."""
        with self._guard:
            return sorted(self._locks)
