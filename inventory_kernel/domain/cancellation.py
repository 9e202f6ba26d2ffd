"""
Cancellation tokens for inventory operations.

A caller creates a CancellationToken, passes it to import_product() or
export_product(), and may call cancel() from any thread.  The service checks
the token on entry and again right before its commit point; once the
operation has committed, cancellation has no effect.
"""

import threading

from inventory_kernel.exceptions import OperationCancelledError


class CancellationToken:
    """Thread-safe one-shot cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, operation: str) -> None:
        if self._event.is_set():
            raise OperationCancelledError(operation)

    def __repr__(self) -> str:
        return f"<CancellationToken cancelled={self.is_cancelled}>"


class _NeverCancelled(CancellationToken):
    """Token used when the caller supplies none."""

    def cancel(self) -> None:
        raise RuntimeError("The shared never-cancelled token cannot be cancelled")


NEVER_CANCELLED = _NeverCancelled()
