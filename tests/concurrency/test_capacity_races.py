"""
Concurrency tests for capacity and ordering invariants.

Threads share one InventoryService (and therefore one lock registry) and
each call runs in its own session against the same database file.

Run with: pytest tests/concurrency -v
Skip with: pytest -m "not slow_locks"
"""

import pytest

pytestmark = pytest.mark.slow_locks

from concurrent.futures import ThreadPoolExecutor, as_completed
from threading import Barrier

from inventory_kernel.exceptions import CapacityExceededError, ProductNotFoundError
from inventory_kernel.models.transaction_log import TransactionType
from inventory_kernel.services.inventory_service import InventoryService
from inventory_kernel.services.transaction_log import TransactionLogFilter


def _run_concurrently(fns, workers):
    """Start all callables behind a barrier; return (results, errors)."""
    barrier = Barrier(len(fns))
    results, errors = [], []

    def _wrapped(fn):
        barrier.wait()
        return fn()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_wrapped, fn) for fn in fns]
        for future in as_completed(futures):
            try:
                results.append(future.result())
            except Exception as exc:
                errors.append(exc)
    return results, errors


class TestConcurrentImports:

    def test_two_imports_exceeding_capacity_together(self, service, open_warehouse):
        """80 + 80 into capacity 100: exactly one succeeds."""
        results, errors = _run_concurrently(
            [lambda: service.import_product(open_warehouse.id, "Meat", 80)] * 2,
            workers=2,
        )

        assert len(results) == 1
        assert len(errors) == 1
        assert isinstance(errors[0], CapacityExceededError)
        assert service.sum_quantity(open_warehouse.id) == 80
        assert len(service.query_log()) == 1

    def test_many_small_imports_never_exceed_capacity(self, service, warehouse_a):
        """20 threads x 10 units into capacity 125: 12 succeed, load 120."""
        results, errors = _run_concurrently(
            [lambda: service.import_product(warehouse_a.id, "Plants", 10)] * 20,
            workers=20,
        )

        assert len(results) == 12
        assert all(isinstance(e, CapacityExceededError) for e in errors)
        assert service.sum_quantity(warehouse_a.id) == 120
        assert len(service.query_log(TransactionLogFilter(type=TransactionType.IMPORT))) == 12

    def test_separate_services_share_database_guard(
        self, session_factory, deterministic_clock, open_warehouse
    ):
        """Two services with separate lock registries still respect capacity."""
        services = [
            InventoryService(session_factory, deterministic_clock, lock_timeout=10.0)
            for _ in range(2)
        ]
        results, errors = _run_concurrently(
            [lambda svc=svc: svc.import_product(open_warehouse.id, "Meat", 60) for svc in services],
            workers=2,
        )

        assert len(results) == 1
        assert isinstance(errors[0], CapacityExceededError)
        assert services[0].sum_quantity(open_warehouse.id) == 60


class TestConcurrentExports:

    def test_same_product_exported_once(self, service, warehouse_a):
        product_id = service.import_product(warehouse_a.id, "Meat", 40).product_id

        results, errors = _run_concurrently(
            [lambda: service.export_product(product_id)] * 5,
            workers=5,
        )

        assert len(results) == 1
        assert len(errors) == 4
        assert all(isinstance(e, ProductNotFoundError) for e in errors)
        assert len(service.query_log(TransactionLogFilter(type=TransactionType.EXPORT))) == 1

    def test_mixed_imports_and_exports_keep_log_consistent(self, service, warehouse_a, warehouse_b):
        seeded = [service.import_product(warehouse_b.id, "Toys", 10).product_id for _ in range(5)]

        calls = [lambda pid=pid: service.export_product(pid) for pid in seeded]
        calls += [lambda: service.import_product(warehouse_a.id, "Meat", 5)] * 5
        results, errors = _run_concurrently(calls, workers=10)

        assert errors == []
        assert len(results) == 10
        assert service.sum_quantity(warehouse_b.id) == 0
        assert service.sum_quantity(warehouse_a.id) == 25

        log = service.query_log()
        assert len(log) == 15
        ids = [e.id for e in log]
        assert ids == sorted(ids)
        stamps = [e.timestamp for e in log]
        assert stamps == sorted(stamps)
