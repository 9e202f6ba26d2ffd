"""
Pytest fixtures for the inventory kernel test suite.

Provides:
- A file-backed SQLite database per test (real commits, real locking)
- Immutability listeners and triggers
- Deterministic clock, InventoryService and seeded warehouses
- Structured log capture

Environment Variables:
- INVENTORY_TEST_DATABASE_URL: run against another database (e.g. PostgreSQL)
  instead of the per-test SQLite file.  The database must be empty; all
  tables are dropped at teardown.
"""

import json
import logging
import os
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from inventory_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from inventory_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from inventory_kernel.domain.clock import DeterministicClock
from inventory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from inventory_kernel.services.inventory_service import InventoryService

# Lock/busy timeout used by the suite; generous so slow CI machines do not
# turn ordinary waits into StoreUnavailableError
TEST_TIMEOUT_SECONDS = 10.0


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture inventory_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service, warehouse_a):
            service.import_product(warehouse_a.id, "Meat", 1)
            logs = captured_logs()
            assert any(r["message"] == "import_committed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("inventory_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow_locks: mark test as potentially waiting for locks"
    )


# =============================================================================
# Database infrastructure (fresh database per test)
# =============================================================================


def get_database_url(tmp_path) -> str:
    return os.environ.get(
        "INVENTORY_TEST_DATABASE_URL",
        f"sqlite:///{tmp_path / 'inventory.db'}",
    )


@pytest.fixture
def db_engine(tmp_path):
    eng = init_engine_from_url(
        get_database_url(tmp_path),
        echo=False,
        pool_size=30,
        max_overflow=20,
        timeout_seconds=TEST_TIMEOUT_SECONDS,
    )
    yield eng
    reset_engine()


@pytest.fixture
def db_tables(db_engine):
    """Create all tables and triggers; register immutability listeners."""
    create_tables()
    register_immutability_listeners()
    yield
    unregister_immutability_listeners()
    drop_tables()


@pytest.fixture
def session_factory(db_tables):
    return get_session_factory()


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    """
    A session for tests that drive the session-bound services directly.

    Tests using this fixture must not call InventoryService while the
    session holds an open write transaction: SQLite allows one writer.
    """
    sess = session_factory()
    yield sess
    sess.rollback()
    sess.close()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def service(session_factory, deterministic_clock) -> InventoryService:
    return InventoryService(
        session_factory,
        clock=deterministic_clock,
        lock_timeout=TEST_TIMEOUT_SECONDS,
        actor="test",
    )


@pytest.fixture
def warehouse_a(service):
    """Capacity 125, {Plants, Clothing, Meat}."""
    return service.register_warehouse(
        "Warehouse A", "Location A", "Plants, Clothing, Meat", 125
    )


@pytest.fixture
def warehouse_b(service):
    """Capacity 300, {Books, Toys, Furniture}."""
    return service.register_warehouse(
        "Warehouse B", "Location B", "Books, Toys, Furniture", 300
    )


@pytest.fixture
def warehouse_c(service):
    """Capacity 250, {Electronics, Tools, Appliances}."""
    return service.register_warehouse(
        "Warehouse C", "Location C", "Electronics, Tools, Appliances", 250
    )


@pytest.fixture
def open_warehouse(service):
    """Capacity 100, no category restriction."""
    return service.register_warehouse("Open Yard", "Dock 7", None, 100)
