"""
Tests for ReportSelector.

Replays the reference seed: three warehouses, four imports, two rejected
imports, two exports and one restock.
"""

import pytest

from inventory_kernel.db.engine import session_scope
from inventory_kernel.exceptions import (
    CapacityExceededError,
    CategoryNotAllowedError,
    WarehouseNotFoundError,
)
from inventory_kernel.selectors.report_selector import (
    BusiestWarehouse,
    CapacityReportRow,
    ReportSelector,
)


@pytest.fixture
def reports(session):
    return ReportSelector(session)


@pytest.fixture
def seeded(service, warehouse_a, warehouse_b, warehouse_c):
    clothing = service.import_product(warehouse_a.id, "Clothing", 50)
    meat = service.import_product(warehouse_a.id, "Meat", 40)
    toys = service.import_product(warehouse_b.id, "Toys", 300)
    service.import_product(warehouse_c.id, "Tools", 100)

    with pytest.raises(CapacityExceededError):
        service.import_product(warehouse_a.id, "Plants", 200)
    with pytest.raises(CategoryNotAllowedError):
        service.import_product(warehouse_c.id, "Books", 10)

    service.export_product(meat.product_id)
    service.export_product(toys.product_id)
    service.import_product(warehouse_a.id, "Plants", 15)
    return {
        "a": warehouse_a,
        "b": warehouse_b,
        "c": warehouse_c,
        "clothing": clothing,
    }


class TestCapacityReport:

    def test_rows(self, reports, seeded):
        a, b, c = seeded["a"], seeded["b"], seeded["c"]
        assert reports.capacity_report() == [
            CapacityReportRow(a.id, "Warehouse A", 2, 125, 60),
            CapacityReportRow(b.id, "Warehouse B", 0, 300, 300),
            CapacityReportRow(c.id, "Warehouse C", 1, 250, 150),
        ]

    def test_filled_capacity(self, reports, seeded):
        assert reports.capacity_report()[0].filled_capacity == 65

    def test_empty_warehouses_included(self, reports, open_warehouse):
        rows = reports.capacity_report()
        assert rows == [CapacityReportRow(open_warehouse.id, "Open Yard", 0, 100, 100)]

    def test_no_warehouses(self, reports, db_tables):
        assert reports.capacity_report() == []


class TestBusiestWarehouse:

    def test_busiest(self, reports, seeded):
        # A: 3 imports + 1 export; B: 1 import + 1 export; C: 1 import
        assert reports.busiest_warehouse() == BusiestWarehouse(seeded["a"].id, 4)

    def test_empty_log(self, reports, warehouse_a):
        assert reports.busiest_warehouse() is None

    def test_tie_goes_to_lowest_id(self, service, reports, warehouse_a, warehouse_b):
        service.import_product(warehouse_b.id, "Toys", 1)
        service.import_product(warehouse_a.id, "Meat", 1)
        assert reports.busiest_warehouse() == BusiestWarehouse(warehouse_a.id, 1)


class TestPeakProduct:

    def test_peak_rows(self, reports, seeded):
        rows = reports.peak_product_per_warehouse()

        assert [(r.warehouse_name, r.category, r.quantity, r.total_quantity) for r in rows] == [
            ("Warehouse A", "Clothing", 50, 65),
            ("Warehouse C", "Tools", 100, 100),
        ]
        assert rows[0].product_id == seeded["clothing"].product_id

    def test_tie_goes_to_earliest_import(self, service, reports, warehouse_a):
        first = service.import_product(warehouse_a.id, "Meat", 30)
        service.import_product(warehouse_a.id, "Plants", 30)

        (row,) = reports.peak_product_per_warehouse()
        assert row.product_id == first.product_id
        assert row.category == "Meat"
        assert row.total_quantity == 60


class TestProductListing:

    def test_listing_format(self, reports, seeded):
        listing = reports.product_listing(seeded["a"].id)
        lines = listing.splitlines()

        assert len(lines) == 2
        assert lines[0] == (
            f"Product ID: {seeded['clothing'].product_id}, Product Type: Clothing, "
            "Quantity Available: 50"
        )
        assert lines[1].endswith("Product Type: Plants, Quantity Available: 15")
        assert listing.endswith("\n")

    def test_empty_warehouse(self, reports, seeded):
        assert reports.product_listing(seeded["b"].id) == ""

    def test_unknown_warehouse(self, reports, db_tables):
        with pytest.raises(WarehouseNotFoundError):
            reports.product_listing(99)


def test_reports_inside_session_scope(seeded):
    with session_scope() as session:
        rows = ReportSelector(session).capacity_report()
    assert [r.product_count for r in rows] == [2, 0, 1]
