"""
Module: inventory_kernel.selectors.report_selector
Responsibility: Read-only aggregate reports: free capacity per warehouse,
    the busiest warehouse by log activity, the largest product per
    warehouse, and the plain-text product listing of one warehouse.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/ and selectors/base.py.

Invariants enforced:
    - No stored aggregates: every figure is derived from the products and
      transaction_log tables at query time.
    - Deterministic tie-breaks: busiest_warehouse() prefers the lowest
      warehouse id, peak_product_per_warehouse() the lowest product id
      (earliest import).

Failure modes:
    - WarehouseNotFoundError from product_listing() for an unknown id.
    - busiest_warehouse() returns None while the log is empty.
"""

from dataclasses import dataclass

from sqlalchemy import func, select

from inventory_kernel.exceptions import WarehouseNotFoundError
from inventory_kernel.models.product import Product
from inventory_kernel.models.transaction_log import TransactionLogEntry
from inventory_kernel.models.warehouse import Warehouse
from inventory_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class CapacityReportRow:
    """Product count and free capacity of one warehouse."""

    warehouse_id: int
    name: str
    product_count: int
    total_capacity: int
    free_capacity: int

    @property
    def filled_capacity(self) -> int:
        return self.total_capacity - self.free_capacity


@dataclass(frozen=True)
class BusiestWarehouse:
    """Warehouse with the most transaction log entries."""

    warehouse_id: int
    transaction_count: int


@dataclass(frozen=True)
class PeakProductRow:
    """The largest product of one warehouse, with the warehouse's filled capacity."""

    warehouse_id: int
    warehouse_name: str
    product_id: int
    category: str
    quantity: int
    total_quantity: int


class ReportSelector(BaseSelector):
    """
    Aggregate reporting queries.

    Usage:
        with session_scope() as session:
            rows = ReportSelector(session).capacity_report()
    """

    def capacity_report(self) -> list[CapacityReportRow]:
        """
        One row per warehouse, ordered by warehouse id.

        Warehouses without products are included with product_count 0 and
        free_capacity equal to their capacity.
        """
        load = func.coalesce(func.sum(Product.quantity), 0)
        stmt = (
            select(
                Warehouse.id,
                Warehouse.name,
                Warehouse.capacity,
                func.count(Product.id),
                load,
            )
            .outerjoin(Product, Product.warehouse_id == Warehouse.id)
            .group_by(Warehouse.id, Warehouse.name, Warehouse.capacity)
            .order_by(Warehouse.id)
        )
        return [
            CapacityReportRow(
                warehouse_id=warehouse_id,
                name=name,
                product_count=int(product_count),
                total_capacity=capacity,
                free_capacity=capacity - int(total),
            )
            for warehouse_id, name, capacity, product_count, total in self.session.execute(stmt)
        ]

    def busiest_warehouse(self) -> BusiestWarehouse | None:
        """
        The warehouse with the most IMPORT and EXPORT entries combined.

        Ties go to the lowest warehouse id.  Returns None when the log is
        empty.
        """
        entry_count = func.count(TransactionLogEntry.id)
        row = self.session.execute(
            select(TransactionLogEntry.warehouse_id, entry_count)
            .group_by(TransactionLogEntry.warehouse_id)
            .order_by(entry_count.desc(), TransactionLogEntry.warehouse_id)
            .limit(1)
        ).first()
        if row is None:
            return None
        return BusiestWarehouse(warehouse_id=row[0], transaction_count=int(row[1]))

    def peak_product_per_warehouse(self) -> list[PeakProductRow]:
        """
        For each warehouse holding products: its largest product and its
        total stored quantity, ordered by warehouse id.

        Among products of equal quantity the earliest import wins.
        Warehouses without products are omitted.
        """
        totals = dict(
            self.session.execute(
                select(Product.warehouse_id, func.sum(Product.quantity)).group_by(
                    Product.warehouse_id
                )
            ).all()
        )

        stmt = (
            select(Warehouse.id, Warehouse.name, Product.id, Product.category, Product.quantity)
            .join(Product, Product.warehouse_id == Warehouse.id)
            .order_by(Warehouse.id, Product.quantity.desc(), Product.id)
        )

        rows: list[PeakProductRow] = []
        seen: set[int] = set()
        for warehouse_id, name, product_id, category, quantity in self.session.execute(stmt):
            if warehouse_id in seen:
                continue
            seen.add(warehouse_id)
            rows.append(
                PeakProductRow(
                    warehouse_id=warehouse_id,
                    warehouse_name=name,
                    product_id=product_id,
                    category=category,
                    quantity=quantity,
                    total_quantity=int(totals[warehouse_id]),
                )
            )
        return rows

    def product_listing(self, warehouse_id: int) -> str:
        """
        Text listing of a warehouse's products, one line each, in id order:

            Product ID: 1, Product Type: Clothing, Quantity Available: 50

        Every line ends with a newline; an empty warehouse yields "".

        Raises:
            WarehouseNotFoundError
        """
        exists = self.session.execute(
            select(Warehouse.id).where(Warehouse.id == warehouse_id)
        ).scalar_one_or_none()
        if exists is None:
            raise WarehouseNotFoundError(warehouse_id)

        stmt = (
            select(Product.id, Product.category, Product.quantity)
            .where(Product.warehouse_id == warehouse_id)
            .order_by(Product.id)
        )
        return "".join(
            f"Product ID: {product_id}, Product Type: {category}, "
            f"Quantity Available: {quantity}\n"
            for product_id, category, quantity in self.session.execute(stmt)
        )
