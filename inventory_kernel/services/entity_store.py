"""
EntityStore -- current warehouse and product records.

Responsibility:
    Session-bound read/write access to the ``warehouses`` and ``products``
    tables.  Inserts and removals assume validation has already passed;
    checking capacity and categories is the constraint engine's job.

Architecture position:
    Kernel > Services -- imperative shell.  Used only by InventoryService
    (writes) and by read helpers running in their own transactions.

Invariants enforced:
    - Identifiers come from SequenceService, never from the database.
    - Products are never updated in place: insert_product() and
      remove_product() are the only mutations.
    - list_products() yields in id (insertion) order.

Failure modes:
    - WarehouseNotFoundError / ProductNotFoundError on missing rows.
"""

from typing import Iterator

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import ProductInfo, WarehouseInfo
from inventory_kernel.domain.values import AllowedCategories
from inventory_kernel.exceptions import ProductNotFoundError, WarehouseNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.product import Product
from inventory_kernel.models.warehouse import Warehouse
from inventory_kernel.services.base import BaseService
from inventory_kernel.services.sequence_service import SequenceService

logger = get_logger("services.entity_store")

# Rows fetched per round trip when streaming products
STREAM_BATCH_SIZE = 100


class EntityStore(BaseService):
    """
    Store for Warehouse and Product records.

    Contract:
        Every write method flushes; none commits.  Read methods return DTOs,
        never ORM instances.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._sequences = SequenceService(session)

    # ------------------------------------------------------------------
    # Warehouses
    # ------------------------------------------------------------------

    def _load_warehouse(self, warehouse_id: int, for_update: bool = False) -> Warehouse:
        stmt = select(Warehouse).where(Warehouse.id == warehouse_id)
        if for_update:
            stmt = stmt.with_for_update()
        warehouse = self.session.execute(stmt).scalar_one_or_none()
        if warehouse is None:
            raise WarehouseNotFoundError(warehouse_id)
        return warehouse

    def get_warehouse(self, warehouse_id: int, *, for_update: bool = False) -> WarehouseInfo:
        """
        Fetch a warehouse.

        Args:
            for_update: Lock the warehouse row until the transaction ends.

        Raises:
            WarehouseNotFoundError
        """
        return WarehouseInfo.from_model(self._load_warehouse(warehouse_id, for_update))

    def list_warehouses(self) -> Iterator[WarehouseInfo]:
        stmt = select(Warehouse).order_by(Warehouse.id)
        for warehouse in self.session.scalars(stmt):
            yield WarehouseInfo.from_model(warehouse)

    def insert_warehouse(
        self,
        name: str,
        location: str,
        allowed_categories: AllowedCategories,
        capacity: int,
    ) -> WarehouseInfo:
        """Allocate an id and store a new warehouse. No validation."""
        warehouse = Warehouse(
            id=self._sequences.next_value(SequenceService.WAREHOUSE),
            name=name,
            location=location,
            allowed_categories=allowed_categories.to_storage(),
            capacity=capacity,
            created_at=self._clock.now_utc(),
        )
        self.session.add(warehouse)
        self.session.flush()
        logger.info(
            "warehouse_inserted",
            extra={
                "warehouse_id": warehouse.id,
                "capacity": capacity,
                "allowed_categories": str(allowed_categories),
            },
        )
        return WarehouseInfo.from_model(warehouse)

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def get_product(self, product_id: int, *, for_update: bool = False) -> ProductInfo:
        """
        Raises:
            ProductNotFoundError
        """
        return ProductInfo.from_model(self._load_product(product_id, for_update))

    def _load_product(self, product_id: int, for_update: bool = False) -> Product:
        stmt = select(Product).where(Product.id == product_id)
        if for_update:
            stmt = stmt.with_for_update()
        product = self.session.execute(stmt).scalar_one_or_none()
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def list_products(self, warehouse_id: int) -> Iterator[ProductInfo]:
        """
        Lazily stream the products of one warehouse in insertion order.

        Each call starts a fresh query, so the sequence can be restarted by
        calling again.  The iterator is only valid while the session is open.
        """
        stmt = (
            select(Product)
            .where(Product.warehouse_id == warehouse_id)
            .order_by(Product.id)
            .execution_options(yield_per=STREAM_BATCH_SIZE)
        )
        for product in self.session.scalars(stmt):
            yield ProductInfo.from_model(product)

    def sum_quantity(self, warehouse_id: int) -> int:
        """Total quantity stored in a warehouse (0 when empty)."""
        total = self.session.execute(
            select(func.coalesce(func.sum(Product.quantity), 0)).where(
                Product.warehouse_id == warehouse_id
            )
        ).scalar_one()
        return int(total)

    def count_products(self, warehouse_id: int) -> int:
        return int(
            self.session.execute(
                select(func.count(Product.id)).where(Product.warehouse_id == warehouse_id)
            ).scalar_one()
        )

    def insert_product(self, category: str, quantity: int, warehouse_id: int) -> ProductInfo:
        """
        Allocate an id and store a new product.

        Preconditions: the constraint engine has accepted this import under
            the warehouse lock.
        """
        product = Product(
            id=self._sequences.next_value(SequenceService.PRODUCT),
            category=category,
            quantity=quantity,
            warehouse_id=warehouse_id,
        )
        self.session.add(product)
        self.session.flush()
        return ProductInfo.from_model(product)

    def remove_product(self, product_id: int) -> ProductInfo:
        """
        Delete a product and return its pre-removal record.

        Raises:
            ProductNotFoundError
        """
        product = self._load_product(product_id, for_update=True)
        removed = ProductInfo.from_model(product)
        self.session.delete(product)
        self.session.flush()
        return removed
