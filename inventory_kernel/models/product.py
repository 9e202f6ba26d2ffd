"""
Module: inventory_kernel.models.product
Responsibility: ORM persistence for stock currently held in a warehouse.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - quantity > 0 (CHECK constraint).
    - warehouse_id references an existing warehouse (FK).
    - No in-place update: a product row is inserted by import and deleted by
      export.  UPDATE is rejected by db/immutability.py and db/sql triggers.
    - id is allocated from the "product" sequence; a removed product's id is
      never handed out again.
"""

from sqlalchemy import CheckConstraint, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base
from inventory_kernel.db.types import CategoryLabel, Sequence


class Product(Base):
    """A quantity of one category stored in one warehouse."""

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_product_quantity_positive"),
        Index("idx_product_warehouse", "warehouse_id"),
    )

    id: Mapped[Sequence] = mapped_column(primary_key=True, autoincrement=False)

    category: Mapped[CategoryLabel] = mapped_column(nullable=False)

    quantity: Mapped[int] = mapped_column(nullable=False)

    warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id"),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Product {self.id} {self.category} x{self.quantity} @ {self.warehouse_id}>"
