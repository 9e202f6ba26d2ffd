"""
Module: inventory_kernel.models.warehouse
Responsibility: ORM persistence for storage sites -- capacity and the
    allowed-category restriction that every import is validated against.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - capacity > 0 (CHECK constraint).
    - id is allocated from the "warehouse" sequence and never reused.
    - Rows are frozen after registration: UPDATE and DELETE are rejected by
      db/immutability.py listeners and db/sql triggers.
    - Sum of product quantities <= capacity (enforced by the constraint
      engine inside InventoryService, not by the database).

Storage of the allowed-category set:
    allowed_categories holds a JSON list of labels.  NULL is the
    "unrestricted" sentinel; services never write an empty list.
"""

from datetime import datetime

from sqlalchemy import JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base
from inventory_kernel.db.types import LocationText, Sequence, WarehouseName


class Warehouse(Base):
    """
    Storage site with finite capacity.

    Contract:
        Created once by InventoryService.register_warehouse(); no update
        path exists afterwards.

    Guarantees:
        - capacity is a positive integer.
        - allowed_categories is None (unrestricted) or a non-empty list.
    """

    __tablename__ = "warehouses"

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_warehouse_capacity_positive"),
    )

    id: Mapped[Sequence] = mapped_column(primary_key=True, autoincrement=False)

    name: Mapped[WarehouseName] = mapped_column(nullable=False)

    location: Mapped[LocationText] = mapped_column(nullable=False)

    # JSON list of category labels; NULL means unrestricted
    allowed_categories: Mapped[list[str] | None] = mapped_column(
        JSON,
        nullable=True,
    )

    capacity: Mapped[int] = mapped_column(nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<Warehouse {self.id} {self.name!r} capacity={self.capacity}>"
