"""
Module: inventory_kernel.models.transaction_log
Responsibility: ORM persistence for the append-only history of stock
    movements.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Append-only: no UPDATE or DELETE (ORM listeners + DB triggers).
    - id is allocated from the "transaction_log" sequence, strictly
      increasing in insertion order.
    - timestamp never decreases along id order (assigned by TransactionLog).
    - type is IMPORT or EXPORT (CHECK constraint).

Audit relevance:
    This table IS the stock movement history.  Exactly one row exists for
    every committed import and every committed export, and none for
    rejected attempts.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base
from inventory_kernel.db.types import CategoryLabel, Sequence, TransactionTypeCode


class TransactionType(str, Enum):
    """Kind of stock movement."""

    IMPORT = "IMPORT"
    EXPORT = "EXPORT"


class TransactionLogEntry(Base):
    """
    One committed stock movement.

    Contract:
        Rows are written only by TransactionLog.append() inside the same
        database transaction as the product insert/delete they describe.
    """

    __tablename__ = "transaction_log"

    __table_args__ = (
        CheckConstraint(
            "transaction_type IN ('IMPORT', 'EXPORT')",
            name="ck_transaction_log_type",
        ),
        CheckConstraint("quantity_changed > 0", name="ck_transaction_log_quantity"),
        Index("idx_transaction_log_warehouse", "warehouse_id"),
    )

    id: Mapped[Sequence] = mapped_column(primary_key=True, autoincrement=False)

    transaction_type: Mapped[TransactionTypeCode] = mapped_column(nullable=False)

    category: Mapped[CategoryLabel] = mapped_column(nullable=False)

    warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id"),
        nullable=False,
    )

    quantity_changed: Mapped[int] = mapped_column(nullable=False)

    timestamp: Mapped[datetime] = mapped_column(nullable=False)

    @property
    def type(self) -> TransactionType:
        return TransactionType(self.transaction_type)

    def __repr__(self) -> str:
        return (
            f"<TransactionLogEntry {self.id} {self.transaction_type} "
            f"{self.category} x{self.quantity_changed} @ {self.warehouse_id}>"
        )
