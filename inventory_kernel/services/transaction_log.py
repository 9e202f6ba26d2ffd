"""
TransactionLog -- append-only history of stock movements.

Responsibility:
    Appends IMPORT/EXPORT entries and serves ordered, filtered reads over
    them.  There is deliberately no update or delete method.

Architecture position:
    Kernel > Services -- imperative shell.  append() is called only by
    InventoryService, inside the same transaction as the product change the
    entry describes.

Invariants enforced:
    - Entry ids come from the "transaction_log" sequence: strictly
      increasing in insertion order.
    - Timestamps are monotonic: each new entry gets
      max(clock.now_utc(), latest entry's timestamp).  The latest entry is
      read after the sequence row is locked, so concurrent appenders cannot
      interleave between read and write.
    - Append-only: the TransactionLogEntry model is protected by ORM
      listeners and database triggers.
"""

from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import TransactionRecord
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.transaction_log import TransactionLogEntry, TransactionType
from inventory_kernel.services.base import BaseService
from inventory_kernel.services.sequence_service import SequenceService

logger = get_logger("services.transaction_log")

STREAM_BATCH_SIZE = 100


@dataclass(frozen=True)
class TransactionLogFilter:
    """Optional filters for TransactionLog.query(); all are ANDed."""

    type: TransactionType | None = None
    warehouse_id: int | None = None
    category: str | None = None
    after_id: int | None = None

    def apply(self, stmt):
        if self.type is not None:
            stmt = stmt.where(TransactionLogEntry.transaction_type == self.type.value)
        if self.warehouse_id is not None:
            stmt = stmt.where(TransactionLogEntry.warehouse_id == self.warehouse_id)
        if self.category is not None:
            stmt = stmt.where(TransactionLogEntry.category == self.category)
        if self.after_id is not None:
            stmt = stmt.where(TransactionLogEntry.id > self.after_id)
        return stmt


class TransactionLog(BaseService):
    """
    Append-only transaction log.

    Guarantees:
        - append() flushes, never commits: the entry becomes visible to
          other sessions together with the product change it records.
        - query() yields entries ordered by id ascending.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._sequences = SequenceService(session)

    def append(
        self,
        transaction_type: TransactionType,
        category: str,
        warehouse_id: int,
        quantity_changed: int,
    ) -> TransactionRecord:
        """
        Append one entry.

        Postconditions:
            - The returned record's id is greater than every existing id.
            - Its timestamp is >= every existing timestamp.
        """
        entry_id = self._sequences.next_value(SequenceService.TRANSACTION_LOG)

        timestamp = self._clock.now_utc()
        latest = self._latest_model()
        if latest is not None and latest.timestamp > timestamp:
            timestamp = latest.timestamp

        entry = TransactionLogEntry(
            id=entry_id,
            transaction_type=transaction_type.value,
            category=category,
            warehouse_id=warehouse_id,
            quantity_changed=quantity_changed,
            timestamp=timestamp,
        )
        self.session.add(entry)
        self.session.flush()

        logger.info(
            "log_entry_appended",
            extra={
                "entry_id": entry_id,
                "transaction_type": transaction_type.value,
                "category": category,
                "quantity_changed": quantity_changed,
            },
        )
        return TransactionRecord.from_model(entry)

    def _latest_model(self) -> TransactionLogEntry | None:
        return self.session.execute(
            select(TransactionLogEntry).order_by(TransactionLogEntry.id.desc()).limit(1)
        ).scalar_one_or_none()

    def latest(self) -> TransactionRecord | None:
        entry = self._latest_model()
        return TransactionRecord.from_model(entry) if entry is not None else None

    def query(self, log_filter: TransactionLogFilter | None = None) -> Iterator[TransactionRecord]:
        """
        Lazily stream entries ordered by id ascending.

        The iterator is only valid while the session is open.
        """
        stmt = select(TransactionLogEntry)
        if log_filter is not None:
            stmt = log_filter.apply(stmt)
        stmt = stmt.order_by(TransactionLogEntry.id).execution_options(
            yield_per=STREAM_BATCH_SIZE
        )
        for entry in self.session.scalars(stmt):
            yield TransactionRecord.from_model(entry)

    def count(self, log_filter: TransactionLogFilter | None = None) -> int:
        stmt = select(func.count(TransactionLogEntry.id))
        if log_filter is not None:
            stmt = log_filter.apply(stmt)
        return int(self.session.execute(stmt).scalar_one())
