"""
Module: inventory_kernel.db.types
Responsibility: Annotated type aliases and type decorators shared by every
    model, so that identifiers, labels and timestamps use identical column
    definitions system-wide.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Failure modes:
    - ValueError from UTCDateTime when a naive datetime is bound (naive
      timestamps are ambiguous and never written).
"""

from datetime import datetime, timezone
from typing import Annotated

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.types import TypeDecorator


# Identifier allocated from a named sequence counter
Sequence = Annotated[int, BigInteger]

# Category label width
CategoryLabel = Annotated[str, String(25)]

# Warehouse display name
WarehouseName = Annotated[str, String(25)]

# Warehouse location
LocationText = Annotated[str, String(35)]

# Transaction type discriminator ("IMPORT" / "EXPORT")
TransactionTypeCode = Annotated[str, String(6)]

CATEGORY_MAX_LENGTH = 25
WAREHOUSE_NAME_MAX_LENGTH = 25
LOCATION_MAX_LENGTH = 35

# Largest value a BigInteger column holds on every backend
BIGINT_MAX = 2**63 - 1


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored as naive UTC.

    Contract:
        SQLite drops tzinfo on the way back; PostgreSQL keeps it.  Storing
        naive UTC and re-attaching ``timezone.utc`` on load gives the same
        Python value on both.

    Guarantees:
        - process_bind_param: aware datetime -> naive UTC.
        - process_result_value: naive UTC -> aware UTC.
    """

    impl = DateTime(timezone=False)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime not allowed: {value!r}")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
