"""
Module: inventory_kernel.db.triggers
Responsibility: Loading, installing, and verifying database-level
    immutability triggers (Layer 2 of 2).  This is the database-level
    complement to the ORM-level listeners in db/immutability.py.
Architecture position: Kernel > DB.  May import from db/ only.  MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - transaction_log rows: no UPDATE, no DELETE.
    - products rows: no UPDATE (quantity changes are export + import).
    - warehouses rows: no UPDATE, no DELETE.

SQL files live in db/sql/<dialect>/ and are applied in numbered order.
Statements inside a file are separated by a line holding only ``-- @@``
because the SQLite driver executes one statement per call.

Failure modes:
    - The database raises on any trigger violation (surfaced by SQLAlchemy
      as IntegrityError or DatabaseError).
    - ValueError for a dialect with no trigger set.
"""

from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from inventory_kernel.logging_config import get_logger

logger = get_logger("db.triggers")

SQL_DIR = Path(__file__).parent / "sql"

TRIGGER_FILES = [
    "01_transaction_log.sql",
    "02_product.sql",
    "03_warehouse.sql",
]

DROP_FILE = "99_drop_all.sql"

STATEMENT_SEPARATOR = "-- @@"

ALL_TRIGGER_NAMES = [
    "trg_transaction_log_immutability_update",
    "trg_transaction_log_immutability_delete",
    "trg_product_immutability_update",
    "trg_warehouse_immutability_update",
    "trg_warehouse_immutability_delete",
]

SUPPORTED_DIALECTS = ("sqlite", "postgresql")


def _dialect_dir(dialect_name: str) -> Path:
    if dialect_name not in SUPPORTED_DIALECTS:
        raise ValueError(f"No immutability triggers for dialect: {dialect_name}")
    return SQL_DIR / dialect_name


def _load_statements(dialect_name: str, filename: str) -> list[str]:
    """
    Load one SQL file and split it into executable statements.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    content = (_dialect_dir(dialect_name) / filename).read_text(encoding="utf-8")
    statements = []
    for chunk in content.split(f"\n{STATEMENT_SEPARATOR}\n"):
        if chunk.strip():
            statements.append(chunk.strip())
    return statements


def _execute_files(conn: Connection, dialect_name: str, filenames: list[str]) -> None:
    for filename in filenames:
        for statement in _load_statements(dialect_name, filename):
            conn.execution_options(no_parameters=True).exec_driver_sql(statement)


# =============================================================================
# Public API
# =============================================================================


def install_immutability_triggers(engine: Engine) -> None:
    """
    Install database-level immutability triggers for the engine's dialect.

    Preconditions: Tables must exist (call after Base.metadata.create_all()).
    Postconditions: All triggers in ALL_TRIGGER_NAMES are installed.
        Installation is idempotent.
    """
    dialect_name = engine.dialect.name
    with engine.begin() as conn:
        _execute_files(conn, dialect_name, TRIGGER_FILES)
    logger.debug(
        "immutability_triggers_installed",
        extra={"dialect": dialect_name, "trigger_count": len(ALL_TRIGGER_NAMES)},
    )


def uninstall_immutability_triggers(engine: Engine) -> None:
    """
    Remove database-level immutability triggers.

    WARNING: Only use this for tests or migrations that must touch
    historical rows.  Re-install triggers immediately afterwards.
    """
    dialect_name = engine.dialect.name
    with engine.begin() as conn:
        _execute_files(conn, dialect_name, [DROP_FILE])
    logger.debug("immutability_triggers_uninstalled", extra={"dialect": dialect_name})


def get_installed_triggers(engine: Engine) -> list[str]:
    """
    Get list of installed immutability triggers.

    Useful for debugging and verification.
    """
    if engine.dialect.name == "sqlite":
        check_sql = "SELECT name FROM sqlite_master WHERE type = 'trigger'"
    else:
        check_sql = "SELECT tgname FROM pg_trigger WHERE NOT tgisinternal"

    with engine.connect() as conn:
        names = {row[0] for row in conn.execute(text(check_sql))}
    return sorted(name for name in ALL_TRIGGER_NAMES if name in names)


def triggers_installed(engine: Engine) -> bool:
    """Check if all immutability triggers are installed."""
    return len(get_installed_triggers(engine)) == len(ALL_TRIGGER_NAMES)


def get_missing_triggers(engine: Engine) -> list[str]:
    """Get list of immutability triggers that should be installed but aren't."""
    installed = set(get_installed_triggers(engine))
    return sorted(set(ALL_TRIGGER_NAMES) - installed)
