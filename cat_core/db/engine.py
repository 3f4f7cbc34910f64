from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Cascading deletes of TM entries and client terms rely on foreign_keys.
_CONNECT_PRAGMAS = (
    "PRAGMA foreign_keys=ON;",
    "PRAGMA busy_timeout=5000;",
)


def sqlite_url(db_path: Path) -> str:
    return f"sqlite+pysqlite:///{Path(db_path).as_posix()}"


def _apply_pragmas(dbapi_connection, _connection_record):  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    try:
        for pragma in _CONNECT_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


def create_sqlite_engine(db_path: Path) -> Engine:
    """Engine for one project database file; the parent folder is created on demand."""
    resolved = Path(db_path).expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(sqlite_url(resolved), future=True)
    event.listen(engine, "connect", _apply_pragmas)

    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))

    logger.debug("Opened SQLite database at %s", resolved)
    return engine
