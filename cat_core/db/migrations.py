from __future__ import annotations

from collections.abc import Callable
import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from cat_core.constants import CURRENT_SCHEMA_VERSION

logger = logging.getLogger(__name__)

Migration = Callable[[Connection], None]


def _table_exists(connection: Connection, table_name: str) -> bool:
    row = connection.execute(
        text(
            "SELECT 1 FROM sqlite_master "
            "WHERE type='table' AND name=:table_name LIMIT 1"
        ),
        {"table_name": table_name},
    ).first()
    return row is not None


def get_schema_version(connection: Connection) -> int:
    if not _table_exists(connection, "schema_meta"):
        return 0

    value = connection.execute(
        text("SELECT value FROM schema_meta WHERE key='schema_version' LIMIT 1")
    ).scalar_one_or_none()
    if value is None:
        return 0

    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _set_schema_version(connection: Connection, version: int) -> None:
    connection.execute(
        text(
            "INSERT INTO schema_meta(key, value) VALUES('schema_version', :version) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value"
        ),
        {"version": str(version)},
    )


def _migration_v1(connection: Connection) -> None:
    statements = (
        """
        CREATE TABLE IF NOT EXISTS schema_meta (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS clients (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS translation_memories (
            id TEXT PRIMARY KEY,
            client_id TEXT,
            name TEXT NOT NULL,
            note TEXT,
            source_lang TEXT NOT NULL,
            target_langs_json TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE SET NULL
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_translation_memories_client
        ON translation_memories(client_id)
        """,
        """
        CREATE TABLE IF NOT EXISTS tm_entries (
            id TEXT PRIMARY KEY,
            tm_id TEXT NOT NULL,
            source TEXT NOT NULL,
            target TEXT NOT NULL,
            prev_source TEXT,
            next_source TEXT,
            target_lang TEXT,
            created_at TEXT NOT NULL,
            FOREIGN KEY(tm_id) REFERENCES translation_memories(id) ON DELETE CASCADE
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_tm_entries_tm_created_at
        ON tm_entries(tm_id, created_at)
        """,
        """
        CREATE TABLE IF NOT EXISTS termbase_entries (
            id TEXT PRIMARY KEY,
            client_id TEXT,
            source TEXT NOT NULL,
            target TEXT NOT NULL,
            note TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_termbase_entries_client_source
        ON termbase_entries(client_id, source)
        """,
    )
    for statement in statements:
        connection.execute(text(statement))


MIGRATIONS: dict[int, Migration] = {
    1: _migration_v1,
}


def migrate_to_latest(engine: Engine) -> int:
    """Apply pending migrations in one transaction and return the resulting version."""
    with engine.begin() as connection:
        version = get_schema_version(connection)
        if version > CURRENT_SCHEMA_VERSION:
            raise RuntimeError(
                f"Database schema v{version} is newer than supported v{CURRENT_SCHEMA_VERSION}"
            )

        for pending in range(version + 1, CURRENT_SCHEMA_VERSION + 1):
            MIGRATIONS[pending](connection)
            _set_schema_version(connection, pending)
            logger.info("Migrated project database to schema v%d", pending)
            version = pending

    return version
