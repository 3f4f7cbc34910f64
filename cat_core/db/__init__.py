"""Database helpers for per-project SQLite files."""

from cat_core.db.migrations import migrate_to_latest
from cat_core.db.schema import initialize_database
from cat_core.db.session import session_for_db

__all__ = ["initialize_database", "migrate_to_latest", "session_for_db"]
