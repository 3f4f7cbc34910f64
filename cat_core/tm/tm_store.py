from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from uuid import uuid4

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection

from cat_core.db.schema import initialize_database
from cat_core.tm.models import IntentKind, TMEntry, TMIntent

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class StoredTM:
    id: str
    name: str
    note: str | None
    client_id: str | None
    source_lang: str
    target_langs: list[str]
    created_at: str
    entry_count: int = 0


def _utc_now_iso() -> str:
    return (
        datetime.now(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


def _create_tm_on_connection(
    connection: Connection,
    *,
    name: str,
    source_lang: str,
    target_langs: Sequence[str],
    note: str | None,
    client_id: str | None,
) -> str:
    if not name.strip():
        raise ValueError("TM name must not be empty.")

    now = _utc_now_iso()
    tm_id = str(uuid4())
    connection.execute(
        text(
            """
            INSERT INTO translation_memories(
                id, client_id, name, note, source_lang, target_langs_json, created_at, updated_at
            ) VALUES (
                :id, :client_id, :name, :note, :source_lang, :target_langs_json, :created_at, :updated_at
            )
            """
        ),
        {
            "id": tm_id,
            "client_id": client_id,
            "name": name.strip(),
            "note": note,
            "source_lang": source_lang,
            "target_langs_json": json.dumps(list(target_langs)),
            "created_at": now,
            "updated_at": now,
        },
    )
    return tm_id


def create_tm(
    *,
    name: str,
    source_lang: str,
    target_langs: Sequence[str] = (),
    note: str | None = None,
    client_id: str | None = None,
    db_path: Path | None = None,
    connection: Connection | None = None,
) -> str:
    if connection is not None:
        return _create_tm_on_connection(
            connection,
            name=name,
            source_lang=source_lang,
            target_langs=target_langs,
            note=note,
            client_id=client_id,
        )

    if db_path is None:
        raise ValueError("db_path is required when connection is not provided")

    engine = initialize_database(Path(db_path))
    try:
        with engine.begin() as local_connection:
            return _create_tm_on_connection(
                local_connection,
                name=name,
                source_lang=source_lang,
                target_langs=target_langs,
                note=note,
                client_id=client_id,
            )
    finally:
        engine.dispose()


def _list_tms_on_connection(connection: Connection, client_id: str | None) -> list[StoredTM]:
    query = """
        SELECT
            tm.id,
            tm.name,
            tm.note,
            tm.client_id,
            tm.source_lang,
            tm.target_langs_json,
            tm.created_at,
            (SELECT COUNT(*) FROM tm_entries e WHERE e.tm_id = tm.id) AS entry_count
        FROM translation_memories tm
    """
    params: dict[str, object] = {}
    if client_id is not None:
        query += " WHERE tm.client_id = :client_id"
        params["client_id"] = client_id
    query += " ORDER BY tm.created_at DESC, tm.name"

    rows = connection.execute(text(query), params).mappings().all()
    return [
        StoredTM(
            id=str(row["id"]),
            name=str(row["name"]),
            note=row["note"],
            client_id=row["client_id"],
            source_lang=str(row["source_lang"]),
            target_langs=list(json.loads(row["target_langs_json"] or "[]")),
            created_at=str(row["created_at"]),
            entry_count=int(row["entry_count"]),
        )
        for row in rows
    ]


def list_tms(
    *,
    client_id: str | None = None,
    db_path: Path | None = None,
    connection: Connection | None = None,
) -> list[StoredTM]:
    if connection is not None:
        return _list_tms_on_connection(connection, client_id)

    if db_path is None:
        raise ValueError("db_path is required when connection is not provided")

    engine = initialize_database(Path(db_path))
    try:
        with engine.connect() as local_connection:
            return _list_tms_on_connection(local_connection, client_id)
    finally:
        engine.dispose()


def find_tm_by_name(
    *,
    name: str,
    db_path: Path | None = None,
    connection: Connection | None = None,
) -> StoredTM | None:
    for stored in list_tms(db_path=db_path, connection=connection):
        if stored.name == name:
            return stored
    return None


def delete_tm(
    *,
    tm_id: str,
    db_path: Path | None = None,
    connection: Connection | None = None,
) -> bool:
    statement = text("DELETE FROM translation_memories WHERE id = :id")
    if connection is not None:
        return connection.execute(statement, {"id": tm_id}).rowcount > 0

    if db_path is None:
        raise ValueError("db_path is required when connection is not provided")

    engine = initialize_database(Path(db_path))
    try:
        with engine.begin() as local_connection:
            return local_connection.execute(statement, {"id": tm_id}).rowcount > 0
    finally:
        engine.dispose()


def _insert_entry(
    connection: Connection,
    *,
    tm_id: str,
    entry: TMEntry,
    target_lang: str | None,
) -> str:
    entry_id = str(uuid4())
    connection.execute(
        text(
            """
            INSERT INTO tm_entries(
                id, tm_id, source, target, prev_source, next_source, target_lang, created_at
            ) VALUES (
                :id, :tm_id, :source, :target, :prev_source, :next_source, :target_lang, :created_at
            )
            """
        ),
        {
            "id": entry_id,
            "tm_id": tm_id,
            "source": entry.source,
            "target": entry.target,
            "prev_source": entry.prev_source,
            "next_source": entry.next_source,
            "target_lang": target_lang,
            "created_at": _utc_now_iso(),
        },
    )
    return entry_id


def _existing_sources(connection: Connection, tm_id: str) -> set[str]:
    rows = connection.execute(
        text("SELECT source FROM tm_entries WHERE tm_id = :tm_id"),
        {"tm_id": tm_id},
    ).all()
    return {str(row[0]) for row in rows}


def _import_on_connection(
    connection: Connection,
    *,
    tm_id: str,
    entries: Sequence[TMEntry],
    target_lang: str | None,
) -> int:
    seen = _existing_sources(connection, tm_id)
    saved = 0
    for entry in entries:
        if entry.source in seen:
            continue
        _insert_entry(connection, tm_id=tm_id, entry=entry, target_lang=target_lang)
        seen.add(entry.source)
        saved += 1
    return saved


def add_tm_entry(
    *,
    tm_id: str,
    entry: TMEntry,
    target_lang: str | None = None,
    db_path: Path | None = None,
    connection: Connection | None = None,
) -> bool:
    """Store one entry unless the TM already holds its exact source."""
    return (
        import_tm_entries(
            tm_id=tm_id,
            entries=[entry],
            target_lang=target_lang,
            db_path=db_path,
            connection=connection,
        )
        == 1
    )


def import_tm_entries(
    *,
    tm_id: str,
    entries: Sequence[TMEntry],
    target_lang: str | None = None,
    db_path: Path | None = None,
    connection: Connection | None = None,
) -> int:
    if connection is not None:
        return _import_on_connection(
            connection, tm_id=tm_id, entries=entries, target_lang=target_lang
        )

    if db_path is None:
        raise ValueError("db_path is required when connection is not provided")

    engine = initialize_database(Path(db_path))
    try:
        with engine.begin() as local_connection:
            saved = _import_on_connection(
                local_connection, tm_id=tm_id, entries=entries, target_lang=target_lang
            )
    finally:
        engine.dispose()
    logger.info("Saved %d of %d TM entries into %s", saved, len(entries), tm_id)
    return saved


def delete_tm_entries(
    *,
    tm_id: str,
    sources: Sequence[str],
    db_path: Path | None = None,
    connection: Connection | None = None,
) -> int:
    if not sources:
        return 0

    statement = text(
        "DELETE FROM tm_entries WHERE tm_id = :tm_id AND source IN :sources"
    ).bindparams(bindparam("sources", expanding=True))
    params = {"tm_id": tm_id, "sources": list(sources)}
    if connection is not None:
        return connection.execute(statement, params).rowcount

    if db_path is None:
        raise ValueError("db_path is required when connection is not provided")

    engine = initialize_database(Path(db_path))
    try:
        with engine.begin() as local_connection:
            return local_connection.execute(statement, params).rowcount
    finally:
        engine.dispose()


def _load_on_connection(connection: Connection, tm_ids: Sequence[str]) -> list[TMEntry]:
    rows = connection.execute(
        text(
            """
            SELECT source, target, prev_source, next_source
            FROM tm_entries
            WHERE tm_id IN :tm_ids
            ORDER BY created_at, rowid
            """
        ).bindparams(bindparam("tm_ids", expanding=True)),
        {"tm_ids": list(tm_ids)},
    ).all()
    return [
        TMEntry(
            source=str(row[0]),
            target=str(row[1]),
            prev_source=row[2],
            next_source=row[3],
        )
        for row in rows
    ]


def load_entries_for_matching(
    *,
    tm_ids: Sequence[str],
    db_path: Path | None = None,
    connection: Connection | None = None,
) -> list[TMEntry]:
    if not tm_ids:
        return []

    if connection is not None:
        return _load_on_connection(connection, tm_ids)

    if db_path is None:
        raise ValueError("db_path is required when connection is not provided")

    engine = initialize_database(Path(db_path))
    try:
        with engine.connect() as local_connection:
            return _load_on_connection(local_connection, tm_ids)
    finally:
        engine.dispose()


class TMIntentWriter:
    """Persists intents emitted by a ``TranslationMemory`` into one stored TM."""

    def __init__(self, *, db_path: Path, tm_id: str, target_lang: str | None = None) -> None:
        self.db_path = Path(db_path)
        self.tm_id = tm_id
        self.target_lang = target_lang

    def __call__(self, intent: TMIntent) -> None:
        if intent.kind in (IntentKind.ENTRY_ADDED, IntentKind.ENTRIES_IMPORTED):
            import_tm_entries(
                tm_id=self.tm_id,
                entries=list(intent.entries),
                target_lang=self.target_lang,
                db_path=self.db_path,
            )
        elif intent.kind is IntentKind.ENTRY_DELETED:
            delete_tm_entries(
                tm_id=self.tm_id,
                sources=[entry.source for entry in intent.entries],
                db_path=self.db_path,
            )
        else:
            logger.debug("Ignoring %s intent for stored TM %s", intent.kind.value, self.tm_id)
