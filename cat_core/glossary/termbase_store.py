from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

from sqlmodel import Session, col, select

from cat_core.db.models import TermbaseRow
from cat_core.db.session import session_for_db
from cat_core.glossary.termbase import TermbaseEntry, merge_scoped_terms


def _utc_now_iso() -> str:
    return (
        datetime.now(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


def _row_to_entry(row: TermbaseRow) -> TermbaseEntry:
    return TermbaseEntry(source=row.source, target=row.target, note=row.note or "")


def _scoped_rows(session: Session, client_id: str | None) -> list[TermbaseRow]:
    statement = select(TermbaseRow)
    if client_id is None:
        statement = statement.where(col(TermbaseRow.client_id).is_(None))
    else:
        statement = statement.where(TermbaseRow.client_id == client_id)
    statement = statement.order_by(col(TermbaseRow.created_at).desc(), col(TermbaseRow.id))
    return list(session.exec(statement).all())


def _add_term_in_session(
    session: Session,
    *,
    entry: TermbaseEntry,
    client_id: str | None,
) -> str:
    now = _utc_now_iso()
    existing = next(
        (row for row in _scoped_rows(session, client_id) if row.source == entry.source),
        None,
    )
    if existing is not None:
        existing.target = entry.target
        existing.note = entry.note
        existing.updated_at = now
        session.add(existing)
        session.commit()
        return existing.id

    row = TermbaseRow(
        id=str(uuid4()),
        client_id=client_id,
        source=entry.source,
        target=entry.target,
        note=entry.note,
        created_at=now,
        updated_at=now,
    )
    session.add(row)
    session.commit()
    return row.id


def add_term(
    *,
    entry: TermbaseEntry,
    client_id: str | None = None,
    db_path: Path | None = None,
    session: Session | None = None,
) -> str:
    """Insert a term, or update the one with the same source in the same scope."""
    if session is not None:
        return _add_term_in_session(session, entry=entry, client_id=client_id)

    if db_path is None:
        raise ValueError("db_path is required when session is not provided")

    with session_for_db(Path(db_path)) as local_session:
        return _add_term_in_session(local_session, entry=entry, client_id=client_id)


def list_terms(
    *,
    client_id: str | None = None,
    include_global: bool = True,
    db_path: Path | None = None,
    session: Session | None = None,
) -> list[TermbaseEntry]:
    if session is None:
        if db_path is None:
            raise ValueError("db_path is required when session is not provided")
        with session_for_db(Path(db_path)) as local_session:
            return list_terms(
                client_id=client_id,
                include_global=include_global,
                session=local_session,
            )

    global_terms = [_row_to_entry(row) for row in _scoped_rows(session, None)]
    if client_id is None:
        return global_terms

    client_terms = [_row_to_entry(row) for row in _scoped_rows(session, client_id)]
    if not include_global:
        return client_terms
    return merge_scoped_terms(global_terms, client_terms)


def delete_term(
    *,
    source: str,
    client_id: str | None = None,
    db_path: Path | None = None,
    session: Session | None = None,
) -> bool:
    if session is None:
        if db_path is None:
            raise ValueError("db_path is required when session is not provided")
        with session_for_db(Path(db_path)) as local_session:
            return delete_term(source=source, client_id=client_id, session=local_session)

    rows = [row for row in _scoped_rows(session, client_id) if row.source == source]
    for row in rows:
        session.delete(row)
    session.commit()
    return bool(rows)
