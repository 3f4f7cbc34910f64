from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

from sqlmodel import col, select

from cat_core.db.models import ClientRow
from cat_core.db.session import session_for_db


@dataclass(slots=True, frozen=True)
class Client:
    id: str
    name: str
    description: str | None


def _utc_now_iso() -> str:
    return (
        datetime.now(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


def create_client(*, db_path: Path, name: str, description: str | None = None) -> Client:
    if not name.strip():
        raise ValueError("Client name must not be empty.")

    now = _utc_now_iso()
    row = ClientRow(
        id=str(uuid4()),
        name=name.strip(),
        description=description,
        created_at=now,
        updated_at=now,
    )
    with session_for_db(Path(db_path)) as session:
        session.add(row)
        session.commit()
        return Client(id=row.id, name=row.name, description=row.description)


def list_clients(*, db_path: Path) -> list[Client]:
    with session_for_db(Path(db_path)) as session:
        rows = session.exec(select(ClientRow).order_by(col(ClientRow.name))).all()
        return [Client(id=row.id, name=row.name, description=row.description) for row in rows]


def find_client_by_name(*, db_path: Path, name: str) -> Client | None:
    for client in list_clients(db_path=db_path):
        if client.name == name:
            return client
    return None
