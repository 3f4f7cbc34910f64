from __future__ import annotations

from sqlalchemy import Index
from sqlmodel import Field, SQLModel


class ClientRow(SQLModel, table=True):
    __tablename__ = "clients"

    id: str = Field(primary_key=True)
    name: str
    description: str | None = None
    created_at: str
    updated_at: str


class TermbaseRow(SQLModel, table=True):
    __tablename__ = "termbase_entries"
    __table_args__ = (Index("idx_termbase_entries_client_source", "client_id", "source"),)

    id: str = Field(primary_key=True)
    client_id: str | None = None
    source: str
    target: str
    note: str | None = None
    created_at: str
    updated_at: str
