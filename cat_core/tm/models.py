from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(slots=True, frozen=True)
class TMEntry:
    source: str
    target: str
    prev_source: str | None = None
    next_source: str | None = None


@dataclass(slots=True, frozen=True)
class TMMatch(TMEntry):
    match_rate: int = 0


@dataclass(slots=True, frozen=True)
class ContextMatch:
    entry: TMEntry | None
    match_rate: int


class IntentKind(str, Enum):
    TM_CREATED = "tm_created"
    ENTRY_ADDED = "entry_added"
    ENTRIES_IMPORTED = "entries_imported"
    ENTRY_DELETED = "entry_deleted"


@dataclass(slots=True, frozen=True)
class TMIntent:
    """A persistence request emitted after the working set changed."""

    kind: IntentKind
    entries: tuple[TMEntry, ...] = ()
    name: str | None = None
