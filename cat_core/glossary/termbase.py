from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class TermbaseEntry:
    source: str
    target: str
    note: str = ""


def find_term_matches(text: str, termbase: Sequence[TermbaseEntry]) -> list[TermbaseEntry]:
    """Termbase entries whose source occurs anywhere in ``text``, ignoring case."""
    lowered = text.lower()
    return [term for term in termbase if term.source.lower() in lowered]


def merge_scoped_terms(
    global_terms: Iterable[TermbaseEntry],
    client_terms: Iterable[TermbaseEntry],
) -> list[TermbaseEntry]:
    """Overlay client terms on global terms, keyed by case-insensitive source."""
    merged: dict[str, TermbaseEntry] = {}
    for term in global_terms:
        merged[term.source.casefold()] = term
    for term in client_terms:
        merged[term.source.casefold()] = term
    return list(merged.values())


def search_terms(term: str, termbase: Sequence[TermbaseEntry]) -> list[TermbaseEntry]:
    needle = term.lower()
    return [
        entry
        for entry in termbase
        if needle in entry.source.lower() or needle in entry.target.lower()
    ]
