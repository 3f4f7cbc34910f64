"""Termbase entries, term lookup and termbase storage."""

from cat_core.glossary.termbase import (
    TermbaseEntry,
    find_term_matches,
    merge_scoped_terms,
    search_terms,
)

__all__ = [
    "TermbaseEntry",
    "find_term_matches",
    "merge_scoped_terms",
    "search_terms",
]
