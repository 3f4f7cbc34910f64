"""Translation memory matching and the in-memory working set."""

from cat_core.tm.context_match import (
    calculate_all_match_rates,
    context_match_rate,
    create_tm_entry_with_context,
    find_best_match_with_context,
)
from cat_core.tm.models import ContextMatch, IntentKind, TMEntry, TMIntent, TMMatch
from cat_core.tm.repository import TranslationMemory
from cat_core.tm.similarity import levenshtein_distance, match_rate

__all__ = [
    "ContextMatch",
    "IntentKind",
    "TMEntry",
    "TMIntent",
    "TMMatch",
    "TranslationMemory",
    "calculate_all_match_rates",
    "context_match_rate",
    "create_tm_entry_with_context",
    "find_best_match_with_context",
    "levenshtein_distance",
    "match_rate",
]
