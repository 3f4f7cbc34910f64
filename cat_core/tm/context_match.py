from __future__ import annotations

from collections.abc import Sequence

from cat_core.constants import CONTEXT_MATCH_RATE, EXACT_MATCH_RATE
from cat_core.segments.models import Segment
from cat_core.tm.models import ContextMatch, TMEntry
from cat_core.tm.similarity import MatchRateCache, RateFunction, match_rate


def _neighbours(index: int, segments: Sequence[Segment]) -> tuple[Segment | None, Segment | None]:
    previous = segments[index - 1] if index > 0 else None
    following = segments[index + 1] if index < len(segments) - 1 else None
    return previous, following


def _context_matches(
    entry: TMEntry,
    previous: Segment | None,
    following: Segment | None,
    rate: RateFunction = match_rate,
) -> bool:
    if previous is not None and entry.prev_source:
        if rate(previous.source, entry.prev_source) == EXACT_MATCH_RATE:
            return True
    if following is not None and entry.next_source:
        if rate(following.source, entry.next_source) == EXACT_MATCH_RATE:
            return True
    return False


def context_match_rate(
    index: int,
    segments: Sequence[Segment],
    entries: Sequence[TMEntry],
    *,
    rate: RateFunction = match_rate,
) -> int:
    """Best plain rate of a segment against the TM, or 101 on a context match.

    A context match is an exact source match whose recorded previous or next
    source also matches the adjacent segment exactly.
    """
    if index < 0 or index >= len(segments):
        return 0

    current = segments[index]
    previous, following = _neighbours(index, segments)

    best_rate = 0
    for entry in entries:
        entry_rate = rate(current.source, entry.source)
        if entry_rate == EXACT_MATCH_RATE and _context_matches(entry, previous, following, rate):
            return CONTEXT_MATCH_RATE
        if entry_rate > best_rate:
            best_rate = entry_rate
    return best_rate


def find_best_match_with_context(
    index: int,
    segments: Sequence[Segment],
    entries: Sequence[TMEntry],
) -> ContextMatch:
    if index < 0 or index >= len(segments):
        return ContextMatch(entry=None, match_rate=0)

    current = segments[index]
    previous, following = _neighbours(index, segments)

    best_entry: TMEntry | None = None
    best_rate = 0
    for entry in entries:
        rate = match_rate(current.source, entry.source)
        if rate == EXACT_MATCH_RATE and _context_matches(entry, previous, following):
            return ContextMatch(entry=entry, match_rate=CONTEXT_MATCH_RATE)
        if rate > best_rate:
            best_rate = rate
            best_entry = entry
    return ContextMatch(entry=best_entry, match_rate=best_rate)


def create_tm_entry_with_context(index: int, segments: Sequence[Segment]) -> TMEntry:
    current = segments[index]
    previous, following = _neighbours(index, segments)
    return TMEntry(
        source=current.source,
        target=current.target,
        prev_source=previous.source if previous is not None else None,
        next_source=following.source if following is not None else None,
    )


def calculate_all_match_rates(
    sources: Sequence[str],
    entries: Sequence[TMEntry],
) -> list[int]:
    """Load-time rates for a whole document, each source treated as a new segment."""
    fresh = [Segment(id=index, source=source) for index, source in enumerate(sources)]
    # Repeated sources and anchors are scored once per load.
    cache = MatchRateCache()
    return [context_match_rate(index, fresh, entries, rate=cache) for index in range(len(fresh))]
