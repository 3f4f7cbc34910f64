from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
import logging

from cat_core.constants import DEFAULT_FUZZY_LIMIT, DEFAULT_FUZZY_MIN_RATE, EXACT_MATCH_RATE
from cat_core.tm.models import IntentKind, TMEntry, TMIntent, TMMatch
from cat_core.tm.similarity import match_rate

logger = logging.getLogger(__name__)

IntentListener = Callable[[TMIntent], None]


class TranslationMemory:
    """Ordered in-memory working set of TM entries used for matching.

    Every mutation is reported to subscribed listeners as a ``TMIntent`` so a
    storage adapter can persist it; the working set itself stays authoritative.
    """

    def __init__(self, entries: Iterable[TMEntry] = (), *, name: str | None = None) -> None:
        self.name = name
        self._entries: list[TMEntry] = list(entries)
        self._listeners: list[IntentListener] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TMEntry]:
        return iter(self._entries)

    @property
    def entries(self) -> tuple[TMEntry, ...]:
        return tuple(self._entries)

    def subscribe(self, listener: IntentListener) -> None:
        self._listeners.append(listener)

    def _emit(self, intent: TMIntent) -> None:
        for listener in self._listeners:
            listener(intent)

    def announce_created(self) -> None:
        self._emit(TMIntent(kind=IntentKind.TM_CREATED, name=self.name))

    def append(self, entry: TMEntry) -> None:
        self._entries.append(entry)
        logger.debug("TM entry appended: %r", entry.source)
        self._emit(TMIntent(kind=IntentKind.ENTRY_ADDED, entries=(entry,)))

    def append_all(self, entries: Iterable[TMEntry]) -> int:
        added = tuple(entries)
        if not added:
            return 0
        self._entries.extend(added)
        logger.info("Imported %d TM entries", len(added))
        self._emit(TMIntent(kind=IntentKind.ENTRIES_IMPORTED, entries=added))
        return len(added)

    def remove_where(self, predicate: Callable[[TMEntry], bool]) -> int:
        kept: list[TMEntry] = []
        removed: list[TMEntry] = []
        for entry in self._entries:
            (removed if predicate(entry) else kept).append(entry)
        if not removed:
            return 0
        self._entries = kept
        self._emit(TMIntent(kind=IntentKind.ENTRY_DELETED, entries=tuple(removed)))
        return len(removed)

    def exists_exact(self, source: str) -> bool:
        return any(entry.source == source for entry in self._entries)

    def first_exact(self, source: str) -> TMEntry | None:
        for entry in self._entries:
            if match_rate(source, entry.source) == EXACT_MATCH_RATE:
                return entry
        return None

    def best_plain_match(self, source: str) -> int:
        best = 0
        for entry in self._entries:
            rate = match_rate(source, entry.source)
            if rate > best:
                best = rate
        return best

    def find_ranked_matches(
        self,
        source: str,
        limit: int = DEFAULT_FUZZY_LIMIT,
        min_rate: int = DEFAULT_FUZZY_MIN_RATE,
    ) -> list[TMMatch]:
        scored = [
            TMMatch(
                source=entry.source,
                target=entry.target,
                prev_source=entry.prev_source,
                next_source=entry.next_source,
                match_rate=match_rate(source, entry.source),
            )
            for entry in self._entries
        ]
        kept = [item for item in scored if item.match_rate >= min_rate]
        # list.sort is stable, so equal rates keep repository order.
        kept.sort(key=lambda item: -item.match_rate)
        return kept[: max(0, int(limit))]

    def search(self, term: str) -> list[TMEntry]:
        needle = term.lower()
        return [
            entry
            for entry in self._entries
            if needle in entry.source.lower() or needle in entry.target.lower()
        ]
