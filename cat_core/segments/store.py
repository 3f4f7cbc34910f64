from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
import logging

from cat_core.segments.models import Segment, SegmentStatus, TranslationStats
from cat_core.segments.segmenter import count_words
from cat_core.tm.context_match import create_tm_entry_with_context
from cat_core.tm.models import TMEntry
from cat_core.tm.repository import TranslationMemory

logger = logging.getLogger(__name__)

_NAVIGATION_DIRECTIONS = {"prev", "next"}


@dataclass(slots=True)
class ConfirmResult:
    changed: bool
    active_index: int
    segment_id: int | None = None
    propagated_ids: list[int] = field(default_factory=list)
    tm_entry: TMEntry | None = None


def _status_for_target(target: str) -> SegmentStatus:
    return SegmentStatus.TRANSLATED if target else SegmentStatus.NEW


class SegmentStore:
    """Ordered segments of one document plus the active-segment cursor."""

    def __init__(self) -> None:
        self._segments: list[Segment] = []
        self.active_index = 0

    def __len__(self) -> int:
        return len(self._segments)

    @property
    def segments(self) -> list[Segment]:
        return self._segments

    def create(
        self,
        sources: Sequence[str],
        match_rates: Sequence[int] | None = None,
    ) -> list[Segment]:
        rates = list(match_rates) if match_rates is not None else [0] * len(sources)
        if len(rates) != len(sources):
            raise ValueError("match_rates must be parallel to sources")

        self._segments = [
            Segment(id=index, source=source, match_rate=int(rates[index]))
            for index, source in enumerate(sources)
        ]
        self.active_index = 0
        logger.info("Created %d segments", len(self._segments))
        return self._segments

    def load(self, segments: Iterable[Segment]) -> list[Segment]:
        self._segments = list(segments)
        self.active_index = 0
        return self._segments

    def get(self, segment_id: int) -> Segment | None:
        index = self.index_of(segment_id)
        return self._segments[index] if index >= 0 else None

    def index_of(self, segment_id: int) -> int:
        for index, segment in enumerate(self._segments):
            if segment.id == segment_id:
                return index
        return -1

    def update_target(self, segment_id: int, target: str) -> Segment | None:
        segment = self.get(segment_id)
        if segment is None:
            return None
        segment.target = target
        segment.status = _status_for_target(target)
        return segment

    def apply_tm_match(self, segment_id: int, entry: TMEntry) -> Segment | None:
        return self.update_target(segment_id, entry.target)

    def confirm(
        self,
        segment_id: int,
        repository: TranslationMemory,
        *,
        auto_propagate: bool = True,
    ) -> ConfirmResult:
        """Confirm a segment, propagate its target and record it in the TM.

        Confirming a segment with an empty target is a no-op. Context for the
        new TM entry and the cursor move both read the segment list as it was
        before this call changed anything.
        """
        current_index = self.index_of(segment_id)
        if current_index < 0 or not self._segments[current_index].target:
            return ConfirmResult(changed=False, active_index=self.active_index)

        snapshot = [replace(segment) for segment in self._segments]
        confirmed = self._segments[current_index]
        confirmed.status = SegmentStatus.CONFIRMED

        propagated: list[int] = []
        if auto_propagate:
            for segment in self._segments:
                if segment.id == segment_id:
                    continue
                if segment.source == confirmed.source and segment.status != SegmentStatus.CONFIRMED:
                    segment.target = confirmed.target
                    segment.status = SegmentStatus.TRANSLATED
                    propagated.append(segment.id)

        tm_entry: TMEntry | None = None
        if not repository.exists_exact(confirmed.source):
            tm_entry = create_tm_entry_with_context(current_index, snapshot)
            repository.append(tm_entry)

        next_unconfirmed = next(
            (
                index
                for index, segment in enumerate(snapshot)
                if index > current_index and segment.status != SegmentStatus.CONFIRMED
            ),
            -1,
        )
        if next_unconfirmed != -1:
            self.active_index = next_unconfirmed
        elif current_index < len(self._segments) - 1:
            self.active_index = current_index + 1

        logger.debug(
            "Confirmed segment %d (propagated to %d, tm entry added: %s)",
            segment_id,
            len(propagated),
            tm_entry is not None,
        )
        return ConfirmResult(
            changed=True,
            active_index=self.active_index,
            segment_id=segment_id,
            propagated_ids=propagated,
            tm_entry=tm_entry,
        )

    def navigate(self, direction: str) -> int:
        if direction not in _NAVIGATION_DIRECTIONS:
            raise ValueError(f"Unsupported direction: {direction}")
        if direction == "prev" and self.active_index > 0:
            self.active_index -= 1
        elif direction == "next" and self.active_index < len(self._segments) - 1:
            self.active_index += 1
        return self.active_index

    def apply_all_100_plus_matches(self, repository: TranslationMemory) -> int:
        # Re-verified against a plain exact match, even for stored 101 rates.
        applied = 0
        for segment in self._segments:
            if segment.match_rate < 100 or segment.status != SegmentStatus.NEW:
                continue
            exact = repository.first_exact(segment.source)
            if exact is None:
                continue
            segment.target = exact.target
            segment.status = SegmentStatus.TRANSLATED
            applied += 1
        if applied:
            logger.info("Applied %d exact TM matches", applied)
        return applied

    def stats(self) -> TranslationStats:
        counts = {status: 0 for status in SegmentStatus}
        for segment in self._segments:
            counts[segment.status] += 1
        return TranslationStats(
            total=len(self._segments),
            translated=counts[SegmentStatus.TRANSLATED],
            confirmed=counts[SegmentStatus.CONFIRMED],
            new=counts[SegmentStatus.NEW],
        )

    def progress(self) -> int:
        stats = self.stats()
        if stats.total == 0:
            return 0
        return int(stats.confirmed / stats.total * 100 + 0.5)

    def filter_by_status(self, status: SegmentStatus | str) -> list[Segment]:
        if status == "all":
            return list(self._segments)
        wanted = SegmentStatus(status)
        return [segment for segment in self._segments if segment.status == wanted]

    def total_words(self) -> int:
        return sum(count_words(segment.source) for segment in self._segments)
