from __future__ import annotations

from cat_core.segments.models import Segment
from cat_core.tm.context_match import (
    calculate_all_match_rates,
    context_match_rate,
    create_tm_entry_with_context,
    find_best_match_with_context,
)
from cat_core.tm.models import TMEntry


def _segments(*sources: str) -> list[Segment]:
    return [Segment(id=index, source=source) for index, source in enumerate(sources)]


def test_context_match_scores_101_when_neighbours_match() -> None:
    segments = _segments("A.", "B.", "C.")
    tm = [TMEntry(source="B.", target="B-trans.", prev_source="A.", next_source="C.")]

    assert context_match_rate(1, segments, tm) == 101


def test_context_match_needs_only_one_matching_neighbour() -> None:
    segments = _segments("B.", "C.")
    tm = [TMEntry(source="B.", target="B-trans.", prev_source="Z.", next_source="C.")]

    assert context_match_rate(0, segments, tm) == 101


def test_exact_match_without_context_anchors_stays_100() -> None:
    segments = _segments("A.", "B.", "C.")
    tm = [TMEntry(source="B.", target="B-trans.")]

    assert context_match_rate(1, segments, tm) == 100


def test_context_match_falls_back_to_best_plain_rate() -> None:
    segments = _segments("Save your file.", "Close the window.")
    tm = [
        TMEntry(source="Delete the window.", target="창을 삭제합니다."),
        TMEntry(source="Close the windows.", target="창을 닫습니다."),
    ]

    assert context_match_rate(1, segments, tm) == 94
    assert context_match_rate(5, segments, tm) == 0
    assert context_match_rate(0, segments, []) == 0


def test_find_best_match_prefers_context_entry_over_earlier_exact() -> None:
    segments = _segments("A.", "B.", "C.")
    plain = TMEntry(source="B.", target="plain")
    contextual = TMEntry(source="B.", target="context", prev_source="A.")

    result = find_best_match_with_context(1, segments, [plain, contextual])

    assert result.entry == contextual
    assert result.match_rate == 101


def test_find_best_match_keeps_first_entry_on_ties() -> None:
    segments = _segments("Hello world")
    first = TMEntry(source="Hello world", target="first")
    second = TMEntry(source="Hello world", target="second")

    result = find_best_match_with_context(0, segments, [first, second])

    assert result.entry == first
    assert result.match_rate == 100


def test_find_best_match_on_empty_tm() -> None:
    result = find_best_match_with_context(0, _segments("Hello"), [])

    assert result.entry is None
    assert result.match_rate == 0


def test_create_tm_entry_with_context_at_document_boundaries() -> None:
    segments = _segments("A.", "B.", "C.")
    segments[0].target = "A-t."
    segments[2].target = "C-t."

    first = create_tm_entry_with_context(0, segments)
    last = create_tm_entry_with_context(2, segments)

    assert first == TMEntry(source="A.", target="A-t.", prev_source=None, next_source="B.")
    assert last == TMEntry(source="C.", target="C-t.", prev_source="B.", next_source=None)


def test_calculate_all_match_rates_for_loaded_document() -> None:
    tm = [TMEntry(source="B.", target="B-trans.", prev_source="A.", next_source="C.")]

    assert calculate_all_match_rates(["A.", "B.", "C."], tm) == [50, 101, 50]
    assert calculate_all_match_rates([], tm) == []
