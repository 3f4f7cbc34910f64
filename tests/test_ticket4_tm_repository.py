from __future__ import annotations

from cat_core.tm.models import IntentKind, TMEntry, TMIntent
from cat_core.tm.repository import TranslationMemory


def _tm() -> TranslationMemory:
    return TranslationMemory(
        [
            TMEntry(source="abcx", target="x"),
            TMEntry(source="abcd", target="d"),
            TMEntry(source="abcy", target="y"),
            TMEntry(source="zzzz", target="z"),
        ]
    )


def test_find_ranked_matches_sorts_stably_and_filters() -> None:
    matches = _tm().find_ranked_matches("abcd")

    assert [(item.target, item.match_rate) for item in matches] == [
        ("d", 100),
        ("x", 75),
        ("y", 75),
    ]


def test_find_ranked_matches_respects_limit_and_min_rate() -> None:
    tm = _tm()

    assert [item.target for item in tm.find_ranked_matches("abcd", limit=2)] == ["d", "x"]
    assert [item.target for item in tm.find_ranked_matches("abcd", min_rate=80)] == ["d"]
    assert tm.find_ranked_matches("abcd", limit=0) == []


def test_ranked_match_carries_context_fields() -> None:
    tm = TranslationMemory([TMEntry(source="B.", target="b", prev_source="A.", next_source="C.")])

    (match,) = tm.find_ranked_matches("B.")

    assert match.prev_source == "A."
    assert match.next_source == "C."
    assert match.match_rate == 100


def test_best_plain_match() -> None:
    assert TranslationMemory().best_plain_match("anything") == 0
    assert _tm().best_plain_match("abcz") == 75


def test_exists_exact_is_case_sensitive() -> None:
    tm = TranslationMemory([TMEntry(source="Hello", target="안녕")])

    assert tm.exists_exact("Hello") is True
    assert tm.exists_exact("hello") is False
    assert tm.first_exact("hello") == TMEntry(source="Hello", target="안녕")


def test_mutations_emit_intents_in_order() -> None:
    received: list[TMIntent] = []
    tm = TranslationMemory(name="Main")
    tm.subscribe(received.append)

    tm.announce_created()
    tm.append(TMEntry(source="One", target="하나"))
    assert tm.append_all([TMEntry(source="Two", target="둘"), TMEntry(source="Three", target="셋")]) == 2
    assert tm.append_all([]) == 0
    assert tm.remove_where(lambda entry: entry.source.startswith("T")) == 2
    assert tm.remove_where(lambda entry: False) == 0

    assert [intent.kind for intent in received] == [
        IntentKind.TM_CREATED,
        IntentKind.ENTRY_ADDED,
        IntentKind.ENTRIES_IMPORTED,
        IntentKind.ENTRY_DELETED,
    ]
    assert received[0].name == "Main"
    assert [entry.source for entry in received[3].entries] == ["Two", "Three"]
    assert [entry.source for entry in tm] == ["One"]


def test_search_matches_source_or_target_ignoring_case() -> None:
    tm = TranslationMemory(
        [
            TMEntry(source="Upload File", target="파일 업로드"),
            TMEntry(source="Download", target="다운로드"),
        ]
    )

    assert [entry.source for entry in tm.search("file")] == ["Upload File"]
    assert [entry.source for entry in tm.search("다운")] == ["Download"]
