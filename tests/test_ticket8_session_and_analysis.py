from __future__ import annotations

import pytest

from cat_core.analysis.match_analysis import MATCH_TIERS, analyze_segments, match_rate_band
from cat_core.glossary.termbase import TermbaseEntry
from cat_core.project.config import ProjectConfig
from cat_core.qa.checks import QAIssueType
from cat_core.segments.models import Segment, SegmentStatus
from cat_core.session import EditorSession
from cat_core.tm.models import TMEntry


def _session(**overrides: object) -> EditorSession:
    config = ProjectConfig(project_name="Demo", slug="demo", **overrides)
    return EditorSession.from_config(
        config,
        tm_entries=[TMEntry(source="Hello world.", target="안녕하세요 세계.")],
        termbase=[TermbaseEntry(source="world", target="세계")],
    )


def test_analysis_prices_each_tier() -> None:
    session = _session(word_rate=100)
    session.load_sources(["Hello world.", "Brand new sentence here."])

    analysis = session.analysis()

    assert analysis is not None
    by_name = {result.tier.name: result for result in analysis.tiers}
    assert [result.tier.name for result in analysis.tiers] == [tier.name for tier in MATCH_TIERS]
    assert by_name["100%"].segments == 1
    assert by_name["100%"].words == 2
    assert by_name["100%"].cost == pytest.approx(20)
    assert by_name["New"].segments == 1
    assert by_name["New"].cost == pytest.approx(400)
    assert analysis.total_words == 6
    assert analysis.full_cost == pytest.approx(600)
    assert analysis.savings == pytest.approx(180)
    assert analysis.savings_percent == 30


def test_analysis_of_empty_document_is_none() -> None:
    assert analyze_segments([]) is None


def test_analysis_places_context_matches_in_free_tier() -> None:
    segments = [
        Segment(id=0, source="one two", match_rate=101),
        Segment(id=1, source="three", match_rate=97),
        Segment(id=2, source="four five six", match_rate=80),
    ]

    analysis = analyze_segments(segments, word_rate=10)

    assert analysis is not None
    costs = {result.tier.name: result.cost for result in analysis.tiers}
    assert costs["101%"] == 0
    assert costs["95-99%"] == pytest.approx(2.5)
    assert costs["75-84%"] == pytest.approx(22.5)
    assert analysis.savings_percent == 58


@pytest.mark.parametrize(
    ("rate", "band"),
    [(101, "context"), (100, "exact"), (90, "high_fuzzy"), (75, "low_fuzzy"), (74, "no_match")],
)
def test_match_rate_band(rate: int, band: str) -> None:
    assert match_rate_band(rate) == band


def test_load_text_segments_and_scores_sources() -> None:
    session = _session()

    segments = session.load_text("Hello world. Goodbye world!", file_name="greeting.txt")

    assert [segment.source for segment in segments] == ["Hello world.", "Goodbye world!"]
    assert segments[0].match_rate == 100
    assert session.file_name == "greeting.txt"
    assert session.segments.active_index == 0


def test_confirm_runs_instant_qa_for_that_segment() -> None:
    session = _session()
    session.load_sources(["Hello world.", "Pay 5 now."])
    session.update_target(1, "지금 결제하세요")

    session.confirm(1)

    assert [issue.type for issue in session.qa_issues] == [
        QAIssueType.NUMBERS_MISMATCH,
        QAIssueType.TRAILING_PUNCTUATION,
    ]
    assert session.tm.exists_exact("Pay 5 now.")

    session.update_target(1, "지금 5 결제하세요.")
    session.confirm(1)

    assert session.qa_issues == []


def test_confirm_without_instant_qa_leaves_issues_untouched() -> None:
    session = _session(instant_qa=False)
    session.load_sources(["Pay 5 now."])
    session.update_target(0, "결제")

    session.confirm(0)

    assert session.qa_issues == []


def test_disabled_checks_are_excluded_from_full_qa() -> None:
    session = _session(disabled_qa_checks=["terminology_not_used"])
    session.load_sources(["Hello world."])
    session.update_target(0, "안녕하세요.")

    assert session.run_qa() == []
    assert QAIssueType.TERMINOLOGY_NOT_USED not in session.enabled_qa_types()


def test_tm_and_term_lookups_for_segment() -> None:
    session = _session(fuzzy_limit=1)
    session.load_sources(["Hello world!"])

    matches = session.tm_matches(0)
    terms = session.term_matches(0)

    assert [(match.target, match.match_rate) for match in matches] == [("안녕하세요 세계.", 92)]
    assert terms == [TermbaseEntry(source="world", target="세계")]
    assert session.tm_matches(9) == []
    assert session.term_matches(9) == []


def test_pretranslate_then_export_xliff_and_resume() -> None:
    session = _session()
    session.load_sources(["Hello world.", "Unknown line."], file_name="doc.txt")

    assert session.apply_all_100_plus_matches() == 1
    exported = session.export_xliff()

    resumed = _session()
    segments = resumed.load_xliff(exported, file_name="doc.txt")

    assert [(segment.target, segment.status) for segment in segments] == [
        ("안녕하세요 세계.", SegmentStatus.TRANSLATED),
        ("", SegmentStatus.NEW),
    ]
    assert segments[0].match_rate == 100
    assert resumed.segments.active_index == 0


def test_tmx_exchange_through_session() -> None:
    session = _session()
    imported = session.import_tmx(
        '<tmx version="1.4"><body><tu>'
        '<tuv xml:lang="en"><seg>Bye.</seg></tuv><tuv xml:lang="ko"><seg>잘 가.</seg></tuv>'
        "</tu></body></tmx>"
    )

    assert imported == 1
    assert len(session.tm) == 2
    assert "<seg>잘 가.</seg>" in session.export_tmx()
