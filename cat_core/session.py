from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
import logging

from cat_core.analysis.match_analysis import AnalysisData, analyze_segments
from cat_core.constants import DEFAULT_FUZZY_LIMIT, DEFAULT_FUZZY_MIN_RATE, DEFAULT_WORD_RATE
from cat_core.exchange.tmx import generate_tmx, parse_tmx
from cat_core.exchange.xliff import generate_xliff, parse_xliff
from cat_core.glossary.termbase import TermbaseEntry, find_term_matches
from cat_core.project.config import ProjectConfig
from cat_core.qa.checks import (
    DEFAULT_QA_CHECKS,
    QACheck,
    QAIssue,
    QAIssueType,
    checks_with_disabled,
    enabled_types,
    replace_segment_issues,
    run_full_qa,
    run_segment_qa,
)
from cat_core.segments.models import Segment
from cat_core.segments.segmenter import segment_text
from cat_core.segments.store import ConfirmResult, SegmentStore
from cat_core.tm.context_match import calculate_all_match_rates
from cat_core.tm.models import TMEntry, TMMatch
from cat_core.tm.repository import TranslationMemory

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EditorSettings:
    source_lang: str = "en"
    target_lang: str = "ko"
    delimiter: str = "sentence"
    auto_propagation: bool = True
    instant_qa: bool = True
    word_rate: float = DEFAULT_WORD_RATE
    fuzzy_limit: int = DEFAULT_FUZZY_LIMIT
    fuzzy_min_rate: int = DEFAULT_FUZZY_MIN_RATE

    @classmethod
    def from_config(cls, config: ProjectConfig) -> EditorSettings:
        return cls(
            source_lang=config.source_lang,
            target_lang=config.target_lang,
            delimiter=config.delimiter,
            auto_propagation=config.auto_propagation,
            instant_qa=config.instant_qa,
            word_rate=config.word_rate,
            fuzzy_limit=config.fuzzy_limit,
            fuzzy_min_rate=config.fuzzy_min_rate,
        )


@dataclass(slots=True)
class EditorSession:
    """All state of one editing session, passed explicitly to every operation."""

    tm: TranslationMemory = field(default_factory=TranslationMemory)
    termbase: list[TermbaseEntry] = field(default_factory=list)
    settings: EditorSettings = field(default_factory=EditorSettings)
    qa_checks: list[QACheck] = field(default_factory=lambda: list(DEFAULT_QA_CHECKS))
    qa_issues: list[QAIssue] = field(default_factory=list)
    segments: SegmentStore = field(default_factory=SegmentStore)
    file_name: str = ""

    @classmethod
    def from_config(
        cls,
        config: ProjectConfig,
        *,
        tm_entries: Iterable[TMEntry] = (),
        termbase: Sequence[TermbaseEntry] = (),
    ) -> EditorSession:
        return cls(
            tm=TranslationMemory(tm_entries),
            termbase=list(termbase),
            settings=EditorSettings.from_config(config),
            qa_checks=checks_with_disabled(config.disabled_qa_checks),
        )

    def _load_time_rates(self, sources: Sequence[str]) -> list[int]:
        return calculate_all_match_rates(sources, self.tm.entries)

    def load_sources(self, sources: Sequence[str], *, file_name: str = "") -> list[Segment]:
        rates = self._load_time_rates(sources)
        self.file_name = file_name
        self.qa_issues = []
        return self.segments.create(sources, rates)

    def load_text(self, text: str, *, file_name: str = "") -> list[Segment]:
        return self.load_sources(segment_text(text, self.settings.delimiter), file_name=file_name)

    def load_xliff(self, content: str | bytes, *, file_name: str = "") -> list[Segment]:
        imported = parse_xliff(content)
        rates = self._load_time_rates([segment.source for segment in imported])
        for segment, rate in zip(imported, rates):
            segment.match_rate = rate
        self.file_name = file_name
        self.qa_issues = []
        return self.segments.load(imported)

    def update_target(self, segment_id: int, target: str) -> Segment | None:
        return self.segments.update_target(segment_id, target)

    def apply_tm_match(self, segment_id: int, entry: TMEntry) -> Segment | None:
        return self.segments.apply_tm_match(segment_id, entry)

    def confirm(self, segment_id: int) -> ConfirmResult:
        result = self.segments.confirm(
            segment_id,
            self.tm,
            auto_propagate=self.settings.auto_propagation,
        )
        if result.changed and self.settings.instant_qa:
            confirmed = self.segments.get(segment_id)
            if confirmed is not None:
                new_issues = run_segment_qa(
                    confirmed,
                    self.segments.segments,
                    self.termbase,
                    self.enabled_qa_types(),
                )
                self.qa_issues = replace_segment_issues(self.qa_issues, segment_id, new_issues)
        return result

    def navigate(self, direction: str) -> int:
        return self.segments.navigate(direction)

    def apply_all_100_plus_matches(self) -> int:
        return self.segments.apply_all_100_plus_matches(self.tm)

    def enabled_qa_types(self) -> list[QAIssueType]:
        return enabled_types(self.qa_checks)

    def run_qa(self) -> list[QAIssue]:
        self.qa_issues = run_full_qa(self.segments.segments, self.termbase, self.enabled_qa_types())
        return self.qa_issues

    def tm_matches(self, segment_id: int) -> list[TMMatch]:
        segment = self.segments.get(segment_id)
        if segment is None:
            return []
        return self.tm.find_ranked_matches(
            segment.source,
            limit=self.settings.fuzzy_limit,
            min_rate=self.settings.fuzzy_min_rate,
        )

    def term_matches(self, segment_id: int) -> list[TermbaseEntry]:
        segment = self.segments.get(segment_id)
        if segment is None:
            return []
        return find_term_matches(segment.source, self.termbase)

    def import_tmx(self, content: str | bytes) -> int:
        return self.tm.append_all(parse_tmx(content))

    def export_tmx(self) -> str:
        return generate_tmx(self.tm.entries, self.settings.source_lang, self.settings.target_lang)

    def export_xliff(self) -> str:
        return generate_xliff(
            self.segments.segments,
            self.settings.source_lang,
            self.settings.target_lang,
            self.file_name,
        )

    def analysis(self) -> AnalysisData | None:
        return analyze_segments(self.segments.segments, self.settings.word_rate)
