from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
import logging
import re

from cat_core.constants import TRAILING_PUNCTUATION
from cat_core.glossary.termbase import TermbaseEntry
from cat_core.segments.models import Segment, SegmentStatus

logger = logging.getLogger(__name__)


class QAIssueType(str, Enum):
    EMPTY_TARGET = "empty_target"
    NUMBERS_MISMATCH = "numbers_mismatch"
    TRAILING_PUNCTUATION = "trailing_punctuation"
    LEADING_TRAILING_SPACES = "leading_trailing_spaces"
    DOUBLE_SPACES = "double_spaces"
    REPEATED_WORDS = "repeated_words"
    INCONSISTENT_TRANSLATION = "inconsistent_translation"
    TERMINOLOGY_NOT_USED = "terminology_not_used"
    TARGET_SAME_AS_SOURCE = "target_same_as_source"


class QASeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(slots=True, frozen=True)
class QAIssue:
    type: QAIssueType
    severity: QASeverity
    message: str
    segment_id: int
    ignored: bool = False


@dataclass(slots=True, frozen=True)
class QACheck:
    type: QAIssueType
    name: str
    description: str
    severity: QASeverity
    enabled: bool = True


DEFAULT_QA_CHECKS: tuple[QACheck, ...] = (
    QACheck(QAIssueType.EMPTY_TARGET, "Empty Target", "Target segment is empty", QASeverity.ERROR),
    QACheck(
        QAIssueType.NUMBERS_MISMATCH,
        "Numbers Mismatch",
        "Numbers in source and target do not match",
        QASeverity.WARNING,
    ),
    QACheck(
        QAIssueType.TRAILING_PUNCTUATION,
        "Trailing Punctuation",
        "Trailing punctuation differs between source and target",
        QASeverity.WARNING,
    ),
    QACheck(
        QAIssueType.LEADING_TRAILING_SPACES,
        "Leading/Trailing Spaces",
        "Target has unexpected leading or trailing spaces",
        QASeverity.WARNING,
    ),
    QACheck(
        QAIssueType.DOUBLE_SPACES,
        "Double Spaces",
        "Target contains multiple consecutive spaces",
        QASeverity.WARNING,
    ),
    QACheck(
        QAIssueType.REPEATED_WORDS,
        "Repeated Words",
        "Same word appears consecutively in target",
        QASeverity.WARNING,
    ),
    QACheck(
        QAIssueType.INCONSISTENT_TRANSLATION,
        "Inconsistent Translation",
        "Same source has different translations",
        QASeverity.WARNING,
    ),
    QACheck(
        QAIssueType.TERMINOLOGY_NOT_USED,
        "Terminology Not Used",
        "Term from termbase not found in target",
        QASeverity.WARNING,
    ),
    QACheck(
        QAIssueType.TARGET_SAME_AS_SOURCE,
        "Target Same as Source",
        "Target is identical to source",
        QASeverity.WARNING,
    ),
)

_SEVERITY_BY_TYPE = {check.type: check.severity for check in DEFAULT_QA_CHECKS}

_NUMBER_PATTERN = re.compile(r"\d+(?:[.,]\d+)?", re.ASCII)
_TRAILING_PUNCTUATION_PATTERN = re.compile(f"[{re.escape(TRAILING_PUNCTUATION)}]+$")
_DOUBLE_SPACE_PATTERN = re.compile(r"\s{2,}")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def _issue(issue_type: QAIssueType, segment: Segment, message: str) -> QAIssue:
    return QAIssue(
        type=issue_type,
        severity=_SEVERITY_BY_TYPE[issue_type],
        message=message,
        segment_id=segment.id,
    )


def _extract_numbers(text: str) -> list[str]:
    return sorted(_NUMBER_PATTERN.findall(text))


def _trailing_punctuation(text: str) -> str:
    match = _TRAILING_PUNCTUATION_PATTERN.search(text.strip())
    return match.group(0) if match else ""


def check_empty_target(segment: Segment) -> QAIssue | None:
    if segment.status != SegmentStatus.NEW and not segment.target.strip():
        return _issue(QAIssueType.EMPTY_TARGET, segment, "Target segment is empty")
    return None


def check_numbers_mismatch(segment: Segment) -> QAIssue | None:
    if not segment.target:
        return None

    source_numbers = _extract_numbers(segment.source)
    target_numbers = _extract_numbers(segment.target)
    if source_numbers == target_numbers:
        return None

    missing = [number for number in source_numbers if number not in target_numbers]
    extra = [number for number in target_numbers if number not in source_numbers]
    message = "Numbers mismatch:"
    if missing:
        message += f" missing [{', '.join(missing)}]"
    if extra:
        message += f" extra [{', '.join(extra)}]"
    return _issue(QAIssueType.NUMBERS_MISMATCH, segment, message)


def check_trailing_punctuation(segment: Segment) -> QAIssue | None:
    if not segment.target:
        return None

    source_punctuation = _trailing_punctuation(segment.source)
    target_punctuation = _trailing_punctuation(segment.target)
    if source_punctuation and source_punctuation != target_punctuation:
        return _issue(
            QAIssueType.TRAILING_PUNCTUATION,
            segment,
            (
                f'Trailing punctuation mismatch: source "{source_punctuation}" '
                f'vs target "{target_punctuation or "(none)"}"'
            ),
        )
    return None


def check_leading_trailing_spaces(segment: Segment) -> QAIssue | None:
    if not segment.target:
        return None

    positions: list[str] = []
    if segment.target.startswith(" ") and not segment.source.startswith(" "):
        positions.append("leading")
    if segment.target.endswith(" ") and not segment.source.endswith(" "):
        positions.append("trailing")
    if not positions:
        return None
    return _issue(
        QAIssueType.LEADING_TRAILING_SPACES,
        segment,
        f"Unexpected {' and '.join(positions)} space(s) in target",
    )


def check_double_spaces(segment: Segment) -> QAIssue | None:
    if segment.target and _DOUBLE_SPACE_PATTERN.search(segment.target):
        return _issue(
            QAIssueType.DOUBLE_SPACES,
            segment,
            "Target contains multiple consecutive spaces",
        )
    return None


def check_repeated_words(segment: Segment) -> QAIssue | None:
    if not segment.target:
        return None

    words = _WHITESPACE_PATTERN.split(segment.target.lower())
    for previous, current in zip(words, words[1:]):
        if current == previous and len(current) > 1:
            return _issue(QAIssueType.REPEATED_WORDS, segment, f'Repeated word: "{current}"')
    return None


def check_inconsistent_translation(
    segment: Segment,
    all_segments: Sequence[Segment],
) -> QAIssue | None:
    if not segment.target:
        return None

    different = [
        other
        for other in all_segments
        if other.id != segment.id
        and other.source == segment.source
        and other.target
        and other.target != segment.target
    ]
    if not different:
        return None
    return _issue(
        QAIssueType.INCONSISTENT_TRANSLATION,
        segment,
        f"Inconsistent translation: same source has {len(different) + 1} different translations",
    )


def _whole_word_pattern(term: str) -> re.Pattern[str]:
    # ASCII word boundaries, so "cloud" does not match inside "CloudSync".
    # Callers search lowercased text.
    return re.compile(rf"\b{re.escape(term.lower())}\b", re.ASCII)


def check_terminology_usage(
    segment: Segment,
    termbase: Sequence[TermbaseEntry],
) -> QAIssue | None:
    if not segment.target:
        return None

    source_lower = segment.source.lower()
    target_lower = segment.target.lower()
    for term in termbase:
        if not _whole_word_pattern(term.source).search(source_lower):
            continue
        if term.target.lower() not in target_lower:
            return _issue(
                QAIssueType.TERMINOLOGY_NOT_USED,
                segment,
                f'Term "{term.source}" found in source but "{term.target}" not in target',
            )
    return None


def check_target_same_as_source(segment: Segment) -> QAIssue | None:
    if not segment.target or len(segment.source) <= 3:
        return None
    if segment.source == segment.target:
        return _issue(
            QAIssueType.TARGET_SAME_AS_SOURCE,
            segment,
            "Target is identical to source (not translated?)",
        )
    return None


SegmentCheck = Callable[[Segment, Sequence[Segment], Sequence[TermbaseEntry]], QAIssue | None]

_CHECKS: tuple[tuple[QAIssueType, SegmentCheck], ...] = (
    (QAIssueType.EMPTY_TARGET, lambda segment, _all, _terms: check_empty_target(segment)),
    (QAIssueType.NUMBERS_MISMATCH, lambda segment, _all, _terms: check_numbers_mismatch(segment)),
    (
        QAIssueType.TRAILING_PUNCTUATION,
        lambda segment, _all, _terms: check_trailing_punctuation(segment),
    ),
    (
        QAIssueType.LEADING_TRAILING_SPACES,
        lambda segment, _all, _terms: check_leading_trailing_spaces(segment),
    ),
    (QAIssueType.DOUBLE_SPACES, lambda segment, _all, _terms: check_double_spaces(segment)),
    (QAIssueType.REPEATED_WORDS, lambda segment, _all, _terms: check_repeated_words(segment)),
    (
        QAIssueType.INCONSISTENT_TRANSLATION,
        lambda segment, all_segments, _terms: check_inconsistent_translation(segment, all_segments),
    ),
    (
        QAIssueType.TERMINOLOGY_NOT_USED,
        lambda segment, _all, termbase: check_terminology_usage(segment, termbase),
    ),
    (
        QAIssueType.TARGET_SAME_AS_SOURCE,
        lambda segment, _all, _terms: check_target_same_as_source(segment),
    ),
)


def run_segment_qa(
    segment: Segment,
    all_segments: Sequence[Segment],
    termbase: Sequence[TermbaseEntry],
    enabled_types: Iterable[QAIssueType | str],
) -> list[QAIssue]:
    enabled = {QAIssueType(item) for item in enabled_types}
    issues: list[QAIssue] = []
    for issue_type, check in _CHECKS:
        if issue_type not in enabled:
            continue
        issue = check(segment, all_segments, termbase)
        if issue is not None:
            issues.append(issue)
    return issues


def run_full_qa(
    segments: Sequence[Segment],
    termbase: Sequence[TermbaseEntry],
    enabled_types: Iterable[QAIssueType | str],
) -> list[QAIssue]:
    enabled = [QAIssueType(item) for item in enabled_types]
    issues: list[QAIssue] = []
    for segment in segments:
        if segment.status == SegmentStatus.NEW:
            continue
        issues.extend(run_segment_qa(segment, segments, termbase, enabled))
    logger.info("QA run over %d segments found %d issues", len(segments), len(issues))
    return issues


def enabled_types(checks: Iterable[QACheck]) -> list[QAIssueType]:
    return [check.type for check in checks if check.enabled]


def issue_type_name(issue_type: QAIssueType | str) -> str:
    for check in DEFAULT_QA_CHECKS:
        if check.type == issue_type:
            return check.name
    return str(issue_type)


def checks_with_disabled(disabled: Iterable[QAIssueType | str]) -> list[QACheck]:
    disabled_types = {QAIssueType(item) for item in disabled}
    return [
        replace(check, enabled=check.type not in disabled_types)
        for check in DEFAULT_QA_CHECKS
    ]


def replace_segment_issues(
    issues: Sequence[QAIssue],
    segment_id: int,
    new_issues: Sequence[QAIssue],
) -> list[QAIssue]:
    return [issue for issue in issues if issue.segment_id != segment_id] + list(new_issues)


def toggle_ignored(issues: Sequence[QAIssue], index: int) -> list[QAIssue]:
    if index < 0 or index >= len(issues):
        raise IndexError(f"QA issue index out of range: {index}")
    toggled = list(issues)
    toggled[index] = replace(toggled[index], ignored=not toggled[index].ignored)
    return toggled


def active_issues(issues: Iterable[QAIssue]) -> list[QAIssue]:
    return [issue for issue in issues if not issue.ignored]
