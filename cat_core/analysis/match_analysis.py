from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from cat_core.constants import DEFAULT_WORD_RATE
from cat_core.segments.models import Segment
from cat_core.segments.segmenter import count_words


@dataclass(slots=True, frozen=True)
class MatchTier:
    name: str
    label: str
    min: int
    max: int
    rate: int


@dataclass(slots=True)
class MatchTierResult:
    tier: MatchTier
    segments: int = 0
    words: int = 0
    cost: float = 0.0


@dataclass(slots=True)
class AnalysisData:
    tiers: list[MatchTierResult] = field(default_factory=list)
    total_segments: int = 0
    total_words: int = 0
    total_cost: float = 0.0
    full_cost: float = 0.0
    savings: float = 0.0
    savings_percent: int = 0


# rate is the share of the full word rate charged for the tier.
MATCH_TIERS: tuple[MatchTier, ...] = (
    MatchTier("101%", "Context Match", 101, 101, 0),
    MatchTier("100%", "Exact Match", 100, 100, 10),
    MatchTier("95-99%", "High Fuzzy", 95, 99, 25),
    MatchTier("85-94%", "Medium Fuzzy", 85, 94, 50),
    MatchTier("75-84%", "Low Fuzzy", 75, 84, 75),
    MatchTier("New", "No Match", 0, 74, 100),
)


def analyze_segments(
    segments: Sequence[Segment],
    word_rate: float = DEFAULT_WORD_RATE,
) -> AnalysisData | None:
    """Group segments by their load-time match rate and price each tier."""
    if not segments:
        return None

    results = [MatchTierResult(tier=tier) for tier in MATCH_TIERS]
    total_words = 0
    for segment in segments:
        words = count_words(segment.source)
        total_words += words
        for result in results:
            if result.tier.min <= segment.match_rate <= result.tier.max:
                result.segments += 1
                result.words += words
                result.cost += words * (result.tier.rate / 100) * word_rate
                break

    total_cost = sum(result.cost for result in results)
    full_cost = total_words * word_rate
    savings = full_cost - total_cost
    savings_percent = int(savings / full_cost * 100 + 0.5) if full_cost > 0 else 0

    return AnalysisData(
        tiers=results,
        total_segments=len(segments),
        total_words=total_words,
        total_cost=total_cost,
        full_cost=full_cost,
        savings=savings,
        savings_percent=savings_percent,
    )


def match_rate_band(rate: int) -> str:
    if rate == 101:
        return "context"
    if rate == 100:
        return "exact"
    if rate >= 85:
        return "high_fuzzy"
    if rate >= 75:
        return "low_fuzzy"
    return "no_match"
