"""Match-tier analysis and cost estimation for a loaded document."""

from cat_core.analysis.match_analysis import (
    MATCH_TIERS,
    AnalysisData,
    MatchTier,
    MatchTierResult,
    analyze_segments,
    match_rate_band,
)

__all__ = [
    "MATCH_TIERS",
    "AnalysisData",
    "MatchTier",
    "MatchTierResult",
    "analyze_segments",
    "match_rate_band",
]
