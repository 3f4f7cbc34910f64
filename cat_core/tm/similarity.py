from __future__ import annotations

from collections.abc import Callable
import math

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(left: str, right: str) -> int:
    """Unit-cost edit distance (insert, delete, substitute), case-sensitive."""
    return int(Levenshtein.distance(left, right))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def match_rate(left: str, right: str) -> int:
    """Return the 0-100 reuse percentage between two strings.

    Identical strings score 100 without a distance computation. Otherwise
    the case-insensitive edit distance is scaled by the longer input length.
    """
    if left == right:
        return 100

    max_len = max(len(left), len(right))
    if max_len == 0:
        return 100

    distance = levenshtein_distance(left.lower(), right.lower())
    return max(0, _round_half_up((1 - distance / max_len) * 100))


RateFunction = Callable[[str, str], int]


class MatchRateCache:
    """Per-pair memo of ``match_rate``, owned by a single document load."""

    def __init__(self) -> None:
        self._rates: dict[tuple[str, str], int] = {}

    def __len__(self) -> int:
        return len(self._rates)

    def __call__(self, left: str, right: str) -> int:
        key = (left, right)
        rate = self._rates.get(key)
        if rate is None:
            rate = match_rate(left, right)
            self._rates[key] = rate
        return rate
