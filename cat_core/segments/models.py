from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SegmentStatus(str, Enum):
    NEW = "new"
    TRANSLATED = "translated"
    CONFIRMED = "confirmed"


@dataclass(slots=True)
class Segment:
    id: int
    source: str
    target: str = ""
    status: SegmentStatus = SegmentStatus.NEW
    match_rate: int = 0


@dataclass(slots=True, frozen=True)
class TranslationStats:
    total: int
    translated: int
    confirmed: int
    new: int
