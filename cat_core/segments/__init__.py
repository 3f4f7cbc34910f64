"""Segment records and document segmentation.

The state store lives in ``cat_core.segments.store``; it depends on the TM
matcher, which in turn depends on the models exported here.
"""

from cat_core.segments.models import Segment, SegmentStatus, TranslationStats
from cat_core.segments.segmenter import count_words, segment_text

__all__ = [
    "Segment",
    "SegmentStatus",
    "TranslationStats",
    "count_words",
    "segment_text",
]
