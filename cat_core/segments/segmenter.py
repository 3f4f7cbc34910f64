from __future__ import annotations

import re

SUPPORTED_DELIMITERS = ("sentence", "newline", "paragraph")

_DELIMITER_PATTERNS: dict[str, re.Pattern[str]] = {
    "sentence": re.compile(r"(?<=[.!?。！？])\s+"),
    "newline": re.compile(r"\n+"),
    "paragraph": re.compile(r"\n\n+"),
}
_WHITESPACE_PATTERN = re.compile(r"\s+")


def segment_text(text: str, delimiter: str = "sentence") -> list[str]:
    pattern = _DELIMITER_PATTERNS.get(delimiter)
    if pattern is None:
        raise ValueError(f"Unsupported delimiter: {delimiter}")
    pieces = (piece.strip() for piece in pattern.split(text))
    return [piece for piece in pieces if piece]


def count_words(text: str) -> int:
    return len([word for word in _WHITESPACE_PATTERN.split(text.strip()) if word])
