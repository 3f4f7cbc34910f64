from __future__ import annotations

import re

# Vertical tab and form feed are soft line and page breaks in office sources.
_BREAK_PATTERN = re.compile(r"[\x0b\x0c]")
# Code points outside the XML 1.0 Char production.
_XML_ILLEGAL_PATTERN = re.compile(r"[\x00-\x08\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def xml_safe_text(value: str) -> str:
    """Text that lxml accepts: breaks become newlines, other illegal characters are dropped."""
    return _XML_ILLEGAL_PATTERN.sub("", _BREAK_PATTERN.sub("\n", value))
