"""Boundary codecs: TMX for translation memory, XLIFF for project resume, XLSX."""

from cat_core.exchange.errors import ExchangeFormatError
from cat_core.exchange.tmx import generate_tmx, parse_tmx
from cat_core.exchange.xliff import generate_xliff, parse_xliff

__all__ = [
    "ExchangeFormatError",
    "generate_tmx",
    "generate_xliff",
    "parse_tmx",
    "parse_xliff",
]
