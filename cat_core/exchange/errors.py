from __future__ import annotations


class ExchangeFormatError(ValueError):
    """Raised when an exchange document cannot be parsed."""
