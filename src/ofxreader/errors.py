from __future__ import annotations

from typing import Optional


class OFXError(Exception):
    """Base class for everything the reader raises."""


class ParseError(OFXError):
    """The document is malformed. Nothing is returned."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class HeaderError(ParseError):
    pass


class NormalizationError(ParseError):
    pass


class StructuralError(ParseError):
    """A required element is missing at extraction time."""


class InvalidValueError(ParseError):
    """A scalar is present but cannot be coerced to its target type."""

    def __init__(self, message: str, path: Optional[str] = None, value: Optional[str] = None) -> None:
        super().__init__(message, path)
        self.value = value


class UnsupportedFeatureError(OFXError):
    """Recognized by the model but not implemented (AP/AR accounts, unknown message sets)."""
