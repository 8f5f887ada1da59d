"""Exceptions raised by refcode.

There is deliberately no overflow error: a sequence that outgrows its
width widens the code instead of failing.
"""

from __future__ import annotations


class RefCodeError(ValueError):
    """Base class for all refcode errors."""


class ConfigurationError(RefCodeError):
    """Generator configuration is missing or invalid."""


class InvalidInputError(RefCodeError):
    """A required argument is missing, empty, or of the wrong kind."""


class InvalidFormatError(RefCodeError):
    """A code does not have the structure this generator produces."""

    def __init__(self, code: str) -> None:
        super().__init__(f"Invalid code format: {code!r}")
        self.code = code
