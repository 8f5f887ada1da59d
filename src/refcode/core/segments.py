"""Recover the date and sequence segments of a code.

Pure functions of (code, prefix, separator, date length); the generator
supplies the date length by rendering its pattern for "now".
"""

from __future__ import annotations

from typing import NamedTuple


class CodeSegments(NamedTuple):
    date: str
    sequence: str


def pad(sequence: int, width: int) -> str:
    """Zero-pad *sequence* to *width* digits. Never truncates."""
    return str(sequence).zfill(width)


def compose(prefix: str, separator: str, date_key: str, sequence: int, width: int) -> str:
    return f"{prefix}{separator}{date_key}{separator}{pad(sequence, width)}"


def split_code(code: str, prefix: str, separator: str, date_length: int) -> CodeSegments:
    """Split *code* into its date and sequence segments.

    With a separator, the sequence is whatever follows the last separator,
    so a sequence wider than the configured width is still recovered. The
    last separator only counts if it starts after ``prefix + separator``;
    otherwise (e.g. the prefix itself contains the separator and the code
    is truncated) the date is taken to be *date_length* characters long.

    Without a separator the date is always *date_length* characters, which
    assumes the date pattern renders at a fixed width.

    Short input yields short (possibly empty) segments rather than errors.
    """
    head = len(prefix) + len(separator)

    if separator:
        last = code.rfind(separator)
        if last > head:
            return CodeSegments(code[head:last], code[last + len(separator) :])

    date_end = head + date_length
    date = code[head:date_end]
    rest = code[date_end:]
    if separator and rest.startswith(separator):
        rest = rest[len(separator) :]
    return CodeSegments(date, rest)
