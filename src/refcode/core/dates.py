"""Date backend: renders and parses date keys in an IANA timezone.

Patterns are ``strftime`` patterns with one extension: ``%Q`` renders the
calendar quarter (1-4). Patterns containing ``%Q`` cannot be parsed back.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from refcode.core.errors import ConfigurationError

Clock = Callable[[], datetime]

_DIRECTIVE = re.compile(r"%[%Q]")


def utc_now() -> datetime:
    return datetime.now(UTC)


@lru_cache(maxsize=64)
def get_zone(name: str) -> ZoneInfo:
    """Return the ZoneInfo for *name*, raising ConfigurationError if unknown."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown timezone: {name!r}") from e


def has_quarter(pattern: str) -> bool:
    return any(m.group() == "%Q" for m in _DIRECTIVE.finditer(pattern))


def render(moment: datetime, pattern: str) -> str:
    """Render *moment* with *pattern*, expanding ``%Q`` first."""
    quarter = str((moment.month - 1) // 3 + 1)
    expanded = _DIRECTIVE.sub(lambda m: "%%" if m.group() == "%%" else quarter, pattern)
    return moment.strftime(expanded)


class DateBackend:
    """Supplies the current instant and formats it as a date key.

    The clock is injectable so callers (and tests) can pin "now". It should
    return an aware datetime; naive values are taken to be UTC.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now

    def now(self, timezone: str) -> datetime:
        moment = self._clock()
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        return moment.astimezone(get_zone(timezone))

    def render_now(self, timezone: str, pattern: str) -> str:
        return render(self.now(timezone), pattern)

    def parse(self, text: str, pattern: str) -> datetime | None:
        """Parse *text* under *pattern*; None if it is not a valid date.

        Only exact round-trips count: "2023011" parses under "%Y%m%d" in
        strptime, but does not render back to the same text.
        """
        if has_quarter(pattern):
            return None
        try:
            parsed = datetime.strptime(text, pattern)
        except ValueError:
            return None
        if render(parsed, pattern) != text:
            return None
        return parsed
