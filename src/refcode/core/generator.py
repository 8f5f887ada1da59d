"""Date-keyed sequential code generator.

Codes are formatted as "<prefix><sep><date key><sep><seq>" where the date
key is "now" rendered in the configured timezone and seq is zero-padded to
the sequence width. The sequence restarts at 1 whenever the date key
changes.

Two usage modes share the same formatting:

* stateful: call ``generate()`` repeatedly; the instance tracks the last
  date key and sequence in its GeneratorState.
* stateless: keep the sequence elsewhere (a database row, a shared
  counter) and call ``generate_from_sequence()`` or ``increment()``.

Nothing here is safe for concurrent ``generate()`` calls unless a lock is
supplied; the stateless operations never touch the sequence state.
"""

from __future__ import annotations

import logging
import re
from contextlib import AbstractContextManager, nullcontext
from typing import Any

from pydantic import ValidationError

from refcode.core.dates import DateBackend, get_zone, has_quarter
from refcode.core.errors import ConfigurationError, InvalidFormatError, InvalidInputError
from refcode.core.models import GeneratorConfig, GeneratorState, OverflowPolicy, ParsedCode
from refcode.core.segments import CodeSegments, compose, split_code
from refcode.metrics import CODES_ISSUED, REJECTED_CODES, SEQUENCE_RESETS, WIDTH_GROWTH

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"[0-9]+")


class CodeGenerator:
    """Generates, validates, parses and increments date-keyed codes.

    Example::

        gen = CodeGenerator(prefix="INV", separator="-", timezone="Asia/Bangkok")
        gen.generate()                        # "INV-20250101-0001"
        gen.increment("INV-20250101-0001")    # "INV-20250101-0002"
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        *,
        state: GeneratorState | None = None,
        backend: DateBackend | None = None,
        lock: AbstractContextManager[Any] | None = None,
        **options: Any,
    ) -> None:
        if config is not None and options:
            raise ConfigurationError("Pass either a GeneratorConfig or keyword options, not both")
        if config is None:
            try:
                config = GeneratorConfig(**options)
            except ValidationError as e:
                raise ConfigurationError(str(e)) from e

        get_zone(config.timezone)
        if config.strict_dates and has_quarter(config.date_format):
            raise ConfigurationError(
                f"strict_dates needs a parseable date format; %Q is render-only: {config.date_format!r}"
            )

        self._config = config
        self._backend = backend or DateBackend()
        self._state = state if state is not None else GeneratorState()
        self._state.sequence_width = max(config.sequence_width, self._state.sequence_width or 0)
        self._lock = lock if lock is not None else nullcontext()

    # -- Properties ----------------------------------------------------------

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def state(self) -> GeneratorState:
        return self._state

    @property
    def sequence_width(self) -> int:
        """Effective padding width, including any growth since construction."""
        assert self._state.sequence_width is not None
        return self._state.sequence_width

    # -- Public API ----------------------------------------------------------

    def get_date_key(self) -> str:
        """Render "now" in the configured timezone with the date format."""
        return self._backend.render_now(self._config.timezone, self._config.date_format)

    def generate(self) -> str:
        """Issue the next code from in-process state. Never fails."""
        with self._lock:
            date_key = self.get_date_key()
            if date_key == self._state.last_date_key:
                sequence = self._state.current_sequence + 1
            else:
                if self._state.last_date_key is not None:
                    logger.debug(
                        "Date key changed from %s to %s; restarting sequence",
                        self._state.last_date_key,
                        date_key,
                    )
                    SEQUENCE_RESETS.labels(reason="date_change").inc()
                sequence = 1

            sequence, code = self._render(sequence, date_key)
            self._state.last_date_key = date_key
            self._state.current_sequence = sequence

        CODES_ISSUED.labels(mode="generate").inc()
        return code

    def generate_from_sequence(self, sequence: int, date_key: str | None = None) -> str:
        """Render the code for an externally tracked *sequence*.

        Uses *date_key* if given, otherwise today's key. Does not touch the
        last date key or current sequence, but can grow the width.
        """
        if isinstance(sequence, bool) or not isinstance(sequence, int):
            raise InvalidInputError(f"sequence must be an integer, got {sequence!r}")
        if sequence < 1:
            raise InvalidInputError(f"sequence must be >= 1, got {sequence}")
        if date_key is None:
            date_key = self.get_date_key()
        elif not isinstance(date_key, str) or not date_key:
            raise InvalidInputError("date_key must be a non-empty string")

        _, code = self._render(sequence, date_key)
        CODES_ISSUED.labels(mode="from_sequence").inc()
        return code

    def increment(self, code: str) -> str:
        """Return the code that follows *code*.

        If *code* carries today's date key its sequence is incremented and
        its sequence width is adopted when wider than ours; otherwise the
        sequence restarts at 1 under today's key.
        """
        self._require_code(code)
        date_length = len(self.get_date_key())
        if not self._is_valid(code, date_length):
            REJECTED_CODES.labels(operation="increment").inc()
            logger.debug("Rejected code for increment: %r", code)
            raise InvalidFormatError(code)

        segments = split_code(code, self._config.prefix, self._config.separator, date_length)
        today = self.get_date_key()
        if segments.date == today:
            self._grow_width(len(segments.sequence))
            sequence = int(segments.sequence) + 1
        else:
            logger.debug("Code %s is from %s, today is %s; restarting sequence", code, segments.date, today)
            SEQUENCE_RESETS.labels(reason="date_change").inc()
            sequence = 1

        _, next_code = self._render(sequence, today)
        CODES_ISSUED.labels(mode="increment").inc()
        return next_code

    def validate(self, code: str) -> bool:
        """Check that *code* has this generator's structure.

        Only prefix, length and sequence charset are checked, unless the
        generator was built with ``strict_dates=True``, in which case the
        date segment must also be a real date under the date format.
        """
        if not isinstance(code, str):
            raise InvalidInputError(f"code must be a string, got {type(code).__name__}")
        return self._is_valid(code, len(self.get_date_key()))

    def parse(self, code: str) -> ParsedCode:
        self._require_code(code)
        date_length = len(self.get_date_key())
        if not self._is_valid(code, date_length):
            REJECTED_CODES.labels(operation="parse").inc()
            raise InvalidFormatError(code)
        segments = split_code(code, self._config.prefix, self._config.separator, date_length)
        return ParsedCode(prefix=self._config.prefix, date=segments.date, sequence=int(segments.sequence))

    def extract_date(self, code: str) -> str:
        """Best-effort date segment of *code*; short input gives a short string."""
        return self._split(code).date

    def extract_sequence(self, code: str) -> int | None:
        """Sequence number of *code*, or None if the segment is not all digits."""
        segment = self._split(code).sequence
        if not _DIGITS.fullmatch(segment):
            return None
        return int(segment)

    def reset(self) -> None:
        """Forget the last date key and sequence. Width growth is kept."""
        with self._lock:
            self._state.last_date_key = None
            self._state.current_sequence = 0

    # -- Internals -----------------------------------------------------------

    def _split(self, code: str) -> CodeSegments:
        if not isinstance(code, str):
            raise InvalidInputError(f"code must be a string, got {type(code).__name__}")
        return split_code(
            code,
            self._config.prefix,
            self._config.separator,
            len(self.get_date_key()),
        )

    def _is_valid(self, code: str, date_length: int) -> bool:
        prefix, separator = self._config.prefix, self._config.separator
        if not code.startswith(prefix):
            return False
        if len(code) < len(prefix) + 2 * len(separator) + date_length + 1:
            return False

        segments = split_code(code, prefix, separator, date_length)
        if not _DIGITS.fullmatch(segments.sequence):
            return False
        # Rejects codes whose separators are missing or misplaced.
        if f"{prefix}{separator}{segments.date}{separator}{segments.sequence}" != code:
            return False
        if self._config.strict_dates:
            return self._backend.parse(segments.date, self._config.date_format) is not None
        return True

    def _render(self, sequence: int, date_key: str) -> tuple[int, str]:
        """Compose the code for *sequence*, applying the overflow policy.

        Returns the sequence actually used, which differs from the input
        only under the legacy reset policy.
        """
        width = self.sequence_width
        digits = len(str(sequence))
        if digits > width:
            if self._config.on_overflow is OverflowPolicy.reset:
                self._grow_width(width + 1)
                SEQUENCE_RESETS.labels(reason="overflow").inc()
                sequence = 1
            else:
                self._grow_width(digits)

        code = compose(
            self._config.prefix,
            self._config.separator,
            date_key,
            sequence,
            self.sequence_width,
        )
        return sequence, code

    def _grow_width(self, width: int) -> None:
        if width <= self.sequence_width:
            return
        logger.info(
            "Sequence width for prefix %r grew from %d to %d",
            self._config.prefix,
            self.sequence_width,
            width,
        )
        WIDTH_GROWTH.inc()
        self._state.sequence_width = width

    @staticmethod
    def _require_code(code: str) -> None:
        if not isinstance(code, str):
            raise InvalidInputError(f"code must be a string, got {type(code).__name__}")
        if not code:
            raise InvalidInputError("code is required")
