"""Core domain models for refcode.

Configuration and runtime state are Pydantic BaseModel classes. A code is
never stored; it is rendered from a date key and a sequence number, e.g.
"INV-20250101-0001".
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class OverflowPolicy(StrEnum):
    """What happens when a sequence needs more digits than the current width."""

    # Grow the width and keep the numeric value.
    continue_ = "continue"
    # Legacy behaviour: grow the width by one and restart at 1.
    reset = "reset"


class GeneratorConfig(BaseModel):
    """Settings for one code series (prefix / timezone / pattern combination)."""

    model_config = ConfigDict(frozen=True)

    prefix: str = ""
    date_format: str = "%Y%m%d"
    separator: str = ""
    sequence_width: int = Field(default=4, ge=1)
    timezone: str = "UTC"
    on_overflow: OverflowPolicy = OverflowPolicy.continue_
    strict_dates: bool = False

    @field_validator("date_format", "timezone")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


# ---------------------------------------------------------------------------
# Runtime state
# ---------------------------------------------------------------------------


class GeneratorState(BaseModel):
    """Mutable per-generator state for the stateful ``generate()`` path."""

    last_date_key: str | None = None
    current_sequence: int = 0
    # Effective padding width; only ever grows.
    sequence_width: int | None = None


# ---------------------------------------------------------------------------
# Parsed codes
# ---------------------------------------------------------------------------


class ParsedCode(BaseModel):
    """The three parts of a code as returned by ``CodeGenerator.parse``."""

    model_config = ConfigDict(frozen=True)

    prefix: str
    date: str
    sequence: int
