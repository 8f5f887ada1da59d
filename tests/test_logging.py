"""Tests for structured logging configuration."""

from __future__ import annotations

import io
import json
import logging
import sys
from datetime import UTC, datetime

import pytest
import structlog

from refcode.core.dates import DateBackend
from refcode.core.generator import CodeGenerator
from refcode.core.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Reset logging configuration between tests."""
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)


def _capture() -> io.StringIO:
    """Swap the configured handler for one writing to a buffer."""
    captured = io.StringIO()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    handler = logging.StreamHandler(captured)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    return captured


def test_single_stderr_handler() -> None:
    configure_logging(json_output=False, level="INFO")

    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert handlers[0].stream is sys.stderr


def test_reconfiguring_does_not_stack_handlers() -> None:
    configure_logging(level="INFO")
    configure_logging(level="INFO")
    assert len(logging.getLogger().handlers) == 1


def test_json_output() -> None:
    configure_logging(json_output=True, level="INFO")
    captured = _capture()

    structlog.get_logger("test_json").info("code issued", code="INV-20230101-0001")

    data = json.loads(captured.getvalue().strip())
    assert data["event"] == "code issued"
    assert data["code"] == "INV-20230101-0001"
    assert data["level"] == "info"
    assert "timestamp" in data


@pytest.mark.parametrize(
    ("level", "expected"),
    [("DEBUG", logging.DEBUG), ("info", logging.INFO), ("WARNING", logging.WARNING), ("ERROR", logging.ERROR)],
)
def test_levels(level: str, expected: int) -> None:
    configure_logging(level=level)
    assert logging.getLogger().level == expected


def test_width_growth_is_logged() -> None:
    configure_logging(level="INFO")
    captured = _capture()

    gen = CodeGenerator(
        backend=DateBackend(lambda: datetime(2023, 1, 1, tzinfo=UTC)),
        prefix="INV",
        sequence_width=2,
    )
    gen.generate_from_sequence(100)

    assert "grew from 2 to 3" in captured.getvalue()
