"""Tests for Prometheus metrics."""

from __future__ import annotations

from datetime import UTC, datetime

from prometheus_client import REGISTRY

from refcode.core.dates import DateBackend
from refcode.core.errors import InvalidFormatError
from refcode.core.generator import CodeGenerator
from refcode.metrics import CODES_ISSUED, REJECTED_CODES, SEQUENCE_RESETS, WIDTH_GROWTH


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def _generator(**options) -> CodeGenerator:
    return CodeGenerator(backend=DateBackend(lambda: datetime(2023, 1, 1, tzinfo=UTC)), **options)


class TestMetricsDefinitions:
    def test_counters_exist(self) -> None:
        assert CODES_ISSUED is not None
        assert SEQUENCE_RESETS is not None
        assert WIDTH_GROWTH is not None
        assert REJECTED_CODES is not None

    def test_metrics_registered(self) -> None:
        metric_names = [m.name for m in REGISTRY.collect()]
        # Counters don't have the _total suffix in the name attribute
        assert "refcode_codes_issued" in metric_names
        assert "refcode_width_growth" in metric_names


class TestGeneratorUpdatesMetrics:
    def test_generate_counts_codes(self) -> None:
        before = _sample("refcode_codes_issued_total", {"mode": "generate"})
        gen = _generator()
        gen.generate()
        gen.generate()
        assert _sample("refcode_codes_issued_total", {"mode": "generate"}) == before + 2

    def test_width_growth_counted(self) -> None:
        before = _sample("refcode_width_growth_total")
        _generator(sequence_width=1).generate_from_sequence(10)
        assert _sample("refcode_width_growth_total") == before + 1

    def test_rejected_increment_counted(self) -> None:
        before = _sample("refcode_rejected_codes_total", {"operation": "increment"})
        try:
            _generator(prefix="INV").increment("INVALID")
        except InvalidFormatError:
            pass
        assert _sample("refcode_rejected_codes_total", {"operation": "increment"}) == before + 1

    def test_date_change_reset_counted(self) -> None:
        before = _sample("refcode_sequence_resets_total", {"reason": "date_change"})
        _generator(prefix="INV").increment("INV202212310007")
        assert _sample("refcode_sequence_resets_total", {"reason": "date_change"}) == before + 1
