"""Tests for the date backend."""

from datetime import UTC, datetime

import pytest

from refcode.core.dates import DateBackend, get_zone, has_quarter, render
from refcode.core.errors import ConfigurationError

NOW = datetime(2023, 1, 1, 17, 0, 0, tzinfo=UTC)


class TestRender:
    def test_plain_strftime(self):
        assert render(NOW, "%Y%m%d") == "20230101"

    @pytest.mark.parametrize(
        ("month", "quarter"),
        [(1, "1"), (3, "1"), (4, "2"), (6, "2"), (7, "3"), (10, "4"), (12, "4")],
    )
    def test_quarter(self, month, quarter):
        moment = datetime(2023, month, 15, tzinfo=UTC)
        assert render(moment, "%YQ%Q") == f"2023Q{quarter}"

    def test_escaped_percent_is_not_a_quarter(self):
        moment = datetime(2023, 5, 1, tzinfo=UTC)
        assert render(moment, "%%Q%Q") == "%Q2"

    def test_has_quarter(self):
        assert has_quarter("%Y%Q")
        assert not has_quarter("%Y%%Q")
        assert not has_quarter("%Y%m%d")


class TestDateBackend:
    def test_render_now_in_zone(self):
        backend = DateBackend(lambda: NOW)
        assert backend.render_now("UTC", "%Y%m%d") == "20230101"
        assert backend.render_now("Asia/Bangkok", "%Y%m%d") == "20230102"

    def test_naive_clock_is_utc(self):
        backend = DateBackend(lambda: datetime(2023, 1, 1, 23, 0, 0))
        assert backend.render_now("UTC", "%Y%m%d") == "20230101"
        assert backend.render_now("Asia/Tokyo", "%Y%m%d") == "20230102"

    def test_default_clock(self):
        assert len(DateBackend().render_now("UTC", "%Y%m%d")) == 8

    def test_parse_valid(self):
        assert DateBackend().parse("20240229", "%Y%m%d") == datetime(2024, 2, 29)

    @pytest.mark.parametrize("text", ["20231399", "20230229", "2023011", "abcdefgh", ""])
    def test_parse_invalid(self, text):
        assert DateBackend().parse(text, "%Y%m%d") is None

    def test_parse_quarter_pattern(self):
        assert DateBackend().parse("2023Q1", "%YQ%Q") is None


class TestGetZone:
    def test_known(self):
        assert get_zone("Asia/Bangkok").key == "Asia/Bangkok"

    def test_unknown(self):
        with pytest.raises(ConfigurationError, match="Unknown timezone"):
            get_zone("Nowhere/Special")
