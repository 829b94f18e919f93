"""Tests for reply utility functions: format_duration, format_duration_ms and truncate."""

from __future__ import annotations

import pytest

from discord_jukebox.utils.reply import format_duration, format_duration_ms, truncate

# =============================================================================
# format_duration
# =============================================================================


class TestFormatDuration:
    def test_none(self):
        assert format_duration(None) == "–"

    def test_zero(self):
        assert format_duration(0) == "0:00"

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(5, "0:05"), (65, "1:05"), (599, "9:59"), (3600, "1:00:00"), (3725, "1:02:05")],
    )
    def test_values(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_float_truncated(self):
        assert format_duration(65.9) == "1:05"


class TestFormatDurationMs:
    def test_none(self):
        assert format_duration_ms(None) == "–"

    def test_milliseconds(self):
        assert format_duration_ms(185_999) == "3:05"


# =============================================================================
# truncate
# =============================================================================


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("hello", 10) == "hello"

    def test_exact_length_unchanged(self):
        assert truncate("a" * 10, 10) == "a" * 10

    def test_long_text_ellipsized(self):
        result = truncate("a" * 20, 10)

        assert len(result) == 10
        assert result.endswith("…")

    def test_default_length(self):
        assert len(truncate("x" * 200)) == 90
