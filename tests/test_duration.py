"""
Tests for duration parsing and rendering.
"""

import pytest

from clock_invoice.tools.invoice.duration import duration_to_minutes, minutes_to_duration


class TestDurationToMinutes:

    @pytest.mark.parametrize("value,expected", [
        ("1:30", 90),
        ("0:45:30", 45.5),
        ("2h", 120),
        ("1h 30min", 90),
        ("1d 3:12", 1632),
        ("90", 90),
        ("1.5h", 90),
        (45, 45),
    ])
    def test_parses(self, value, expected):
        assert duration_to_minutes(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "   ", "soon", "1:3", "2 hours", None, [], True])
    def test_rejects(self, value):
        assert duration_to_minutes(value) is None


class TestMinutesToDuration:

    def test_renders_hours_and_minutes(self):
        assert minutes_to_duration(95) == "1:35"
        assert minutes_to_duration(0) == "0:00"
        assert minutes_to_duration(1500) == "25:00"

    def test_rounds_to_whole_minutes(self):
        assert minutes_to_duration(59.6) == "1:00"
        assert minutes_to_duration(45.5) == "0:46"

    def test_invalid_is_zero(self):
        assert minutes_to_duration(None) == "0:00"

    def test_huge_values(self):
        assert minutes_to_duration(10**30) == f"{10**30 // 60}:{10**30 % 60:02d}"
