"""Tests for the built-in techniques and cycle planning."""

import pytest

from guided_breathing import (
    BALANCED,
    LONG_EXHALE,
    InvalidDurationError,
    UnknownTechniqueError,
    get_technique,
    total_cycles,
)


class TestTechniques:

    def test_balanced_durations(self):
        assert BALANCED.durations == (4000, 4000, 4000, 4000)
        assert BALANCED.cycle_time == 16000
        assert BALANCED.exhale_end == 12000
        assert BALANCED.boundaries == (4000, 8000, 12000, 16000)
        assert BALANCED.holds_carry_label is False

    def test_long_exhale_durations(self):
        assert LONG_EXHALE.durations == (4000, 500, 8000, 500)
        assert LONG_EXHALE.cycle_time == 13000
        assert LONG_EXHALE.exhale_end == 12500
        assert LONG_EXHALE.holds_carry_label is True

    def test_technique_is_immutable(self):
        with pytest.raises(Exception):
            BALANCED.inhale = 1000

    @pytest.mark.parametrize("name", ["longExhale", "long_exhale", "long-exhale", "LONGEXHALE"])
    def test_aliases(self, name):
        assert get_technique(name) is LONG_EXHALE

    def test_instance_passes_through(self):
        assert get_technique(BALANCED) is BALANCED

    def test_unknown_technique(self):
        with pytest.raises(UnknownTechniqueError) as info:
            get_technique("square")
        assert "square" in str(info.value)


class TestTotalCycles:

    def test_balanced_one_minute(self):
        assert total_cycles("balanced", 60) == 4

    def test_rounds_up(self):
        # 60000 / 13000 = 4.6
        assert total_cycles("longExhale", 60) == 5
        assert total_cycles("balanced", 16.001) == 2

    def test_exact_multiple(self):
        assert total_cycles("balanced", 32) == 2

    @pytest.mark.parametrize("duration", [0, -5, "abc", None, float("nan"), True])
    def test_invalid_duration(self, duration):
        with pytest.raises(InvalidDurationError):
            total_cycles("balanced", duration)
