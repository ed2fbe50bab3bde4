"""Tests for chaos-level derivation and session settings."""

from __future__ import annotations

import math

import pytest

from time_mosaic.chaos_settings import ChaosSettings
from time_mosaic.chaos_settings import calculate_lost_years
from time_mosaic.chaos_settings import clamp_float
from time_mosaic.chaos_settings import compute_cell_size
from time_mosaic.chaos_settings import compute_chaos_level


def test_chaos_level_stays_in_range_and_never_decreases() -> None:
    """Chaos stays within [0.1, 1.0] and grows with screen time across a full day."""
    list_float_hours = [int_step / 10.0 for int_step in range(0, 241)]
    list_float_levels = [compute_chaos_level(float_hours) for float_hours in list_float_hours]

    for float_level in list_float_levels:
        assert 0.1 <= float_level <= 1.0
    for float_previous, float_current in zip(list_float_levels, list_float_levels[1:]):
        assert float_current >= float_previous


def test_cell_size_stays_in_range_and_never_increases() -> None:
    """Cell size stays within [10, 19] and shrinks as chaos rises."""
    list_float_levels = [0.1 + int_step * 0.9 / 200 for int_step in range(201)]
    list_int_sizes = [compute_cell_size(float_level) for float_level in list_float_levels]

    for int_size in list_int_sizes:
        assert 10 <= int_size <= 19
    for int_previous, int_current in zip(list_int_sizes, list_int_sizes[1:]):
        assert int_current <= int_previous


def test_zero_screen_time_scenario() -> None:
    """No screen time gives minimum chaos, coarsest grid, and no glitches."""
    obj_settings = ChaosSettings(float_daily_screen_time=0.0)
    assert obj_settings.float_chaos_level == pytest.approx(0.1)
    assert obj_settings.int_cell_size == 19
    assert obj_settings.bool_glitch_eligible is False


def test_twelve_hour_scenario() -> None:
    """Twelve hours saturates chaos, gives the finest grid, and enables glitches."""
    obj_settings = ChaosSettings(float_daily_screen_time=12.0)
    assert obj_settings.float_chaos_level == 1.0
    assert obj_settings.int_cell_size == 10
    assert obj_settings.bool_glitch_eligible is True
    assert obj_settings.float_glyph_probability == pytest.approx(0.8)


def test_glitch_threshold_is_exclusive() -> None:
    """A chaos level of exactly 0.6 is not glitch-eligible."""
    obj_settings = ChaosSettings(float_daily_screen_time=7.2)
    assert obj_settings.float_chaos_level == pytest.approx(0.6)
    assert obj_settings.bool_glitch_eligible is False


def test_screen_time_beyond_twelve_hours_is_clamped() -> None:
    obj_settings = ChaosSettings(float_daily_screen_time=20.0)
    assert obj_settings.float_chaos_level == 1.0
    assert obj_settings.int_cell_size == 10


def test_with_daily_screen_time_returns_updated_copy() -> None:
    obj_settings = ChaosSettings(float_daily_screen_time=1.0)
    obj_updated = obj_settings.with_daily_screen_time(9.0)

    assert obj_settings.float_daily_screen_time == 1.0
    assert obj_updated.float_daily_screen_time == 9.0
    assert obj_updated.float_chaos_level == pytest.approx(0.75)
    assert obj_updated.int_cell_size == 12


@pytest.mark.parametrize("float_bad_hours", [-1.0, math.nan, math.inf])
def test_rejects_invalid_screen_time(float_bad_hours: float) -> None:
    with pytest.raises(ValueError):
        ChaosSettings(float_daily_screen_time=float_bad_hours)


def test_clamp_float_bounds() -> None:
    assert clamp_float(-5.0, 0.0, 1.0) == 0.0
    assert clamp_float(5.0, 0.0, 1.0) == 1.0
    assert clamp_float(0.25, 0.0, 1.0) == 0.25


def test_calculate_lost_years() -> None:
    """Four hours a day from age 25 costs about 9.2 years."""
    float_years = calculate_lost_years(25, 4.0)
    assert float_years == pytest.approx(55 * 4 / 24)


def test_calculate_lost_years_never_negative() -> None:
    assert calculate_lost_years(95, 6.0) == 0.0
