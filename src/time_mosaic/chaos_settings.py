"""Chaos-level settings and derivation helpers for mosaic rendering.

This module isolates the screen-time to chaos mapping from the renderer so
`mosaic_renderer.py` stays focused on the per-frame pipeline.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from dataclasses import replace

logger_app = logging.getLogger(__name__)

FLOAT_MAX_CHAOS_HOURS: float = 12.0
FLOAT_MIN_CHAOS_LEVEL: float = 0.1
FLOAT_MAX_CHAOS_LEVEL: float = 1.0
INT_BASE_CELL_SIZE: int = 20
INT_CELL_SIZE_CHAOS_SPAN: int = 10
FLOAT_GLYPH_PROBABILITY_SCALE: float = 0.8
FLOAT_GLITCH_CHAOS_THRESHOLD: float = 0.6
INT_LIFE_EXPECTANCY_YEARS: int = 80


def clamp_float(float_value: float, float_low: float, float_high: float) -> float:
    """Clamp a float to the inclusive ``[float_low, float_high]`` range."""
    float_result: float = min(max(float_value, float_low), float_high)
    return float_result


def compute_chaos_level(float_daily_screen_time: float) -> float:
    """Map daily screen time in hours to a chaos level in ``[0.1, 1.0]``."""
    float_chaos_level: float = clamp_float(
        float_daily_screen_time / FLOAT_MAX_CHAOS_HOURS,
        FLOAT_MIN_CHAOS_LEVEL,
        FLOAT_MAX_CHAOS_LEVEL,
    )
    return float_chaos_level


def compute_cell_size(float_chaos_level: float) -> int:
    """Return the mosaic cell size for a chaos level.

    Higher chaos means smaller cells, which means more cells per frame.
    """
    int_cell_size: int = int(
        math.floor(INT_BASE_CELL_SIZE - float_chaos_level * INT_CELL_SIZE_CHAOS_SPAN)
    )
    return int_cell_size


def calculate_lost_years(int_age: int, float_daily_screen_time: float) -> float:
    """Estimate remaining-life years spent looking at a screen."""
    int_remaining_years: int = max(0, INT_LIFE_EXPECTANCY_YEARS - int_age)
    float_total_hours: float = int_remaining_years * 365 * float_daily_screen_time
    float_years_lost: float = float_total_hours / 24 / 365
    return max(0.0, float_years_lost)


@dataclass
class ChaosSettings:
    """Session settings that drive mosaic density, glyph and glitch rates.

    Inputs:
    - ``float_daily_screen_time``: Daily screen time in hours.

    Output/Behavior:
    - Derived values are recomputed on every access, so replacing the screen
      time takes effect on the next render pass.
    """

    float_daily_screen_time: float = 4.0

    def __post_init__(self) -> None:
        """Validate the screen-time input."""
        if not math.isfinite(self.float_daily_screen_time):
            logger_app.error(
                "Daily screen time must be finite. Received: %s",
                self.float_daily_screen_time,
            )
            raise ValueError("Daily screen time must be a finite number.")
        if self.float_daily_screen_time < 0:
            logger_app.error(
                "Daily screen time must be >= 0. Received: %s",
                self.float_daily_screen_time,
            )
            raise ValueError("Daily screen time must be >= 0.")

    @property
    def float_chaos_level(self) -> float:
        return compute_chaos_level(self.float_daily_screen_time)

    @property
    def int_cell_size(self) -> int:
        return compute_cell_size(self.float_chaos_level)

    @property
    def float_glyph_probability(self) -> float:
        """Probability that a bright cell is drawn as a glyph."""
        return self.float_chaos_level * FLOAT_GLYPH_PROBABILITY_SCALE

    @property
    def bool_glitch_eligible(self) -> bool:
        """True when the chaos level is high enough for screen tears."""
        return self.float_chaos_level > FLOAT_GLITCH_CHAOS_THRESHOLD

    def with_daily_screen_time(self, float_daily_screen_time: float) -> ChaosSettings:
        """Return a copy of these settings with a new screen-time input."""
        obj_new_settings: ChaosSettings = replace(
            self, float_daily_screen_time=float_daily_screen_time
        )
        return obj_new_settings
