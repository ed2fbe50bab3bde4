"""Core per-frame mosaic rendering.

This module turns one decoded camera frame plus the session chaos level into a
stylized mosaic on a drawable surface. Each pass downsamples the frame to a
coarse grid, draws each cell as a flat color swatch or a glyph, and sometimes
tears a horizontal strip of the output sideways.
"""

from __future__ import annotations

import logging
import math
import random
import secrets
import time
from collections.abc import Callable
from collections.abc import Generator
from dataclasses import dataclass

import cv2
import numpy as np

from .chaos_settings import ChaosSettings
from .frame_source import VideoFrame
from .mosaic_glyphs import GLYPH_SETS
from .mosaic_surface import MosaicSurface

logger_app = logging.getLogger(__name__)

TUPLE_BACKGROUND_COLOR: tuple[int, int, int] = (0, 0, 0)
FLOAT_DARK_CELL_BRIGHTNESS: float = 30.0
FLOAT_GLYPH_MIN_BRIGHTNESS: float = 100.0
FLOAT_GLITCH_TRIGGER: float = 0.9
INT_GLITCH_MAX_SLICE_HEIGHT: int = 50
INT_GLITCH_MAX_OFFSET_SPAN: int = 50


@dataclass(frozen=True)
class MosaicCell:
    """One grid cell sampled from the current frame."""

    int_x: int
    int_y: int
    tuple_color: tuple[int, int, int]
    float_brightness: float
    tuple_position: tuple[int, int]


@dataclass(frozen=True)
class GlitchTear:
    """Geometry of one horizontal screen tear."""

    int_slice_y: int
    int_slice_height: int
    int_offset: int


@dataclass
class MosaicRenderResult:
    """Summary of one completed render pass."""

    int_cols: int
    int_rows: int
    int_cell_size: int
    int_flat_cells: int = 0
    int_glyph_cells: int = 0
    int_dark_cells: int = 0
    obj_glitch_tear: GlitchTear | None = None


class MosaicRenderer:
    """Render mosaic frames onto one output surface.

    Constructor Input:
    - ``obj_surface``: Drawable output surface owned by this renderer.
    - ``obj_chaos_settings``: Session chaos settings.
    - ``obj_random``: Random source for the glyph and glitch decisions. The
      default ``secrets.SystemRandom`` cannot be seeded; pass a seeded
      ``random.Random`` for reproducible output.
    - ``fn_clock``: Returns seconds; drives glyph flicker between frames.
    """

    def __init__(
        self,
        obj_surface: MosaicSurface,
        obj_chaos_settings: ChaosSettings,
        obj_random: random.Random | None = None,
        fn_clock: Callable[[], float] | None = None,
    ) -> None:
        self.obj_surface: MosaicSurface = obj_surface
        self.obj_chaos_settings: ChaosSettings = obj_chaos_settings
        self.obj_random: random.Random = (
            obj_random if obj_random is not None else secrets.SystemRandom()
        )
        self.fn_clock: Callable[[], float] = fn_clock if fn_clock is not None else time.time

    def set_daily_screen_time(self, float_daily_screen_time: float) -> None:
        """Replace the chaos input; takes effect on the next render pass."""
        self.obj_chaos_settings = self.obj_chaos_settings.with_daily_screen_time(
            float_daily_screen_time
        )
        logger_app.info(
            "Chaos level updated. chaos=%.2f cell_size=%d",
            self.obj_chaos_settings.float_chaos_level,
            self.obj_chaos_settings.int_cell_size,
        )

    @staticmethod
    def compute_grid_dimensions(
        int_width: int, int_height: int, int_cell_size: int
    ) -> tuple[int, int]:
        """Return ``(cols, rows)`` for a surface, or ``(0, 0)`` when degenerate."""
        if int_cell_size <= 0 or int_width <= 0 or int_height <= 0:
            return 0, 0
        int_cols: int = int_width // int_cell_size
        int_rows: int = int_height // int_cell_size
        return int_cols, int_rows

    @staticmethod
    def sample_grid(array_rgb: np.ndarray, int_cols: int, int_rows: int) -> np.ndarray:
        """Box-filter the frame down to one averaged RGB sample per cell.

        Third-party API reference:
        https://docs.opencv.org/4.x/da/d54/group__imgproc__transform.html
        """
        array_samples: np.ndarray = cv2.resize(
            array_rgb, (int_cols, int_rows), interpolation=cv2.INTER_AREA
        )
        return array_samples

    @staticmethod
    def select_glyph(
        int_x: int,
        int_y: int,
        float_elapsed_seconds: float,
        tuple_symbols: tuple[str, ...],
    ) -> str:
        """Pick a symbol from a glyph set using a position/time seeded index.

        The same cell flickers between symbols as time advances, even for a
        static input frame.
        """
        float_seed: float = math.sin(int_x * int_y + float_elapsed_seconds)
        int_index: int = int(math.floor(abs(float_seed * 100))) % len(tuple_symbols)
        return tuple_symbols[int_index]

    @staticmethod
    def generate_cells(
        array_samples: np.ndarray, int_cell_size: int
    ) -> Generator[MosaicCell, None, None]:
        """Yield sampled cells in row-major order."""
        int_rows: int = int(array_samples.shape[0])
        int_cols: int = int(array_samples.shape[1])
        for int_y in range(int_rows):
            for int_x in range(int_cols):
                int_r: int = int(array_samples[int_y, int_x, 0])
                int_g: int = int(array_samples[int_y, int_x, 1])
                int_b: int = int(array_samples[int_y, int_x, 2])
                float_brightness: float = (int_r + int_g + int_b) / 3.0
                yield MosaicCell(
                    int_x=int_x,
                    int_y=int_y,
                    tuple_color=(int_r, int_g, int_b),
                    float_brightness=float_brightness,
                    tuple_position=(int_x * int_cell_size, int_y * int_cell_size),
                )

    def _choose_glyph_mode(self, float_brightness: float) -> bool:
        """Decide whether a visible cell becomes a glyph."""
        if float_brightness <= FLOAT_GLYPH_MIN_BRIGHTNESS:
            return False
        return self.obj_random.random() < self.obj_chaos_settings.float_glyph_probability

    def _draw_cell(
        self, obj_cell: MosaicCell, int_cell_size: int, float_elapsed_seconds: float
    ) -> bool:
        """Draw one visible cell. Returns True when drawn as a glyph."""
        int_pos_x: int
        int_pos_y: int
        int_pos_x, int_pos_y = obj_cell.tuple_position

        if not self._choose_glyph_mode(obj_cell.float_brightness):
            # One pixel short on each side leaves a grid-line gap.
            self.obj_surface.fill_rect(
                int_pos_x,
                int_pos_y,
                int_cell_size - 1,
                int_cell_size - 1,
                obj_cell.tuple_color,
            )
            return False

        tuple_symbols: tuple[str, ...] = (
            GLYPH_SETS[0] if self.obj_random.random() > 0.5 else GLYPH_SETS[1]
        )
        str_symbol: str = self.select_glyph(
            obj_cell.int_x, obj_cell.int_y, float_elapsed_seconds, tuple_symbols
        )
        tuple_center: tuple[int, int] = (
            int_pos_x + int_cell_size // 2,
            int_pos_y + int_cell_size // 2,
        )
        self.obj_surface.fill_text_centered(
            str_symbol, tuple_center, int_cell_size, obj_cell.tuple_color
        )
        return True

    def apply_glitch_tear(self) -> GlitchTear | None:
        """Maybe shift a random horizontal strip of the output sideways.

        Only fires when the chaos level is glitch-eligible, and then with
        probability 0.1. Pixels are copied from the rendered output, not the
        source frame.
        """
        if not self.obj_chaos_settings.bool_glitch_eligible:
            return None
        if self.obj_random.random() <= FLOAT_GLITCH_TRIGGER:
            return None

        int_width: int = self.obj_surface.int_width
        int_height: int = self.obj_surface.int_height
        int_slice_height: int = int(self.obj_random.random() * INT_GLITCH_MAX_SLICE_HEIGHT)
        int_slice_y: int = int(self.obj_random.random() * int_height)
        int_offset: int = int(
            round((self.obj_random.random() - 0.5) * INT_GLITCH_MAX_OFFSET_SPAN)
        )

        obj_glitch_tear: GlitchTear = GlitchTear(
            int_slice_y=int_slice_y,
            int_slice_height=int_slice_height,
            int_offset=int_offset,
        )
        if int_slice_height > 0:
            self.obj_surface.copy_region(
                (0, int_slice_y, int_width, int_slice_y + int_slice_height),
                (int_offset, int_slice_y),
            )
        return obj_glitch_tear

    def render_frame(self, video_frame: VideoFrame | None) -> MosaicRenderResult | None:
        """Render one mosaic pass from a decoded frame.

        Output:
        - ``MosaicRenderResult`` for a completed pass.
        - ``None`` when the pass was skipped because no decoded frame was
          available or the grid geometry was degenerate.
        """
        if video_frame is None or not video_frame.is_decoded():
            logger_app.debug("Skipping render pass: no decoded frame available.")
            return None

        if (
            self.obj_surface.int_width != video_frame.int_width
            or self.obj_surface.int_height != video_frame.int_height
        ):
            self.obj_surface.resize(video_frame.int_width, video_frame.int_height)

        int_width: int = self.obj_surface.int_width
        int_height: int = self.obj_surface.int_height
        int_cell_size: int = self.obj_chaos_settings.int_cell_size
        int_cols: int
        int_rows: int
        int_cols, int_rows = self.compute_grid_dimensions(int_width, int_height, int_cell_size)
        if int_cols <= 0 or int_rows <= 0:
            logger_app.debug(
                "Skipping render pass: degenerate grid. surface=%dx%d cell_size=%d",
                int_width,
                int_height,
                int_cell_size,
            )
            return None

        array_samples: np.ndarray = self.sample_grid(video_frame.array_rgb, int_cols, int_rows)

        self.obj_surface.fill_rect(0, 0, int_width, int_height, TUPLE_BACKGROUND_COLOR)

        float_elapsed_seconds: float = self.fn_clock()
        obj_result: MosaicRenderResult = MosaicRenderResult(
            int_cols=int_cols,
            int_rows=int_rows,
            int_cell_size=int_cell_size,
        )
        for obj_cell in self.generate_cells(array_samples, int_cell_size):
            if obj_cell.float_brightness < FLOAT_DARK_CELL_BRIGHTNESS:
                obj_result.int_dark_cells += 1
                continue
            if self._draw_cell(obj_cell, int_cell_size, float_elapsed_seconds):
                obj_result.int_glyph_cells += 1
            else:
                obj_result.int_flat_cells += 1

        obj_result.obj_glitch_tear = self.apply_glitch_tear()
        return obj_result
