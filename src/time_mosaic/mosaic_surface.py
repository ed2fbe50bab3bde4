"""Drawable output surface for the mosaic renderer.

The renderer only needs three primitives: fill a rectangle, draw centered
text, and copy a region of the surface onto itself. ``PillowSurface`` provides
them on top of a Pillow RGB image.
"""

from __future__ import annotations

import functools
import logging
from typing import Protocol

import numpy as np
from PIL import Image, ImageDraw, ImageFont

logger_app = logging.getLogger(__name__)

TypeFont = ImageFont.FreeTypeFont | ImageFont.ImageFont

# Searched by file name in the platform font directories, first match wins.
TUPLE_EMOJI_FONT_CANDIDATES: tuple[str, ...] = (
    "NotoColorEmoji.ttf",
    "Apple Color Emoji.ttc",
    "seguiemj.ttf",
    "NotoEmoji-Regular.ttf",
    "Symbola.ttf",
)
# Bitmap color emoji fonts only load at their native strike size.
INT_BITMAP_EMOJI_FONT_SIZE: int = 109
INT_EMOJI_PROBE_FONT_SIZE: int = 20


class MosaicSurface(Protocol):
    """Drawing API consumed by ``MosaicRenderer``."""

    @property
    def int_width(self) -> int:
        """Surface width in pixels."""

    @property
    def int_height(self) -> int:
        """Surface height in pixels."""

    def resize(self, int_width: int, int_height: int) -> None:
        """Resize the surface, discarding its contents."""

    def fill_rect(
        self,
        int_left: int,
        int_top: int,
        int_width: int,
        int_height: int,
        tuple_color: tuple[int, int, int],
    ) -> None:
        """Fill an axis-aligned rectangle."""

    def fill_text_centered(
        self,
        str_text: str,
        tuple_center: tuple[int, int],
        int_font_size: int,
        tuple_color: tuple[int, int, int],
    ) -> None:
        """Draw text centered on a point."""

    def copy_region(
        self,
        tuple_source_box: tuple[int, int, int, int],
        tuple_dest_xy: tuple[int, int],
    ) -> None:
        """Copy a region of this surface onto itself at another position."""


@functools.lru_cache(maxsize=1)
def resolve_emoji_font() -> tuple[str, int | None] | None:
    """Find an installed font that can draw the brainrot emoji.

    Output:
    - ``(font_name, fixed_size)`` where ``fixed_size`` is set for bitmap fonts
      that only load at one size.
    - ``None`` when no candidate is installed. A warning is logged once.
    """
    for str_candidate in TUPLE_EMOJI_FONT_CANDIDATES:
        for int_size, int_fixed_size in (
            (INT_EMOJI_PROBE_FONT_SIZE, None),
            (INT_BITMAP_EMOJI_FONT_SIZE, INT_BITMAP_EMOJI_FONT_SIZE),
        ):
            try:
                ImageFont.truetype(str_candidate, int_size)
            except OSError:
                continue
            logger_app.info("Using emoji font %s.", str_candidate)
            return str_candidate, int_fixed_size

    logger_app.warning(
        "No emoji font found (tried %s). Emoji glyphs will draw as placeholder "
        "boxes; set TIME_MOSAIC_GLYPH_FONT or --glyph_font to an emoji font.",
        ", ".join(TUPLE_EMOJI_FONT_CANDIDATES),
    )
    return None


@functools.lru_cache(maxsize=64)
def load_glyph_font(
    int_font_size: int, str_font_path: str | None = None, bool_emoji: bool = False
) -> TypeFont:
    """Load and cache a font for glyph rendering at one pixel size.

    A configured path wins. Otherwise emoji text uses the first installed
    emoji font, and everything else uses Pillow's bundled default font. A
    bitmap emoji font comes back at its native size, not ``int_font_size``.
    """
    int_font_size = max(1, int_font_size)
    if str_font_path:
        try:
            obj_font: TypeFont = ImageFont.truetype(str_font_path, int_font_size)
            return obj_font
        except OSError as exc_error:
            logger_app.warning(
                "Failed to load glyph font %s; using fallback font. Context: %s",
                str_font_path,
                exc_error,
            )

    if bool_emoji:
        tuple_emoji_font: tuple[str, int | None] | None = resolve_emoji_font()
        if tuple_emoji_font is not None:
            str_emoji_font, int_fixed_size = tuple_emoji_font
            try:
                obj_emoji_font: TypeFont = ImageFont.truetype(
                    str_emoji_font,
                    int_fixed_size if int_fixed_size is not None else int_font_size,
                )
                return obj_emoji_font
            except OSError as exc_error:
                logger_app.warning(
                    "Emoji font %s cannot load at size %d; using default font. Context: %s",
                    str_emoji_font,
                    int_font_size,
                    exc_error,
                )

    obj_default_font: TypeFont = ImageFont.load_default(size=int_font_size)
    return obj_default_font


class PillowSurface:
    """RGB Pillow image implementing the ``MosaicSurface`` drawing API."""

    def __init__(
        self,
        int_width: int = 0,
        int_height: int = 0,
        str_font_path: str | None = None,
    ) -> None:
        self.str_font_path: str | None = str_font_path
        self.image_canvas: Image.Image = Image.new(
            "RGB", (max(0, int_width), max(0, int_height)), (0, 0, 0)
        )
        self._image_draw: ImageDraw.ImageDraw = ImageDraw.Draw(self.image_canvas)

    @property
    def int_width(self) -> int:
        return self.image_canvas.width

    @property
    def int_height(self) -> int:
        return self.image_canvas.height

    def resize(self, int_width: int, int_height: int) -> None:
        tuple_size: tuple[int, int] = (max(0, int_width), max(0, int_height))
        self.image_canvas = Image.new("RGB", tuple_size, (0, 0, 0))
        self._image_draw = ImageDraw.Draw(self.image_canvas)
        logger_app.debug("Resized surface to %dx%d.", tuple_size[0], tuple_size[1])

    def fill_rect(
        self,
        int_left: int,
        int_top: int,
        int_width: int,
        int_height: int,
        tuple_color: tuple[int, int, int],
    ) -> None:
        if int_width <= 0 or int_height <= 0:
            return
        # ImageDraw rectangles include the right and bottom edges.
        tuple_draw_box: tuple[int, int, int, int] = (
            int_left,
            int_top,
            int_left + int_width - 1,
            int_top + int_height - 1,
        )
        self._image_draw.rectangle(tuple_draw_box, fill=tuple_color)

    def fill_text_centered(
        self,
        str_text: str,
        tuple_center: tuple[int, int],
        int_font_size: int,
        tuple_color: tuple[int, int, int],
    ) -> None:
        if int_font_size <= 0:
            return
        obj_font: TypeFont = load_glyph_font(
            int_font_size, self.str_font_path, not str_text.isascii()
        )
        if getattr(obj_font, "size", int_font_size) == int_font_size:
            self._image_draw.text(
                tuple_center,
                str_text,
                fill=tuple_color,
                font=obj_font,
                anchor="mm",
                embedded_color=True,
            )
            return

        # Fixed-size emoji font: draw on a tile, trim, and scale into the cell.
        int_tile_side: int = int(obj_font.size * 2)
        image_tile: Image.Image = Image.new("RGBA", (int_tile_side, int_tile_side), (0, 0, 0, 0))
        ImageDraw.Draw(image_tile).text(
            (int_tile_side // 2, int_tile_side // 2),
            str_text,
            fill=tuple_color,
            font=obj_font,
            anchor="mm",
            embedded_color=True,
        )
        tuple_content_box: tuple[int, int, int, int] | None = image_tile.getbbox()
        if tuple_content_box is None:
            return
        image_tile = image_tile.crop(tuple_content_box)
        image_tile.thumbnail((int_font_size, int_font_size), Image.Resampling.LANCZOS)
        tuple_paste_xy: tuple[int, int] = (
            tuple_center[0] - image_tile.width // 2,
            tuple_center[1] - image_tile.height // 2,
        )
        self.image_canvas.paste(image_tile, tuple_paste_xy, image_tile)

    def copy_region(
        self,
        tuple_source_box: tuple[int, int, int, int],
        tuple_dest_xy: tuple[int, int],
    ) -> None:
        int_left: int
        int_top: int
        int_right: int
        int_bottom: int
        int_left, int_top, int_right, int_bottom = tuple_source_box
        int_left = max(0, int_left)
        int_top = max(0, int_top)
        int_right = min(self.int_width, int_right)
        int_bottom = min(self.int_height, int_bottom)
        if int_right <= int_left or int_bottom <= int_top:
            return

        image_region: Image.Image = self.image_canvas.crop(
            (int_left, int_top, int_right, int_bottom)
        )
        self.image_canvas.paste(image_region, tuple_dest_xy)

    def to_image(self) -> Image.Image:
        """Return a copy of the current surface contents."""
        return self.image_canvas.copy()

    def to_bgr_array(self) -> np.ndarray:
        """Return the surface as a BGR uint8 array for OpenCV consumers."""
        array_rgb = np.array(self.image_canvas)
        array_bgr = array_rgb[:, :, ::-1].copy()
        return array_bgr
