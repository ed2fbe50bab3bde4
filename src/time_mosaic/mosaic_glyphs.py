"""Glyph sets used when a mosaic cell is drawn as a symbol."""

from __future__ import annotations

BRAINROT_SYMBOLS: tuple[str, ...] = (
    "📱",
    "👁️",
    "💀",
    "🤡",
    "🤖",
    "💩",
    "👾",
    "💸",
    "💊",
    "🚧",
    "🔒",
    "📉",
)

TECH_LOGOS: tuple[str, ...] = ("X", "f", "G", "in", "tt", "yt")

GLYPH_SETS: tuple[tuple[str, ...], tuple[str, ...]] = (BRAINROT_SYMBOLS, TECH_LOGOS)
