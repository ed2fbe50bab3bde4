"""Environment-driven defaults for mirror sessions."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TypeVar

logger_app = logging.getLogger(__name__)

TypeEnvValue = TypeVar("TypeEnvValue", int, float)


@dataclass
class MirrorConfig:
    """Session defaults, overridable by CLI flags.

    Environment variables:
    - `TIME_MOSAIC_CAMERA_INDEX` defaults to `0`.
    - `TIME_MOSAIC_TARGET_FPS` defaults to `30`.
    - `TIME_MOSAIC_GLYPH_FONT` optional TrueType/emoji font path.
    - `TIME_MOSAIC_OUTPUT_DIR` defaults to `output`.
    - `TIME_MOSAIC_SCREEN_TIME` defaults to `4.0` hours.
    - `TIME_MOSAIC_AGE` defaults to `25`.
    """

    int_camera_index: int = 0
    int_target_fps: int = 30
    str_glyph_font_path: str | None = None
    str_output_dir: str = "output"
    float_daily_screen_time: float = 4.0
    int_age: int = 25


def _parse_env_value(
    dict_env: Mapping[str, str],
    str_name: str,
    fn_type: Callable[[str], TypeEnvValue],
    obj_default: TypeEnvValue,
) -> TypeEnvValue:
    """Parse one numeric environment variable, failing loudly on bad input."""
    str_raw: str | None = dict_env.get(str_name)
    if str_raw is None or not str_raw.strip():
        return obj_default
    try:
        obj_value: TypeEnvValue = fn_type(str_raw.strip())
        return obj_value
    except ValueError as exc_error:
        logger_app.error(
            "Invalid value for %s: %r. Context: %s", str_name, str_raw, exc_error
        )
        raise ValueError(f"Invalid value for {str_name}: {str_raw!r}") from exc_error


def load_mirror_config(dict_env: Mapping[str, str] | None = None) -> MirrorConfig:
    """Build a ``MirrorConfig`` from environment variables."""
    dict_source: Mapping[str, str] = os.environ if dict_env is None else dict_env

    str_font_path: str | None = dict_source.get("TIME_MOSAIC_GLYPH_FONT")
    if str_font_path is not None and not str_font_path.strip():
        str_font_path = None

    obj_config: MirrorConfig = MirrorConfig(
        int_camera_index=_parse_env_value(dict_source, "TIME_MOSAIC_CAMERA_INDEX", int, 0),
        int_target_fps=_parse_env_value(dict_source, "TIME_MOSAIC_TARGET_FPS", int, 30),
        str_glyph_font_path=str_font_path,
        str_output_dir=dict_source.get("TIME_MOSAIC_OUTPUT_DIR", "output") or "output",
        float_daily_screen_time=_parse_env_value(
            dict_source, "TIME_MOSAIC_SCREEN_TIME", float, 4.0
        ),
        int_age=_parse_env_value(dict_source, "TIME_MOSAIC_AGE", int, 25),
    )
    return obj_config
