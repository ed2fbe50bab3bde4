"""Public package interface for the time mosaic mirror."""

from .__version__ import __version__
from .chaos_settings import ChaosSettings
from .chaos_settings import calculate_lost_years
from .chaos_settings import compute_cell_size
from .chaos_settings import compute_chaos_level
from .frame_source import FrameSource
from .frame_source import FrameSourceState
from .frame_source import PermissionDeniedError
from .frame_source import VideoFrame
from .mirror_config import MirrorConfig
from .mirror_config import load_mirror_config
from .mirror_recorder import MosaicVideoWriter
from .mosaic_mirror import get_version
from .mosaic_mirror import main
from .mosaic_mirror import render_video_file
from .mosaic_mirror import run_live_mirror
from .mosaic_renderer import GlitchTear
from .mosaic_renderer import MosaicRenderResult
from .mosaic_renderer import MosaicRenderer
from .mosaic_source_inputs import MosaicSourceInputs
from .mosaic_surface import PillowSurface
from .render_loop import RenderLoop
from .schedulers import FrameRateScheduler
from .schedulers import ManualScheduler

__all__ = [
    "__version__",
    "ChaosSettings",
    "FrameRateScheduler",
    "FrameSource",
    "FrameSourceState",
    "GlitchTear",
    "ManualScheduler",
    "MirrorConfig",
    "MosaicRenderResult",
    "MosaicRenderer",
    "MosaicSourceInputs",
    "MosaicVideoWriter",
    "PermissionDeniedError",
    "PillowSurface",
    "RenderLoop",
    "VideoFrame",
    "calculate_lost_years",
    "compute_cell_size",
    "compute_chaos_level",
    "get_version",
    "load_mirror_config",
    "main",
    "render_video_file",
    "run_live_mirror",
]
