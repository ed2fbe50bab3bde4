"""Mirror session drivers and CLI entrypoint.

This module wires the frame source, renderer and render loop together for the
two ways a session runs: live from a camera into an OpenCV window, or offline
from a recorded video into an MP4. It also contains the CLI entrypoint used by
``time-mosaic``.
"""

from __future__ import annotations

import importlib.metadata
import logging
import os
import random
import sys
from collections.abc import Callable

from tqdm import tqdm

from .chaos_settings import ChaosSettings
from .chaos_settings import calculate_lost_years
from .frame_source import CameraStream
from .frame_source import FrameSource
from .frame_source import PermissionDeniedError
from .mirror_config import MirrorConfig
from .mirror_config import load_mirror_config
from .mirror_display import OpenCVWindowDisplay
from .mirror_recorder import MosaicVideoWriter
from .mosaic_renderer import MosaicRenderResult
from .mosaic_renderer import MosaicRenderer
from .mosaic_source_inputs import MosaicSourceInputs
from .mosaic_surface import MosaicSurface
from .mosaic_surface import PillowSurface
from .render_loop import RenderLoop
from .schedulers import FrameRateScheduler
from .schedulers import ManualScheduler

# Structured logging without timestamps for cleaner CLI output.
logging.basicConfig(format="%(levelname)s: %(message)s", level=logging.INFO)
logger_app = logging.getLogger(__name__)

TypeStreamOpener = Callable[[int | str], CameraStream]


def get_version() -> str:
    """Retrieve package version from installed metadata."""
    try:
        str_version_result: str = importlib.metadata.version("time-mosaic")
        return str_version_result
    except importlib.metadata.PackageNotFoundError as exc_error:
        logger_app.warning(
            "Package 'time-mosaic' not found. Using 'unknown' version. Context: %s",
            exc_error,
        )
        str_unknown_version: str = "unknown"
        return str_unknown_version


def render_video_file(
    str_input_path: str,
    str_output_path: str,
    obj_chaos_settings: ChaosSettings,
    int_fps: int = 30,
    int_max_frames: int | None = None,
    obj_random: random.Random | None = None,
    str_font_path: str | None = None,
    fn_open_stream: TypeStreamOpener | None = None,
) -> int:
    """Render every frame of a recorded video through the mosaic into an MP4.

    Behavior:
    - Decoding is pumped one frame per tick, so no input frame is skipped.
    - Glyph flicker follows video time (tick index / fps), not wall time.
    - Raises ``PermissionDeniedError`` when the input cannot be opened.

    Output:
    - Number of frames written to ``str_output_path``.
    """
    obj_frame_source: FrameSource = FrameSource(
        str_input_path,
        fn_open_stream=fn_open_stream,
        bool_background_decode=False,
    )
    obj_surface: PillowSurface = PillowSurface(str_font_path=str_font_path)
    obj_renderer: MosaicRenderer = MosaicRenderer(
        obj_surface,
        obj_chaos_settings,
        obj_random=obj_random,
    )
    obj_scheduler: ManualScheduler = ManualScheduler()
    obj_loop: RenderLoop = RenderLoop(obj_frame_source, obj_renderer, obj_scheduler)
    obj_renderer.fn_clock = lambda: obj_loop.int_tick_count / float(int_fps)
    obj_writer: MosaicVideoWriter = MosaicVideoWriter(str_output_path, int_fps=int_fps)

    str_filename_short: str = os.path.basename(str_output_path)
    if len(str_filename_short) > 30:
        str_filename_short = str_filename_short[:27] + "..."

    try:
        obj_loop.start()
        with tqdm(
            total=int_max_frames,
            desc=f"Rendering {str_filename_short}",
            unit="frame",
        ) as obj_progress:
            while int_max_frames is None or obj_writer.int_frames_written < int_max_frames:
                if not obj_frame_source.decode_next():
                    break
                int_drawn_before: int = obj_loop.int_frames_drawn
                obj_scheduler.run_next()
                if obj_loop.int_frames_drawn > int_drawn_before:
                    obj_writer.append_frame(obj_surface.to_image())
                    obj_progress.update(1)
    finally:
        obj_loop.stop()
        obj_writer.close()

    return obj_writer.int_frames_written


def run_live_mirror(
    int_camera_index: int,
    obj_chaos_settings: ChaosSettings,
    int_target_fps: int = 30,
    int_max_frames: int | None = None,
    str_record_path: str | None = None,
    obj_random: random.Random | None = None,
    str_font_path: str | None = None,
    obj_display: OpenCVWindowDisplay | None = None,
    fn_open_stream: TypeStreamOpener | None = None,
) -> int:
    """Run the live camera mirror until quit, interrupt, or ``int_max_frames``.

    Raises ``PermissionDeniedError`` before anything is drawn when the camera
    cannot be opened.

    Output:
    - Number of frames drawn during the session.
    """
    obj_frame_source: FrameSource = FrameSource(
        int_camera_index,
        fn_open_stream=fn_open_stream,
        bool_background_decode=True,
    )
    obj_surface: PillowSurface = PillowSurface(str_font_path=str_font_path)
    obj_renderer: MosaicRenderer = MosaicRenderer(
        obj_surface,
        obj_chaos_settings,
        obj_random=obj_random,
    )
    obj_scheduler: FrameRateScheduler = FrameRateScheduler(float(int_target_fps))
    obj_window: OpenCVWindowDisplay = (
        obj_display if obj_display is not None else OpenCVWindowDisplay()
    )
    obj_writer: MosaicVideoWriter | None = (
        MosaicVideoWriter(str_record_path, int_fps=int_target_fps)
        if str_record_path is not None
        else None
    )

    obj_loop: RenderLoop

    def handle_frame_rendered(
        _obj_drawn_surface: MosaicSurface, obj_result: MosaicRenderResult
    ) -> None:
        """Present and optionally record the frame; stop on quit or frame cap."""
        nonlocal obj_writer
        bool_quit_requested: bool = obj_window.present(obj_surface.to_bgr_array())
        if obj_writer is not None:
            try:
                obj_writer.append_frame(obj_surface.to_image())
            except RuntimeError as exc_error:
                # Recording stops for the rest of the session; the mirror keeps running.
                logger_app.error(
                    "Recording disabled for %s. Context: %s", str_record_path, exc_error
                )
                obj_writer.close()
                obj_writer = None
        if obj_result.obj_glitch_tear is not None:
            logger_app.debug("Glitch tear applied: %s", obj_result.obj_glitch_tear)

        bool_cap_reached: bool = (
            int_max_frames is not None and obj_loop.int_frames_drawn >= int_max_frames
        )
        if bool_quit_requested or bool_cap_reached:
            obj_loop.stop()

    obj_loop = RenderLoop(
        obj_frame_source,
        obj_renderer,
        obj_scheduler,
        fn_on_frame_rendered=handle_frame_rendered,
    )

    try:
        obj_loop.start()
        obj_scheduler.run()
    except KeyboardInterrupt:
        logger_app.info("Interrupted; tearing down the mirror.")
    finally:
        obj_loop.stop()
        obj_window.close()
        if obj_writer is not None:
            obj_writer.close()

    return obj_loop.int_frames_drawn


def main() -> None:
    """CLI entrypoint for the live mirror and offline video rendering."""
    import argparse

    from dotenv import load_dotenv

    obj_parser = argparse.ArgumentParser(description="Time Mosaic: the mirror of consumption")

    obj_parser.add_argument(
        "input_video",
        nargs="?",
        type=str,
        help="Path to a recorded video. When omitted, the live camera is used.",
    )
    obj_parser.add_argument(
        "--version", "-v", action="store_true", help="Print version and exit"
    )
    obj_parser.add_argument(
        "--screen_time",
        type=float,
        help="Daily screen time in hours (0-24). Drives the chaos level.",
    )
    obj_parser.add_argument(
        "--age",
        type=int,
        help="Age in years, used for the estimated attention cost.",
    )
    obj_parser.add_argument(
        "--camera_index",
        type=int,
        help="Camera device index for live mode.",
    )
    obj_parser.add_argument(
        "--fps",
        type=int,
        help="Target refresh rate in live mode; output frame rate for video files.",
    )
    obj_parser.add_argument(
        "--max_frames",
        type=int,
        help="Stop after this many rendered frames.",
    )
    obj_parser.add_argument(
        "--seed",
        type=int,
        help="Seed the glyph and glitch decisions for reproducible output.",
    )
    obj_parser.add_argument(
        "--record",
        type=str,
        help="Record the live mirror to this MP4 path.",
    )
    obj_parser.add_argument(
        "--glyph_font",
        type=str,
        help="TrueType or emoji font used to draw glyph cells.",
    )

    obj_args = obj_parser.parse_args()

    if obj_args.version:
        str_version_text: str = f"time-mosaic v{get_version()} (Python {sys.version.split()[0]})"
        logger_app.info(str_version_text)
        sys.exit(0)

    load_dotenv()
    try:
        obj_config: MirrorConfig = load_mirror_config()
    except ValueError as exc_error:
        logger_app.error("Configuration error. Context: %s", exc_error)
        sys.exit(1)

    float_screen_time: float = (
        obj_args.screen_time
        if obj_args.screen_time is not None
        else obj_config.float_daily_screen_time
    )
    int_age: int = obj_args.age if obj_args.age is not None else obj_config.int_age
    int_fps: int = obj_args.fps if obj_args.fps is not None else obj_config.int_target_fps
    str_font_path: str | None = (
        obj_args.glyph_font
        if obj_args.glyph_font is not None
        else obj_config.str_glyph_font_path
    )

    if not 0 <= float_screen_time <= 24:
        logger_app.error("Screen time must be between 0 and 24 hours.")
        sys.exit(1)
    if int_age < 0:
        logger_app.error("Age must be >= 0.")
        sys.exit(1)
    if int_fps < 1:
        logger_app.error("FPS must be >= 1.")
        sys.exit(1)
    if obj_args.max_frames is not None and obj_args.max_frames < 1:
        logger_app.error("Max frame count must be >= 1.")
        sys.exit(1)

    try:
        if obj_args.input_video is not None:
            obj_source_inputs: MosaicSourceInputs = MosaicSourceInputs(
                str_input_video_path=obj_args.input_video
            )
        else:
            int_camera_index: int = (
                obj_args.camera_index
                if obj_args.camera_index is not None
                else obj_config.int_camera_index
            )
            obj_source_inputs = MosaicSourceInputs(int_camera_index=int_camera_index)
    except ValueError as exc_error:
        logger_app.error("Initialization error. Context: %s", exc_error)
        sys.exit(1)

    obj_chaos_settings: ChaosSettings = ChaosSettings(float_daily_screen_time=float_screen_time)
    obj_random: random.Random | None = (
        random.Random(obj_args.seed) if obj_args.seed is not None else None
    )

    logger_app.info(
        "Estimated attention cost: %.1f years. chaos=%.2f cell_size=%d",
        calculate_lost_years(int_age, float_screen_time),
        obj_chaos_settings.float_chaos_level,
        obj_chaos_settings.int_cell_size,
    )

    if not obj_source_inputs.bool_live:
        str_input_path: str = str(obj_source_inputs.str_input_video_path)
        str_output_dir: str = obj_config.str_output_dir
        if not os.path.exists(str_output_dir):
            os.makedirs(str_output_dir)

        str_filename: str = os.path.splitext(os.path.basename(str_input_path))[0]
        str_output_file: str = os.path.join(
            str_output_dir,
            f"{str_filename}_mosaic_chaos{obj_chaos_settings.float_chaos_level:.2f}.mp4",
        )
        logger_app.info("Rendering video file %s...", str_input_path)
        try:
            render_video_file(
                str_input_path,
                str_output_file,
                obj_chaos_settings,
                int_fps=int_fps,
                int_max_frames=obj_args.max_frames,
                obj_random=obj_random,
                str_font_path=str_font_path,
            )
        except PermissionDeniedError:
            logger_app.error("Could not open input video: %s", str_input_path)
            sys.exit(1)
        except Exception as exc_error:
            logger_app.error("Video rendering failed. Context: %s", exc_error)
            sys.exit(1)
        return

    try:
        run_live_mirror(
            int(obj_source_inputs.obj_device),
            obj_chaos_settings,
            int_target_fps=int_fps,
            int_max_frames=obj_args.max_frames,
            str_record_path=obj_args.record,
            obj_random=obj_random,
            str_font_path=str_font_path,
        )
    except PermissionDeniedError as exc_error:
        logger_app.error("%s", exc_error.str_message)
        sys.exit(1)
    except Exception as exc_error:
        logger_app.error("Mirror session failed. Context: %s", exc_error)
        sys.exit(1)


if __name__ == "__main__":
    main()
