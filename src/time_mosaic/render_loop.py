"""Continuous render loop tying a frame source to a mosaic renderer."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .frame_source import FrameSource
from .frame_source import FrameSourceState
from .mosaic_renderer import MosaicRenderResult
from .mosaic_renderer import MosaicRenderer
from .mosaic_surface import MosaicSurface
from .schedulers import FrameScheduler

logger_app = logging.getLogger(__name__)

TypeFrameCallback = Callable[[MosaicSurface, MosaicRenderResult], None]


class RenderLoop:
    """Pull the latest frame, render it, and reschedule, until stopped.

    Constructor Input:
    - ``obj_frame_source``: Source of decoded frames; released on ``stop``.
    - ``obj_renderer``: Renderer drawing onto its own surface.
    - ``obj_scheduler``: Refresh scheduler used to queue the next tick.
    - ``fn_on_frame_rendered``: Optional callback after each drawn frame. It
      may call ``stop``; no further tick is scheduled in that case.

    Output/Behavior:
    - A failing tick is logged and skipped. The loop only ends on ``stop``.
    """

    def __init__(
        self,
        obj_frame_source: FrameSource,
        obj_renderer: MosaicRenderer,
        obj_scheduler: FrameScheduler,
        fn_on_frame_rendered: TypeFrameCallback | None = None,
    ) -> None:
        self.obj_frame_source: FrameSource = obj_frame_source
        self.obj_renderer: MosaicRenderer = obj_renderer
        self.obj_scheduler: FrameScheduler = obj_scheduler
        self.fn_on_frame_rendered: TypeFrameCallback | None = fn_on_frame_rendered

        self.bool_running: bool = False
        self.bool_stopped: bool = False
        self.int_tick_count: int = 0
        self.int_frames_drawn: int = 0
        self._int_pending_handle: int | None = None

    def start(self) -> None:
        """Acquire the frame source if needed and schedule the first tick.

        ``PermissionDeniedError`` from the frame source propagates and the
        loop is never started.
        """
        if self.bool_running or self.bool_stopped:
            logger_app.error("Render loop cannot be started twice.")
            raise RuntimeError("Render loop cannot be started twice.")

        if self.obj_frame_source.state is FrameSourceState.UNINITIALIZED:
            self.obj_frame_source.acquire()

        self.bool_running = True
        logger_app.info(
            "Render loop started. chaos=%.2f cell_size=%d",
            self.obj_renderer.obj_chaos_settings.float_chaos_level,
            self.obj_renderer.obj_chaos_settings.int_cell_size,
        )
        self._schedule_next()

    def _schedule_next(self) -> None:
        self._int_pending_handle = self.obj_scheduler.schedule(self.tick)

    def tick(self) -> None:
        """Run one render pass and queue the next one while running."""
        self._int_pending_handle = None
        if not self.bool_running:
            return

        self.int_tick_count += 1
        try:
            obj_result: MosaicRenderResult | None = self.obj_renderer.render_frame(
                self.obj_frame_source.current_frame()
            )
            if obj_result is not None:
                self.int_frames_drawn += 1
                if self.fn_on_frame_rendered is not None:
                    self.fn_on_frame_rendered(self.obj_renderer.obj_surface, obj_result)
        except Exception as exc_error:
            logger_app.warning(
                "Render tick %d failed; continuing. Context: %s",
                self.int_tick_count,
                exc_error,
            )

        if self.bool_running:
            self._schedule_next()

    def stop(self) -> None:
        """Cancel the pending tick and release the frame source. Idempotent."""
        if self.bool_stopped:
            return
        self.bool_running = False
        self.bool_stopped = True

        if self._int_pending_handle is not None:
            self.obj_scheduler.cancel(self._int_pending_handle)
            self._int_pending_handle = None

        self.obj_frame_source.release()
        logger_app.info(
            "Render loop stopped. ticks=%d frames_drawn=%d",
            self.int_tick_count,
            self.int_frames_drawn,
        )
