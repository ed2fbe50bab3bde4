"""Tick schedulers for the render loop.

A scheduler accepts "run this on the next refresh" requests and can cancel the
pending one. ``ManualScheduler`` runs ticks only when asked, which keeps tests
and offline rendering synchronous. ``FrameRateScheduler`` paces ticks against
a target refresh rate on the calling thread.
"""

from __future__ import annotations

import itertools
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Protocol

logger_app = logging.getLogger(__name__)


class FrameScheduler(Protocol):
    """Scheduling capability injected into ``RenderLoop``."""

    def schedule(self, fn_callback: Callable[[], None]) -> int:
        """Queue a callback for the next refresh and return its handle."""

    def cancel(self, int_handle: int) -> None:
        """Cancel a queued callback. Unknown handles are ignored."""


class ManualScheduler:
    """Queue callbacks and run them only on explicit request."""

    def __init__(self) -> None:
        self._iter_handles = itertools.count(1)
        self._dict_pending: OrderedDict[int, Callable[[], None]] = OrderedDict()

    @property
    def int_pending_count(self) -> int:
        return len(self._dict_pending)

    def schedule(self, fn_callback: Callable[[], None]) -> int:
        int_handle: int = next(self._iter_handles)
        self._dict_pending[int_handle] = fn_callback
        return int_handle

    def cancel(self, int_handle: int) -> None:
        self._dict_pending.pop(int_handle, None)

    def run_next(self) -> bool:
        """Run the oldest pending callback. Returns False when none is queued."""
        if not self._dict_pending:
            return False
        fn_callback: Callable[[], None]
        _, fn_callback = self._dict_pending.popitem(last=False)
        fn_callback()
        return True

    def run_pending(self, int_max_ticks: int) -> int:
        """Run up to ``int_max_ticks`` callbacks and return how many ran."""
        int_ran: int = 0
        while int_ran < int_max_ticks and self.run_next():
            int_ran += 1
        return int_ran


class FrameRateScheduler(ManualScheduler):
    """Run queued callbacks on the calling thread at a fixed refresh rate.

    ``run`` returns once nothing is pending, which happens after the render
    loop stops rescheduling itself.
    """

    def __init__(
        self,
        float_target_fps: float = 60.0,
        fn_clock: Callable[[], float] | None = None,
        fn_sleep: Callable[[float], None] | None = None,
    ) -> None:
        super().__init__()
        if float_target_fps <= 0:
            logger_app.error("Target FPS must be > 0. Received: %s", float_target_fps)
            raise ValueError("Target FPS must be > 0.")
        self.float_frame_interval: float = 1.0 / float_target_fps
        self.fn_clock: Callable[[], float] = fn_clock if fn_clock is not None else time.monotonic
        self.fn_sleep: Callable[[float], None] = fn_sleep if fn_sleep is not None else time.sleep

    def run(self) -> int:
        """Drive pending callbacks until none remain. Returns ticks executed."""
        int_ticks: int = 0
        float_next_deadline: float = self.fn_clock()
        while self.int_pending_count > 0:
            float_wait_seconds: float = float_next_deadline - self.fn_clock()
            if float_wait_seconds > 0:
                self.fn_sleep(float_wait_seconds)
            float_next_deadline = max(
                float_next_deadline + self.float_frame_interval, self.fn_clock()
            )
            self.run_next()
            int_ticks += 1
        return int_ticks
