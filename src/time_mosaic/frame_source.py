"""Camera frame acquisition for the mosaic mirror.

The frame source owns the capture handle for one session. It opens the stream
once, publishes the most recently decoded frame, and releases the hardware on
teardown. Live cameras decode on a daemon reader thread that stands in for the
host media pipeline; offline callers pump ``decode_next`` themselves.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any
from typing import Protocol

import cv2
import numpy as np

logger_app = logging.getLogger(__name__)

STR_PERMISSION_DENIED_MESSAGE: str = (
    "Camera access denied. The mirror cannot reflect your digital soul."
)


class PermissionDeniedError(RuntimeError):
    """Raised when the camera cannot be opened for this session."""

    def __init__(self, str_message: str = STR_PERMISSION_DENIED_MESSAGE) -> None:
        super().__init__(str_message)
        self.str_message: str = str_message


class FrameSourceState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RELEASED = "released"
    DENIED = "denied"


class CameraStream(Protocol):
    """Subset of ``cv2.VideoCapture`` consumed by ``FrameSource``."""

    def isOpened(self) -> bool:
        """Return True when the stream handle is usable."""

    def read(self) -> tuple[bool, Any]:
        """Return ``(ok, bgr_array)`` for the next frame."""

    def release(self) -> None:
        """Stop the stream and free the device."""


@dataclass(frozen=True)
class VideoFrame:
    """One decoded camera frame.

    Attributes:
    - ``array_rgb``: RGB uint8 array of shape (height, width, 3).
    - ``float_timestamp``: Monotonic time of decode in seconds.
    - ``int_sequence``: Zero-based decode counter.
    """

    array_rgb: np.ndarray
    float_timestamp: float
    int_sequence: int

    @property
    def int_width(self) -> int:
        return int(self.array_rgb.shape[1])

    @property
    def int_height(self) -> int:
        return int(self.array_rgb.shape[0])

    def is_decoded(self) -> bool:
        """Return True when the frame holds a complete drawable RGB image."""
        if self.array_rgb.dtype != np.uint8:
            return False
        if self.array_rgb.ndim != 3 or self.array_rgb.shape[2] != 3:
            return False
        if self.array_rgb.shape[0] < 1 or self.array_rgb.shape[1] < 1:
            return False
        return True

    def __repr__(self) -> str:
        return (
            f"VideoFrame(int_sequence={self.int_sequence}, "
            f"size={self.int_width}x{self.int_height}, "
            f"float_timestamp={self.float_timestamp:.3f})"
        )


def open_video_capture(obj_device: int | str) -> CameraStream:
    """Open an OpenCV capture for a camera index or video file path.

    Third-party API reference:
    https://docs.opencv.org/4.x/d8/dfe/classcv_1_1VideoCapture.html
    """
    obj_capture: CameraStream = cv2.VideoCapture(obj_device)
    return obj_capture


class FrameSource:
    """Own one video stream and expose its latest decoded frame.

    Constructor Input:
    - ``obj_device``: Camera index or video file path.
    - ``fn_open_stream``: Stream opener, ``open_video_capture`` by default.
    - ``bool_background_decode``: Start a reader thread on ``acquire``.
    """

    def __init__(
        self,
        obj_device: int | str = 0,
        fn_open_stream: Callable[[int | str], CameraStream] | None = None,
        bool_background_decode: bool = True,
        float_join_timeout_seconds: float = 1.0,
    ) -> None:
        self.obj_device: int | str = obj_device
        self._fn_open_stream: Callable[[int | str], CameraStream] = (
            fn_open_stream if fn_open_stream is not None else open_video_capture
        )
        self.bool_background_decode: bool = bool_background_decode
        self.float_join_timeout_seconds: float = float_join_timeout_seconds

        self.state: FrameSourceState = FrameSourceState.UNINITIALIZED
        self._obj_stream: CameraStream | None = None
        self._video_frame_latest: VideoFrame | None = None
        self._int_sequence: int = 0
        self._lock_frame: threading.Lock = threading.Lock()
        self._lock_stream: threading.Lock = threading.Lock()
        self._event_stop: threading.Event = threading.Event()
        self._thread_reader: threading.Thread | None = None

    def __enter__(self) -> FrameSource:
        return self

    def __exit__(self, *args: object) -> None:
        self.release()

    @property
    def int_active_streams(self) -> int:
        """Number of stream handles currently held (0 or 1)."""
        return 0 if self._obj_stream is None else 1

    @property
    def bool_reader_alive(self) -> bool:
        return self._thread_reader is not None and self._thread_reader.is_alive()

    def acquire(self) -> None:
        """Request the video stream and transition to ``READY``.

        Raises ``PermissionDeniedError`` when the device cannot be opened.
        """
        if self.state is not FrameSourceState.UNINITIALIZED:
            logger_app.error(
                "acquire called on a frame source in state %s.", self.state.value
            )
            raise RuntimeError(
                f"Frame source cannot be acquired from state {self.state.value}."
            )

        try:
            obj_stream: CameraStream = self._fn_open_stream(self.obj_device)
        except Exception as exc_error:
            self.state = FrameSourceState.DENIED
            logger_app.error(
                "Failed to open video stream for device %s. Context: %s",
                self.obj_device,
                exc_error,
            )
            raise PermissionDeniedError() from exc_error

        if not obj_stream.isOpened():
            self.state = FrameSourceState.DENIED
            obj_stream.release()
            logger_app.error("Video stream for device %s is not available.", self.obj_device)
            raise PermissionDeniedError()

        self._obj_stream = obj_stream
        self.state = FrameSourceState.READY
        logger_app.info("Acquired video stream for device %s.", self.obj_device)

        if self.bool_background_decode:
            self._event_stop.clear()
            self._thread_reader = threading.Thread(
                target=self._run_reader,
                name="time-mosaic-frame-reader",
                daemon=True,
            )
            self._thread_reader.start()

    def _run_reader(self) -> None:
        """Decode frames until release is requested or the stream ends."""
        while not self._event_stop.is_set():
            if not self.decode_next():
                logger_app.info("Video stream for device %s ended.", self.obj_device)
                break

    def decode_next(self) -> bool:
        """Decode one frame from the stream and publish it as the latest.

        Output:
        - ``True`` when a frame was published, ``False`` at end-of-stream, on a
          failed read, or when the source is not ready.
        """
        # The stream lock keeps release() from freeing the handle mid-read.
        with self._lock_stream:
            obj_stream: CameraStream | None = self._obj_stream
            if self.state is not FrameSourceState.READY or obj_stream is None:
                return False
            bool_ok, array_bgr = obj_stream.read()
        if not bool_ok or array_bgr is None:
            return False

        array_rgb: np.ndarray = cv2.cvtColor(array_bgr, cv2.COLOR_BGR2RGB)
        video_frame: VideoFrame = VideoFrame(
            array_rgb=array_rgb,
            float_timestamp=time.monotonic(),
            int_sequence=self._int_sequence,
        )
        with self._lock_frame:
            if self.state is not FrameSourceState.READY:
                return False
            self._int_sequence += 1
            self._video_frame_latest = video_frame
        return True

    def current_frame(self) -> VideoFrame | None:
        """Return the latest decoded frame without blocking, if any."""
        if self.state is not FrameSourceState.READY:
            return None
        with self._lock_frame:
            video_frame: VideoFrame | None = self._video_frame_latest
        return video_frame

    def release(self) -> None:
        """Stop decoding and free the stream handle. Repeated calls are no-ops."""
        if self.state in (FrameSourceState.RELEASED, FrameSourceState.DENIED):
            return

        self._event_stop.set()
        with self._lock_frame:
            self.state = FrameSourceState.RELEASED
            self._video_frame_latest = None

        thread_reader: threading.Thread | None = self._thread_reader
        if thread_reader is not None and thread_reader is not threading.current_thread():
            thread_reader.join(timeout=self.float_join_timeout_seconds)
            if thread_reader.is_alive():
                logger_app.warning(
                    "Frame reader for device %s did not stop within %.1fs.",
                    self.obj_device,
                    self.float_join_timeout_seconds,
                )
        self._thread_reader = None

        # Blocks until an in-flight read returns.
        with self._lock_stream:
            obj_stream: CameraStream | None = self._obj_stream
            self._obj_stream = None
            if obj_stream is not None:
                try:
                    obj_stream.release()
                finally:
                    logger_app.info("Released video stream for device %s.", self.obj_device)
