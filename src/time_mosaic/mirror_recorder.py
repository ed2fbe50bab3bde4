"""MP4 encoding of rendered mosaic frames."""

from __future__ import annotations

import logging

import cv2
import numpy as np
from PIL import Image

logger_app = logging.getLogger(__name__)


class MosaicVideoWriter:
    """Append rendered frames to an MP4 file.

    The underlying ``cv2.VideoWriter`` is created lazily from the size of the
    first appended frame. Later frames with a different size are resized to
    match it.

    Third-party API reference:
    https://docs.opencv.org/4.x/dd/d9e/classcv_1_1VideoWriter.html
    """

    def __init__(self, str_output_path: str, int_fps: int = 30) -> None:
        if int_fps < 1:
            logger_app.error("FPS must be >= 1. Received: %d", int_fps)
            raise ValueError("FPS must be >= 1.")
        self.str_output_path: str = str_output_path
        self.int_fps: int = int_fps
        self.int_frames_written: int = 0
        self._tuple_frame_size: tuple[int, int] | None = None
        self._video_writer: cv2.VideoWriter | None = None

    def __enter__(self) -> MosaicVideoWriter:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def append_frame(self, image_frame: Image.Image) -> None:
        """Encode one RGB image as the next video frame."""
        if self._video_writer is None:
            obj_fourcc: int = cv2.VideoWriter_fourcc(*"mp4v")  # type: ignore
            self._tuple_frame_size = (image_frame.width, image_frame.height)
            self._video_writer = cv2.VideoWriter(
                self.str_output_path,
                obj_fourcc,
                self.int_fps,
                self._tuple_frame_size,
            )
            if not self._video_writer.isOpened():
                self._video_writer = None
                logger_app.error("Failed to open video writer for %s.", self.str_output_path)
                raise RuntimeError(f"Failed to open video writer for {self.str_output_path}.")

        if image_frame.size != self._tuple_frame_size:
            image_frame = image_frame.resize(self._tuple_frame_size, Image.Resampling.LANCZOS)

        array_rgb = np.array(image_frame.convert("RGB"))
        array_bgr = array_rgb[:, :, ::-1].copy()
        try:
            self._video_writer.write(array_bgr)
        except cv2.error as exc_error:
            logger_app.error("Failed to encode frame. Context: %s", exc_error)
            raise RuntimeError(f"Error encoding frame: {exc_error}") from exc_error
        self.int_frames_written += 1

    def close(self) -> None:
        """Finalize the file. Safe to call when nothing was written."""
        if self._video_writer is not None:
            self._video_writer.release()
            self._video_writer = None
            logger_app.info(
                "Recording complete. frames=%d saved to: %s",
                self.int_frames_written,
                self.str_output_path,
            )
