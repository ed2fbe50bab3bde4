"""OpenCV window used to present the live mirror."""

from __future__ import annotations

import logging

import cv2
import numpy as np

logger_app = logging.getLogger(__name__)

TUPLE_QUIT_KEYS: tuple[int, ...] = (ord("q"), 27)


class OpenCVWindowDisplay:
    """Show BGR frames in a named window and report quit key presses."""

    def __init__(self, str_window_name: str = "The Mirror of Consumption") -> None:
        self.str_window_name: str = str_window_name
        self.bool_open: bool = False

    def present(self, array_bgr: np.ndarray) -> bool:
        """Show one frame. Returns True when the viewer asked to quit."""
        if not self.bool_open:
            cv2.namedWindow(self.str_window_name, cv2.WINDOW_NORMAL)
            self.bool_open = True
        cv2.imshow(self.str_window_name, array_bgr)
        int_key: int = cv2.waitKey(1) & 0xFF
        return int_key in TUPLE_QUIT_KEYS

    def close(self) -> None:
        if self.bool_open:
            cv2.destroyWindow(self.str_window_name)
            self.bool_open = False
