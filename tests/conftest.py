"""Shared pytest configuration and fixtures for the time mosaic test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import random
import sys
import time

import numpy as np
import pytest


path_project_root = Path(__file__).resolve().parents[1]
path_src = path_project_root / "src"
if str(path_src) not in sys.path:
    sys.path.insert(0, str(path_src))

from time_mosaic.frame_source import VideoFrame  # noqa: E402


class StubCameraStream:
    """Camera stream stub returning queued BGR frames."""

    def __init__(
        self,
        list_array_frames: list[np.ndarray],
        bool_opened: bool = True,
        bool_repeat_last: bool = False,
        float_read_delay_seconds: float = 0.0,
    ) -> None:
        self.list_array_frames = list(list_array_frames)
        self.bool_opened = bool_opened
        self.bool_repeat_last = bool_repeat_last
        self.float_read_delay_seconds = float_read_delay_seconds
        self.int_read_calls = 0
        self.int_release_calls = 0
        self._array_last: np.ndarray | None = None

    def isOpened(self) -> bool:
        return self.bool_opened and self.int_release_calls == 0

    def read(self) -> tuple[bool, np.ndarray | None]:
        self.int_read_calls += 1
        if self.float_read_delay_seconds > 0:
            time.sleep(self.float_read_delay_seconds)
        if self.list_array_frames:
            self._array_last = self.list_array_frames.pop(0)
            return True, self._array_last
        if self.bool_repeat_last and self._array_last is not None:
            return True, self._array_last
        return False, None

    def release(self) -> None:
        self.int_release_calls += 1


class RecordingSurface:
    """Surface stub that records every drawing call."""

    def __init__(self, int_width: int = 0, int_height: int = 0) -> None:
        self._int_width = int_width
        self._int_height = int_height
        self.list_rect_calls: list[tuple[int, int, int, int, tuple[int, int, int]]] = []
        self.list_text_calls: list[tuple[str, tuple[int, int], int, tuple[int, int, int]]] = []
        self.list_copy_calls: list[tuple[tuple[int, int, int, int], tuple[int, int]]] = []
        self.int_resize_calls = 0

    @property
    def int_width(self) -> int:
        return self._int_width

    @property
    def int_height(self) -> int:
        return self._int_height

    @property
    def int_draw_calls(self) -> int:
        return len(self.list_rect_calls) + len(self.list_text_calls) + len(self.list_copy_calls)

    def resize(self, int_width: int, int_height: int) -> None:
        self.int_resize_calls += 1
        self._int_width = int_width
        self._int_height = int_height

    def fill_rect(
        self,
        int_left: int,
        int_top: int,
        int_width: int,
        int_height: int,
        tuple_color: tuple[int, int, int],
    ) -> None:
        self.list_rect_calls.append((int_left, int_top, int_width, int_height, tuple_color))

    def fill_text_centered(
        self,
        str_text: str,
        tuple_center: tuple[int, int],
        int_font_size: int,
        tuple_color: tuple[int, int, int],
    ) -> None:
        self.list_text_calls.append((str_text, tuple_center, int_font_size, tuple_color))

    def copy_region(
        self,
        tuple_source_box: tuple[int, int, int, int],
        tuple_dest_xy: tuple[int, int],
    ) -> None:
        self.list_copy_calls.append((tuple_source_box, tuple_dest_xy))


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns one value."""

    def __init__(self, float_value: float) -> None:
        super().__init__(0)
        self.float_value = float_value

    def random(self) -> float:
        return self.float_value


def build_solid_array(
    int_width: int, int_height: int, tuple_color: tuple[int, int, int]
) -> np.ndarray:
    """Create a solid-color uint8 image array of shape (height, width, 3)."""
    array_result = np.empty((int_height, int_width, 3), dtype=np.uint8)
    array_result[:, :] = tuple_color
    return array_result


@pytest.fixture
def fn_solid_frame() -> Callable[..., VideoFrame]:
    """Factory for solid-color RGB ``VideoFrame`` objects."""

    def build_frame(
        int_width: int, int_height: int, tuple_color: tuple[int, int, int]
    ) -> VideoFrame:
        return VideoFrame(
            array_rgb=build_solid_array(int_width, int_height, tuple_color),
            float_timestamp=1.0,
            int_sequence=0,
        )

    return build_frame


@pytest.fixture
def fn_solid_array() -> Callable[[int, int, tuple[int, int, int]], np.ndarray]:
    """Factory for solid-color uint8 arrays (used as BGR stream frames)."""
    return build_solid_array


@pytest.fixture
def cls_stub_stream() -> type[StubCameraStream]:
    return StubCameraStream


@pytest.fixture
def recording_surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def cls_fixed_random() -> type[FixedRandom]:
    return FixedRandom
