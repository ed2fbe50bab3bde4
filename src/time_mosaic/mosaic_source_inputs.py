"""Input model for selecting the mirror's video source.

Callers must supply exactly one source: a live camera index or a recorded
video file.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class MosaicSourceInputs:
    """Validated video-source inputs for a mirror session.

    Inputs:
    - ``int_camera_index``: Live camera device index.
    - ``str_input_video_path``: Filesystem path to a recorded video.

    Output/Behavior:
    - Exactly one input source is allowed.
    - Camera index must be >= 0; video path must be non-blank.
    """

    int_camera_index: int | None = None
    str_input_video_path: str | None = None

    def __post_init__(self) -> None:
        """Validate source exclusivity and normalize stored values."""
        bool_has_camera_field: bool = self.int_camera_index is not None
        bool_has_video_field: bool = self.str_input_video_path is not None

        if bool_has_camera_field and bool_has_video_field:
            raise ValueError("Provide only one video source: camera index or video path.")

        if not bool_has_camera_field and not bool_has_video_field:
            raise ValueError("One video source is required: camera index or video path.")

        if self.int_camera_index is not None and self.int_camera_index < 0:
            raise ValueError("Camera index must be >= 0.")

        if self.str_input_video_path is not None:
            str_normalized_path: str = self.str_input_video_path.strip()
            if not str_normalized_path:
                raise ValueError("Video path cannot be empty or whitespace.")
            self.str_input_video_path = str_normalized_path

    @property
    def bool_live(self) -> bool:
        return self.int_camera_index is not None

    @property
    def obj_device(self) -> int | str:
        """Device argument for ``FrameSource``."""
        if self.int_camera_index is not None:
            return self.int_camera_index
        return str(self.str_input_video_path)
