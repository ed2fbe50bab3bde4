"""Unit tests for the time mosaic CLI entrypoint and helpers."""

from __future__ import annotations

import importlib.metadata
import logging
import os
import sys

import pytest

from time_mosaic import frame_source
from time_mosaic import mosaic_mirror
from time_mosaic.chaos_settings import ChaosSettings


@pytest.fixture
def clean_cli_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run the CLI in an empty directory without TIME_MOSAIC_* overrides."""
    for str_key in list(os.environ):
        if str_key.startswith("TIME_MOSAIC_"):
            monkeypatch.delenv(str_key)
    monkeypatch.chdir(tmp_path)


def test_get_version_returns_unknown_when_package_not_installed(monkeypatch: pytest.MonkeyPatch) -> None:
    """Validate version fallback behavior when package metadata is unavailable."""

    def _raise_package_not_found(str_name: str) -> str:
        """Raise package not found for version lookup."""
        raise importlib.metadata.PackageNotFoundError(str_name)

    monkeypatch.setattr(mosaic_mirror.importlib.metadata, "version", _raise_package_not_found)
    str_version = mosaic_mirror.get_version()
    assert str_version == "unknown"


def test_version_flag_exits_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["time-mosaic", "--version"])
    with pytest.raises(SystemExit) as obj_exc_info:
        mosaic_mirror.main()
    assert obj_exc_info.value.code == 0


def test_invalid_screen_time_exits(monkeypatch: pytest.MonkeyPatch, clean_cli_environment) -> None:
    """Validate the CLI exits with code 1 for screen time outside a day."""
    monkeypatch.setattr(sys, "argv", ["time-mosaic", "--screen_time", "25"])
    with pytest.raises(SystemExit) as obj_exc_info:
        mosaic_mirror.main()
    assert obj_exc_info.value.code == 1


def test_invalid_environment_value_exits(monkeypatch: pytest.MonkeyPatch, clean_cli_environment) -> None:
    monkeypatch.setenv("TIME_MOSAIC_TARGET_FPS", "fast")
    monkeypatch.setattr(sys, "argv", ["time-mosaic"])
    with pytest.raises(SystemExit) as obj_exc_info:
        mosaic_mirror.main()
    assert obj_exc_info.value.code == 1


def test_denied_camera_logs_message_and_exits(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
    clean_cli_environment,
    cls_stub_stream,
) -> None:
    """A camera that cannot be opened reports the denial message and exits 1."""
    monkeypatch.setattr(
        frame_source, "open_video_capture", lambda obj_device: cls_stub_stream([], bool_opened=False)
    )
    monkeypatch.setattr(sys, "argv", ["time-mosaic", "--camera_index", "0"])

    with caplog.at_level(logging.ERROR):
        with pytest.raises(SystemExit) as obj_exc_info:
            mosaic_mirror.main()

    assert obj_exc_info.value.code == 1
    assert "Camera access denied. The mirror cannot reflect your digital soul." in caplog.text


def test_main_video_mode_routes_to_render_video_file(
    monkeypatch: pytest.MonkeyPatch, clean_cli_environment, tmp_path
) -> None:
    """Ensure a positional video path renders offline into the output directory."""
    dict_call: dict[str, object] = {}

    def record_render_video_file(
        str_input_path: str,
        str_output_path: str,
        obj_chaos_settings: ChaosSettings,
        **kwargs: object,
    ) -> int:
        dict_call["str_input_path"] = str_input_path
        dict_call["str_output_path"] = str_output_path
        dict_call["obj_chaos_settings"] = obj_chaos_settings
        dict_call.update(kwargs)
        return 0

    monkeypatch.setattr(mosaic_mirror, "render_video_file", record_render_video_file)
    monkeypatch.setattr(
        sys,
        "argv",
        ["time-mosaic", "clip.mp4", "--screen_time", "12", "--fps", "12", "--max_frames", "5", "--seed", "3"],
    )

    mosaic_mirror.main()

    assert dict_call["str_input_path"] == "clip.mp4"
    assert dict_call["str_output_path"] == os.path.join("output", "clip_mosaic_chaos1.00.mp4")
    assert dict_call["obj_chaos_settings"] == ChaosSettings(float_daily_screen_time=12.0)
    assert dict_call["int_fps"] == 12
    assert dict_call["int_max_frames"] == 5
    assert dict_call["obj_random"] is not None
    assert (tmp_path / "output").is_dir()


def test_main_video_mode_unreadable_input_exits(
    monkeypatch: pytest.MonkeyPatch, clean_cli_environment, cls_stub_stream
) -> None:
    monkeypatch.setattr(
        frame_source, "open_video_capture", lambda obj_device: cls_stub_stream([], bool_opened=False)
    )
    monkeypatch.setattr(sys, "argv", ["time-mosaic", "missing.mp4"])

    with pytest.raises(SystemExit) as obj_exc_info:
        mosaic_mirror.main()
    assert obj_exc_info.value.code == 1
