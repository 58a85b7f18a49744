import os
import pytest
from datetime import datetime
from pathlib import Path
from unittest.mock import patch, MagicMock
from hevcify.domain.models import FileTimes
from hevcify.domain.errors import TimestampToolError
from hevcify.infrastructure.timestamps import (
    PortableTimestampTool, SetFileTimestampTool, copy_times, select_timestamp_tool
)


def _completed(stdout="", returncode=0, stderr=""):
    return MagicMock(stdout=stdout, returncode=returncode, stderr=stderr)


def test_setfile_read_times():
    outputs = [_completed("03/15/2024 10:22:33\n"), _completed("03/16/2024 08:00:00\n")]
    with patch("subprocess.run", side_effect=outputs) as mock_run:
        times = SetFileTimestampTool().read_times(Path("clip.MOV"))

    assert times.created == datetime(2024, 3, 15, 10, 22, 33)
    assert times.modified == datetime(2024, 3, 16, 8, 0, 0)
    assert mock_run.call_args_list[0][0][0] == ["GetFileInfo", "-d", "clip.MOV"]
    assert mock_run.call_args_list[1][0][0] == ["GetFileInfo", "-m", "clip.MOV"]


def test_setfile_apply_times():
    times = FileTimes(created=datetime(2024, 3, 15, 10, 22, 33), modified=datetime(2024, 3, 16, 8, 0, 0))
    with patch("subprocess.run", return_value=_completed()) as mock_run:
        SetFileTimestampTool().apply_times(Path("clip.mp4"), times)

    cmds = [c[0][0] for c in mock_run.call_args_list]
    assert cmds == [
        ["SetFile", "-d", "03/15/2024 10:22:33", "clip.mp4"],
        ["SetFile", "-m", "03/16/2024 08:00:00", "clip.mp4"],
    ]


def test_setfile_failure_raises():
    with patch("subprocess.run", return_value=_completed(returncode=1, stderr="boom")):
        with pytest.raises(TimestampToolError):
            SetFileTimestampTool().read_times(Path("clip.MOV"))


def test_setfile_unparseable_output_raises():
    with patch("subprocess.run", return_value=_completed("garbage")):
        with pytest.raises(TimestampToolError):
            SetFileTimestampTool().read_times(Path("clip.MOV"))


def test_portable_tool_copies_mtime(tmp_path):
    src = tmp_path / "src.mov"
    dest = tmp_path / "dest.mp4"
    src.write_text("a")
    dest.write_text("b")
    os.utime(src, (1_600_000_000, 1_600_000_000))

    tool = PortableTimestampTool()
    tool.apply_times(dest, tool.read_times(src))

    assert int(dest.stat().st_mtime) == 1_600_000_000


def test_copy_times_requires_both_paths(tmp_path):
    existing = tmp_path / "a.mov"
    existing.write_text("a")
    tool = PortableTimestampTool()

    with pytest.raises(FileNotFoundError, match="Source file"):
        copy_times(tmp_path / "missing.mov", existing, tool)
    with pytest.raises(FileNotFoundError, match="Destination file"):
        copy_times(existing, tmp_path / "missing.mp4", tool)


def test_select_prefers_setfile():
    with patch("shutil.which", return_value="/usr/bin/SetFile"):
        assert isinstance(select_timestamp_tool(), SetFileTimestampTool)
    with patch("shutil.which", return_value=None):
        assert isinstance(select_timestamp_tool(), PortableTimestampTool)
