import io
import pytest
from datetime import datetime
from pathlib import Path
from rich.console import Console
from hevcify.config.models import GeneralConfig
from hevcify.domain.errors import EncoderError, MetadataToolError, TimestampToolError
from hevcify.domain.models import FileTimes
from hevcify.infrastructure.event_bus import EventBus
from hevcify.pipeline.orchestrator import PipelineOrchestrator


class FakeEncoder:
    """Writes a small fake intermediate file instead of running ffmpeg."""

    def __init__(self, calls, fail=False, payload=b"x" * 400):
        self.calls = calls
        self.fail = fail
        self.payload = payload

    def transcode(self, task, crf, speed):
        self.calls.append(("transcode", task.input_file.name, crf, speed))
        if self.fail:
            raise EncoderError("ffmpeg exited with code 1: boom", returncode=1)
        task.intermediate_path.write_bytes(self.payload)


class FakeMetadataTool:
    def __init__(self, calls, fail_copy=False, fail_keys=False):
        self.calls = calls
        self.fail_copy = fail_copy
        self.fail_keys = fail_keys

    def copy_metadata(self, source, target):
        self.calls.append(("copy_metadata", source.name, target.name))
        if self.fail_copy:
            raise MetadataToolError("exiftool exited with code 1: bad file", returncode=1)

    def rebuild_keys(self, target):
        self.calls.append(("rebuild_keys", target.name))
        if self.fail_keys:
            raise MetadataToolError("exiftool exited with code 1: keys", returncode=1)

    def stop(self):
        pass


class FakeTimestampTool:
    name = "fake"

    def __init__(self, calls, fail=False):
        self.calls = calls
        self.fail = fail
        self.times = FileTimes(created=datetime(2024, 3, 15, 10, 22, 33), modified=datetime(2024, 3, 16, 8, 0, 0))

    def read_times(self, path):
        self.calls.append(("read_times", path.name))
        if self.fail:
            raise TimestampToolError("GetFileInfo exited with code 1", returncode=1)
        return self.times

    def apply_times(self, path, times):
        self.calls.append(("apply_times", path.name))


@pytest.fixture
def calls():
    return []


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorded_events(bus):
    from hevcify.domain.events import Event
    events = []
    bus.subscribe(Event, events.append)
    return events


@pytest.fixture
def make_orchestrator(bus, calls):
    """Builds an orchestrator wired to fakes; keyword args tweak the fakes."""
    def factory(config=None, answer=False, encoder_fail=False, fail_copy=False,
                fail_keys=False, timestamp_fail=False):
        prompts = []

        def confirm(existing):
            prompts.append(list(existing))
            return answer

        orchestrator = PipelineOrchestrator(
            config=config or GeneralConfig(),
            event_bus=bus,
            encoder=FakeEncoder(calls, fail=encoder_fail),
            metadata_tool=FakeMetadataTool(calls, fail_copy=fail_copy, fail_keys=fail_keys),
            timestamp_tool=FakeTimestampTool(calls, fail=timestamp_fail),
            confirm_overwrite=confirm,
        )
        orchestrator.prompts = prompts
        return orchestrator
    return factory


@pytest.fixture
def video_dir(tmp_path):
    d = tmp_path / "videos"
    d.mkdir()
    return d


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200, force_terminal=False, color_system=None)


@pytest.fixture
def cli_env(monkeypatch, calls, tmp_path):
    """Points hevcify.main at fake tools so CLI runs never touch real binaries."""
    import logging
    from hevcify import main

    metadata = FakeMetadataTool(calls)
    timestamps = FakeTimestampTool(calls)
    monkeypatch.setattr(main, "check_required_tools", lambda: None)
    monkeypatch.setattr(main, "setup_logging", lambda *a, **kw: logging.getLogger("hevcify"))
    monkeypatch.setattr(main, "ExifToolAdapter", lambda: metadata)
    monkeypatch.setattr(main, "FFprobeAdapter", lambda: None)
    monkeypatch.setattr(main, "FFmpegAdapter", lambda event_bus, ffprobe: FakeEncoder(calls))
    monkeypatch.setattr(main, "select_timestamp_tool", lambda: timestamps)
    return tmp_path / "no-config.yaml"
