import pytest
from hevcify.config.models import GeneralConfig
from hevcify.domain.models import JobRequest, JobStatus
from hevcify.domain.events import DiscoveryFinished, FileSkipped
from hevcify.infrastructure.file_scanner import FileScanner
from hevcify.pipeline.batch import BatchDriver
from hevcify.ui.manager import UIManager
from hevcify.ui.state import RunState


@pytest.fixture
def driver(make_orchestrator, bus):
    def factory(**kwargs):
        orchestrator = make_orchestrator(**kwargs)
        scanner = FileScanner(orchestrator.config.extensions, orchestrator.config.intermediate_suffix)
        return BatchDriver(orchestrator, scanner, bus)
    return factory


def test_directory_runs_pipeline_once_per_eligible_file(driver, video_dir, calls, recorded_events):
    for name in ["a.MOV", "b.mp4", "c.mkv"]:
        (video_dir / name).write_bytes(b"v" * 100)
    for name in ["notes.txt", "d.avi"]:
        (video_dir / name).write_text("x")
    (video_dir / "sub").mkdir()
    (video_dir / "sub" / "e.mov").write_bytes(b"v")

    outcomes = driver().run(JobRequest(input_path=video_dir))

    assert len(outcomes) == 3
    assert [c[1] for c in calls if c[0] == "transcode"] == ["a.MOV", "b.mp4", "c.mkv"]
    skipped = [e.path.name for e in recorded_events if isinstance(e, FileSkipped)]
    assert sorted(skipped) == ["d.avi", "notes.txt"]
    finished = [e for e in recorded_events if isinstance(e, DiscoveryFinished)][0]
    assert finished.files_to_process == 3
    assert finished.ignored == 2


def test_previous_intermediate_outputs_are_not_reprocessed(driver, video_dir, calls):
    (video_dir / "a.mov").write_bytes(b"v")
    (video_dir / "old_ffmpeg-raw.mp4").write_bytes(b"v")

    outcomes = driver().run(JobRequest(input_path=video_dir))

    assert [o.input_file.name for o in outcomes] == ["a.mov"]


def test_failure_does_not_stop_the_batch(driver, video_dir, calls, bus):
    for name in ["a.mov", "b.mov"]:
        (video_dir / name).write_bytes(b"v")
    state = RunState()
    UIManager(bus, state)

    outcomes = driver(encoder_fail=True).run(JobRequest(input_path=video_dir))

    assert [o.status for o in outcomes] == [JobStatus.FAILED, JobStatus.FAILED]
    assert state.failed_count == 2
    assert state.exit_code == 1


def test_single_file_unsupported_does_not_fail_run(driver, video_dir, bus, calls):
    path = video_dir / "movie.avi"
    path.write_text("x")
    state = RunState()
    UIManager(bus, state)

    outcomes = driver().run(JobRequest(input_path=path))

    assert outcomes[0].status == JobStatus.UNSUPPORTED
    assert calls == []
    assert state.unsupported_count == 1
    assert state.exit_code == 0


def test_missing_path_raises(driver, tmp_path):
    with pytest.raises(FileNotFoundError):
        driver().run(JobRequest(input_path=tmp_path / "nope.mov"))


def test_output_never_overwrites_another_source(driver, video_dir, calls):
    (video_dir / "clip.MOV").write_bytes(b"v" * 1000)
    (video_dir / "clip.mp4").write_bytes(b"USER-SOURCE")

    outcomes = driver(config=GeneralConfig(assume_yes=True)).run(JobRequest(input_path=video_dir))

    assert [o.status for o in outcomes] == [JobStatus.COMPLETED, JobStatus.COMPLETED]
    assert [o.task.final_path.name for o in outcomes] == ["clip_mov.mp4", "clip_mp4.mp4"]
    assert (video_dir / "clip.mp4").read_bytes() == b"USER-SOURCE"
    assert [c[1] for c in calls if c[0] == "transcode"] == ["clip.MOV", "clip.mp4"]


def test_shared_stem_gets_distinct_outputs(driver, video_dir):
    for name in ["clip.mkv", "clip.mov"]:
        (video_dir / name).write_bytes(b"v")

    outcomes = driver().run(JobRequest(input_path=video_dir))

    paths = [p.name for o in outcomes for p in o.task.output_paths]
    assert paths == [
        "clip_mkv_ffmpeg-raw.mp4", "clip_mkv.mp4",
        "clip_mov_ffmpeg-raw.mp4", "clip_mov.mp4",
    ]
