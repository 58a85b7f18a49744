import logging
import shutil
from pathlib import Path
from typing import Callable, List, Sequence, Tuple
from hevcify.config.models import GeneralConfig
from hevcify.infrastructure.event_bus import EventBus
from hevcify.infrastructure.file_scanner import FileScanner
from hevcify.domain.interfaces import Encoder, MetadataTool, TimestampTool, OverwritePrompt
from hevcify.domain.errors import ToolError
from hevcify.domain.models import (
    FileTask, JobOutcome, JobRequest, JobStatus, PipelineResult, SizeStats, Stage
)
from hevcify.domain.events import (
    FileSkipped, JobCompleted, JobFailed, JobFinished, JobStarted, OverwriteDeclined,
    StageCompleted, StageFailed, StageStarted
)

OUTPUT_EXTENSION = ".mp4"
COLLISION_SUFFIX = "_hevc"

class PipelineOrchestrator:
    """Runs one file through transcode -> metadata copy -> Keys fix -> timestamp sync.

    Each stage either succeeds and hands over to the next one, or fails and
    ends the job. Outputs left behind by a failed stage are not removed.
    """

    def __init__(
        self,
        config: GeneralConfig,
        event_bus: EventBus,
        encoder: Encoder,
        metadata_tool: MetadataTool,
        timestamp_tool: TimestampTool,
        confirm_overwrite: OverwritePrompt
    ):
        self.config = config
        self.event_bus = event_bus
        self.encoder = encoder
        self.metadata_tool = metadata_tool
        self.timestamp_tool = timestamp_tool
        self.confirm_overwrite = confirm_overwrite
        self.file_scanner = FileScanner(config.extensions, config.intermediate_suffix)
        self.logger = logging.getLogger(__name__)

        self.stages: List[Tuple[Stage, Callable[[JobRequest, FileTask], str]]] = [
            (Stage.TRANSCODE, self._transcode),
            (Stage.METADATA_COPY, self._copy_metadata),
            (Stage.KEY_FIX, self._fix_keys),
            (Stage.TIMESTAMP_SYNC, self._sync_timestamps),
        ]
        if not config.fix_keys:
            self.stages = [s for s in self.stages if s[0] != Stage.KEY_FIX]

    def build_task(self, input_file: Path, sources: Sequence[Path] = ()) -> FileTask:
        """Derives output paths from the input file name.

        ``sources`` are the other inputs of the same batch. No output path may
        land on one of them, so a stem shared between inputs (clip.mov and
        clip.mkv) gets the source extension appended, and a final name equal
        to an input gets the collision suffix.
        """
        out_dir = self.config.output_dir if self.config.output_dir else input_file.parent
        extension = input_file.suffix.lower().lstrip(".")
        others = [p for p in sources if p != input_file]

        stem = input_file.stem
        if any(p.stem.lower() == stem.lower() for p in others):
            stem = f"{stem}_{extension}"

        intermediate = out_dir / f"{stem}{self.config.intermediate_suffix}{OUTPUT_EXTENSION}"
        final = out_dir / f"{stem}{OUTPUT_EXTENSION}"
        # Compared case-insensitively: clip.MP4 and clip.mp4 are one file on macOS
        taken = {
            p.name.lower() for p in [input_file, *others]
            if p.parent.resolve() == out_dir.resolve()
        }
        if final.name.lower() in taken:
            final = out_dir / f"{stem}{COLLISION_SUFFIX}{OUTPUT_EXTENSION}"

        return FileTask(
            input_file=input_file,
            intermediate_path=intermediate,
            final_path=final,
            extension=extension,
        )

    def process(self, request: JobRequest, input_file: Path, sources: Sequence[Path] = ()) -> JobOutcome:
        outcome = JobOutcome(input_file=input_file)

        # 1. Extension check
        if not self.file_scanner.is_supported(input_file):
            reason = f"unsupported format '{input_file.suffix or '(none)'}' (expected: {', '.join(self.config.extensions)})"
            self.logger.warning(f"Skipping {input_file.name}: {reason}")
            outcome.status = JobStatus.UNSUPPORTED
            self.event_bus.publish(FileSkipped(path=input_file, reason=reason))
            return self._finish(outcome)

        task = self.build_task(input_file, sources)
        outcome.task = task

        # 2. Overwrite check
        existing = [p for p in task.output_paths if p.exists()]
        if existing and not self.config.assume_yes:
            if not self.confirm_overwrite(existing):
                self.logger.info(f"Overwrite declined for {input_file.name}")
                outcome.status = JobStatus.SKIPPED_BY_USER
                self.event_bus.publish(OverwriteDeclined(task=task, existing=existing))
                return self._finish(outcome)

        if self.config.output_dir:
            self.config.output_dir.mkdir(parents=True, exist_ok=True)

        outcome.status = JobStatus.PROCESSING
        self.event_bus.publish(JobStarted(task=task, crf=request.crf, speed=request.speed))

        # 3-6. Stages, halting on the first failure
        for stage, handler in self.stages:
            self.event_bus.publish(StageStarted(task=task, stage=stage))
            result = self._run_stage(stage, handler, request, task)
            outcome.results.append(result)
            if not result.success:
                outcome.status = JobStatus.FAILED
                self.event_bus.publish(StageFailed(task=task, result=result))
                self.event_bus.publish(JobFailed(task=task, result=result))
                return self._finish(outcome)
            self.event_bus.publish(StageCompleted(task=task, result=result))

        # 7. Stats
        outcome.stats = SizeStats(
            original_bytes=input_file.stat().st_size,
            final_bytes=task.final_path.stat().st_size,
        )
        outcome.status = JobStatus.COMPLETED
        self.logger.info(
            f"Completed {input_file.name}: {outcome.stats.original_bytes} -> {outcome.stats.final_bytes} bytes"
        )
        self.event_bus.publish(JobCompleted(task=task, stats=outcome.stats))
        return self._finish(outcome)

    def _finish(self, outcome: JobOutcome) -> JobOutcome:
        self.event_bus.publish(JobFinished(outcome=outcome))
        return outcome

    def _run_stage(self, stage: Stage, handler, request: JobRequest, task: FileTask) -> PipelineResult:
        try:
            message = handler(request, task)
        except ToolError as e:
            self.logger.error(f"{stage.value} failed for {task.input_file.name}: {e.message}")
            return PipelineResult(stage=stage, success=False, message=e.message)
        except Exception as e:
            self.logger.exception(f"Exception in {stage.value} for {task.input_file.name}")
            return PipelineResult(stage=stage, success=False, message=f"Exception: {e}")
        return PipelineResult(stage=stage, success=True, message=message)

    def _transcode(self, request: JobRequest, task: FileTask) -> str:
        self.encoder.transcode(task, request.crf, request.speed)
        return f"Encoded to {task.intermediate_path}"

    def _copy_metadata(self, request: JobRequest, task: FileTask) -> str:
        shutil.copy2(task.intermediate_path, task.final_path)
        self.metadata_tool.copy_metadata(task.input_file, task.final_path)
        return f"Metadata copied to {task.final_path}"

    def _fix_keys(self, request: JobRequest, task: FileTask) -> str:
        self.metadata_tool.rebuild_keys(task.final_path)
        return f"Keys metadata rebuilt in {task.final_path}"

    def _sync_timestamps(self, request: JobRequest, task: FileTask) -> str:
        times = self.timestamp_tool.read_times(task.input_file)
        for path in task.output_paths:
            self.timestamp_tool.apply_times(path, times)
        return f"Timestamps synced via {self.timestamp_tool.name}"
