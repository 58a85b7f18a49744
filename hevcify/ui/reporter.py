from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.markup import escape
from rich.status import Status
from hevcify.infrastructure.event_bus import EventBus
from hevcify.ui.state import RunState
from hevcify.domain.models import Stage
from hevcify.domain.events import (
    DependencyWarning, DiscoveryFinished, EncodeProgress, FileSkipped,
    JobCompleted, JobStarted, OverwriteDeclined, StageCompleted, StageFailed, StageStarted
)

STAGE_LABELS = {
    Stage.TRANSCODE: "FFmpeg conversion",
    Stage.METADATA_COPY: "Metadata copying",
    Stage.KEY_FIX: "Keys metadata fix",
    Stage.TIMESTAMP_SYNC: "Timestamp sync",
}

class ConsoleReporter:
    """Prints human-readable progress for pipeline events."""

    def __init__(self, bus: EventBus, console: Optional[Console] = None):
        self.bus = bus
        self.console = console or Console(highlight=False)
        self._status: Optional[Status] = None
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(DependencyWarning, self.on_dependency_warning)
        self.bus.subscribe(DiscoveryFinished, self.on_discovery_finished)
        self.bus.subscribe(FileSkipped, self.on_file_skipped)
        self.bus.subscribe(OverwriteDeclined, self.on_overwrite_declined)
        self.bus.subscribe(JobStarted, self.on_job_started)
        self.bus.subscribe(StageStarted, self.on_stage_started)
        self.bus.subscribe(EncodeProgress, self.on_encode_progress)
        self.bus.subscribe(StageCompleted, self.on_stage_completed)
        self.bus.subscribe(StageFailed, self.on_stage_failed)
        self.bus.subscribe(JobCompleted, self.on_job_completed)

    def format_size(self, size: int) -> str:
        """Format size in bytes to human readable (base 1024)"""
        if size < 1024:
            return f"{size} B"
        value = float(size)
        for unit in ['KB', 'MB', 'GB']:
            value /= 1024.0
            if value < 1024.0 or unit == 'GB':
                return f"{value:.2f} {unit}"

    def format_delta(self, delta: int) -> str:
        sign = "-" if delta < 0 else "+"
        return f"{sign}{self.format_size(abs(delta))}"

    def confirm_overwrite(self, existing: List[Path]) -> bool:
        """Asks before clobbering outputs. Only "y" or "Y" (tabs aside) means yes."""
        self.console.print("[yellow]⚠️ Warning: One or both output files already exist:[/]")
        for path in existing:
            self.console.print(f" - {escape(str(path))}")
        try:
            answer = self.console.input("❓ Do you want to overwrite them? \\[y/N]: ")
        except EOFError:
            return False
        return answer.strip("\n\t").lower() == "y"

    def _stop_status(self):
        if self._status is not None:
            self._status.stop()
            self._status = None

    def on_dependency_warning(self, event: DependencyWarning):
        self.console.print(f"[yellow]⚠️ Warning: {escape(event.message)}[/]")

    def on_discovery_finished(self, event: DiscoveryFinished):
        self.console.print(
            f"📂 Found {event.files_to_process} file(s) to convert"
            f" ({event.ignored} ignored)"
        )

    def on_file_skipped(self, event: FileSkipped):
        self.console.print(f"[yellow]⚠️ Skipping '{escape(event.path.name)}': {escape(event.reason)}[/]")

    def on_overwrite_declined(self, event: OverwriteDeclined):
        self.console.print(f"[red]🛑 Skipped by user: {escape(event.task.input_file.name)}[/]")

    def on_job_started(self, event: JobStarted):
        task = event.task
        self.console.print(
            f"🚀 Converting '{escape(str(task.input_file))}' to "
            f"'{escape(str(task.intermediate_path))}' using ffmpeg..."
        )
        self.console.print(f"   ➤ CRF: {event.crf}")
        self.console.print(f"   ➤ Speed (ffmpeg preset): {escape(event.speed)}")

    def on_stage_started(self, event: StageStarted):
        task = event.task
        if event.stage == Stage.TRANSCODE:
            self._status = self.console.status(f"Encoding {escape(task.input_file.name)}...")
            self._status.start()
        elif event.stage == Stage.METADATA_COPY:
            self.console.print(
                f"🔄 Copying metadata from '{escape(str(task.input_file))}' to "
                f"'{escape(str(task.final_path))}' using exiftool..."
            )
        elif event.stage == Stage.KEY_FIX:
            self.console.print(f"🧹 Fixing Keys metadata in '{escape(str(task.final_path))}'...")
        elif event.stage == Stage.TIMESTAMP_SYNC:
            self.console.print("🕒 Syncing timestamps from original file to output files...")

    def on_encode_progress(self, event: EncodeProgress):
        if self._status is None:
            return
        parts = [f"Encoding {escape(event.task.input_file.name)}"]
        if event.progress_percent is not None:
            parts.append(f"{event.progress_percent:.1f}%")
        if event.frame is not None:
            parts.append(f"frame {event.frame}")
        if event.speed:
            parts.append(event.speed)
        self._status.update(" | ".join(parts))

    def on_stage_completed(self, event: StageCompleted):
        if event.result.stage == Stage.TRANSCODE:
            self._stop_status()
        self.console.print(f"[green]✅ {escape(event.result.message)}[/]")

    def on_stage_failed(self, event: StageFailed):
        self._stop_status()
        label = STAGE_LABELS[event.result.stage]
        self.console.print(f"[red]❌ {label} failed: {escape(event.result.message)}[/]")

    def on_job_completed(self, event: JobCompleted):
        task = event.task
        stats = event.stats
        self.console.print("🎉 All done, files created:")
        self.console.print(f"  - Intermediate video (ffmpeg output, no metadata): {escape(str(task.intermediate_path))}")
        self.console.print(f"  - Final .mp4 with metadata and correct timestamps: {escape(str(task.final_path))}")
        self.console.print(f"  Original size: {self.format_size(stats.original_bytes)}")
        self.console.print(f"  Final size:    {self.format_size(stats.final_bytes)}")
        color = "green" if stats.saved_bytes >= 0 else "yellow"
        self.console.print(
            f"  Savings:       [{color}]{self.format_delta(stats.saved_bytes)}"
            f" ({stats.saved_ratio * 100:+.1f}%)[/]"
        )

    def print_summary(self, state: RunState):
        """Run totals, printed once after a directory batch."""
        self.console.print(
            f"📊 Completed: {state.completed_count} | Failed: {state.failed_count} | "
            f"Skipped: {state.skipped_count} | Unsupported: {state.unsupported_count}"
        )
        if state.completed_count:
            self.console.print(
                f"   Total: {self.format_size(state.total_input_bytes)} -> "
                f"{self.format_size(state.total_output_bytes)} "
                f"({self.format_delta(state.space_saved_bytes)})"
            )
