import typer
import yaml
from pathlib import Path
from typing import Optional
from pydantic import ValidationError
from typer.core import TyperGroup

from hevcify.config.loader import load_config
from hevcify.config.models import GeneralConfig
from hevcify.infrastructure.logging import setup_logging
from hevcify.infrastructure.event_bus import EventBus
from hevcify.infrastructure.dependencies import check_required_tools
from hevcify.infrastructure.file_scanner import FileScanner
from hevcify.infrastructure.exif_tool import ExifToolAdapter
from hevcify.infrastructure.ffprobe import FFprobeAdapter
from hevcify.infrastructure.ffmpeg import FFmpegAdapter
from hevcify.infrastructure.timestamps import (
    PortableTimestampTool, copy_times, select_timestamp_tool
)
from hevcify.pipeline.orchestrator import PipelineOrchestrator
from hevcify.pipeline.batch import BatchDriver
from hevcify.ui.state import RunState
from hevcify.ui.manager import UIManager
from hevcify.ui.reporter import ConsoleReporter
from hevcify.domain.errors import MissingDependencyError, TimestampToolError
from hevcify.domain.events import DependencyWarning
from hevcify.domain.models import JobRequest

SETFILE_MISSING = (
    "GetFileInfo/SetFile not found (install Xcode command line tools: xcode-select --install); "
    "creation dates will not be copied, only modification times"
)

# click reports usage errors (unknown option, wrong argument count) with this code
CLICK_USAGE_EXIT_CODE = 2

class UsageExitGroup(TyperGroup):
    """Reports usage errors with exit code 1 instead of click's 2."""

    def main(self, *args, **kwargs):
        try:
            return super().main(*args, **kwargs)
        except SystemExit as e:
            if e.code == CLICK_USAGE_EXIT_CODE:
                raise SystemExit(1) from e
            raise

app = typer.Typer(
    cls=UsageExitGroup,
    help="hevcify - transcode videos to H.265/HEVC and carry over metadata and timestamps",
    add_completion=False,
)

def _fail(message: str) -> typer.Exit:
    typer.secho(f"❌ Error: {message}", fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)

def _resolve_config(config_path: Optional[Path], **overrides) -> GeneralConfig:
    config = load_config(config_path)
    data = config.general.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    return GeneralConfig(**data)

@app.command()
def convert(
    path: Path = typer.Argument(..., help="A .mov/.mp4/.mkv file or a directory of them"),
    crf: Optional[int] = typer.Option(None, "--crf", help="Constant Rate Factor 0-51, lower is better quality (default: 24)"),
    speed: Optional[str] = typer.Option(None, "--speed", help="x265 preset, ultrafast..placebo (default: veryslow)"),
    config_path: Optional[Path] = typer.Option(Path("conf/hevcify.yaml"), "--config", "-c", help="Path to YAML config"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Write outputs here instead of next to the input"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Overwrite existing outputs without asking"),
    fix_keys: Optional[bool] = typer.Option(None, "--fix-keys/--no-fix-keys", help="Clear and rebuild QuickTime Keys tags after copying"),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging")
):
    """Convert one video, or every video in a directory, to HEVC."""
    if not path.exists():
        raise _fail(f"File or directory '{path}' not found.")

    try:
        general = _resolve_config(
            config_path,
            crf=crf,
            speed=speed,
            output_dir=output_dir,
            assume_yes=True if yes else None,
            fix_keys=fix_keys,
            debug=True if debug else None,
        )
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        raise _fail(f"Invalid configuration: {e}")

    logger = setup_logging(general.log_file, debug=general.debug)
    logger.info(f"hevcify started: path={path}, crf={general.crf}, speed={general.speed}")

    try:
        check_required_tools()
    except MissingDependencyError as e:
        raise _fail(str(e))

    bus = EventBus()
    state = RunState()
    UIManager(bus, state)
    reporter = ConsoleReporter(bus)

    timestamp_tool = select_timestamp_tool()
    if isinstance(timestamp_tool, PortableTimestampTool):
        bus.publish(DependencyWarning(tool="SetFile", message=SETFILE_MISSING))

    exif = ExifToolAdapter()
    ffmpeg = FFmpegAdapter(event_bus=bus, ffprobe=FFprobeAdapter())
    orchestrator = PipelineOrchestrator(
        config=general,
        event_bus=bus,
        encoder=ffmpeg,
        metadata_tool=exif,
        timestamp_tool=timestamp_tool,
        confirm_overwrite=reporter.confirm_overwrite
    )
    driver = BatchDriver(
        orchestrator,
        FileScanner(general.extensions, general.intermediate_suffix),
        bus
    )
    request = JobRequest(input_path=path, crf=general.crf, speed=general.speed)

    try:
        driver.run(request)
    except KeyboardInterrupt:
        typer.echo("\nInterrupted by user")
        raise typer.Exit(code=130)
    except Exception as e:
        logger.exception("Fatal error")
        raise _fail(f"Fatal Error: {e}")
    finally:
        exif.stop()

    if path.is_dir():
        reporter.print_summary(state)
    logger.info(f"hevcify finished: completed={state.completed_count}, failed={state.failed_count}")
    raise typer.Exit(code=state.exit_code)

@app.command("copy-times")
def copy_times_command(
    source: Path = typer.Argument(..., help="File to read creation/modification times from"),
    destination: Path = typer.Argument(..., help="Existing file to apply them to"),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging")
):
    """Copy creation and modification time from SOURCE to DESTINATION."""
    setup_logging(None, debug=debug)
    tool = select_timestamp_tool()
    if isinstance(tool, PortableTimestampTool):
        typer.secho(f"⚠️ Warning: {SETFILE_MISSING}", fg=typer.colors.YELLOW, err=True)

    try:
        copy_times(source, destination, tool)
    except FileNotFoundError as e:
        raise _fail(str(e))
    except TimestampToolError as e:
        raise _fail(e.message)

    typer.echo(f"Copied creation and modification time from '{source}' to '{destination}'.")

if __name__ == "__main__":
    app()
