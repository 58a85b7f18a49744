import subprocess
import re
import logging
import time
from collections import deque
from typing import List, Optional
from hevcify.domain.models import FileTask
from hevcify.domain.errors import EncoderError
from hevcify.domain.events import EncodeProgress
from hevcify.infrastructure.event_bus import EventBus
from hevcify.infrastructure.ffprobe import FFprobeAdapter

# Regexes for the '-stats' line ffmpeg prints while encoding
FRAME_REGEX = re.compile(r"frame=\s*(\d+)")
TIME_REGEX = re.compile(r"time=(\d+):(\d+):(\d+(?:\.\d+)?)")
SPEED_REGEX = re.compile(r"speed=\s*([\d.]+x)")

class FFmpegAdapter:
    """Wrapper around ffmpeg for H.265/HEVC transcoding."""

    def __init__(self, event_bus: EventBus, ffprobe: Optional[FFprobeAdapter] = None):
        self.event_bus = event_bus
        self.ffprobe = ffprobe
        self.logger = logging.getLogger(__name__)

    def _build_command(self, task: FileTask, crf: int, speed: str) -> List[str]:
        """Constructs the ffmpeg command line arguments."""
        return [
            "ffmpeg",
            "-hide_banner",
            "-loglevel", "info",
            "-stats",
            "-y",  # overwrite was already confirmed by the orchestrator
            "-i", str(task.input_file),
            "-c:v", "libx265",
            "-preset", speed,
            "-crf", str(crf),
            "-tag:v", "hvc1",  # fourCC QuickTime/Apple players expect for HEVC
            "-movflags", "use_metadata_tags",
            str(task.intermediate_path),
        ]

    def _parse_progress(self, task: FileTask, line: str, duration: Optional[float]) -> Optional[EncodeProgress]:
        match = TIME_REGEX.search(line)
        if not match:
            return None
        h, m, s = match.groups()
        out_time = int(h) * 3600 + int(m) * 60 + float(s)

        frame_match = FRAME_REGEX.search(line)
        speed_match = SPEED_REGEX.search(line)
        percent = None
        if duration:
            percent = min(100.0, out_time / duration * 100.0)

        return EncodeProgress(
            task=task,
            frame=int(frame_match.group(1)) if frame_match else None,
            out_time_seconds=out_time,
            speed=speed_match.group(1) if speed_match else None,
            progress_percent=percent,
        )

    def transcode(self, task: FileTask, crf: int, speed: str) -> None:
        filename = task.input_file.name
        start_time = time.monotonic()
        self.logger.info(f"FFMPEG_START: {filename} (crf={crf}, preset={speed})")

        duration = self.ffprobe.get_duration(task.input_file) if self.ffprobe else None
        cmd = self._build_command(task, crf, speed)
        self.logger.debug(f"FFMPEG_CMD: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                universal_newlines=True,
                bufsize=1
            )
        except OSError as e:
            raise EncoderError(f"Could not start ffmpeg: {e}") from e

        # Keep the tail of the output for the failure message
        tail = deque(maxlen=10)
        for line in process.stdout:
            line = line.rstrip()
            if not line:
                continue
            progress = self._parse_progress(task, line, duration)
            if progress is not None:
                self.event_bus.publish(progress)
            else:
                tail.append(line)
                self.logger.debug(f"ffmpeg: {line}")

        process.wait()
        elapsed = time.monotonic() - start_time

        if process.returncode != 0:
            self.logger.info(f"FFMPEG_END: {filename} status=failed code={process.returncode} elapsed={elapsed:.2f}s")
            detail = tail[-1] if tail else "no output"
            raise EncoderError(
                f"ffmpeg exited with code {process.returncode}: {detail}",
                returncode=process.returncode,
            )

        self.logger.info(f"FFMPEG_END: {filename} status=completed elapsed={elapsed:.2f}s")
